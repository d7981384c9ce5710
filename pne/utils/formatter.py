"""Report formatter — renders a finished negotiation as a Markdown report."""

from pathlib import Path

from pne.config import get_config
from pne.state import NegotiationState, RoundRecord

_OUTCOMES = {
    "terminated": "Converged",
    "cancelled": "Cancelled by operator",
    "max_rounds_reached": "Stopped at round ceiling",
    "awaiting_event": "Interrupted",
}


def _render_round_table(history: list[RoundRecord]) -> str:
    """Build a markdown table of completed rounds."""
    if not history:
        return "*No rounds completed.*"

    lines = [
        "| Round | Rate | Mismatch | Decision | Terminate |",
        "|-------|------|----------|----------|-----------|",
    ]
    for record in history:
        lines.append(
            f"| {record['round_index']} | {record['rate']:.6f} | {record['mismatch']:.6f} "
            f"| {record['decision']:.6f} | {'yes' if record['terminate'] else 'no'} |"
        )
    return "\n".join(lines)


def _render_markdown(state: NegotiationState, history: list[RoundRecord], title: str = "") -> str:
    """Convert the final state and round history into a Markdown report."""
    lines = []

    lines.append(f"# {title or 'Negotiation'} — Report")
    lines.append("")

    lines.append("## Outcome")
    lines.append("")
    lines.append(f"- **Status:** {_OUTCOMES.get(state['status'], state['status'])}")
    lines.append(f"- **Rounds observed:** {state['round_index']}")
    lines.append(f"- **Rounds completed:** {len(history)}")
    abandoned = state["round_index"] - len(history)
    if abandoned > 0:
        lines.append(f"- **Rounds abandoned (undecodable payloads):** {abandoned}")
    lines.append("")

    lines.append("## Final Values")
    lines.append("")
    lines.append(f"- **Rate (Lambda):** {state['rate']}")
    lines.append(f"- **Mismatch:** {state['mismatch']}")
    lines.append(f"- **Decision (P):** {state['decision']}")
    lines.append("")

    lines.append("## Rounds")
    lines.append("")
    lines.append(_render_round_table(history))
    lines.append("")

    return "\n".join(lines)


def write_report(state: NegotiationState, history: list[RoundRecord], title: str = "") -> Path:
    """Write the negotiation report as Markdown to the configured report path.

    Never overwrites an earlier report; a numbered suffix is added instead.
    Returns the Path to the written file.
    """
    config = get_config()
    base_path = Path(__file__).resolve().parent.parent.parent / config["report_path"]
    output_dir = base_path.parent
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = base_path.stem
    output_path = output_dir / f"{stem}.md"
    counter = 1
    while output_path.exists():
        counter += 1
        output_path = output_dir / f"{stem} ({counter}).md"

    output_path.write_text(_render_markdown(state, history, title=title), encoding="utf-8")
    return output_path
