"""Centralized config loading — read once at import time."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Load .env from project root (parent of pne/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"

_config = yaml.safe_load(CONFIG_PATH.read_text())

# Environment overrides the configured gateway URL
if os.getenv("PNE_LEDGER_URL"):
    _config["ledger_url"] = os.environ["PNE_LEDGER_URL"]


def get_config() -> dict:
    """Return the loaded config dictionary."""
    return _config


def get_ledger_token() -> str | None:
    """Return the bearer token for the ledger gateway, if one is set."""
    return os.getenv("PNE_LEDGER_TOKEN")
