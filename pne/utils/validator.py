"""Ledger settings validation — checks routing values before connecting."""

from pne.errors import ConfigError

REQUIRED_LEDGER_FIELDS = ("ledger_url", "channel", "contract", "event_name", "update_function")


def validate_ledger_settings(config: dict) -> dict:
    """Validate the ledger routing values in config.

    Returns a dict of the stripped values on success.
    Raises ConfigError if a value is missing, empty, or the URL is not http(s).
    """
    settings = {}
    for field in REQUIRED_LEDGER_FIELDS:
        value = config.get(field)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"'{field}' must be a non-empty string.")
        settings[field] = value.strip()

    if not settings["ledger_url"].startswith(("http://", "https://")):
        raise ConfigError(f"ledger_url must be an http(s) URL, got {settings['ledger_url']!r}.")
    return settings
