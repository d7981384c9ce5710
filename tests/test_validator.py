"""Tests for pne.utils.validator.validate_ledger_settings."""

import pytest

from pne.errors import ConfigError
from pne.utils.validator import validate_ledger_settings


class TestValidateLedgerSettings:
    def test_valid_settings_returned_stripped(self, test_config):
        test_config["channel"] = "  mychannel  "
        settings = validate_ledger_settings(test_config)
        assert settings["channel"] == "mychannel"
        assert settings["update_function"] == "SendUpdate"

    def test_extra_keys_dropped(self, test_config):
        assert "tolerance" not in validate_ledger_settings(test_config)

    @pytest.mark.parametrize("field", ["ledger_url", "channel", "contract", "event_name", "update_function"])
    def test_missing_field_raises(self, test_config, field):
        del test_config[field]
        with pytest.raises(ConfigError, match=field):
            validate_ledger_settings(test_config)

    def test_whitespace_only_raises(self, test_config):
        test_config["event_name"] = "   "
        with pytest.raises(ConfigError):
            validate_ledger_settings(test_config)

    def test_non_string_raises(self, test_config):
        test_config["contract"] = 42
        with pytest.raises(ConfigError):
            validate_ledger_settings(test_config)

    def test_non_http_url_raises(self, test_config):
        test_config["ledger_url"] = "grpc://localhost:7051"
        with pytest.raises(ConfigError, match="http"):
            validate_ledger_settings(test_config)
