"""Shared fixtures for the PNE test suite."""

import pytest
from unittest.mock import patch

from pne.ledger.memory import InMemoryLedger


@pytest.fixture
def test_config():
    """Full config dict with zero publish backoff so retries don't sleep."""
    return {
        "initial_rate": 0.0,
        "initial_mismatch": 1.5,
        "initial_decision": 0.0,
        "decision_min": 0.0,
        "decision_max": 8.0,
        "min_step_size": 0.05,
        "tolerance": 0.05,
        "max_rounds": None,
        "ledger_url": "http://ledger.test",
        "ledger_timeout": 5.0,
        "channel": "mychannel",
        "contract": "basic",
        "event_name": "Org2",
        "update_function": "SendUpdate",
        "publish_max_retries": 3,
        "publish_wait_min": 0,
        "publish_wait_max": 0,
        "report_path": "output/negotiation.md",
        "simulation_max_rounds": 200,
    }


@pytest.fixture
def patched_config(test_config):
    """Install test_config as the loaded config for the duration of a test."""
    with patch("pne.config._config", test_config):
        yield test_config


@pytest.fixture
def base_state():
    """Minimal valid NegotiationState at the start of a negotiation."""
    return {
        "rate": 0.0,
        "mismatch": 1.5,
        "decision": 0.0,
        "round_index": 0,
        "status": "awaiting_event",
    }


@pytest.fixture
def ledger():
    return InMemoryLedger()
