"""Tests for logging configuration."""

import json
import logging

import pytest
import structlog

from ledger_client.core.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)


def test_json_format_emits_one_object_per_event(capsys):
    configure_logging(level="info", log_format="json")

    structlog.get_logger().info("Posted journal entry", group_id="jeg-1")

    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["event"] == "Posted journal entry"
    assert record["group_id"] == "jeg-1"
    assert record["level"] == "info"
    assert "timestamp" in record


def test_level_filters_structlog_events(capsys):
    configure_logging(level="WARNING", log_format="json")

    structlog.get_logger().info("Loaded ledger accounts", count=3)

    assert capsys.readouterr().out == ""
    assert logging.getLogger().level == logging.WARNING


def test_unknown_level_falls_back_to_info():
    configure_logging(level="chatty", log_format="console")

    assert logging.getLogger().level == logging.INFO
