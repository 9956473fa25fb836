"""
Tests for log_utils.structured_logger
"""

import json
import logging
import sys

import pytest

from log_utils import StructuredFormatter, get_logger, log_performance, setup_logging
from tests.conftest import ALICE, T1


def _record(**extra):
    record = logging.LogRecord("registry.test", logging.INFO, __file__, 10, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:

    def test_base_fields(self):
        entry = json.loads(StructuredFormatter().format(_record()))

        assert entry["message"] == "hello world"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "registry.test"
        assert entry["timestamp"].endswith("Z")
        assert "extra" not in entry

    def test_context_promoted_and_extras_nested(self):
        entry = json.loads(StructuredFormatter().format(
            _record(policy="cached", user=ALICE, token=T1, duration=0.5)
        ))

        assert entry["policy"] == "cached"
        assert entry["user"] == ALICE
        assert entry["token"] == T1
        assert entry["extra"] == {"duration": 0.5}

    def test_exception_info(self):
        try:
            raise KeyError("boom")
        except KeyError:
            record = _record()
            record.exc_info = sys.exc_info()

        entry = json.loads(StructuredFormatter().format(record))
        assert entry["exception"]["type"] == "KeyError"


class TestContextualLogger:

    def test_context_merges_into_extra(self, caplog):
        caplog.set_level(logging.INFO)
        logger = get_logger("registry.ctx").with_context(policy="live")

        logger.info("Token registered", extra={"user": ALICE})

        record = caplog.records[-1]
        assert record.policy == "live"
        assert record.user == ALICE

    def test_with_context_does_not_mutate_parent(self):
        parent = get_logger("registry.ctx")
        child = parent.with_context(policy="cached")
        assert parent.context == {}
        assert child.context == {"policy": "cached"}


class TestLogPerformance:

    def test_success_logged_at_requested_level(self, caplog):
        caplog.set_level(logging.DEBUG)
        logger = get_logger("registry.perf")

        @log_performance(logger, "double")
        def double(x):
            return 2 * x

        assert double(4) == 8
        assert double.__name__ == "double"
        record = caplog.records[-1]
        assert record.levelno == logging.DEBUG
        assert record.operation == "double"
        assert record.status == "success"

    def test_failure_reraised_and_logged(self, caplog):
        caplog.set_level(logging.DEBUG)
        logger = get_logger("registry.perf")

        @log_performance(logger, "explode")
        def explode():
            raise ValueError("nope")

        with pytest.raises(ValueError):
            explode()
        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.status == "error"


def test_setup_logging_writes_json_file(tmp_path, restore_root_logging):
    log_file = tmp_path / "registry.log"
    setup_logging(level="DEBUG", log_file=str(log_file), enable_console=False, enable_structured=True)

    get_logger("registry.file").info("written", extra={"token": T1})
    for handler in logging.getLogger().handlers:
        handler.flush()

    entry = json.loads(log_file.read_text().strip().splitlines()[-1])
    assert entry["message"] == "written"
    assert entry["token"] == T1
