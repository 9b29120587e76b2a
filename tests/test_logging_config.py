"""Tests for logging setup and credential masking."""

import logging

from common.logging_config import SensitiveDataFilter, get_logger, setup_logging


def make_record(msg, args=None):
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


class TestSensitiveDataFilter:
    """Tests for credential masking."""

    def test_masks_password(self):
        record = make_record("login password=hunter2 ok")
        SensitiveDataFilter().filter(record)
        assert "hunter2" not in record.msg
        assert "***MASKED***" in record.msg

    def test_masks_basic_authorization(self):
        record = make_record("Authorization: Basic dXNlcjpwYXNz")
        SensitiveDataFilter().filter(record)
        assert "dXNlcjpwYXNz" not in record.msg

    def test_masks_tuple_args(self):
        record = make_record("header %s", ("Bearer abc.def",))
        SensitiveDataFilter().filter(record)
        assert record.args == ("Bearer ***MASKED***",)

    def test_leaves_plain_messages(self):
        record = make_record("Created fragment 1234 (text/plain, 5 bytes)")
        assert SensitiveDataFilter().filter(record)
        assert record.msg == "Created fragment 1234 (text/plain, 5 bytes)"


class TestSetupLogging:
    """Tests for logger configuration."""

    def test_setup_logging_configures_handler(self):
        logger = setup_logging("fragments-test-component", log_level="DEBUG")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert not logger.propagate
        assert any(isinstance(f, SensitiveDataFilter) for f in logger.handlers[0].filters)

    def test_setup_logging_is_idempotent(self):
        first = setup_logging("fragments-test-idempotent")
        second = setup_logging("fragments-test-idempotent")
        assert first is second
        assert len(second.handlers) == 1

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        logger = setup_logging("fragments-test-env")
        assert logger.level == logging.WARNING

    def test_unknown_level_defaults_to_info(self):
        logger = setup_logging("fragments-test-unknown", log_level="LOUD")
        assert logger.level == logging.INFO

    def test_get_logger(self):
        assert get_logger("fragments.model").name == "fragments.model"
