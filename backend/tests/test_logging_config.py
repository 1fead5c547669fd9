"""
Unit tests for logging helpers.
"""

import json
import logging

import pytest

from hiiside.core.logging_config import (
    MASK,
    ColoredFormatter,
    JSONFormatter,
    filter_sensitive_data,
    setup_logging,
    truncate_large_data,
)
from hiiside.config import Settings


class TestFilterSensitiveData:
    def test_masks_credentials_in_request_bodies(self):
        body = {
            "identifier": "alice.test",
            "appPassword": "abcd-efgh",
            "session": {"accessJwt": "a", "refreshJwt": "r"},
        }

        filtered = filter_sensitive_data(body)

        assert filtered["identifier"] == "alice.test"
        assert filtered["appPassword"] == MASK
        assert filtered["session"] == MASK
        assert body["appPassword"] == "abcd-efgh"

    def test_recurses_into_lists(self):
        data = [{"Authorization": "Bearer x", "convoId": "c1"}]
        assert filter_sensitive_data(data) == [{"Authorization": MASK, "convoId": "c1"}]

    def test_custom_keys(self):
        assert filter_sensitive_data({"text": "hi", "x": 1}, ["text"]) == {"text": MASK, "x": 1}


class TestTruncateLargeData:
    def test_short_data_unchanged(self):
        assert truncate_large_data("abc", max_length=3) == "abc"

    def test_long_data_is_cut(self):
        result = truncate_large_data("x" * 20, max_length=5)
        assert result == "xxxxx... (truncated, total length: 20)"


class TestFormatters:
    def make_record(self, **extra):
        record = logging.LogRecord("hiiside.test", logging.WARNING, __file__, 10, "hello %s", ("world",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter(self):
        record = self.make_record(extra_fields={"path": "/api/chat/convos"})

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "hello world"
        assert data["level"] == "WARNING"
        assert data["logger"] == "hiiside.test"
        assert data["path"] == "/api/chat/convos"

    def test_colored_formatter_leaves_record_untouched(self):
        record = self.make_record()

        output = ColoredFormatter("%(levelname)s %(message)s").format(record)

        assert "\033[33m" in output
        assert "hello world" in output
        assert record.levelname == "WARNING"


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        for handler in root.handlers:
            handler.close()
        root.handlers = handlers
        root.setLevel(level)

    def test_json_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "hiiside.log"
        config = Settings(
            log_level="debug",
            log_console_enabled=False,
            log_file_enabled=True,
            log_file_path=str(log_file),
        )

        setup_logging(config)
        logging.getLogger("hiiside.test").info("session opened")
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
        assert lines[-1]["message"] == "session opened"
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_console_only(self):
        setup_logging(Settings(log_console_enabled=True, log_file_enabled=False))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, ColoredFormatter)
