"""日志配置测试"""

from __future__ import annotations

import json
import logging

import pytest

from inboxpkgs.utils.logger import JSONFormatter, setup_logging


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("inboxpkgs.test", logging.WARNING, __file__, 1, "覆盖 %s", ("A",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_basic_fields(self) -> None:
        entry = json.loads(JSONFormatter().format(make_record()))
        assert entry["level"] == "WARNING"
        assert entry["message"] == "覆盖 A"
        assert "framework" not in entry

    def test_context_fields(self) -> None:
        entry = json.loads(JSONFormatter().format(make_record(framework="net6.0", family="default")))
        assert entry["framework"] == "net6.0"
        assert entry["family"] == "default"


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def _restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_repeated_setup_keeps_one_handler(self) -> None:
        setup_logging("DEBUG")
        setup_logging("WARNING", json_output=True)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert root.level == logging.WARNING
