import logging
import os
import sys

import pytest

# Ensure the repository's src/ is importable
sys.path.insert(0, os.path.abspath("src"))

from helpy_receipts.logging import ROOT_NAME, configured_level, get_logger


class _Collect(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("HELPY_LOG_LEVEL", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(key, raising=False)


def test_handlers_live_on_package_root_only():
    a = get_logger("alpha")
    b = get_logger("beta")
    get_logger("alpha")

    root = logging.getLogger(ROOT_NAME)
    assert a.name == "helpy_receipts.alpha"
    assert b.name == "helpy_receipts.beta"
    assert a.handlers == [] and b.handlers == []
    assert a.propagate and b.propagate
    assert root.propagate is False
    stream_handlers = [h for h in root.handlers if type(h) is logging.StreamHandler]
    assert len(stream_handlers) == 1


def test_child_records_reach_root_handlers():
    root = logging.getLogger(ROOT_NAME)
    sink = _Collect()
    root.addHandler(sink)
    old_level = root.level
    root.setLevel(logging.INFO)
    try:
        get_logger("gamma").info("hello %s", "receipt")
    finally:
        root.removeHandler(sink)
        root.setLevel(old_level)

    assert [(r.name, r.getMessage()) for r in sink.records] == [("helpy_receipts.gamma", "hello receipt")]


def test_level_defaults_to_info():
    assert configured_level() == logging.INFO


def test_generic_log_level_is_honoured(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert configured_level() == logging.DEBUG


def test_package_level_overrides_generic(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("HELPY_LOG_LEVEL", "warn")
    assert configured_level() == logging.WARNING


def test_unknown_level_name_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("HELPY_LOG_LEVEL", "chatty")
    assert configured_level() == logging.INFO
