"""Tests for caldav_bridge/logging.py"""

import logging

import pytest

import caldav_bridge.logging as app_logging


@pytest.fixture
def isolated_root(monkeypatch):
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    monkeypatch.setattr(app_logging, "_INITIALIZED", False)
    yield root
    for handler in root.handlers[len(handlers):]:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configures_file_and_console_once(isolated_root, tmp_path):
    log_file = tmp_path / "nested" / "bridge.log"
    before = len(isolated_root.handlers)

    app_logging.configure_logging("debug", log_path=log_file)
    app_logging.configure_logging("debug", log_path=log_file)

    assert len(isolated_root.handlers) == before + 2
    assert isolated_root.level == logging.DEBUG
    logging.getLogger("caldav_bridge.test").info("hello from the test")
    for handler in isolated_root.handlers:
        handler.flush()
    assert "INFO [caldav_bridge.test] hello from the test" in log_file.read_text()
