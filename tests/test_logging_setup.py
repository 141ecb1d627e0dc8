import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import logging
from types import SimpleNamespace

import pytest
from PySide6.QtCore import QtMsgType

from linked_notes import logging_setup


@pytest.fixture
def package_logger(tmp_path, monkeypatch):
    monkeypatch.setattr(logging_setup, "LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(logging_setup, "LOG_PATH", tmp_path / "logs" / "test.log")
    logger = logging.getLogger(logging_setup.PACKAGE_LOGGER)
    saved = (list(logger.handlers), logger.propagate, logger.level)
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved[0]
    logger.propagate = saved[1]
    logger.setLevel(saved[2])


def test_setup_is_idempotent(package_logger, tmp_path):
    logging_setup.setup_logging(console=False)
    logging_setup.setup_logging(console=False)
    assert len(package_logger.handlers) == 1


def test_records_carry_session_id(package_logger, tmp_path):
    log = logging_setup.setup_logging(console=False)
    log.info("hello from test")
    logging.getLogger("linked_notes.vault.store").warning("module logger")
    for handler in package_logger.handlers:
        handler.flush()

    text = (tmp_path / "logs" / "test.log").read_text(encoding="utf-8")
    assert f"hello from test | sid={logging_setup.SESSION_ID}" in text
    assert "| WARNING | linked_notes.vault.store | module logger" in text


def test_qt_messages_are_logged_by_severity(package_logger, tmp_path):
    logging_setup.setup_logging(console=False)
    context = SimpleNamespace(file="widget.cpp", line=12)
    logging_setup.log_qt_message(QtMsgType.QtCriticalMsg, context, "painter not active")
    logging_setup.log_qt_message(QtMsgType.QtDebugMsg, SimpleNamespace(file=None), "noise")
    for handler in package_logger.handlers:
        handler.flush()

    text = (tmp_path / "logs" / "test.log").read_text(encoding="utf-8")
    assert "| ERROR | linked_notes.qt | painter not active (widget.cpp:12)" in text
    assert "| DEBUG | linked_notes.qt | noise (qt)" in text
