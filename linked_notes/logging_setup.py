"""Log file, console output and crash hooks for the app process."""
from __future__ import annotations

import logging
import sys
import uuid
from logging.handlers import RotatingFileHandler

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

from linked_notes.settings import LOG_DIR, LOG_PATH

PACKAGE_LOGGER = "linked_notes"
SESSION_ID = uuid.uuid4().hex[:8]

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s | sid=%(session)s"
LOG_MAX_BYTES = 2 * 1024 * 1024
LOG_BACKUPS = 5

QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}


class _SessionFilter(logging.Filter):
    """Stamp every record with the id of this app run."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session = SESSION_ID
        return True


def _prepared(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(_SessionFilter())
    return handler


def setup_logging(*, console: bool = True) -> logging.Logger:
    """
    Send the package's records to a rotating log file (DEBUG and up) and,
    with `console`, to stdout (INFO and up). A second call changes nothing.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        LOG_PATH, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8",
    )
    logger.addHandler(_prepared(file_handler, logging.DEBUG))
    if console:
        logger.addHandler(_prepared(logging.StreamHandler(sys.stdout), logging.INFO))

    logger.info("Logging to %s", LOG_PATH)
    return logger


def log_qt_message(mode: QtMsgType, context, message: str) -> None:
    where = f"{context.file}:{context.line}" if getattr(context, "file", None) else "qt"
    logging.getLogger(f"{PACKAGE_LOGGER}.qt").log(
        QT_LEVELS.get(mode, logging.WARNING), "%s (%s)", message, where,
    )


def install_global_exception_hooks(log: logging.Logger) -> None:
    """Uncaught Python exceptions and Qt's own messages end up in the log."""

    def _excepthook(exc_type, exc, tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, tb)
            return
        log.critical("Uncaught exception", exc_info=(exc_type, exc, tb))

    sys.excepthook = _excepthook
    qInstallMessageHandler(log_qt_message)
