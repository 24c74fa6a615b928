# -*- coding: utf-8 -*-
"""
Logging configuration for hosts embedding the notification handler.

Routes logs by severity:
- DEBUG, INFO, WARNING → STDOUT
- ERROR, CRITICAL → STDERR

Uses QueueHandler + QueueListener so the event loop never blocks on
stdout/stderr: only the listener thread does the I/O.

The library itself never calls setup_logging(); it only creates module
loggers. Hosts call it once at startup, usually without arguments so the
level comes from NOTIFICATIONS_LOG_LEVEL.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import Optional, Union

from notification_handler.config import get_settings


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class MaxLevelFilter(logging.Filter):
    """
    Allows only records up to a specified level (inclusive).
    Used to keep ERROR/CRITICAL logs off stdout.
    """

    def __init__(self, max_level):
        super().__init__()
        self.max_level = max_level

    def filter(self, record):
        return record.levelno <= self.max_level


# Module-level listener so it can be stopped on shutdown
_log_listener: Optional[QueueListener] = None


def setup_logging(level: Optional[Union[int, str]] = None) -> None:
    """
    Configure logging: QueueHandler on the root logger; QueueListener in a
    background thread with stdout/stderr StreamHandlers.

    Calling it again replaces the previous configuration.

    Args:
        level: Root log level (name such as "DEBUG" or a logging constant).
            Defaults to NOTIFICATIONS_LOG_LEVEL from the loaded settings.
    """
    global _log_listener

    if level is None:
        level = get_settings().log_level

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    stop_logging()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(MaxLevelFilter(logging.WARNING))
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(formatter)

    log_queue = queue.Queue()
    root_logger.addHandler(QueueHandler(log_queue))

    _log_listener = QueueListener(
        log_queue,
        stdout_handler,
        stderr_handler,
        respect_handler_level=True,
    )
    _log_listener.start()
    atexit.register(stop_logging)


def stop_logging() -> None:
    """Stop the queue listener, flushing queued records."""
    global _log_listener
    if _log_listener is not None:
        _log_listener.stop()
        _log_listener = None
