"""Status and error channels for background job lifecycle events.

Both channels are plain stdlib loggers. ``configure_logging`` points each one
at its own append-only file; every record is written as a single line, so
launchers and workers running in separate processes can share the files.
"""
import logging
import os
from typing import Optional

from . import config

STATUS_CHANNEL = "jobrunner.status"
ERROR_CHANNEL = "jobrunner.errors"

LOG_FORMAT = "[%(asctime)s] %(name)s.%(levelname)s: %(message)s"

_FILES = {
    STATUS_CHANNEL: "background_jobs.log",
    ERROR_CHANNEL: "background_jobs_errors.log",
}


class StatusLog:
    def __init__(self, status_channel: str = STATUS_CHANNEL, error_channel: str = ERROR_CHANNEL):
        self._status = logging.getLogger(status_channel)
        self._errors = logging.getLogger(error_channel)
        for logger in (self._status, self._errors):
            if logger.level == logging.NOTSET:
                logger.setLevel(logging.INFO)

    def log_status(self, message: str) -> None:
        self._status.info(message)

    def log_error(self, message: str) -> None:
        self._errors.error(message)


def configure_logging(log_dir: Optional[str] = None) -> None:
    """Attach a file handler to each channel. Safe to call more than once."""
    log_dir = log_dir or config.LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)
    for channel, filename in _FILES.items():
        path = os.path.abspath(os.path.join(log_dir, filename))
        logger = logging.getLogger(channel)
        if logger.level == logging.NOTSET:
            logger.setLevel(logging.INFO)
        if any(getattr(h, "baseFilename", None) == path for h in logger.handlers):
            continue
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
