"""Logging configuration for the task stream service."""

import logging
import os
from logging.handlers import TimedRotatingFileHandler

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

# Third-party loggers that are too chatty at INFO.
QUIET_LOGGERS = ("httpx", "httpcore", "sse_starlette")


class SizeAndTimeRotatingHandler(TimedRotatingFileHandler):
    """Rotates at the timed boundary or before a record would push the file
    past max_bytes.

    Rotated files are named by period, as TimedRotatingFileHandler does. A
    size rollover within a period that already has a rotated file gets a
    numeric suffix (``app.log.2024-05-01.1``) so earlier ones are kept. A
    max_bytes of 0 disables size rotation.
    """

    def __init__(self, filename, max_bytes, backup_count=0, **kwargs):
        if max_bytes < 0:
            raise ValueError("max_bytes must be non-negative")
        self.max_bytes = max_bytes
        super().__init__(filename, backupCount=backup_count, **kwargs)

    def shouldRollover(self, record):
        if super().shouldRollover(record):
            return True
        if self.max_bytes == 0 or self.stream is None:
            return False
        self.stream.seek(0, os.SEEK_END)
        position = self.stream.tell()
        # An empty file keeps an oversized record rather than rotating.
        if position == 0:
            return False
        message = f"{self.format(record)}{self.terminator}"
        size = len(message.encode(self.encoding or "utf-8"))
        return position + size > self.max_bytes

    def rotation_filename(self, default_name):
        name = super().rotation_filename(default_name)
        if not os.path.exists(name):
            return name
        index = 1
        while os.path.exists(f"{name}.{index}"):
            index += 1
        return f"{name}.{index}"


class TaskLogAdapter(logging.LoggerAdapter):
    """Prefixes every message with the task it concerns."""

    def process(self, msg, kwargs):
        return f"[task {self.extra['task_id']}] {msg}", kwargs


def task_logger(logger: logging.Logger, task_id: str) -> TaskLogAdapter:
    return TaskLogAdapter(logger, {"task_id": task_id})


def configure_logging(
    level: int = logging.INFO,
    log_dir: str | None = None,
    log_file: str = "taskstream.log",
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 7,
    console: bool = True,
) -> logging.Logger:
    """Configure the root logger.

    Args:
        level: Logging level.
        log_dir: Directory for the rotating log file. None disables file
            logging.
        log_file: Log file name inside log_dir.
        max_bytes: Max file size before rotation.
        backup_count: Number of rotated files to keep.
        console: Whether to also log to the console.

    Returns:
        Configured root logger.
    """
    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = SizeAndTimeRotatingHandler(
            filename=os.path.join(log_dir, log_file),
            when="midnight",
            interval=1,
            max_bytes=max_bytes,
            backup_count=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return logger
