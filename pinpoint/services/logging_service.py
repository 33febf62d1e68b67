"""
Log sinks beyond the console: a rotating file and an in-memory ring buffer
served by /api/logs/recent.
"""
import logging
import os
from collections import deque
from logging.handlers import RotatingFileHandler
from typing import Any, Deque, Dict, List, Optional


LOG_DIR = os.getenv("LOG_DIR", os.path.join(os.path.dirname(__file__), "..", "..", "logs"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
RING_BUFFER_SIZE = int(os.getenv("RING_BUFFER_SIZE", "2000"))
RING_BUFFER_MIN_LEVEL = os.getenv("RING_BUFFER_MIN_LEVEL", "INFO").upper()
LOG_FILE_NAME = "pinpoint.log"
LOG_FILE_MAX_BYTES = 5_000_000
LOG_FILE_BACKUPS = 5

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class RingBufferHandler(logging.Handler):
    """Keeps the newest records as plain dicts."""

    def __init__(self, maxlen: int = RING_BUFFER_SIZE):
        super().__init__()
        self.buffer: Deque[Dict[str, Any]] = deque(maxlen=maxlen)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = {
                "ts": record.created,
                "level": record.levelname,
                "name": record.name,
                "message": record.getMessage(),
                "lineno": record.lineno,
            }
        except Exception:
            self.handleError(record)
            return
        self.buffer.append(entry)

    def get_recent(self, limit: int = 500, min_level: Optional[str] = None) -> List[Dict[str, Any]]:
        """Newest `limit` entries (all when limit <= 0), optionally at or above min_level."""
        entries = list(self.buffer)
        if min_level:
            threshold = logging.getLevelName(min_level.upper())
            if isinstance(threshold, int):
                entries = [e for e in entries if logging.getLevelName(e["level"]) >= threshold]
        return entries if limit <= 0 else entries[-limit:]


_ring_handler: Optional[RingBufferHandler] = None


def get_ring_handler() -> RingBufferHandler:
    global _ring_handler
    if _ring_handler is None:
        _ring_handler = RingBufferHandler()
    return _ring_handler


def init_logging(log_dir: Optional[str] = None) -> None:
    """
    Attach the file and ring-buffer handlers to the root logger.

    Raises:
        OSError: the log directory cannot be created or opened
    """
    directory = log_dir or LOG_DIR
    os.makedirs(directory, exist_ok=True)
    formatter = logging.Formatter(_PLAIN_FORMAT)
    root = logging.getLogger()
    if root.level == logging.NOTSET:
        root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    file_handler = RotatingFileHandler(
        os.path.join(directory, LOG_FILE_NAME),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    ring = get_ring_handler()
    ring.setFormatter(formatter)
    ring.setLevel(getattr(logging, RING_BUFFER_MIN_LEVEL, logging.INFO))
    if ring not in root.handlers:
        root.addHandler(ring)
