"""Ring buffer of recent nfl_hub log records, served by /api/logs."""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

ROOT_LOGGER = "nfl_hub"
DEFAULT_CAPACITY = 200


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    level: str
    levelno: int
    logger: str
    message: str


def _level_number(name: str | None) -> int | None:
    if not name:
        return None
    value = logging.getLevelName(name.strip().upper())
    return value if isinstance(value, int) else None


class BufferHandler(logging.Handler):
    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        super().__init__(level=logging.DEBUG)
        self._records: deque[LogEntry] = deque(maxlen=capacity)
        self._records_lock = threading.Lock()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            created = datetime.fromtimestamp(record.created, tz=timezone.utc)
            entry = LogEntry(
                timestamp=created.isoformat(timespec="seconds"),
                level=record.levelname,
                levelno=record.levelno,
                logger=record.name,
                message=self.format(record),
            )
        except Exception:
            self.handleError(record)
            return
        with self._records_lock:
            self._records.append(entry)

    def entries(self, limit: int = 100, min_level: str | None = None) -> list[dict]:
        """Newest first; unknown *min_level* names are ignored."""
        with self._records_lock:
            snapshot = list(self._records)
        threshold = _level_number(min_level)
        if threshold is not None:
            snapshot = [entry for entry in snapshot if entry.levelno >= threshold]
        if limit < 1:
            return []
        return [asdict(entry) for entry in reversed(snapshot[-limit:])]

    def clear(self) -> None:
        with self._records_lock:
            self._records.clear()


_handler: BufferHandler | None = None


def get_buffer_handler() -> BufferHandler:
    global _handler
    if _handler is None:
        _handler = BufferHandler()
        _handler.setFormatter(logging.Formatter("%(message)s"))
    return _handler


def install_buffer_handler(level: str = "INFO") -> BufferHandler:
    """Attach the shared handler to the ``nfl_hub`` logger tree (idempotent)."""
    handler = get_buffer_handler()
    package_logger = logging.getLogger(ROOT_LOGGER)
    if handler not in package_logger.handlers:
        package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler
