"""DakiyaLogger — process-wide JSON logger for the Bot API client.

The transport, the retry layer and the update receiver all log through one
``logging.Logger`` named ``dakiya``.  Each record becomes one line of JSON,
written to stderr and (unless ``LOG_DIR`` is empty) to a size-rotated
``<LOG_DIR>/dakiya.log``.

Environment:
    LOG_LEVEL: level name or number, default ``INFO``.
    LOG_DIR: directory for the log file, default ``logs``.  Empty disables it.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else on a record came from ``extra=``.
_RESERVED: frozenset = frozenset(
    vars(logging.makeLogRecord({})).keys() | {"message", "asctime", "taskName"}
)


class _JsonFormatter(logging.Formatter):
    """Render a record as one JSON object.

    ``extra=`` keys are copied to the top level next to the fixed fields, so::

        logger.debug("Fetched updates", extra={"offset": 12, "count": 3})

    yields ``{"timestamp": ..., "level": "DEBUG", ..., "offset": 12, "count": 3}``.
    Values json cannot encode are stringified.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "func_name": record.funcName,
        }
        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED and key not in entry
        )
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class DakiyaLogger:
    """Lazily-created singleton that owns the ``dakiya`` logger's handlers.

    Usage::

        from core.logger import DakiyaLogger

        logger = DakiyaLogger.get_logger()
        logger.info("Receiver started", extra={"offset": 0})
    """

    _instance: Optional["DakiyaLogger"] = None

    NAME: str = "dakiya"
    FILE_NAME: str = "dakiya.log"
    ROTATE_BYTES: int = 5 * 1024 * 1024
    ROTATE_KEEP: int = 5

    def __new__(cls, level: Optional[int] = None) -> "DakiyaLogger":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._logger = instance._configure(level if level is not None else cls._level_from_env())
            cls._instance = instance
        return cls._instance

    @staticmethod
    def _level_from_env() -> int:
        """Resolve ``LOG_LEVEL`` (name or number), defaulting to INFO."""
        raw = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
        if raw.isdigit():
            return int(raw)
        level = logging.getLevelName(raw)
        return level if isinstance(level, int) else logging.INFO

    def _configure(self, level: int) -> logging.Logger:
        log = logging.getLogger(self.NAME)
        log.setLevel(level)
        # Handlers survive a module reload; attach them only once per process.
        if log.handlers:
            return log

        handlers: list = [logging.StreamHandler()]
        log_dir = os.environ.get("LOG_DIR", "logs")
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            handlers.append(RotatingFileHandler(
                os.path.join(log_dir, self.FILE_NAME),
                maxBytes=self.ROTATE_BYTES,
                backupCount=self.ROTATE_KEEP,
                encoding="utf-8",
            ))

        formatter = _JsonFormatter()
        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            log.addHandler(handler)
        return log

    @staticmethod
    def get_logger(level: Optional[int] = None) -> logging.Logger:
        """Return the shared logger, creating it on first use.

        *level* only takes effect on that first call.
        """
        return DakiyaLogger(level)._logger

    def cleanup(self) -> None:
        """Flush, close and detach every handler."""
        for handler in list(self._logger.handlers):
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)
