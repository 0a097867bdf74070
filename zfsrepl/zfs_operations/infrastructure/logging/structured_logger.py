"""
Structured logger implementation for ZFS operations.
"""
import json
import logging
import sys
import threading
from typing import Dict, Any, Optional
from datetime import datetime, timezone
from ...core.interfaces.logger_interface import ILogger


def _now() -> datetime:
    return datetime.now(timezone.utc)


class StructuredLogger(ILogger):
    """Structured logger emitting one JSON object per record."""

    def __init__(self, name: str = "zfsrepl", level: str = "INFO"):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)

        # Prevent duplicate logs
        self.logger.propagate = False

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.DEBUG, message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.INFO, message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.WARNING, message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.ERROR, message, extra)

    def critical(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.CRITICAL, message, extra)

    def exception(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.ERROR, message, extra, exc_info=True)

    def _log(self, level: int, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False) -> None:
        if not self.logger.isEnabledFor(level):
            return
        record = self.logger.makeRecord(
            name=self.name,
            level=level,
            fn="",
            lno=0,
            msg=message,
            args=(),
            exc_info=sys.exc_info() if exc_info else None
        )
        for key, value in (extra or {}).items():
            setattr(record, key, value)
        record.timestamp = _now().isoformat()
        self.logger.handle(record)


class StructuredFormatter(logging.Formatter):
    """Formats log records as compact JSON."""

    _RESERVED = {
        'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
        'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
        'thread', 'threadName', 'processName', 'process', 'stack_info',
        'exc_info', 'exc_text', 'message', 'timestamp', 'taskName'
    }

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": getattr(record, 'timestamp', _now().isoformat()),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in self._RESERVED:
                continue
            try:
                json.dumps(value)
                log_entry[key] = value
            except (TypeError, ValueError):
                log_entry[key] = str(value)

        return json.dumps(log_entry, ensure_ascii=False, separators=(',', ':'))


class ContextLogger(StructuredLogger):
    """Logger with persistent context that gets added to all log messages."""

    def __init__(self, name: str = "zfsrepl", level: str = "INFO", context: Optional[Dict[str, Any]] = None):
        super().__init__(name, level)
        self.context = context or {}
        self._context_lock = threading.Lock()

    def add_context(self, key: str, value: Any) -> None:
        with self._context_lock:
            self.context[key] = value

    def remove_context(self, key: str) -> None:
        with self._context_lock:
            self.context.pop(key, None)

    def _log(self, level: int, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False) -> None:
        with self._context_lock:
            merged_extra = self.context.copy()
        if extra:
            merged_extra.update(extra)
        super()._log(level, message, merged_extra, exc_info)


class OperationLogger(ContextLogger):
    """Tracks one replication at a time: id, type and duration."""

    def __init__(self, name: str = "zfsrepl", level: str = "INFO"):
        super().__init__(name, level)
        self.operation_id: Optional[str] = None
        self.operation_start_time: Optional[datetime] = None

    def start_operation(self, operation_id: str, operation_type: str, **kwargs) -> None:
        self.operation_id = operation_id
        self.operation_start_time = _now()
        self.add_context("operation_id", operation_id)
        self.add_context("operation_type", operation_type)
        self.info(f"Starting operation: {operation_type}", kwargs)

    def complete_operation(self, **kwargs) -> None:
        self._finish(logging.INFO, "Operation completed", {"success": True, **kwargs})

    def fail_operation(self, error: str, **kwargs) -> None:
        self._finish(logging.ERROR, "Operation failed", {"success": False, "error": error, **kwargs})

    def _finish(self, level: int, message: str, extra: Dict[str, Any]) -> None:
        if self.operation_id is None or self.operation_start_time is None:
            return
        duration = (_now() - self.operation_start_time).total_seconds()
        operation_type = self.context.get('operation_type', 'unknown')
        self._log(level, f"{message}: {operation_type}", {"duration_seconds": duration, **extra})
        self.remove_context("operation_id")
        self.remove_context("operation_type")
        self.operation_id = None
        self.operation_start_time = None
