"""JSON-lines structured logging with redaction applied to every entry."""

from __future__ import annotations

import json
import os
import sys
import time
import uuid
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, TextIO, Union

from bulwark.config import Settings

from .redaction import DataRedactor


class LogLevel(Enum):
    """Standard log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class StructuredLogger:
    """Structured logger writing one JSON object per line to console and/or file."""

    def __init__(
        self,
        component: str,
        session_id: Optional[str] = None,
        output_file: Optional[Union[str, Path, TextIO]] = None,
        enable_console: bool = True,
        redactor: Optional[DataRedactor] = None,
        max_log_size_mb: Optional[int] = None,
        max_log_files: int = 5,
    ) -> None:
        """Initialize structured logger.

        Args:
            component: Component identifier (e.g., 'path_guard', 'uploads')
            session_id: Optional correlation ID; a short random one is generated otherwise
            output_file: Optional file path or handle for log output
            enable_console: Whether to write entries to stdout (default: True)
            redactor: Data redactor; a default DataRedactor is used when omitted
            max_log_size_mb: Rotate the file past this size (None = no limit)
            max_log_files: Number of rotated files kept (default: 5)
        """
        self.component = component
        self.session_id = session_id or uuid.uuid4().hex[:8]
        self.start_time = time.time()
        self.redactor = redactor or DataRedactor()

        self.max_log_size_bytes = (max_log_size_mb * 1024 * 1024) if max_log_size_mb else None
        self.max_log_files = max_log_files
        self.log_file_path: Optional[Path] = None

        self.console_enabled = enable_console
        self.log_file: Optional[TextIO] = None

        if output_file:
            if isinstance(output_file, (str, Path)):
                self.log_file_path = Path(output_file)
                self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
                self._open_log_file()
            else:
                self.log_file = output_file

    def _format_log_entry(self, level: LogLevel, message: str, **context: Any) -> Dict[str, Any]:
        safe_context = self.redactor.redact_dict(context)
        now = time.time()
        return {
            "timestamp": now,
            "iso_timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(now))
            + f".{int((now % 1) * 1000):03d}Z",
            "level": level.value,
            "component": self.component,
            "session_id": self.session_id,
            "session_time": now - self.start_time,
            "message": self.redactor.redact_string(message),
            **safe_context,
        }

    def _open_log_file(self) -> None:
        if self.log_file_path:
            self.log_file = open(self.log_file_path, "a", encoding="utf-8")

    @staticmethod
    def _rotated_name(path: Path, index: int) -> Path:
        return path.with_suffix(f".{index}{path.suffix}")

    def _rotate_log_if_needed(self) -> None:
        """Rotate the log file once it grows past the size limit."""
        path = self.log_file_path
        if not path or not self.max_log_size_bytes:
            return
        if not path.exists():
            return
        if path.stat().st_size <= self.max_log_size_bytes:
            return

        if self.log_file:
            self.log_file.close()
            self.log_file = None
        try:
            for i in range(self.max_log_files - 1, 0, -1):
                older = self._rotated_name(path, i)
                if older.exists():
                    older.replace(self._rotated_name(path, i + 1))
            path.replace(self._rotated_name(path, 1))
        finally:
            self._open_log_file()

    def _write_log(self, entry: Dict[str, Any]) -> None:
        json_line = json.dumps(entry, default=str, separators=(",", ":"))

        if self.console_enabled:
            print(json_line, file=sys.stdout, flush=True)

        if self.log_file:
            self._rotate_log_if_needed()
            if self.log_file:
                self.log_file.write(json_line + "\n")
                self.log_file.flush()

    def log(self, level: LogLevel, message: str, **context: Any) -> None:
        self._write_log(self._format_log_entry(level, message, **context))

    def debug(self, message: str, **context: Any) -> None:
        self.log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self.log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self.log(LogLevel.WARNING, message, **context)

    def error(self, message: str, **context: Any) -> None:
        self.log(LogLevel.ERROR, message, **context)

    def critical(self, message: str, **context: Any) -> None:
        self.log(LogLevel.CRITICAL, message, **context)

    def close(self) -> None:
        """Close log file handle if open."""
        if self.log_file and hasattr(self.log_file, "close"):
            self.log_file.close()
            self.log_file = None


def create_logger(
    component: str,
    session_id: Optional[str] = None,
    log_dir: Optional[Union[str, Path]] = None,
    settings: Optional[Settings] = None,
    **kwargs: Any,
) -> StructuredLogger:
    """Create a StructuredLogger with standard file naming and rotation limits.

    Args:
        component: Component identifier
        session_id: Optional session ID for correlation
        log_dir: Directory for ``<component>_<session>.jsonl``; falls back to
            ``settings.log_dir`` and then the BW_LOG_DIR environment variable
        settings: Explicit settings carrying ``log_dir``
        **kwargs: Additional arguments passed to StructuredLogger

    Environment Variables:
        BW_LOG_DIR: Log directory when neither ``log_dir`` nor settings give one
        BW_LOG_MAX_SIZE_MB: Rotation size (10 MB by default when CI=true)
        BW_LOG_MAX_FILES: Rotated files kept (3 by default when CI=true)
    """
    if log_dir is None:
        log_dir = (settings.log_dir if settings else None) or os.getenv("BW_LOG_DIR")

    if "max_log_size_mb" not in kwargs:
        max_size = os.getenv("BW_LOG_MAX_SIZE_MB")
        if max_size and max_size.isdigit():
            kwargs["max_log_size_mb"] = int(max_size)
        elif os.getenv("CI") == "true":
            kwargs["max_log_size_mb"] = 10

    if "max_log_files" not in kwargs:
        max_files = os.getenv("BW_LOG_MAX_FILES")
        if max_files and max_files.isdigit():
            kwargs["max_log_files"] = int(max_files)
        elif os.getenv("CI") == "true":
            kwargs["max_log_files"] = 3

    output_file = None
    if log_dir:
        output_file = Path(log_dir) / f"{component}_{session_id or 'default'}.jsonl"

    return StructuredLogger(
        component=component, session_id=session_id, output_file=output_file, **kwargs
    )
