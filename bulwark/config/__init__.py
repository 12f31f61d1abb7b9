"""Bulwark configuration.

Settings are an explicitly constructed value owned by the host application and
passed to the components that need them. Nothing in Bulwark reads a
process-wide settings object on its own.

Example:
    >>> from bulwark.config import Settings
    >>> settings = Settings.from_env()
    >>> settings.audit_max_chars
    48

Environment Variables (read only by ``Settings.from_env``):
    BW_SCRUB_BYTE: Byte written over secret buffers on release, 0-255 (default: 0)
    BW_COMMAND_TIMEOUT: Default command timeout in seconds; 0 or unset disables it
    BW_AUDIT_MAX_CHARS: Characters of a rejected path kept in audit logs (default: 48)
    BW_LOG_DIR: Directory for JSON-lines logs created by ``create_logger``
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_SCRUB_BYTE = 0x00
DEFAULT_AUDIT_MAX_CHARS = 48


def _env(name: str, default: str) -> str:
    """Get environment variable with BW_* prefix validation."""
    if not name.startswith("BW_"):
        raise ValueError(f"Only BW_* env vars are allowed, got: {name}")
    return os.getenv(name, default)


def _env_int(name: str, default: int) -> int:
    raw = _env(name, str(default))
    try:
        return int(raw, 0)
    except Exception:
        return default


def _env_float(name: str, default: float) -> float:
    raw = _env(name, str(default))
    try:
        return float(raw)
    except Exception:
        return default


@dataclass(frozen=True)
class Settings:
    """Runtime settings for Bulwark components.

    Frozen so a configured instance can be shared across threads. Construct
    directly for explicit values, or with :meth:`from_env` at application start.
    """

    scrub_byte: int = DEFAULT_SCRUB_BYTE
    command_timeout_s: Optional[float] = None
    audit_max_chars: int = DEFAULT_AUDIT_MAX_CHARS
    log_dir: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0 <= self.scrub_byte <= 0xFF:
            raise ValueError(f"scrub_byte must be in 0..255, got {self.scrub_byte}")
        if self.audit_max_chars < 1:
            raise ValueError("audit_max_chars must be positive")

    @classmethod
    def from_env(cls) -> "Settings":
        scrub = _env_int("BW_SCRUB_BYTE", DEFAULT_SCRUB_BYTE)
        if not 0 <= scrub <= 0xFF:
            scrub = DEFAULT_SCRUB_BYTE
        timeout = _env_float("BW_COMMAND_TIMEOUT", 0.0)
        audit = _env_int("BW_AUDIT_MAX_CHARS", DEFAULT_AUDIT_MAX_CHARS)
        if audit < 1:
            audit = DEFAULT_AUDIT_MAX_CHARS
        return cls(
            scrub_byte=scrub,
            command_timeout_s=timeout if timeout > 0 else None,
            audit_max_chars=audit,
            log_dir=_env("BW_LOG_DIR", "") or None,
        )


DEFAULTS = Settings()

__all__ = ["Settings", "DEFAULTS", "DEFAULT_SCRUB_BYTE", "DEFAULT_AUDIT_MAX_CHARS"]
