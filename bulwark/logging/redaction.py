"""Sensitive data redaction for structured logging."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern, Union

from bulwark.secrets import REDACTION_TOKEN, SecretCell


class DataRedactor:
    """Redact credentials, secret cells and host paths from log data."""

    def __init__(self, custom_patterns: Optional[List[Pattern[str]]] = None) -> None:
        """Initialize redactor with standard and custom patterns.

        Args:
            custom_patterns: Additional regex patterns to redact
        """
        self.patterns: List[Pattern[str]] = [
            # key=value / key: value credentials
            re.compile(
                r'(token|key|secret|password|passwd|api_key|credential)["\']?\s*[=:]\s*["\']?[^\s"\',]{6,}["\']?',
                re.IGNORECASE,
            ),
            # Authorization headers
            re.compile(r"\b(Bearer|Basic)\s+[A-Za-z0-9._~+/=-]{8,}", re.IGNORECASE),
            # user:password@ in URLs
            re.compile(r"(?<=://)[^/\s:@]+:[^/\s@]+(?=@)"),
            # PEM private key blocks
            re.compile(
                r"-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----", re.DOTALL
            ),
            # User home directories
            re.compile(r"/home/[^/\s]+"),
            re.compile(r"/Users/[^/\s]+"),
            re.compile(r"C:\\Users\\[^\\\s]+"),
        ]

        if custom_patterns:
            self.patterns.extend(custom_patterns)

        # Field names whose values are dropped entirely
        self.sensitive_fields = {
            "password", "passwd", "token", "secret", "key", "auth", "credential",
            "api_key", "access_token", "refresh_token", "auth_token", "private_key",
            "authorization", "cookie",
        }

    def redact_string(self, text: str) -> str:
        result = text
        for pattern in self.patterns:
            result = pattern.sub(REDACTION_TOKEN, result)
        return result

    def redact_path(self, path: Union[str, "os.PathLike[str]"]) -> str:
        """Hide the directory part of a path, keeping only the final name."""
        return f"{REDACTION_TOKEN}/{Path(os.fspath(path)).name}"

    def redact_value(self, value: Any) -> Any:
        if isinstance(value, SecretCell):
            return REDACTION_TOKEN
        if isinstance(value, (bytes, bytearray, memoryview)):
            return REDACTION_TOKEN
        if isinstance(value, dict):
            return self.redact_dict(value)
        if isinstance(value, (list, tuple)):
            return [self.redact_value(item) for item in value]
        if isinstance(value, str):
            return self.redact_string(value)
        if isinstance(value, os.PathLike):
            return self.redact_path(value)
        return value

    def redact_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively redact a mapping of log context."""
        result: Dict[str, Any] = {}
        for key, value in data.items():
            if str(key).lower() in self.sensitive_fields:
                result[key] = REDACTION_TOKEN
            else:
                result[key] = self.redact_value(value)
        return result

    def add_pattern(self, pattern: Union[str, Pattern[str]]) -> None:
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        self.patterns.append(pattern)

    def add_sensitive_field(self, field_name: str) -> None:
        self.sensitive_fields.add(field_name.lower())
