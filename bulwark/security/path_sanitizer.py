"""Pure string checks for untrusted relative path candidates.

No filesystem I/O is performed by any function in this module. PathGuard runs
these checks before it joins a candidate onto its root, and converts
``UnsafePathError`` into a ``PATH_TRAVERSAL`` fault.

Rejected outright:
- NUL and other C0 control characters, DEL
- parent-directory segments (``..``)
- absolute forms: leading ``/`` or ``\\``, UNC, ``~`` expansion, drive letters
- separator-equivalent escapes: backslashes, percent-encoded ``.``, ``/``, ``\\``, NUL

Each check runs on the raw candidate and on its NFKC compatibility form, so
full-width lookalikes such as ``．．／`` are caught as well.
"""

from __future__ import annotations

import re
import unicodedata
from typing import List

_CONTROL_RE = re.compile(r"[\x00-\x1F\x7F]")
_DRIVE_RE = re.compile(r"^[A-Za-z]:")
_ENCODED_RE = re.compile(r"%(2e|2f|5c|00)", re.IGNORECASE)


class UnsafePathError(ValueError):
    """Raised when a candidate path fails lexical validation."""


def _check_form(text: str) -> None:
    if _CONTROL_RE.search(text):
        raise UnsafePathError("control characters not permitted in path")
    if text.startswith("~"):
        raise UnsafePathError("tilde expansion is not permitted")
    if text.startswith("\\\\"):
        raise UnsafePathError("UNC paths are not permitted")
    if text.startswith(("/", "\\")):
        raise UnsafePathError("absolute paths are not permitted")
    if _DRIVE_RE.match(text):
        raise UnsafePathError("drive-prefixed paths are not permitted")
    if "\\" in text:
        raise UnsafePathError("backslash separators are not permitted")
    if _ENCODED_RE.search(text):
        raise UnsafePathError("percent-encoded path characters are not permitted")
    if ".." in text.split("/"):
        raise UnsafePathError("parent-directory segments are not permitted")


def split_candidate(raw: str) -> List[str]:
    """Validate ``raw`` and return its components, dropping empty and ``.`` segments.

    An empty list denotes the root itself.

    Raises:
        UnsafePathError: If the candidate is not a string or fails any check
    """
    if not isinstance(raw, str):
        raise UnsafePathError("path must be a string")

    _check_form(raw)
    folded = unicodedata.normalize("NFKC", raw)
    if folded != raw:
        _check_form(folded)

    return [part for part in raw.split("/") if part and part != "."]


def truncate_for_audit(raw: object, max_chars: int) -> str:
    """Render an untrusted candidate for logs: escaped and bounded in length."""
    if not isinstance(raw, str):
        return f"<{type(raw).__name__}>"
    if len(raw) <= max_chars:
        return repr(raw)
    return f"{raw[:max_chars]!r}...(+{len(raw) - max_chars} chars)"


__all__ = ["UnsafePathError", "split_candidate", "truncate_for_audit"]
