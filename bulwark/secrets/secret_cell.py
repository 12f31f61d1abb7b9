"""SecretCell: short-lived ownership of credential bytes with scrub-on-release.

Python's memory model cannot promise erasure of every copy a program ever
made, so this is best effort with explicit rules:

- The cell keeps the material in a private ``bytearray`` that it never
  resizes, so the bytes live in one long-lived allocation.
- ``expose`` lends a scratch copy and scrubs it before returning, so a
  view retained past the call (or sliced from it) reads only the scrub byte.
- A ``bytearray`` handed to the constructor is copied and then scrubbed in
  place, which is how ownership moves into the cell. ``bytes`` and ``str``
  are immutable; callers must drop their own references to those.
- ``close()``, leaving a ``with`` block (also while an exception unwinds)
  and garbage collection all overwrite the buffer with the scrub byte.
- ``str``/``repr``/``format`` always give ``[REDACTED]``. There is no
  ``bytes()``, ``len()``, content equality, ordering or pickling.

A cell has a single owner and no internal lock. Wrap it in your own lock if
several threads must share one.
"""

from __future__ import annotations

import weakref
from typing import Any, Callable, Optional, TypeVar, Union

from bulwark.config import DEFAULTS, Settings
from bulwark.outcome import Fault, Outcome

from ._scrub import scrub

R = TypeVar("R")

REDACTION_TOKEN = "[REDACTED]"

SecretInput = Union[bytes, bytearray, memoryview, str]


class SecretCell:
    """Exclusive holder of one secret value.

    Args:
        data: Secret material. A ``bytearray`` argument is scrubbed after copying.
        scrub_byte: Fill byte used on release; defaults to ``settings.scrub_byte``
        settings: Explicit settings; defaults to compiled-in values
    """

    __slots__ = ("_buf", "_pattern", "_finalizer", "__weakref__")

    def __init__(
        self,
        data: SecretInput,
        *,
        scrub_byte: Optional[int] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        cfg = settings or DEFAULTS
        pattern = cfg.scrub_byte if scrub_byte is None else scrub_byte
        if not 0 <= pattern <= 0xFF:
            raise ValueError(f"scrub_byte must be in 0..255, got {pattern}")

        if isinstance(data, bytearray):
            buf = bytearray(data)
            scrub(data, pattern)
        elif isinstance(data, (bytes, memoryview)):
            buf = bytearray(data)
        elif isinstance(data, str):
            buf = bytearray(data.encode("utf-8"))
        else:
            raise TypeError(f"unsupported secret type: {type(data).__name__}")

        self._buf = buf
        self._pattern = pattern
        # The finalizer references the buffer, not the cell, so it can fire on collection.
        self._finalizer = weakref.finalize(self, scrub, buf, pattern)

    @classmethod
    def from_text(cls, text: str, encoding: str = "utf-8", **kwargs: Any) -> "SecretCell":
        return cls(text.encode(encoding), **kwargs)

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def expose(self, fn: Callable[[memoryview], R]) -> Outcome[R]:
        """Run ``fn`` with a read-only view of the secret and return its result.

        ``fn`` sees a scratch copy that is scrubbed when it returns or raises,
        so the view, and any slice or cast taken from it, reads only the scrub
        pattern afterwards. Fails with RELEASED once scrubbed.
        """
        if self.closed:
            return Outcome.failure(Fault.released())
        scratch = bytearray(self._buf)
        view = memoryview(scratch).toreadonly()
        try:
            return Outcome.success(fn(view))
        finally:
            scrub(scratch, self._pattern)
            try:
                view.release()
            except BufferError:
                # fn re-exported the view; the scratch bytes are already scrubbed.
                pass

    def close(self) -> None:
        """Scrub the buffer now. Safe to call more than once."""
        self._finalizer()

    def __enter__(self) -> "SecretCell":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------- No textual or serialized form ----------
    def __repr__(self) -> str:
        return REDACTION_TOKEN

    def __str__(self) -> str:
        return REDACTION_TOKEN

    def __format__(self, format_spec: str) -> str:
        return REDACTION_TOKEN

    def __reduce_ex__(self, protocol: Any) -> Any:
        raise TypeError("SecretCell cannot be pickled")

    def __copy__(self) -> "SecretCell":
        raise TypeError("SecretCell cannot be copied")

    def __deepcopy__(self, memo: Any) -> "SecretCell":
        raise TypeError("SecretCell cannot be copied")


__all__ = ["SecretCell", "REDACTION_TOKEN"]
