"""In-place buffer overwrite for SecretCell.

This is the one direct memory write in Bulwark. It must only be called on a
bytearray owned exclusively by the caller: the buffer is overwritten through
its raw address, bypassing any other view of it.
"""

from __future__ import annotations

import ctypes


def scrub(buf: bytearray, pattern: int = 0x00) -> None:
    """Overwrite every byte of ``buf`` with ``pattern`` without reallocating it."""
    n = len(buf)
    if n == 0:
        return
    raw = (ctypes.c_char * n).from_buffer(buf)
    try:
        ctypes.memset(ctypes.addressof(raw), pattern, n)
    finally:
        # Drop the buffer export so the bytearray is free to be deallocated.
        del raw
