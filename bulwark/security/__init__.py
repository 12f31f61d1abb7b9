"""Filesystem trust-boundary checks for Bulwark."""

from .path_guard import PathGuard
from .path_sanitizer import UnsafePathError, split_candidate
from ._types import ValidatedPath

__all__ = ["PathGuard", "ValidatedPath", "UnsafePathError", "split_candidate"]
