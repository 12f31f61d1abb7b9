"""PathGuard: confine untrusted relative paths to one canonical root.

Threat model and protections:
- Directory traversal: reject ``..`` segments, absolute/drive/UNC/tilde forms,
  backslashes and percent-encoded separators before touching the filesystem.
- Symlink escape: canonicalize the joined path (following symlinks) and verify
  the result still lies under the canonical root. A link that points outside
  the root is reported as traversal even when its target does not exist, so
  callers cannot use the guard to probe for files outside the root.
- Information exposure: faults never include host paths; rejected candidates
  are logged escaped and truncated.

The guard only reads metadata. It never creates, writes or deletes.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

from bulwark.config import DEFAULTS, Settings
from bulwark.outcome import Fault, Outcome

from ._types import _MINT, ValidatedPath, mint
from .path_sanitizer import UnsafePathError, split_candidate, truncate_for_audit

logger = logging.getLogger(__name__)

_RESOLVE_ERRORS = (OSError, RuntimeError)


class PathGuard:
    """Validate untrusted relative paths against a fixed, canonical root.

    Build with :meth:`create`; the root is canonicalized exactly once there and
    is never derived from untrusted input afterwards. Instances are immutable
    and safe to share between threads.
    """

    __slots__ = ("_root", "_audit_max_chars")

    def __init__(self, canonical_root: Path, *, audit_max_chars: int, _key: object = None) -> None:
        if _key is not _MINT:
            raise TypeError("use PathGuard.create() to construct a guard")
        self._root = canonical_root
        self._audit_max_chars = audit_max_chars

    @classmethod
    def create(
        cls, root: Union[str, "os.PathLike[str]"], *, settings: Optional[Settings] = None
    ) -> Outcome["PathGuard"]:
        """Canonicalize ``root`` and build a guard for it.

        Fails with INVALID_ROOT if ``root`` is empty, missing, or not a directory.
        """
        cfg = settings or DEFAULTS
        raw = os.fspath(root)
        if not raw:
            return Outcome.failure(Fault.invalid_root("root must not be empty"))
        try:
            canonical = Path(raw).expanduser().resolve(strict=True)
        except _RESOLVE_ERRORS as exc:
            return Outcome.failure(Fault.invalid_root("root does not exist", cause=exc))
        if not canonical.is_dir():
            return Outcome.failure(Fault.invalid_root("root is not a directory"))
        return Outcome.success(cls(canonical, audit_max_chars=cfg.audit_max_chars, _key=_MINT))

    @property
    def root(self) -> Path:
        return self._root

    def __repr__(self) -> str:
        return f"PathGuard(root={self._root!s})"

    def contains(self, path: Union[Path, ValidatedPath]) -> bool:
        """Lexical containment check for an already-canonical absolute path."""
        p = path.as_path() if isinstance(path, ValidatedPath) else Path(path)
        return p == self._root or p.is_relative_to(self._root)

    # ---------- Validation ----------
    def validate(self, candidate: str) -> Outcome[ValidatedPath]:
        """Resolve ``candidate`` under the root; the entry must already exist.

        Steps:
        - Lexical rejection of traversal forms (PATH_TRAVERSAL)
        - Join with the canonical root and canonicalize strictly (NOT_FOUND)
        - Verify the canonical result is under the root (PATH_TRAVERSAL)
        """
        try:
            parts = split_candidate(candidate)
        except UnsafePathError as exc:
            return self._reject(candidate, str(exc))

        joined = self._root.joinpath(*parts)
        try:
            resolved = joined.resolve(strict=True)
        except _RESOLVE_ERRORS as exc:
            return self._unresolvable(candidate, joined, exc)

        if not self.contains(resolved):
            return self._reject(candidate, "resolved path escapes root")
        return Outcome.success(mint(resolved, self._root))

    def validate_for_create(self, candidate: str) -> Outcome[ValidatedPath]:
        """Validate a path whose final component may not exist yet.

        The parent directory must exist and resolve under the root. If the leaf
        already exists (including as a dangling symlink) it is checked the same
        way :meth:`validate` checks it.
        """
        try:
            parts = split_candidate(candidate)
        except UnsafePathError as exc:
            return self._reject(candidate, str(exc))
        if not parts:
            return Outcome.failure(Fault.invalid_input("candidate does not name an entry"))

        parent = self._root.joinpath(*parts[:-1])
        try:
            parent_resolved = parent.resolve(strict=True)
        except _RESOLVE_ERRORS as exc:
            return self._unresolvable(candidate, parent, exc)
        if not self.contains(parent_resolved):
            return self._reject(candidate, "parent directory escapes root")
        if not parent_resolved.is_dir():
            return Outcome.failure(Fault.not_found("parent is not a directory"))

        target = parent_resolved / parts[-1]
        if not os.path.lexists(target):
            return Outcome.success(mint(target, self._root))

        try:
            resolved = target.resolve(strict=True)
        except _RESOLVE_ERRORS as exc:
            return self._unresolvable(candidate, target, exc)
        if not self.contains(resolved):
            return self._reject(candidate, "resolved path escapes root")
        return Outcome.success(mint(resolved, self._root))

    # ---------- Internals ----------
    def _reject(self, candidate: object, reason: str) -> Outcome[ValidatedPath]:
        audit = truncate_for_audit(candidate, self._audit_max_chars)
        logger.warning("path traversal rejected: %s (candidate=%s)", reason, audit)
        return Outcome.failure(Fault.path_traversal(reason, candidate=audit))

    def _unresolvable(
        self, candidate: str, joined: Path, exc: BaseException
    ) -> Outcome[ValidatedPath]:
        # A dangling link pointing outside the root is still an escape attempt.
        try:
            lenient = joined.resolve(strict=False)
        except _RESOLVE_ERRORS:
            lenient = None
        if lenient is not None and not self.contains(lenient):
            return self._reject(candidate, "resolved path escapes root")
        return Outcome.failure(
            Fault.not_found("path does not resolve to an existing entry", cause=exc)
        )


__all__ = ["PathGuard"]
