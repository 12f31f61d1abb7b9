from __future__ import annotations

from dataclasses import InitVar, dataclass
from pathlib import Path

# Held only by PathGuard; a ValidatedPath built without it is rejected.
_MINT = object()


@dataclass(frozen=True, slots=True)
class ValidatedPath:
	"""
	Canonical absolute path proven to lie within a PathGuard root.
	Produced only by PathGuard.validate / PathGuard.validate_for_create.
	"""
	_p: Path
	_root: Path
	key: InitVar[object] = None

	def __post_init__(self, key: object) -> None:
		if key is not _MINT:
			raise TypeError("ValidatedPath can only be produced by PathGuard")
		if not (self._p == self._root or self._p.is_relative_to(self._root)):
			raise ValueError("path is outside its guard root")

	@property
	def root(self) -> Path:
		return self._root

	def as_path(self) -> Path:
		"""Return the underlying Path."""
		return self._p

	def relative(self) -> Path:
		"""Path relative to the guard root (``.`` for the root itself)."""
		return self._p.relative_to(self._root)

	def __fspath__(self) -> str:
		# Allows open(vp), os.stat(vp) and CommandSpec.arg(vp).
		return str(self._p)

	def __str__(self) -> str:
		return str(self._p)

	def __repr__(self) -> str:
		return f"ValidatedPath({self._p!s})"


def mint(path: Path, root: Path) -> ValidatedPath:
	return ValidatedPath(path, root, _MINT)
