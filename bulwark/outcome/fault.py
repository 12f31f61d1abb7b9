"""Fault vocabulary shared by every Bulwark component."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class FaultKind(str, Enum):
    """Categories of failure a caller is expected to match on."""

    INVALID_ROOT = "invalid_root"
    PATH_TRAVERSAL = "path_traversal"
    NOT_FOUND = "not_found"
    SPAWN_FAILED = "spawn_failed"
    NON_ZERO_EXIT = "non_zero_exit"
    TIMED_OUT = "timed_out"
    INVALID_INPUT = "invalid_input"
    RELEASED = "released"


_RETRYABLE = frozenset(
    {
        FaultKind.NOT_FOUND,
        FaultKind.NON_ZERO_EXIT,
        FaultKind.TIMED_OUT,
    }
)


@dataclass(frozen=True)
class Fault:
    """Failure value carried by an Outcome.

    Args:
        kind: Category from :class:`FaultKind`
        message: Short human-readable description (no host paths or secrets)
        detail: Structured context safe to log (exit code, truncated candidate)
        cause: Underlying exception, when the fault was converted from one
    """

    kind: FaultKind
    message: str
    detail: Mapping[str, Any] = field(default_factory=dict, hash=False)
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)

    @property
    def retryable(self) -> bool:
        return self.kind in _RETRYABLE

    @property
    def code(self) -> Optional[int]:
        """Exit code for NON_ZERO_EXIT faults, otherwise None."""
        if self.kind is not FaultKind.NON_ZERO_EXIT:
            return None
        return self.detail.get("code")

    def to_log_context(self) -> Dict[str, Any]:
        context: Dict[str, Any] = {
            "fault_kind": self.kind.value,
            "fault_message": self.message,
            "retryable": self.retryable,
        }
        context.update(self.detail)
        if self.cause is not None:
            context["cause_type"] = type(self.cause).__name__
        return context

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"

    # Constructors for the common kinds

    @classmethod
    def invalid_root(cls, message: str, *, cause: Optional[BaseException] = None) -> "Fault":
        return cls(FaultKind.INVALID_ROOT, message, cause=cause)

    @classmethod
    def path_traversal(cls, message: str, *, candidate: Optional[str] = None) -> "Fault":
        detail = {"candidate": candidate} if candidate is not None else {}
        return cls(FaultKind.PATH_TRAVERSAL, message, detail)

    @classmethod
    def not_found(cls, message: str, *, cause: Optional[BaseException] = None) -> "Fault":
        return cls(FaultKind.NOT_FOUND, message, cause=cause)

    @classmethod
    def spawn_failed(
        cls, program: str, *, cause: Optional[BaseException] = None
    ) -> "Fault":
        return cls(FaultKind.SPAWN_FAILED, f"could not start {program!r}", {"program": program}, cause)

    @classmethod
    def non_zero_exit(cls, program: str, code: int) -> "Fault":
        return cls(
            FaultKind.NON_ZERO_EXIT,
            f"{program!r} exited with status {code}",
            {"program": program, "code": code},
        )

    @classmethod
    def timed_out(cls, program: str, timeout: float) -> "Fault":
        return cls(
            FaultKind.TIMED_OUT,
            f"{program!r} did not finish within {timeout}s",
            {"program": program, "timeout_s": timeout},
        )

    @classmethod
    def invalid_input(cls, message: str) -> "Fault":
        return cls(FaultKind.INVALID_INPUT, message)

    @classmethod
    def released(cls) -> "Fault":
        return cls(FaultKind.RELEASED, "secret material has already been scrubbed")


__all__ = ["Fault", "FaultKind"]
