"""Outcome: value-carrying result type used in place of raised failures.

An Outcome is constructed terminal, as either a success holding a value or a
failure holding a :class:`~bulwark.outcome.fault.Fault`. A failure must be
consumed by one of:

- handling it (``fault``, ``value_or``, ``fold``)
- passing it on (``propagate`` inside a ``@propagating`` function, or chaining
  with ``map``/``and_then``/``map_fault``)
- recording and discarding it (``log_and_drop``)

There is deliberately no accessor that returns the value or aborts. A failure
that is garbage-collected without being consumed is reported through the
``bulwark.outcome`` logger, in the same spirit as asyncio's "exception was
never retrieved".
"""

from __future__ import annotations

import functools
import inspect
import logging
from typing import Any, Callable, Generic, Optional, Tuple, Type, TypeVar, Union

from .fault import Fault, FaultKind

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")

logger = logging.getLogger("bulwark.outcome")


class PropagatedFault(Exception):
    """Carries a Fault out of ``Outcome.propagate`` up to a ``@propagating`` boundary."""

    def __init__(self, fault: Fault) -> None:
        super().__init__(str(fault))
        self.fault = fault


class Outcome(Generic[T]):
    """Success(value) or Failure(fault). Use the classmethods to construct."""

    __slots__ = ("_value", "_fault", "_handled", "_logged", "__weakref__")

    def __init__(self, value: Optional[T], fault: Optional[Fault]) -> None:
        self._value = value
        self._fault = fault
        self._handled = fault is None
        self._logged = False

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value, None)

    @classmethod
    def failure(cls, fault: Fault) -> "Outcome[Any]":
        if not isinstance(fault, Fault):
            raise TypeError(f"failure requires a Fault, got {type(fault).__name__}")
        return cls(None, fault)

    # ---------- Inspection ----------
    @property
    def is_success(self) -> bool:
        return self._fault is None

    @property
    def is_failure(self) -> bool:
        return self._fault is not None

    @property
    def fault(self) -> Optional[Fault]:
        """The failure value, or None on success. Reading it counts as handling."""
        self._handled = True
        return self._fault

    def __bool__(self) -> bool:
        # A failure must not read as "falsy and ignorable".
        raise TypeError("Outcome has no truth value; use is_success or is_failure")

    def __repr__(self) -> str:
        if self._fault is None:
            return f"Success({self._value!r})"
        return f"Failure({self._fault!s})"

    # ---------- Handling ----------
    def value_or(self, default: U) -> Union[T, U]:
        self._handled = True
        if self._fault is None:
            return self._value  # type: ignore[return-value]
        return default

    def fold(self, on_success: Callable[[T], R], on_failure: Callable[[Fault], R]) -> R:
        self._handled = True
        if self._fault is None:
            return on_success(self._value)  # type: ignore[arg-type]
        return on_failure(self._fault)

    def propagate(self) -> T:
        """Return the value, or hand the fault to the enclosing ``@propagating`` function."""
        if self._fault is None:
            return self._value  # type: ignore[return-value]
        self._handled = True
        raise PropagatedFault(self._fault)

    def log_and_drop(self, log: Any, message: str = "operation failed") -> None:
        """Record a failure once on ``log`` and discard it. No-op on success.

        ``log`` may be a stdlib ``logging.Logger``/``LoggerAdapter`` or a
        ``bulwark.logging.StructuredLogger``.
        """
        if self._fault is None:
            return
        self._handled = True
        if self._logged:
            return
        self._logged = True
        fault = self._fault
        if isinstance(log, (logging.Logger, logging.LoggerAdapter)):
            log.error(
                "%s: %s",
                message,
                fault,
                exc_info=fault.cause,
                extra={"bulwark_fault": fault.to_log_context()},
            )
        else:
            log.error(message, **fault.to_log_context())

    # ---------- Chaining ----------
    def map(self, fn: Callable[[T], U]) -> "Outcome[U]":
        if self._fault is not None:
            self._handled = True
            return Outcome.failure(self._fault)
        return Outcome.success(fn(self._value))  # type: ignore[arg-type]

    def and_then(self, fn: Callable[[T], "Outcome[U]"]) -> "Outcome[U]":
        if self._fault is not None:
            self._handled = True
            return Outcome.failure(self._fault)
        nxt = fn(self._value)  # type: ignore[arg-type]
        if not isinstance(nxt, Outcome):
            raise TypeError(f"and_then callback must return an Outcome, got {type(nxt).__name__}")
        return nxt

    def map_fault(self, fn: Callable[[Fault], Fault]) -> "Outcome[T]":
        if self._fault is None:
            return self
        self._handled = True
        return Outcome.failure(fn(self._fault))

    def __del__(self) -> None:
        if not self._handled and self._fault is not None and logger is not None:
            logger.error("unhandled fault discarded: %s", self._fault)


def propagating(fn: Callable[..., Any]) -> Callable[..., Outcome[Any]]:
    """Turn ``Outcome.propagate`` calls inside ``fn`` into an early failure return.

    A plain (non-Outcome) return value is wrapped as a success.
    """

    if inspect.iscoroutinefunction(fn):

        @functools.wraps(fn)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Outcome[Any]:
            try:
                result = await fn(*args, **kwargs)
            except PropagatedFault as signal:
                return Outcome.failure(signal.fault)
            return result if isinstance(result, Outcome) else Outcome.success(result)

        return async_wrapper

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Outcome[Any]:
        try:
            result = fn(*args, **kwargs)
        except PropagatedFault as signal:
            return Outcome.failure(signal.fault)
        return result if isinstance(result, Outcome) else Outcome.success(result)

    return wrapper


def attempt(
    fn: Callable[..., T],
    *args: Any,
    kind: FaultKind,
    catch: Tuple[Type[BaseException], ...] = (OSError,),
    message: Optional[str] = None,
    **kwargs: Any,
) -> Outcome[T]:
    """Call an exception-raising function and convert ``catch`` exceptions to a Fault."""
    try:
        return Outcome.success(fn(*args, **kwargs))
    except catch as exc:
        text = message or f"{getattr(fn, '__name__', 'call')} failed: {type(exc).__name__}"
        return Outcome.failure(Fault(kind, text, cause=exc))


__all__ = ["Outcome", "PropagatedFault", "attempt", "propagating"]
