"""Argv-only external process invocation.

``CommandSpec`` never builds a shell string: the program and each argument are
handed to ``subprocess.run`` as separate argv elements with ``shell=False``,
so metacharacters such as ``;``, ``|``, ``$()`` or quotes reach the child as
literal text.

The program name is trusted by contract: it must come from the caller's own
code, never from untrusted input. Nothing at this layer can tell the two apart.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from bulwark.config import DEFAULTS, Settings
from bulwark.outcome import Fault, Outcome

logger = logging.getLogger(__name__)

ArgValue = Union[str, "os.PathLike[str]"]


class ProcessResult(BaseModel):
    """Captured result of a finished process."""

    model_config = ConfigDict(frozen=True)

    argv: Tuple[str, ...] = Field(description="Exact argument vector that was executed")
    returncode: int = Field(description="Exit status; negative values are POSIX signals")
    stdout: Union[str, bytes] = Field(description="Captured standard output")
    stderr: Union[str, bytes] = Field(description="Captured standard error")
    duration_s: float = Field(ge=0.0, description="Wall-clock runtime in seconds")

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


def _coerce_arg(value: Any) -> Any:
    # PathLike (including ValidatedPath) becomes its string form; anything else
    # is kept as given and rejected by run().
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    return value


def _element_problem(value: Any, what: str) -> Optional[str]:
    if not isinstance(value, str):
        return f"{what} must be a string, got {type(value).__name__}"
    if "\x00" in value:
        return f"{what} contains a NUL byte"
    try:
        os.fsencode(value)
    except UnicodeEncodeError:
        return f"{what} cannot be encoded for the operating system"
    return None


@dataclass(frozen=True)
class CommandSpec:
    """Immutable description of one process invocation.

    Builder methods return a new spec, so a partially built spec can be
    shared and extended safely.

    Example:
        >>> CommandSpec("echo").arg("hello; rm -rf /").argv
        ('echo', 'hello; rm -rf /')
    """

    program: str
    arguments: Tuple[Any, ...] = ()
    working_dir: Optional[str] = None
    environment: Optional[Tuple[Tuple[str, str], ...]] = None
    timeout_s: Optional[float] = None
    check_exit: bool = False
    text: bool = True

    # ---------- Builder ----------
    def arg(self, value: ArgValue) -> "CommandSpec":
        """Append one argument, passed verbatim."""
        return replace(self, arguments=self.arguments + (_coerce_arg(value),))

    def args(self, *values: ArgValue) -> "CommandSpec":
        return replace(self, arguments=self.arguments + tuple(_coerce_arg(v) for v in values))

    def cwd(self, path: Union[str, "os.PathLike[str]"]) -> "CommandSpec":
        return replace(self, working_dir=os.fspath(path))

    def env(self, mapping: Mapping[str, str]) -> "CommandSpec":
        """Run with exactly ``mapping`` as the environment (nothing is inherited)."""
        return replace(self, environment=tuple(sorted(mapping.items())))

    def timeout(self, seconds: Optional[float]) -> "CommandSpec":
        return replace(self, timeout_s=seconds)

    def check(self, enabled: bool = True) -> "CommandSpec":
        """Treat a non-zero exit status as a NON_ZERO_EXIT fault."""
        return replace(self, check_exit=enabled)

    def binary(self) -> "CommandSpec":
        """Capture stdout/stderr as bytes instead of UTF-8 text."""
        return replace(self, text=False)

    @property
    def argv(self) -> Tuple[Any, ...]:
        return (self.program,) + self.arguments

    # ---------- Execution ----------
    def _validation_problem(self) -> Optional[str]:
        if not self.program:
            return "program must not be empty"
        problem = _element_problem(self.program, "program")
        if problem:
            return problem
        for index, value in enumerate(self.arguments):
            problem = _element_problem(value, f"argument {index}")
            if problem:
                return problem
        for key, value in self.environment or ():
            if isinstance(key, str) and (not key or "=" in key):
                return f"environment name {key!r} is empty or contains '='"
            problem = _element_problem(key, "environment name") or _element_problem(
                value, f"environment value for {key!r}"
            )
            if problem:
                return problem
        if self.working_dir is not None:
            return _element_problem(self.working_dir, "working directory")
        return None

    def run(self, *, settings: Optional[Settings] = None) -> Outcome[ProcessResult]:
        """Execute the command and capture its output.

        Blocks the calling thread until the process exits. Async callers should
        use ``asyncio.to_thread(spec.run)`` or their runtime's equivalent.

        Faults:
            INVALID_INPUT: Non-string or NUL-containing argv/env element
            SPAWN_FAILED: Program missing, not executable, or cwd unusable
            TIMED_OUT: Timeout elapsed; the child has been killed
            NON_ZERO_EXIT: Only when ``check()`` was requested
        """
        problem = self._validation_problem()
        if problem:
            return Outcome.failure(Fault.invalid_input(problem))

        cfg = settings or DEFAULTS
        timeout = self.timeout_s if self.timeout_s is not None else cfg.command_timeout_s
        argv = list(self.argv)
        decode: dict = {"encoding": "utf-8", "errors": "replace"} if self.text else {}

        logger.debug("spawning %s with %d argument(s)", self.program, len(self.arguments))
        started = time.monotonic()
        try:
            completed = subprocess.run(
                argv,
                shell=False,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                check=False,
                cwd=self.working_dir,
                env=dict(self.environment) if self.environment is not None else None,
                timeout=timeout,
                **decode,
            )
        except subprocess.TimeoutExpired:
            logger.warning("%s timed out after %ss", self.program, timeout)
            return Outcome.failure(Fault.timed_out(self.program, timeout or 0.0))
        except OSError as exc:
            logger.warning("could not start %s: %s", self.program, type(exc).__name__)
            return Outcome.failure(Fault.spawn_failed(self.program, cause=exc))
        elapsed = time.monotonic() - started

        result = ProcessResult(
            argv=tuple(argv),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
            duration_s=elapsed,
        )
        if self.check_exit and completed.returncode != 0:
            return Outcome.failure(Fault.non_zero_exit(self.program, completed.returncode))
        return Outcome.success(result)


__all__ = ["CommandSpec", "ProcessResult"]
