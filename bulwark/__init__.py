"""Bulwark: trust-boundary validation and credential-lifecycle toolkit.

Four independent components, all reporting failure through ``Outcome``:

- ``PathGuard``: confine untrusted relative paths to a canonical root
- ``CommandSpec``: run external programs from an argv, never through a shell
- ``SecretCell``: hold credential bytes and scrub them on release
- ``Outcome``/``Fault``: result values that cannot be silently dropped
"""

from bulwark.config import Settings
from bulwark.outcome import Fault, FaultKind, Outcome, PropagatedFault, attempt, propagating
from bulwark.process import CommandSpec, ProcessResult
from bulwark.secrets import REDACTION_TOKEN, SecretCell
from bulwark.security import PathGuard, ValidatedPath

__version__ = "0.1.0"

__all__ = [
    "CommandSpec",
    "Fault",
    "FaultKind",
    "Outcome",
    "PathGuard",
    "ProcessResult",
    "PropagatedFault",
    "REDACTION_TOKEN",
    "SecretCell",
    "Settings",
    "ValidatedPath",
    "attempt",
    "propagating",
]
