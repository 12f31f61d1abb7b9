"""Shell-free external command execution for Bulwark."""

from .command import CommandSpec, ProcessResult

__all__ = ["CommandSpec", "ProcessResult"]
