"""Build-time checks that keep calling code honest about Outcome values."""

from .outcome_rules import (
    OUTCOME_METHODS,
    UNWRAP_METHODS,
    Finding,
    check_paths,
    check_source,
    iter_python_files,
)

__all__ = [
    "Finding",
    "OUTCOME_METHODS",
    "UNWRAP_METHODS",
    "check_paths",
    "check_source",
    "iter_python_files",
]
