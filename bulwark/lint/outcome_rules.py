"""Static checks for Outcome misuse in calling code.

Rules:
    BW000  source file could not be parsed
    BW001  Outcome-returning call used as a bare statement (result discarded)
    BW002  forced unwrap (``.unwrap()``, ``.expect()``, ``.unwrap_unchecked()``)
    BW003  process termination (``sys.exit``, ``os._exit``, ``os.abort``,
           ``exit``, ``quit``) outside ``main()`` or an ``if __name__ == "__main__"`` block

A line ending in ``# noqa`` suppresses every rule on it; ``# noqa: BW001``
suppresses only the listed codes.
"""

from __future__ import annotations

import ast
import re
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, Iterator, List, Optional, Sequence, Union

from bulwark.outcome import Fault, FaultKind, Outcome, attempt, propagating

OUTCOME_METHODS: FrozenSet[str] = frozenset(
    {
        "validate",
        "validate_for_create",
        "run",
        "expose",
        "map",
        "map_fault",
        "and_then",
        "create",
    }
)
OUTCOME_FUNCTIONS: FrozenSet[str] = frozenset({"attempt"})
UNWRAP_METHODS: FrozenSet[str] = frozenset({"unwrap", "expect", "unwrap_unchecked"})
_EXIT_ATTRS = {("sys", "exit"), ("os", "_exit"), ("os", "abort")}
_EXIT_NAMES = {"exit", "quit"}
# Receivers whose .run() is not ours.
_FOREIGN_RUN_RECEIVERS = {"subprocess", "asyncio"}

_NOQA_RE = re.compile(r"#\s*noqa(?::\s*(?P<codes>[A-Z0-9, ]+))?", re.IGNORECASE)


@dataclass(frozen=True)
class Finding:
    path: str
    line: int
    col: int
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.col}: {self.code} {self.message}"


def _dotted(node: ast.AST) -> Optional[tuple]:
    if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
        return (node.value.id, node.attr)
    return None


def _is_main_guard(node: ast.If) -> bool:
    test = node.test
    return (
        isinstance(test, ast.Compare)
        and isinstance(test.left, ast.Name)
        and test.left.id == "__name__"
        and len(test.comparators) == 1
        and isinstance(test.comparators[0], ast.Constant)
        and test.comparators[0].value == "__main__"
    )


class _OutcomeVisitor(ast.NodeVisitor):
    def __init__(self, path: str, methods: FrozenSet[str]) -> None:
        self.path = path
        self.methods = methods
        self.findings: List[Finding] = []
        self._entry_depth = 0

    def _add(self, node: ast.AST, code: str, message: str) -> None:
        self.findings.append(
            Finding(self.path, getattr(node, "lineno", 0), getattr(node, "col_offset", 0), code, message)
        )

    def _visit_entry(self, node: ast.AST) -> None:
        self._entry_depth += 1
        self.generic_visit(node)
        self._entry_depth -= 1

    def visit_If(self, node: ast.If) -> None:
        if _is_main_guard(node):
            self._visit_entry(node)
        else:
            self.generic_visit(node)

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        if node.name == "main":
            self._visit_entry(node)
        else:
            self.generic_visit(node)

    visit_AsyncFunctionDef = visit_FunctionDef  # type: ignore[assignment]

    def visit_Expr(self, node: ast.Expr) -> None:
        call = node.value
        if isinstance(call, ast.Await):
            call = call.value
        if isinstance(call, ast.Call):
            name = self._discarded_outcome_name(call)
            if name:
                self._add(node, "BW001", f"result of {name}() is discarded; handle, propagate or log_and_drop it")
        self.generic_visit(node)

    def _discarded_outcome_name(self, call: ast.Call) -> Optional[str]:
        func = call.func
        if isinstance(func, ast.Name) and func.id in OUTCOME_FUNCTIONS:
            return func.id
        if isinstance(func, ast.Attribute) and func.attr in self.methods:
            dotted = _dotted(func)
            if func.attr == "run" and dotted and dotted[0] in _FOREIGN_RUN_RECEIVERS:
                return None
            return func.attr
        return None

    def visit_Call(self, node: ast.Call) -> None:
        func = node.func
        if isinstance(func, ast.Attribute) and func.attr in UNWRAP_METHODS:
            self._add(node, "BW002", f".{func.attr}() forces a value out of a fallible result")
        if self._entry_depth == 0:
            dotted = _dotted(func)
            if dotted in _EXIT_ATTRS:
                self._add(node, "BW003", f"{'.'.join(dotted)}() terminates the process from library code")
            elif isinstance(func, ast.Name) and func.id in _EXIT_NAMES:
                self._add(node, "BW003", f"{func.id}() terminates the process from library code")
        self.generic_visit(node)


def _suppressed(finding: Finding, lines: Sequence[str]) -> bool:
    if not 0 < finding.line <= len(lines):
        return False
    match = _NOQA_RE.search(lines[finding.line - 1])
    if not match:
        return False
    codes = match.group("codes")
    if not codes:
        return True
    return finding.code in {c.upper() for c in re.split(r"[,\s]+", codes) if c}


def check_source(
    source: str, path: str = "<string>", *, methods: Iterable[str] = OUTCOME_METHODS
) -> List[Finding]:
    """Return rule violations found in one module's source text."""
    try:
        tree = ast.parse(source, filename=path)
    except SyntaxError as exc:
        return [Finding(path, exc.lineno or 0, exc.offset or 0, "BW000", f"could not parse: {exc.msg}")]
    visitor = _OutcomeVisitor(path, frozenset(methods))
    visitor.visit(tree)
    lines = source.splitlines()
    return sorted(
        (f for f in visitor.findings if not _suppressed(f, lines)),
        key=lambda f: (f.line, f.col, f.code),
    )


def iter_python_files(root: Path) -> Iterator[Path]:
    if root.is_file():
        yield root
        return
    for path in sorted(root.rglob("*.py")):
        rel_parts = path.relative_to(root).parts
        if any(part.startswith(".") or part == "__pycache__" for part in rel_parts):
            continue
        yield path


@propagating
def check_paths(
    paths: Iterable[Union[str, Path]], *, methods: Iterable[str] = OUTCOME_METHODS
) -> Outcome[List[Finding]]:
    """Check every ``.py`` file under ``paths``.

    Fails with NOT_FOUND on the first missing or unreadable path.
    """
    method_set = frozenset(methods)
    findings: List[Finding] = []
    for raw in paths:
        root = Path(raw)
        if not root.exists():
            return Outcome.failure(Fault.not_found(f"no such file or directory: {raw}"))
        for file in iter_python_files(root):
            source = attempt(
                file.read_text,
                kind=FaultKind.NOT_FOUND,
                catch=(OSError, UnicodeDecodeError),
                message=f"could not read {file}",
                encoding="utf-8",
            ).propagate()
            findings.extend(check_source(source, str(file), methods=method_set))
    return findings


__all__ = [
    "Finding",
    "OUTCOME_METHODS",
    "UNWRAP_METHODS",
    "check_source",
    "check_paths",
    "iter_python_files",
]
