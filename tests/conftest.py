# tests/conftest.py
# Shared filesystem sandboxes for the Bulwark suite.

from __future__ import annotations

from pathlib import Path

import pytest

from bulwark.security import PathGuard


@pytest.fixture()
def sandbox(tmp_path: Path):
    """A trusted data root next to an untrusted outside directory.

    Layout:
        data/reports/q1.csv
        data/archive/2023/summary.txt
        outside/secret.txt
    """
    data = tmp_path / "data"
    (data / "reports").mkdir(parents=True)
    (data / "archive" / "2023").mkdir(parents=True)
    (data / "reports" / "q1.csv").write_text("quarter,revenue\nq1,100\n", encoding="utf-8")
    (data / "archive" / "2023" / "summary.txt").write_text("ok", encoding="utf-8")

    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("nope", encoding="utf-8")
    return data, outside


@pytest.fixture()
def guard(sandbox) -> PathGuard:
    data, _ = sandbox
    outcome = PathGuard.create(data)
    assert outcome.is_success
    return outcome.value_or(None)
