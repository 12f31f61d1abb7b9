"""Tests for the Outcome/Fault result discipline."""

from __future__ import annotations

import asyncio
import gc
import io
import json
import logging

import pytest

from bulwark.logging import StructuredLogger
from bulwark.outcome import Fault, FaultKind, Outcome, PropagatedFault, attempt, propagating


def _nf(msg: str = "gone") -> Fault:
    return Fault.not_found(msg)


class TestFault:
    def test_retryable_kinds(self):
        assert Fault.not_found("x").retryable
        assert Fault.non_zero_exit("git", 1).retryable
        assert Fault.timed_out("git", 1.0).retryable
        assert not Fault.path_traversal("x").retryable
        assert not Fault.invalid_root("x").retryable
        assert not Fault.spawn_failed("git").retryable
        assert not Fault.invalid_input("x").retryable
        assert not Fault.released().retryable

    def test_code_only_for_non_zero_exit(self):
        assert Fault.non_zero_exit("git", 128).code == 128
        assert Fault.timed_out("git", 2.0).code is None

    def test_str_and_log_context(self):
        cause = FileNotFoundError("x")
        fault = Fault.not_found("no such entry", cause=cause)
        assert str(fault) == "not_found: no such entry"
        ctx = fault.to_log_context()
        assert ctx["fault_kind"] == "not_found"
        assert ctx["retryable"] is True
        assert ctx["cause_type"] == "FileNotFoundError"

    def test_equality_ignores_cause(self):
        assert Fault.not_found("x", cause=OSError(1)) == Fault.not_found("x")

    def test_fault_is_hashable(self):
        faults = {Fault.non_zero_exit("git", 1), Fault.non_zero_exit("git", 1), Fault.not_found("x")}
        assert len(faults) == 2

    def test_fault_is_frozen(self):
        fault = _nf()
        with pytest.raises(AttributeError):
            fault.kind = FaultKind.RELEASED  # type: ignore[misc]


class TestOutcome:
    def test_success_and_failure_are_exclusive(self):
        ok = Outcome.success(3)
        bad = Outcome.failure(_nf())
        assert ok.is_success and not ok.is_failure
        assert bad.is_failure and not bad.is_success
        assert ok.fault is None
        assert bad.fault.kind is FaultKind.NOT_FOUND

    def test_failure_requires_fault(self):
        with pytest.raises(TypeError):
            Outcome.failure("not a fault")  # type: ignore[arg-type]

    def test_no_truth_value(self):
        outcome = Outcome.success(1)
        with pytest.raises(TypeError):
            bool(outcome)
        bad = Outcome.failure(_nf())
        with pytest.raises(TypeError):
            if bad:
                pass
        bad.fault

    def test_no_unchecked_unwrap(self):
        outcome = Outcome.success(1)
        for name in ("unwrap", "expect", "unwrap_unchecked", "value"):
            assert not hasattr(outcome, name)

    def test_value_or_and_fold(self):
        assert Outcome.success(2).value_or(0) == 2
        assert Outcome.failure(_nf()).value_or(0) == 0
        assert Outcome.success(2).fold(lambda v: v * 10, lambda f: -1) == 20
        assert Outcome.failure(_nf()).fold(lambda v: v, lambda f: f.kind) is FaultKind.NOT_FOUND

    def test_repr(self):
        assert repr(Outcome.success("a")) == "Success('a')"
        bad = Outcome.failure(_nf("gone"))
        assert repr(bad) == "Failure(not_found: gone)"
        bad.fault

    def test_map_and_map_fault(self):
        assert Outcome.success(2).map(lambda v: v + 1).value_or(None) == 3
        assert Outcome.failure(_nf()).map(lambda v: v + 1).fault.kind is FaultKind.NOT_FOUND
        remapped = Outcome.failure(_nf()).map_fault(lambda f: Fault.invalid_input(f.message))
        assert remapped.fault.kind is FaultKind.INVALID_INPUT
        ok = Outcome.success(1)
        assert ok.map_fault(lambda f: f) is ok

    def test_chain_short_circuits_and_carries_failing_step(self):
        calls = []

        def step1(v):
            calls.append("step1")
            return Outcome.success(v + 1)

        def step2(v):
            calls.append("step2")
            return Outcome.failure(Fault.non_zero_exit("tool", 3))

        def step3(v):
            calls.append("step3")
            return Outcome.success(v)

        result = Outcome.success(1).and_then(step1).and_then(step2).and_then(step3)
        assert calls == ["step1", "step2"]
        assert result.fault.kind is FaultKind.NON_ZERO_EXIT
        assert result.fault.code == 3

    def test_and_then_requires_outcome(self):
        with pytest.raises(TypeError):
            Outcome.success(1).and_then(lambda v: v)


class TestPropagate:
    def test_propagating_returns_early(self):
        reached = []

        @propagating
        def pipeline(first: Outcome[int]):
            value = first.propagate()
            reached.append(value)
            return value * 2

        assert pipeline(Outcome.success(4)).value_or(None) == 8
        failed = pipeline(Outcome.failure(Fault.timed_out("x", 1.0)))
        assert failed.fault.kind is FaultKind.TIMED_OUT
        assert reached == [4]

    def test_nested_propagation(self):
        @propagating
        def inner():
            Outcome.failure(Fault.invalid_input("bad")).propagate()
            return 1

        @propagating
        def outer():
            return inner().propagate() + 1

        assert outer().fault.kind is FaultKind.INVALID_INPUT

    def test_returned_outcome_is_not_rewrapped(self):
        @propagating
        def passthrough():
            return Outcome.failure(_nf())

        assert passthrough().fault.kind is FaultKind.NOT_FOUND

    def test_async_propagation(self):
        @propagating
        async def fetch(o: Outcome[str]):
            await asyncio.sleep(0)
            return o.propagate().upper()

        assert asyncio.run(fetch(Outcome.success("ok"))).value_or(None) == "OK"
        assert asyncio.run(fetch(Outcome.failure(_nf()))).fault.kind is FaultKind.NOT_FOUND

    def test_propagate_outside_boundary_raises(self):
        with pytest.raises(PropagatedFault) as info:
            Outcome.failure(_nf("x")).propagate()
        assert info.value.fault.kind is FaultKind.NOT_FOUND


class TestLogAndDrop:
    def test_logs_exactly_once(self, caplog):
        log = logging.getLogger("tests.outcome")
        bad = Outcome.failure(Fault.non_zero_exit("tool", 2))
        with caplog.at_level(logging.ERROR, logger="tests.outcome"):
            bad.log_and_drop(log, "cleanup failed")
            bad.log_and_drop(log, "cleanup failed")
        records = [r for r in caplog.records if r.name == "tests.outcome"]
        assert len(records) == 1
        assert "cleanup failed: non_zero_exit" in records[0].getMessage()
        assert records[0].bulwark_fault["code"] == 2

    def test_success_is_noop(self, caplog):
        with caplog.at_level(logging.ERROR):
            Outcome.success(1).log_and_drop(logging.getLogger("tests.outcome"))
        assert caplog.records == []

    def test_structured_logger(self):
        sink = io.StringIO()
        slog = StructuredLogger("outcome", output_file=sink, enable_console=False)
        Outcome.failure(Fault.timed_out("tool", 0.5)).log_and_drop(slog, "probe failed")
        entry = json.loads(sink.getvalue().strip())
        assert entry["level"] == "error"
        assert entry["message"] == "probe failed"
        assert entry["fault_kind"] == "timed_out"
        assert entry["timeout_s"] == 0.5


class TestUnhandledDiscard:
    def test_discarded_failure_is_reported(self, caplog):
        with caplog.at_level(logging.ERROR, logger="bulwark.outcome"):
            bad = Outcome.failure(Fault.spawn_failed("tool"))
            del bad
            gc.collect()
        assert "unhandled fault discarded" in caplog.text

    def test_handled_failure_is_silent(self, caplog):
        with caplog.at_level(logging.ERROR, logger="bulwark.outcome"):
            bad = Outcome.failure(Fault.spawn_failed("tool"))
            assert bad.fault.kind is FaultKind.SPAWN_FAILED
            del bad
            gc.collect()
        assert "unhandled fault discarded" not in caplog.text


class TestAttempt:
    def test_success(self, tmp_path):
        target = tmp_path / "a.txt"
        target.write_text("hi", encoding="utf-8")
        assert attempt(target.read_text, kind=FaultKind.NOT_FOUND, encoding="utf-8").value_or(None) == "hi"

    def test_caught_exception_becomes_fault(self, tmp_path):
        outcome = attempt((tmp_path / "missing").read_text, kind=FaultKind.NOT_FOUND)
        fault = outcome.fault
        assert fault.kind is FaultKind.NOT_FOUND
        assert isinstance(fault.cause, FileNotFoundError)
        assert "FileNotFoundError" in fault.message

    def test_uncaught_exception_propagates(self):
        def boom():
            raise KeyError("x")

        with pytest.raises(KeyError):
            attempt(boom, kind=FaultKind.INVALID_INPUT)
