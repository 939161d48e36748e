"""Tests for caller-side waiting on long-running operations."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from samplectl.domain.errors import DeadlineExceeded, Unavailable
from samplectl.domain.operation import Operation, OperationStatus
from samplectl.domain.schema import OperationRegistry
from samplectl.services.executor import CallExecutor
from samplectl.services.polling import BackoffPolicy, wait_for_completion
from tests.conftest import StubTransport, failed, running, succeeded

OP_ID = "operations/op-1"


class FakeClock:
    """Monotonic clock advanced only by the fake sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _executor(registry: OperationRegistry, *states: dict) -> tuple[CallExecutor, StubTransport]:
    transport = StubTransport(states={OP_ID: list(states)})
    return CallExecutor(transport, registry), transport


class TestBackoffPolicy:
    def test_delays_grow_and_cap(self, registry: OperationRegistry) -> None:
        executor, _ = _executor(registry, *([running()] * 5), succeeded({}))
        clock = FakeClock()
        wait_for_completion(
            executor,
            Operation(id=OP_ID, operation="x"),
            BackoffPolicy(initial_delay=1, multiplier=2, max_delay=5, timeout=None),
            sleep=clock.sleep,
            clock=clock,
        )
        assert clock.sleeps == [1, 2, 4, 5, 5, 5]

    def test_initial_above_cap(self, registry: OperationRegistry) -> None:
        executor, _ = _executor(registry, succeeded({}))
        clock = FakeClock()
        wait_for_completion(
            executor,
            Operation(id=OP_ID, operation="x"),
            BackoffPolicy(initial_delay=10, max_delay=3, timeout=None),
            sleep=clock.sleep,
            clock=clock,
        )
        assert clock.sleeps == [3]

    @pytest.mark.parametrize(
        "kwargs",
        [{"initial_delay": 0}, {"multiplier": 0.5}, {"max_delay": -1}, {"timeout": 0}],
    )
    def test_invalid(self, kwargs: dict) -> None:
        with pytest.raises(ValidationError):
            BackoffPolicy(**kwargs)


class TestWaitForCompletion:
    def test_running_running_succeeded(self, registry: OperationRegistry) -> None:
        executor, transport = _executor(registry, running(), running(), succeeded({"name": "in-2"}))
        clock = FakeClock()
        seen: list[OperationStatus] = []

        op = wait_for_completion(
            executor,
            Operation(id=OP_ID, operation="test.createItem"),
            BackoffPolicy(initial_delay=1, multiplier=2, max_delay=10, timeout=None),
            sleep=clock.sleep,
            clock=clock,
            on_poll=lambda o: seen.append(o.status),
        )

        assert op.status is OperationStatus.SUCCEEDED
        assert op.result == {"name": "in-2"}
        assert seen == [OperationStatus.RUNNING, OperationStatus.RUNNING, OperationStatus.SUCCEEDED]
        assert clock.sleeps == [1, 2, 4]
        assert len(transport.calls) == 3

    def test_failed_is_returned_not_raised(self, registry: OperationRegistry) -> None:
        executor, _ = _executor(registry, failed("INTERNAL", "boom"))
        clock = FakeClock()
        op = wait_for_completion(
            executor,
            Operation(id=OP_ID, operation="x"),
            sleep=clock.sleep,
            clock=clock,
        )
        assert op.status is OperationStatus.FAILED
        assert op.error is not None and op.error.message == "boom"

    def test_done_operation_returns_immediately(self, registry: OperationRegistry) -> None:
        executor, transport = _executor(registry, running())
        done = Operation(id=OP_ID, operation="x", status=OperationStatus.SUCCEEDED, result={})
        clock = FakeClock()
        assert wait_for_completion(executor, done, sleep=clock.sleep, clock=clock) is done
        assert transport.calls == []
        assert clock.sleeps == []

    def test_deadline_exceeded(self, registry: OperationRegistry) -> None:
        executor, transport = _executor(registry, running())
        clock = FakeClock()
        with pytest.raises(DeadlineExceeded) as exc_info:
            wait_for_completion(
                executor,
                Operation(id=OP_ID, operation="x"),
                BackoffPolicy(initial_delay=1, multiplier=2, max_delay=4, timeout=6),
                sleep=clock.sleep,
                clock=clock,
            )
        assert clock.sleeps == [1, 2, 3]
        assert exc_info.value.detail["polls"] == 3
        assert len(transport.calls) == 3

    def test_transport_errors_propagate(self, registry: OperationRegistry) -> None:
        transport = StubTransport(fail_with=TimeoutError("slow"))
        clock = FakeClock()
        with pytest.raises(Unavailable):
            wait_for_completion(
                CallExecutor(transport, registry),
                Operation(id=OP_ID, operation="x"),
                sleep=clock.sleep,
                clock=clock,
            )
