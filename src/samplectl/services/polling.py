"""Caller-side waiting for long-running operations.

The executor's ``poll()`` performs one round trip and returns. This module
is the loop a caller may choose to run around it, driven by a tenacity
``Retrying``: exponential backoff with a cap and an overall deadline.
Sleep and clock are injectable so tests run instantly.

Abandoning a wait has no effect on the remote task; it keeps running.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from tenacity import RetryCallState, RetryError, Retrying, retry_if_result, wait_exponential

from samplectl.domain.errors import DeadlineExceeded

if TYPE_CHECKING:
    from samplectl.domain.operation import Operation
    from samplectl.services.executor import CallExecutor

logger = logging.getLogger(__name__)


class BackoffPolicy(BaseModel):
    """Exponential backoff between polls.

    Attributes:
        initial_delay: Seconds to wait before the first re-poll.
        multiplier: Growth factor applied after each poll.
        max_delay: Upper bound for a single wait.
        timeout: Overall deadline in seconds; None waits forever.
    """

    model_config = ConfigDict(frozen=True)

    initial_delay: float = Field(default=1.0, gt=0)
    multiplier: float = Field(default=2.0, ge=1.0)
    max_delay: float = Field(default=30.0, gt=0)
    timeout: float | None = Field(default=600.0, gt=0)

    def backoff(self) -> wait_exponential:
        """Wait strategy: initial, initial*m, initial*m**2, ... capped at max."""
        return wait_exponential(
            multiplier=self.initial_delay,
            exp_base=self.multiplier,
            max=self.max_delay,
        )


def wait_for_completion(
    executor: CallExecutor,
    operation: Operation,
    policy: BackoffPolicy | None = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    on_poll: Callable[[Operation], None] | None = None,
) -> Operation:
    """Poll *operation* until it reaches a terminal status.

    The first attempt hands back the operation as given; every later
    attempt is one ``executor.poll()`` round trip, so a wait always comes
    before a poll. Transport errors raised by ``poll()`` are not retried.

    Args:
        executor: Executor whose ``poll()`` performs each round trip.
        operation: The handle returned by ``execute()``.
        policy: Backoff settings; defaults to :class:`BackoffPolicy()`.
        sleep: Called with each wait in seconds.
        clock: Monotonic clock used for the deadline.
        on_poll: Called with every polled state (progress reporting).

    Returns:
        The terminal Operation. A FAILED operation is returned, not raised.

    Raises:
        DeadlineExceeded: The policy's timeout elapsed first.
    """
    if operation.done:
        return operation

    policy = policy or BackoffPolicy()
    deadline = None if policy.timeout is None else clock() + policy.timeout
    backoff = policy.backoff()
    current = operation
    polls = 0
    first = True

    def past_deadline(retry_state: RetryCallState) -> bool:
        return deadline is not None and clock() >= deadline

    def next_wait(retry_state: RetryCallState) -> float:
        delay = backoff(retry_state)
        if deadline is None:
            return delay
        return min(delay, deadline - clock())

    def attempt() -> Operation:
        nonlocal current, polls, first
        if first:
            first = False
            return current
        current = executor.poll(current)
        polls += 1
        logger.debug("Polled %s (%d): %s", current.id, polls, current.status)
        if on_poll is not None:
            on_poll(current)
        return current

    retrying = Retrying(
        sleep=sleep,
        stop=past_deadline,
        wait=next_wait,
        retry=retry_if_result(lambda op: not op.done),
    )
    try:
        return retrying(attempt)
    except RetryError:
        raise DeadlineExceeded(
            f"Operation {current.id} still running after {policy.timeout}s",
            detail={"id": current.id, "polls": polls, "timeout": policy.timeout},
        ) from None
