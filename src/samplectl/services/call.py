"""CallService — build, execute, and format one remote call as a ServiceResult.

Two surfaces:
- call: the full pipeline (RequestBuilder -> CallExecutor -> ResultFormatter)
- poll: refresh a long-running operation, optionally waiting with backoff

Formatted output is collected into the payload up to ``limit`` rows; the
formatter itself stays lazy, so a capped listing only fetches the pages it
needs.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from itertools import islice
from typing import TYPE_CHECKING, Any

from samplectl.domain.errors import SampleError
from samplectl.domain.operation import Operation
from samplectl.domain.schema import OperationRegistry
from samplectl.services.base import BaseService
from samplectl.services.builder import RequestBuilder
from samplectl.services.contracts import CallResultData, OperationData, dump_validated
from samplectl.services.executor import CallExecutor
from samplectl.services.formatter import HeaderRow, OutputStyle, OutputUnit, ResultFormatter
from samplectl.services.pages import PageSequence
from samplectl.services.polling import BackoffPolicy, wait_for_completion
from samplectl.services.result import ServiceResult
from samplectl.services.telemetry import trace_span, traced
from samplectl.transport.base import GET_OPERATION

if TYPE_CHECKING:
    from samplectl.transport.base import Transport


class CallService(BaseService):
    """Runs operations from the registry against one transport."""

    def __init__(
        self,
        registry: OperationRegistry,
        transport: Transport,
        *,
        max_rows: int | None = None,
    ) -> None:
        super().__init__(registry)
        self._builder = RequestBuilder(registry)
        self._executor = CallExecutor(transport, registry)
        self._formatter = ResultFormatter()
        self._max_rows = max_rows

    # ------------------------------------------------------------------
    # call: build + execute + format
    # ------------------------------------------------------------------

    @traced
    def call(
        self,
        operation: str,
        resource: str,
        fields: Mapping[str, Any] | None = None,
        *,
        style: str = "text",
        limit: int | None = None,
        wait: bool = False,
        policy: BackoffPolicy | None = None,
    ) -> ServiceResult:
        """Run *operation* on *resource* and return its formatted output.

        Args:
            operation: Registered operation name.
            resource: Target resource path.
            fields: Request fields (dotted keys or nested mappings).
            style: ``"text"`` or ``"tabular"``.
            limit: Maximum data rows/lines to collect; defaults to the
                service's ``max_rows``. None collects everything.
            wait: For long-running operations, poll until terminal.
            policy: Backoff used when *wait* is set.
        """
        limit = self._max_rows if limit is None else limit
        warnings: list[str] = []
        try:
            with trace_span("build"):
                request = self._builder.build(operation, resource, fields)
            with trace_span("execute") as span:
                response = self._executor.execute(request)
                if wait and isinstance(response, Operation):
                    response = wait_for_completion(self._executor, response, policy)
                if span is not None:
                    span.annotate("response", type(response).__name__)
            with trace_span("format"):
                units = self._formatter.format(response, style)
                header, body, truncated = _collect(units, limit)
        except SampleError as exc:
            return self._failure("call", exc)

        if truncated:
            warnings.append(f"Output truncated to {limit} rows")

        kind = self._registry.get(operation).kind
        payload: dict[str, Any] = {
            "operation": operation,
            "kind": kind.value,
            "resource": resource,
            "style": OutputStyle(style).value,
            "header": header,
            "count": len(body),
            "truncated": truncated,
        }
        if OutputStyle(style) is OutputStyle.TEXT:
            payload["lines"] = body
        else:
            payload["rows"] = body
        if isinstance(response, PageSequence):
            payload["pages"] = response.pages_fetched
        if isinstance(response, Operation):
            payload["operation_id"] = response.id
            payload["status"] = response.status.value

        return ServiceResult(
            ok=True,
            op="call",
            data=dump_validated(CallResultData, payload),
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # poll: refresh a long-running operation
    # ------------------------------------------------------------------

    @traced
    def poll(
        self,
        operation_id: str,
        *,
        operation: str = GET_OPERATION,
        wait: bool = False,
        policy: BackoffPolicy | None = None,
    ) -> ServiceResult:
        """Poll operation *operation_id* once, or until terminal with *wait*.

        A FAILED operation is a successful poll: the result is ``ok`` and the
        failure is in ``data["error"]``.
        """
        polls = 0

        def count(_op: Operation) -> None:
            nonlocal polls
            polls += 1

        try:
            current = self._executor.poll(Operation(id=operation_id, operation=operation))
            polls = 1
            if wait:
                current = wait_for_completion(self._executor, current, policy, on_poll=count)
        except SampleError as exc:
            return self._failure("poll", exc)

        payload = {
            "id": current.id,
            "operation": current.operation,
            "status": current.status.value,
            "done": current.done,
            "result": current.result,
            "error": current.error.model_dump() if current.error else None,
            "metadata": current.metadata,
            "polls": polls,
        }
        return ServiceResult(ok=True, op="poll", data=dump_validated(OperationData, payload))


def _collect(
    units: Iterator[OutputUnit],
    limit: int | None,
) -> tuple[list[str] | None, list[Any], bool]:
    """Split off the header and take up to *limit* data units.

    Pulls one unit past the limit to tell "exactly limit" from "truncated".
    """
    header: list[str] | None = None
    first = next(units, None)
    if isinstance(first, HeaderRow):
        header = list(first)
        rest: Iterator[OutputUnit] = units
    elif first is None:
        return None, [], False
    else:
        rest = _chain_one(first, units)

    if limit is None:
        return header, [_plain(u) for u in rest], False
    taken = [_plain(u) for u in islice(rest, limit + 1)]
    return header, taken[:limit], len(taken) > limit


def _chain_one(first: OutputUnit, rest: Iterator[OutputUnit]) -> Iterator[OutputUnit]:
    yield first
    yield from rest


def _plain(unit: OutputUnit) -> Any:
    return unit if isinstance(unit, str) else list(unit)
