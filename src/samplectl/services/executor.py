"""CallExecutor — send a Request through a Transport, normalize the result.

Three Response shapes, chosen by the operation's declared kind:

- ``unary``         -> :class:`UnaryResponse` (one invoke)
- ``listing``       -> :class:`~samplectl.services.pages.PageSequence`
                       (first page eager, later pages lazy)
- ``long_running``  -> :class:`~samplectl.domain.operation.Operation`
                       (returned immediately; the caller polls)

INVARIANT: The executor never defaults fields, never retries, and never
polls on its own. Remote errors surface unmodified; raw transport failures
(timeouts, connection errors) become ``Unavailable``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field

from samplectl.domain.errors import InvalidArgument, SampleError, Unavailable
from samplectl.domain.operation import Operation, advance
from samplectl.domain.request import Request
from samplectl.domain.schema import OperationKind, OperationRegistry
from samplectl.services.pages import Page, PageSequence
from samplectl.transport.base import GET_OPERATION, Row, Transport

log = structlog.get_logger(__name__)

_T = TypeVar("_T")


class UnaryResponse(BaseModel):
    """Result of a unary call.

    Attributes:
        operation: Name of the operation that produced it.
        data: The result fields as returned by the service.
        columns: Declared field order for display; empty means ``data`` order.
    """

    model_config = ConfigDict(frozen=True)

    operation: str
    data: dict[str, Any] = Field(default_factory=dict)
    columns: tuple[str, ...] = ()


Response = UnaryResponse | PageSequence | Operation


class CallExecutor:
    """Executes requests for the operations in *registry* via *transport*."""

    def __init__(self, transport: Transport, registry: OperationRegistry) -> None:
        self._transport = transport
        self._registry = registry

    def execute(self, request: Request) -> Response:
        """Issue *request* and return the normalized Response.

        Raises:
            InvalidArgument: The operation is unknown or returned a malformed
                operation handle.
            NotFound, PermissionDenied: Reported by the transport.
            Unavailable: The transport failed to complete the round trip.
        """
        schema = self._registry.get(request.operation)
        log.debug("call.execute", operation=request.operation, kind=str(schema.kind))

        if schema.kind is OperationKind.LISTING:
            return self._execute_listing(request, schema.columns)

        raw = coerce_mapping(
            _call_transport(request.operation, self._transport.invoke, request.operation, request),
            request.operation,
        )
        if schema.kind is OperationKind.LONG_RUNNING:
            operation = Operation.from_raw(raw, operation=request.operation)
            log.debug("call.started", operation=request.operation, id=operation.id)
            return operation
        return UnaryResponse(operation=request.operation, data=dict(raw), columns=schema.columns)

    def poll(self, operation: Operation) -> Operation:
        """Refresh *operation* with exactly one round trip.

        A terminal operation is returned as-is without contacting the
        service. Status never moves backwards.
        """
        if operation.done:
            return operation
        probe = Request(operation=GET_OPERATION, resource=operation.id)
        raw = coerce_mapping(
            _call_transport(GET_OPERATION, self._transport.invoke, GET_OPERATION, probe),
            GET_OPERATION,
        )
        observed = Operation.from_raw(raw, operation=operation.operation)
        updated = advance(operation, observed)
        log.debug("call.polled", id=operation.id, status=str(updated.status))
        return updated

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def _execute_listing(self, request: Request, columns: tuple[str, ...]) -> PageSequence:
        def fetch(token: str | None) -> tuple[Sequence[Row], str | None]:
            result = _call_transport(
                request.operation,
                self._transport.fetch_page,
                request.operation,
                request,
                token,
            )
            if not isinstance(result, tuple) or len(result) != 2:
                raise InvalidArgument(
                    f"Transport returned a malformed page for {request.operation}",
                    detail={"operation": request.operation},
                )
            return result

        rows, next_token = fetch(None)
        first = Page(index=0, rows=tuple(rows), next_page_token=next_token or None)
        return PageSequence(request.operation, first, fetch, columns=columns)


def _call_transport(operation: str, func: Callable[..., _T], *args: Any) -> _T:
    """Run one transport call, mapping raw I/O failures to ``Unavailable``."""
    try:
        return func(*args)
    except SampleError:
        raise
    except (TimeoutError, ConnectionError, OSError) as exc:
        log.warning("call.unavailable", operation=operation, error=str(exc))
        raise Unavailable(
            f"Transport failed during {operation}: {exc}",
            detail={"operation": operation, "cause": type(exc).__name__},
        ) from exc


def coerce_mapping(raw: Any, operation: str) -> Mapping[str, Any]:
    """Reject transport results that are not mappings."""
    if not isinstance(raw, Mapping):
        raise InvalidArgument(
            f"Transport returned {type(raw).__name__} for {operation}, expected a mapping",
            detail={"operation": operation},
        )
    return raw
