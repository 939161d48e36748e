"""Long-running Operation handle and its forward-only lifecycle.

State machine::

    RUNNING ──► SUCCEEDED
       │
       └──────► FAILED

RUNNING may be observed any number of times. SUCCEEDED and FAILED are
terminal: once reached, the Operation's result or error never changes.
A FAILED operation is an ordinary value, not an exception.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from samplectl.domain.errors import InvalidArgument


class OperationStatus(StrEnum):
    """Lifecycle status of a long-running operation."""

    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


OPERATION_TRANSITIONS: dict[str, list[str]] = {
    "RUNNING": ["RUNNING", "SUCCEEDED", "FAILED"],
    "SUCCEEDED": [],
    "FAILED": [],
}

TERMINAL_STATUSES: frozenset[OperationStatus] = frozenset(
    {OperationStatus.SUCCEEDED, OperationStatus.FAILED}
)


class OperationError(BaseModel):
    """Error carried by a FAILED operation."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class Operation(BaseModel):
    """Handle to an asynchronous remote task.

    Attributes:
        id: Server-assigned operation name (``projects/p/.../operations/op-1``).
        operation: The registered operation that started this task.
        status: Current lifecycle status.
        result: Terminal result payload (SUCCEEDED only).
        error: Terminal error (FAILED only).
        metadata: Progress metadata reported by the service, if any.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    operation: str
    status: OperationStatus = OperationStatus.RUNNING
    result: dict[str, Any] | None = None
    error: OperationError | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_terminal_payload(self) -> Operation:
        if self.status is OperationStatus.RUNNING and (self.result is not None or self.error):
            raise ValueError("A RUNNING operation carries neither result nor error")
        if self.status is OperationStatus.SUCCEEDED and self.error is not None:
            raise ValueError("A SUCCEEDED operation cannot carry an error")
        if self.status is OperationStatus.FAILED and self.error is None:
            raise ValueError("A FAILED operation must carry an error")
        return self

    @property
    def done(self) -> bool:
        """Whether the operation reached a terminal status."""
        return self.status in TERMINAL_STATUSES

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, operation: str) -> Operation:
        """Decode a ``google.longrunning.Operation``-shaped mapping.

        ``done`` false (or absent) means RUNNING; ``done`` true with an
        ``error`` means FAILED; ``done`` true otherwise means SUCCEEDED.

        Raises:
            InvalidArgument: *raw* has no ``name``.
        """
        name = raw.get("name")
        if not name:
            raise InvalidArgument(
                "Operation payload has no name",
                detail={"operation": operation, "payload": dict(raw)},
            )
        metadata = dict(raw.get("metadata") or {})
        if not raw.get("done"):
            return cls(id=str(name), operation=operation, metadata=metadata)
        err = raw.get("error")
        if err:
            if not isinstance(err, Mapping):
                err = {"message": str(err)}
            return cls(
                id=str(name),
                operation=operation,
                status=OperationStatus.FAILED,
                error=OperationError(
                    code=str(err.get("code", "UNKNOWN")),
                    message=str(err.get("message", "")),
                    detail=_error_detail(err.get("details")),
                ),
                metadata=metadata,
            )
        return cls(
            id=str(name),
            operation=operation,
            status=OperationStatus.SUCCEEDED,
            result=dict(raw.get("response") or {}),
            metadata=metadata,
        )


def _error_detail(details: Any) -> dict[str, Any]:
    if not details:
        return {}
    if isinstance(details, Mapping):
        return dict(details)
    return {"details": list(details) if isinstance(details, (list, tuple)) else details}


def can_transition(current: str, target: str) -> bool:
    """Check whether an operation may move from *current* to *target*."""
    return target in OPERATION_TRANSITIONS.get(current, [])


def advance(current: Operation, observed: Operation) -> Operation:
    """Merge a freshly *observed* state into *current*.

    A terminal *current* is returned unchanged: its result or error is fixed.
    Otherwise the observed state replaces it.

    Raises:
        InvalidArgument: *observed* describes a different operation.
    """
    if observed.id != current.id:
        raise InvalidArgument(
            f"Polled operation {observed.id} does not match {current.id}",
            detail={"expected": current.id, "observed": observed.id},
        )
    if not can_transition(current.status, observed.status):
        return current
    return observed.model_copy(update={"operation": current.operation})
