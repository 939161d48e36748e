"""Typed payload contracts for CallService results.

Payloads are validated before they leave the service layer so a renamed key
(``rows`` vs ``items``) fails in tests rather than in a renderer.
"""

from __future__ import annotations

from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T", bound=BaseModel)


def dump_validated(model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="json")


class CallResultData(BaseModel):
    """Payload contract for ``CallService.call``."""

    operation: str
    kind: Literal["unary", "listing", "long_running"]
    resource: str
    style: Literal["text", "tabular"]
    lines: list[str] = Field(default_factory=list)
    header: list[str] | None = None
    rows: list[list[str]] = Field(default_factory=list)
    count: int
    truncated: bool = False
    pages: int | None = None
    operation_id: str | None = None
    status: Literal["RUNNING", "SUCCEEDED", "FAILED"] | None = None


class OperationErrorData(BaseModel):
    """Error carried by a FAILED operation payload."""

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class OperationData(BaseModel):
    """Payload contract for ``CallService.poll``."""

    id: str
    operation: str
    status: Literal["RUNNING", "SUCCEEDED", "FAILED"]
    done: bool
    result: dict[str, Any] | None = None
    error: OperationErrorData | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    polls: int


class OperationSummary(BaseModel):
    """One row of ``CatalogService.list_operations``."""

    model_config = ConfigDict(extra="allow")

    name: str
    kind: str
    resource_template: str | None = None
    description: str = ""


class OperationListData(BaseModel):
    """Payload contract for ``CatalogService.list_operations``."""

    count: int
    items: list[OperationSummary]


class FieldDescription(BaseModel):
    """One (possibly nested, dotted) request field of an operation."""

    path: str
    kind: str
    required: bool
    repeated: bool
    enum_values: list[str] = Field(default_factory=list)
    default: Any = None
    description: str = ""


class OperationDetailData(BaseModel):
    """Payload contract for ``CatalogService.describe``."""

    name: str
    kind: str
    resource_template: str | None = None
    columns: list[str] = Field(default_factory=list)
    description: str = ""
    fields: list[FieldDescription]
