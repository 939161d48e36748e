"""Per-operation request schemas and the registry that holds them.

An :class:`OperationSchema` is everything the builder and executor need to
know about one remote operation: its call shape (unary, listing, or
long-running), its request fields, the resource path it targets, and the
field order used when printing its results.

INVARIANT: Schemas are frozen. The registry maps each name to exactly one
schema; re-registering a name is an error unless explicitly replacing it.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from samplectl.domain.errors import InvalidArgument
from samplectl.domain.resources import ResourceTemplate
from samplectl.domain.values import FieldKind


class OperationKind(StrEnum):
    """How an operation returns its result."""

    UNARY = "unary"
    LISTING = "listing"
    LONG_RUNNING = "long_running"


class FieldSpec(BaseModel):
    """Declaration of one request field."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: FieldKind
    required: bool = False
    repeated: bool = False
    enum_values: tuple[str, ...] = ()
    message: MessageSpec | None = None
    default: Any = None
    description: str = ""

    @field_validator("enum_values")
    @classmethod
    def _upper_enum_values(cls, values: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(v.upper() for v in values)

    @model_validator(mode="after")
    def _check_shape(self) -> FieldSpec:
        if not self.name or "." in self.name:
            raise ValueError(f"Invalid field name: {self.name!r}")
        if self.kind is FieldKind.MESSAGE and self.message is None:
            raise ValueError(f"Message field '{self.name}' needs a message spec")
        if self.kind is not FieldKind.MESSAGE and self.message is not None:
            raise ValueError(f"Only message fields take a message spec ('{self.name}')")
        if self.kind is not FieldKind.ENUM and self.enum_values:
            raise ValueError(f"Only enum fields take enum values ('{self.name}')")
        return self


class MessageSpec(BaseModel):
    """A nested message type: an ordered group of fields."""

    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[FieldSpec, ...] = ()

    @model_validator(mode="after")
    def _unique_fields(self) -> MessageSpec:
        _check_unique(self.name, self.fields)
        return self

    def field(self, name: str) -> FieldSpec | None:
        """Return the field called *name*, or None."""
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None


class OperationSchema(BaseModel):
    """Declaration of one remote operation.

    Attributes:
        name: Dotted operation name (``"livestream.listChannels"``).
        kind: Call shape; decides which Response variant execute() returns.
        fields: Request fields, in declaration order.
        resource_template: When set, request resource paths must match it.
        columns: Declared result field order for formatting. Empty means
            "use the order the service returned".
        description: One-line summary shown by ``operations list``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    kind: OperationKind = OperationKind.UNARY
    fields: tuple[FieldSpec, ...] = ()
    resource_template: str | None = None
    columns: tuple[str, ...] = ()
    description: str = ""

    @model_validator(mode="after")
    def _check(self) -> OperationSchema:
        if not self.name.strip():
            raise ValueError("Operation name cannot be empty")
        _check_unique(self.name, self.fields)
        if self.resource_template is not None:
            ResourceTemplate(self.resource_template)
        return self

    @property
    def template(self) -> ResourceTemplate | None:
        """The parsed resource template, if one is declared."""
        if self.resource_template is None:
            return None
        return ResourceTemplate(self.resource_template)

    @property
    def message(self) -> MessageSpec:
        """The top-level request fields viewed as a message."""
        return MessageSpec(name=self.name, fields=self.fields)

    def field(self, name: str) -> FieldSpec | None:
        """Return the top-level field called *name*, or None."""
        return self.message.field(name)


def _check_unique(owner: str, fields: tuple[FieldSpec, ...]) -> None:
    seen: set[str] = set()
    for spec in fields:
        if spec.name in seen:
            raise ValueError(f"Duplicate field '{spec.name}' in {owner}")
        seen.add(spec.name)


FieldSpec.model_rebuild()


class OperationRegistry:
    """Name -> :class:`OperationSchema` lookup shared by builder and executor."""

    def __init__(self, schemas: list[OperationSchema] | None = None) -> None:
        self._schemas: dict[str, OperationSchema] = {}
        for schema in schemas or []:
            self.register(schema)

    def register(self, schema: OperationSchema, *, replace: bool = False) -> None:
        """Add *schema*.

        Raises:
            ValueError: The name is already registered and *replace* is False.
        """
        if schema.name in self._schemas and not replace:
            raise ValueError(f"Operation already registered: {schema.name}")
        self._schemas[schema.name] = schema

    def get(self, name: str) -> OperationSchema:
        """Look up an operation by name.

        Raises:
            InvalidArgument: No operation of that name is registered.
        """
        schema = self._schemas.get(name)
        if schema is None:
            raise InvalidArgument(
                f"Unknown operation: {name}",
                detail={"operation": name, "known": self.names()},
            )
        return schema

    def names(self) -> list[str]:
        """Sorted list of registered operation names."""
        return sorted(self._schemas)

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __iter__(self) -> Iterator[OperationSchema]:
        return (self._schemas[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._schemas)


# ── Schema shorthands ────────────────────────────────────────────────


def string(name: str, **kwargs: Any) -> FieldSpec:
    return FieldSpec(name=name, kind=FieldKind.STRING, **kwargs)


def integer(name: str, **kwargs: Any) -> FieldSpec:
    return FieldSpec(name=name, kind=FieldKind.INTEGER, **kwargs)


def boolean(name: str, **kwargs: Any) -> FieldSpec:
    return FieldSpec(name=name, kind=FieldKind.BOOLEAN, **kwargs)


def enum(name: str, values: tuple[str, ...], **kwargs: Any) -> FieldSpec:
    return FieldSpec(name=name, kind=FieldKind.ENUM, enum_values=values, **kwargs)


def message(name: str, fields: tuple[FieldSpec, ...], **kwargs: Any) -> FieldSpec:
    spec = MessageSpec(name=name, fields=fields)
    return FieldSpec(name=name, kind=FieldKind.MESSAGE, message=spec, **kwargs)


__all__ = [
    "FieldSpec",
    "MessageSpec",
    "OperationKind",
    "OperationRegistry",
    "OperationSchema",
    "boolean",
    "enum",
    "integer",
    "message",
    "string",
]
