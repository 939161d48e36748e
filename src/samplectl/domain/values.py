"""Tagged field values and scalar conversion rules.

A request field is never a bare Python object: it is a :class:`FieldValue`
carrying its declared :class:`FieldKind`, so the executor and transports can
serialize it without guessing. Conversion from caller input happens here and
only here.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from samplectl.domain.errors import InvalidArgument


class FieldKind(StrEnum):
    """Declared type of a request field."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ENUM = "enum"
    MESSAGE = "message"


SCALAR_KINDS: frozenset[FieldKind] = frozenset(
    {FieldKind.STRING, FieldKind.INTEGER, FieldKind.BOOLEAN, FieldKind.ENUM}
)

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})


class FieldValue(BaseModel):
    """A typed value bound to one request field.

    ``value`` holds a ``str``/``int``/``bool`` for scalars, an upper-case
    symbol name for enums, and a ``dict[str, FieldValue]`` for nested
    messages. Repeated fields hold a tuple of those.
    """

    model_config = ConfigDict(frozen=True)

    kind: FieldKind
    value: Any
    repeated: bool = False

    def to_python(self) -> Any:
        """Plain Python form: dicts for messages, lists for repeated fields."""
        if self.repeated:
            return [_plain(self.kind, item) for item in self.value]
        return _plain(self.kind, self.value)


def _plain(kind: FieldKind, value: Any) -> Any:
    if kind is FieldKind.MESSAGE:
        return {name: fv.to_python() for name, fv in value.items()}
    return value


# ── Scalar conversion ────────────────────────────────────────────────


def coerce_scalar(
    kind: FieldKind,
    raw: Any,
    *,
    field: str,
    enum_values: tuple[str, ...] = (),
) -> str | int | bool:
    """Convert caller input *raw* to the Python type for *kind*.

    Raises:
        InvalidArgument: When *raw* cannot represent a value of *kind*.
    """
    if kind is FieldKind.STRING:
        return _to_string(raw, field)
    if kind is FieldKind.INTEGER:
        return _to_integer(raw, field)
    if kind is FieldKind.BOOLEAN:
        return _to_boolean(raw, field)
    if kind is FieldKind.ENUM:
        return _to_enum(raw, field, enum_values)
    raise InvalidArgument(
        f"Field '{field}' is a {kind} field, not a scalar",
        detail={"field": field, "kind": str(kind)},
    )


def _reject(field: str, kind: str, raw: Any) -> InvalidArgument:
    return InvalidArgument(
        f"Field '{field}' expects {kind}, got {raw!r}",
        detail={"field": field, "kind": kind, "value": repr(raw)},
    )


def _to_string(raw: Any, field: str) -> str:
    if isinstance(raw, str):
        return raw
    # Numeric ids (project numbers, property ids) are commonly passed as ints.
    if isinstance(raw, int) and not isinstance(raw, bool):
        return str(raw)
    raise _reject(field, "string", raw)


def _to_integer(raw: Any, field: str) -> int:
    if isinstance(raw, bool):
        raise _reject(field, "integer", raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        try:
            return int(raw.strip(), 10)
        except ValueError:
            raise _reject(field, "integer", raw) from None
    raise _reject(field, "integer", raw)


def _to_boolean(raw: Any, field: str) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        word = raw.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise _reject(field, "boolean", raw)


def _to_enum(raw: Any, field: str, enum_values: tuple[str, ...]) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise _reject(field, "enum", raw)
    symbol = raw.strip().upper()
    if enum_values and symbol not in enum_values:
        raise InvalidArgument(
            f"Field '{field}' must be one of {', '.join(enum_values)}, got {raw!r}",
            detail={"field": field, "allowed": list(enum_values), "value": raw},
        )
    return symbol
