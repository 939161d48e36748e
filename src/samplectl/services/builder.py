"""RequestBuilder — flat caller parameters in, validated Request out.

Callers pass whatever they have (CLI strings, ints, nested dicts, dotted keys
like ``document.content``); the builder checks every value against the
operation's schema and produces a fully populated :class:`Request`.

No network access and no side effects: a failed build never reaches a
transport.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from samplectl.domain.errors import InvalidArgument
from samplectl.domain.request import Request
from samplectl.domain.schema import FieldSpec, MessageSpec, OperationRegistry
from samplectl.domain.values import FieldValue, coerce_scalar

logger = logging.getLogger(__name__)


class RequestBuilder:
    """Builds :class:`Request` values for operations in a registry."""

    def __init__(self, registry: OperationRegistry) -> None:
        self._registry = registry

    def build(
        self,
        operation: str,
        resource: str,
        fields: Mapping[str, Any] | None = None,
    ) -> Request:
        """Validate caller input and assemble a Request.

        Args:
            operation: Registered operation name.
            resource: Target resource path.
            fields: Field values. Keys may be dotted paths into nested
                messages; values may be nested mappings.

        Raises:
            InvalidArgument: Unknown operation, malformed resource path,
                unknown field, missing required field, or a value that
                cannot be converted to its declared type.
        """
        schema = self._registry.get(operation)

        if not isinstance(resource, str) or not resource.strip():
            raise InvalidArgument(
                f"{operation} needs a resource path",
                detail={"operation": operation},
            )
        template = schema.template
        if template is not None and not template.matches(resource):
            raise InvalidArgument(
                f"Resource path {resource!r} does not match {template.pattern}",
                detail={"operation": operation, "resource": resource, "template": template.pattern},
            )

        values = _build_message(schema.message, unflatten(fields or {}), prefix="")
        logger.debug("Built %s request with %d field(s)", operation, len(values))
        return Request(operation=operation, resource=resource, fields=values)


# ── Field assembly ───────────────────────────────────────────────────


def unflatten(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Expand dotted keys into nested dicts.

    Examples:
        >>> unflatten({"document.content": "hi", "document.type": "PLAIN_TEXT"})
        {'document': {'content': 'hi', 'type': 'PLAIN_TEXT'}}

    Raises:
        InvalidArgument: A key is used both as a value and as a message.
    """
    out: dict[str, Any] = {}
    for key, value in fields.items():
        if not isinstance(key, str) or not key or any(not part for part in key.split(".")):
            raise InvalidArgument(f"Invalid field name: {key!r}", detail={"field": str(key)})
        parts = key.split(".")
        node = out
        for depth, part in enumerate(parts[:-1]):
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise _conflict(".".join(parts[: depth + 1]))
            node = child
        leaf = parts[-1]
        if isinstance(value, Mapping):
            existing = node.setdefault(leaf, {})
            if not isinstance(existing, dict):
                raise _conflict(key)
            for sub_key, sub_value in unflatten(value).items():
                if sub_key in existing:
                    raise _conflict(f"{key}.{sub_key}")
                existing[sub_key] = sub_value
        else:
            if leaf in node:
                raise _conflict(key)
            node[leaf] = value
    return out


def _conflict(path: str) -> InvalidArgument:
    return InvalidArgument(f"Field '{path}' given more than once", detail={"field": path})


def _build_message(
    spec: MessageSpec,
    raw: Mapping[str, Any],
    *,
    prefix: str,
) -> dict[str, FieldValue]:
    known = {f.name for f in spec.fields}
    unknown = sorted(set(raw) - known)
    if unknown:
        path = f"{prefix}{unknown[0]}"
        raise InvalidArgument(
            f"Unknown field '{path}' for {spec.name}",
            detail={"field": path, "message": spec.name, "known": sorted(known)},
        )

    values: dict[str, FieldValue] = {}
    for field_spec in spec.fields:
        path = f"{prefix}{field_spec.name}"
        value = raw.get(field_spec.name)
        if value is None:
            value = field_spec.default
        if value is None:
            if field_spec.required:
                raise InvalidArgument(
                    f"Missing required field '{path}'",
                    detail={"field": path, "message": spec.name},
                )
            continue
        values[field_spec.name] = _build_field(field_spec, value, path)
    return values


def _build_field(spec: FieldSpec, value: Any, path: str) -> FieldValue:
    if not spec.repeated:
        return FieldValue(kind=spec.kind, value=_convert(spec, value, path))

    items = list(value) if isinstance(value, (list, tuple)) else [value]
    if spec.required and not items:
        raise InvalidArgument(
            f"Repeated field '{path}' needs at least one value",
            detail={"field": path},
        )
    converted = tuple(_convert(spec, item, f"{path}[{i}]") for i, item in enumerate(items))
    return FieldValue(kind=spec.kind, value=converted, repeated=True)


def _convert(spec: FieldSpec, value: Any, path: str) -> Any:
    if spec.message is not None:
        if not isinstance(value, Mapping):
            raise InvalidArgument(
                f"Field '{path}' expects a {spec.message.name} message, got {value!r}",
                detail={"field": path, "kind": "message"},
            )
        return _build_message(spec.message, unflatten(value), prefix=f"{path}.")
    return coerce_scalar(spec.kind, value, field=path, enum_values=spec.enum_values)
