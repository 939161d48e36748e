"""CatalogService — read-only views of the operation registry."""

from __future__ import annotations

from typing import Any

from samplectl.domain.errors import InvalidArgument, SampleError
from samplectl.domain.schema import FieldSpec, OperationKind
from samplectl.services.base import BaseService
from samplectl.services.contracts import OperationDetailData, OperationListData, dump_validated
from samplectl.services.result import ServiceResult
from samplectl.services.telemetry import traced


class CatalogService(BaseService):
    """Lists and describes registered operations."""

    @traced
    def list_operations(
        self,
        *,
        kind: str | None = None,
        prefix: str | None = None,
    ) -> ServiceResult:
        """List operations, optionally filtered by call kind or name prefix."""
        if kind is not None:
            try:
                wanted: OperationKind | None = OperationKind(kind)
            except ValueError:
                return self._failure(
                    "list_operations",
                    InvalidArgument(
                        f"Unknown operation kind: {kind}",
                        detail={"kind": kind, "allowed": [k.value for k in OperationKind]},
                    ),
                )
        else:
            wanted = None

        items = [
            {
                "name": schema.name,
                "kind": schema.kind.value,
                "resource_template": schema.resource_template,
                "description": schema.description,
            }
            for schema in self._registry
            if (wanted is None or schema.kind is wanted)
            and (prefix is None or schema.name.startswith(prefix))
        ]
        return ServiceResult(
            ok=True,
            op="list_operations",
            data=dump_validated(OperationListData, {"count": len(items), "items": items}),
        )

    @traced
    def describe(self, name: str) -> ServiceResult:
        """Describe one operation's fields, flattening nested messages to dotted paths."""
        try:
            schema = self._registry.get(name)
        except SampleError as exc:
            return self._failure("describe", exc)

        payload = {
            "name": schema.name,
            "kind": schema.kind.value,
            "resource_template": schema.resource_template,
            "columns": list(schema.columns),
            "description": schema.description,
            "fields": _describe_fields(schema.fields, prefix=""),
        }
        return ServiceResult(
            ok=True,
            op="describe",
            data=dump_validated(OperationDetailData, payload),
        )


def _describe_fields(fields: tuple[FieldSpec, ...], *, prefix: str) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for spec in fields:
        path = f"{prefix}{spec.name}"
        out.append(
            {
                "path": path,
                "kind": spec.kind.value,
                "required": spec.required,
                "repeated": spec.repeated,
                "enum_values": list(spec.enum_values),
                "default": spec.default,
                "description": spec.description,
            }
        )
        if spec.message is not None:
            out.extend(_describe_fields(spec.message.fields, prefix=f"{path}."))
    return out
