"""Request — the immutable value handed from the builder to the executor.

INVARIANT: A Request is fully populated when it exists. Only the builder
creates Requests from caller input; the executor never fills defaults.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from samplectl.domain.values import FieldValue


class Request(BaseModel):
    """One call's worth of input.

    Attributes:
        operation: Registered operation name.
        resource: Target resource path (``projects/p/locations/l``).
        fields: Field name -> tagged value, in schema declaration order.
    """

    model_config = ConfigDict(frozen=True)

    operation: str
    resource: str
    fields: dict[str, FieldValue] = Field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        """Plain Python value of field *name*, or *default* when unset."""
        fv = self.fields.get(name)
        return default if fv is None else fv.to_python()

    def to_payload(self) -> dict[str, Any]:
        """All fields as plain Python values (nested dicts and lists)."""
        return {name: fv.to_python() for name, fv in self.fields.items()}
