"""Transport — the only way a request leaves the process.

The executor depends on this protocol and nothing else: it knows nothing of
HTTP, gRPC, credentials, or SDK retry policy. Implementations raise
:class:`~samplectl.domain.errors.SampleError` subclasses for remote failures
(``NotFound``, ``PermissionDenied``) and may let ``TimeoutError``,
``ConnectionError``, or ``OSError`` escape; the executor maps those to
``Unavailable``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from samplectl.domain.request import Request

# Operation name the executor invokes to refresh a long-running operation.
GET_OPERATION = "operations.get"

Row = Mapping[str, Any] | Sequence[Any]


@runtime_checkable
class Transport(Protocol):
    """Contract for performing one remote round trip."""

    def invoke(self, operation: str, request: Request) -> Mapping[str, Any]:
        """Perform a unary or long-running call and return the raw result."""
        ...

    def fetch_page(
        self,
        operation: str,
        request: Request,
        page_token: str | None,
    ) -> tuple[Sequence[Row], str | None]:
        """Fetch one page of a listing call.

        Returns:
            ``(rows, next_page_token)``; a None or empty token ends the listing.
        """
        ...
