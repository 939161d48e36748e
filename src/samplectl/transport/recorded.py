"""RecordedTransport — replays canned responses from a YAML cassette.

A cassette describes what the remote service "says" for each operation::

    calls:
      livestream.getInput:
        resource: projects/p/locations/us-central1/inputs/in-1
        response: {name: projects/p/locations/us-central1/inputs/in-1, type: RTMP_PUSH}
      livestream.listChannels:
        pages:
          - rows: [{name: ch-1}, {name: ch-2}]
          - rows: [{name: ch-3}]
      transcoder.deleteJob:
        error: {code: NOT_FOUND, message: Job does not exist}
      pubsub.publish:
        timeout: true
    operations:
      projects/p/locations/l/operations/op-1:
        - {done: false}
        - {done: true, response: {name: projects/p/locations/l/inputs/in-1}}

Continuation tokens are the decimal index of the next page. Each poll of an
operation consumes the next scripted state; the last state repeats.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from samplectl.domain.errors import InvalidArgument, NotFound, error_for_code
from samplectl.transport.base import GET_OPERATION, Row

if TYPE_CHECKING:
    from samplectl.domain.request import Request

logger = logging.getLogger(__name__)


class RecordedError(BaseModel):
    """An error the replayed service responds with."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str = ""
    detail: dict[str, Any] = Field(default_factory=dict)


class RecordedPage(BaseModel):
    """One page of a replayed listing."""

    model_config = ConfigDict(frozen=True)

    rows: list[Any] = Field(default_factory=list)


class RecordedCall(BaseModel):
    """Replay script for one operation name."""

    model_config = ConfigDict(frozen=True)

    resource: str | None = None
    response: dict[str, Any] | None = None
    pages: list[RecordedPage] | None = None
    error: RecordedError | None = None
    timeout: bool = False


class Cassette(BaseModel):
    """Parsed cassette file."""

    model_config = ConfigDict(frozen=True)

    calls: dict[str, RecordedCall] = Field(default_factory=dict)
    operations: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)


def load_cassette(path: Path) -> Cassette:
    """Read and validate a YAML cassette.

    Raises:
        InvalidArgument: The file is unreadable, not YAML, or not a cassette.
    """
    try:
        data = YAML(typ="safe").load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeError, YAMLError) as exc:
        raise InvalidArgument(
            f"Cannot read cassette {path}: {exc}",
            detail={"path": str(path)},
        ) from exc
    if data is None:
        return Cassette()
    try:
        return Cassette.model_validate(data)
    except ValidationError as exc:
        problems = [".".join(str(p) for p in err["loc"]) + f": {err['msg']}" for err in exc.errors()]
        raise InvalidArgument(
            f"Invalid cassette {path}: {exc.error_count()} problem(s)",
            detail={"path": str(path), "errors": problems},
        ) from exc


class RecordedTransport:
    """Transport that serves a :class:`Cassette` instead of a network."""

    def __init__(self, cassette: Cassette) -> None:
        self._cassette = cassette
        self._poll_counts: dict[str, int] = {}
        self.calls: list[tuple[str, str, str | None]] = []

    @classmethod
    def from_file(cls, path: Path) -> RecordedTransport:
        """Load the cassette at *path*."""
        return cls(load_cassette(path))

    # ------------------------------------------------------------------
    # Transport protocol
    # ------------------------------------------------------------------

    def invoke(self, operation: str, request: Request) -> Mapping[str, Any]:
        self.calls.append((operation, request.resource, None))
        if operation == GET_OPERATION:
            return self._next_operation_state(request.resource)
        entry = self._entry(operation, request)
        if entry.response is None:
            raise InvalidArgument(
                f"Cassette has no response recorded for {operation}",
                detail={"operation": operation},
            )
        return dict(entry.response)

    def fetch_page(
        self,
        operation: str,
        request: Request,
        page_token: str | None,
    ) -> tuple[Sequence[Row], str | None]:
        self.calls.append((operation, request.resource, page_token))
        entry = self._entry(operation, request)
        pages = entry.pages or []
        index = _page_index(page_token, len(pages))
        if not pages:
            return [], None
        rows = list(pages[index].rows)
        next_token = str(index + 1) if index + 1 < len(pages) else None
        logger.debug("Replayed page %d/%d of %s", index + 1, len(pages), operation)
        return rows, next_token

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _entry(self, operation: str, request: Request) -> RecordedCall:
        entry = self._cassette.calls.get(operation)
        if entry is None:
            raise InvalidArgument(
                f"Cassette has nothing recorded for {operation}",
                detail={"operation": operation, "recorded": sorted(self._cassette.calls)},
            )
        if entry.timeout:
            raise TimeoutError(f"Recorded timeout for {operation}")
        if entry.error is not None:
            raise error_for_code(entry.error.code, entry.error.message, detail=entry.error.detail)
        if entry.resource is not None and entry.resource != request.resource:
            raise NotFound(
                f"Resource not found: {request.resource}",
                detail={"resource": request.resource},
            )
        return entry

    def _next_operation_state(self, operation_id: str) -> dict[str, Any]:
        states = self._cassette.operations.get(operation_id)
        if not states:
            raise NotFound(
                f"Operation not found: {operation_id}",
                detail={"resource": operation_id},
            )
        count = self._poll_counts.get(operation_id, 0)
        self._poll_counts[operation_id] = count + 1
        state = states[min(count, len(states) - 1)]
        return {"name": operation_id, **state}


def _page_index(page_token: str | None, page_count: int) -> int:
    if page_token is None:
        return 0
    if not page_token.isdigit() or not 0 < int(page_token) < page_count:
        raise InvalidArgument(
            f"Invalid page token: {page_token!r}",
            detail={"page_token": page_token},
        )
    return int(page_token)
