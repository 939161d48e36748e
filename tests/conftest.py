"""Shared pytest fixtures and test helpers for samplectl tests."""

from __future__ import annotations

import logging
from collections.abc import Generator, Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from ruamel.yaml import YAML

from samplectl.domain.request import Request
from samplectl.domain.schema import (
    OperationKind,
    OperationRegistry,
    OperationSchema,
    boolean,
    enum,
    integer,
    message,
    string,
)
from samplectl.services.telemetry import disable_telemetry
from samplectl.transport.base import GET_OPERATION


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _reset_process_state() -> Generator[None]:
    """Undo logging and telemetry changes made by ``-v`` CLI invocations."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    sample = logging.getLogger("samplectl")
    sample_level = sample.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    sample.setLevel(sample_level)
    disable_telemetry()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

ECHO = OperationSchema(
    name="test.echo",
    fields=(
        string("name", required=True),
        integer("count", default=1),
        boolean("flag"),
        enum("color", ("RED", "GREEN")),
        string("tags", repeated=True),
        message("doc", (string("content", required=True), enum("type", ("PLAIN_TEXT", "HTML")))),
    ),
)
GET_ITEM = OperationSchema(
    name="test.getItem",
    resource_template="items/{item}",
    columns=("name", "size"),
)
LIST_ITEMS = OperationSchema(name="listItems", kind=OperationKind.LISTING)
CREATE_ITEM = OperationSchema(
    name="test.createItem",
    kind=OperationKind.LONG_RUNNING,
    fields=(string("item_id", required=True),),
)


@pytest.fixture
def registry() -> OperationRegistry:
    """Registry with one operation of each kind plus an echo operation."""
    return OperationRegistry([ECHO, GET_ITEM, LIST_ITEMS, CREATE_ITEM])


# ---------------------------------------------------------------------------
# Transports
# ---------------------------------------------------------------------------


class StubTransport:
    """Scriptable in-memory transport that records every call.

    Args:
        responses: operation name -> mapping returned by ``invoke``.
        pages: operation name -> list of pages (each a list of rows).
        states: operation id -> successive ``operations.get`` payloads;
            the last one repeats.
        fail_with: exception raised by every call.
    """

    def __init__(
        self,
        *,
        responses: Mapping[str, Any] | None = None,
        pages: Mapping[str, list[list[Any]]] | None = None,
        states: Mapping[str, list[dict[str, Any]]] | None = None,
        fail_with: BaseException | None = None,
    ) -> None:
        self.responses = dict(responses or {})
        self.pages = dict(pages or {})
        self.states = {k: list(v) for k, v in (states or {}).items()}
        self.fail_with = fail_with
        self.calls: list[tuple[str, str, str | None]] = []

    def invoke(self, operation: str, request: Request) -> Any:
        self.calls.append((operation, request.resource, None))
        if self.fail_with is not None:
            raise self.fail_with
        if operation == GET_OPERATION:
            states = self.states[request.resource]
            state = states.pop(0) if len(states) > 1 else states[0]
            return {"name": request.resource, **state}
        return self.responses[operation]

    def fetch_page(
        self,
        operation: str,
        request: Request,
        page_token: str | None,
    ) -> tuple[Sequence[Any], str | None]:
        self.calls.append((operation, request.resource, page_token))
        if self.fail_with is not None:
            raise self.fail_with
        pages = self.pages.get(operation, [])
        index = int(page_token) if page_token else 0
        if not pages:
            return [], None
        next_token = str(index + 1) if index + 1 < len(pages) else None
        return pages[index], next_token


class EchoTransport:
    """Returns every request's fields back as the response."""

    def __init__(self) -> None:
        self.calls: list[Request] = []

    def invoke(self, operation: str, request: Request) -> dict[str, Any]:
        self.calls.append(request)
        return request.to_payload()

    def fetch_page(
        self,
        operation: str,
        request: Request,
        page_token: str | None,
    ) -> tuple[Sequence[Any], str | None]:
        self.calls.append(request)
        return [request.to_payload()], None


@pytest.fixture
def echo_transport() -> EchoTransport:
    return EchoTransport()


def running(**extra: Any) -> dict[str, Any]:
    """An ``operations.get`` payload for a still-running operation."""
    return {"done": False, **extra}


def succeeded(response: dict[str, Any]) -> dict[str, Any]:
    """An ``operations.get`` payload for a finished operation."""
    return {"done": True, "response": response}


def failed(code: str, msg: str) -> dict[str, Any]:
    """An ``operations.get`` payload for a failed operation."""
    return {"done": True, "error": {"code": code, "message": msg}}


# ---------------------------------------------------------------------------
# Cassettes and project config
# ---------------------------------------------------------------------------


def write_cassette(path: Path, data: dict[str, Any]) -> Path:
    """Dump *data* as a YAML cassette at *path*."""
    yaml = YAML(typ="safe")
    yaml.default_flow_style = False
    with path.open("w", encoding="utf-8") as fh:
        yaml.dump(data, fh)
    return path


LIVESTREAM_CASSETTE: dict[str, Any] = {
    "calls": {
        "livestream.getInput": {
            "resource": "projects/p/locations/us-central1/inputs/in-1",
            "response": {
                "name": "projects/p/locations/us-central1/inputs/in-1",
                "type": "RTMP_PUSH",
            },
        },
        "livestream.listChannels": {
            "pages": [
                {"rows": [{"name": "ch-1", "state": "STOPPED"}, {"name": "ch-2", "state": "STREAMING"}]},
                {"rows": [{"name": "ch-3", "state": "STOPPED"}]},
            ],
        },
        "livestream.createInput": {
            "response": {"name": "projects/p/locations/us-central1/operations/op-1", "done": False},
        },
        "transcoder.deleteJob": {
            "error": {"code": "NOT_FOUND", "message": "Job does not exist"},
        },
        "pubsub.publish": {"timeout": True},
    },
    "operations": {
        "projects/p/locations/us-central1/operations/op-1": [
            {"done": False},
            {"done": True, "response": {"name": "projects/p/locations/us-central1/inputs/in-2"}},
        ],
    },
}


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Project directory with ``samplectl.toml`` and a livestream cassette; CWD moved there."""
    monkeypatch.delenv("SAMPLECTL_CONFIG", raising=False)
    write_cassette(tmp_path / "cassette.yaml", LIVESTREAM_CASSETTE)
    (tmp_path / "samplectl.toml").write_text(
        '[transport]\ncassette = "cassette.yaml"\n\n[poll]\ninitial_delay = 0.001\nmax_delay = 0.001\n',
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path
