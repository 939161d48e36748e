"""ResultFormatter — Response in, lines or rows out.

Two styles:

- ``text``: human-readable lines. Single results and operations print one
  ``key: value`` line per field; page sequences print one line per row.
- ``tabular``: lists of strings ready for ``csv.writer``. A header row comes
  first whenever rows carry field names. The header is a :class:`HeaderRow`
  so consumers can tell it apart from data.

Formatting is lazy. For a page sequence, the returned iterator pulls the
next page only when the consumer has used up the rows of the current one.
Writing the output anywhere is the caller's job.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from enum import StrEnum
from typing import Any

from samplectl.domain.errors import InvalidArgument
from samplectl.domain.operation import Operation, OperationStatus
from samplectl.services.executor import Response, UnaryResponse
from samplectl.services.pages import PageSequence
from samplectl.transport.base import Row

OutputUnit = str | list[str]


class HeaderRow(list[str]):
    """The column-name row that opens tabular output. Behaves as a plain list."""


class OutputStyle(StrEnum):
    """Rendering style for :meth:`ResultFormatter.format`."""

    TEXT = "text"
    TABULAR = "tabular"


def render_value(value: Any) -> str:
    """Render a single field value as display text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def ordered_keys(data: Mapping[str, Any], columns: tuple[str, ...] = ()) -> list[str]:
    """Declared columns first, then any remaining keys in payload order."""
    if not columns:
        return list(data)
    return [*columns, *(k for k in data if k not in columns)]


class ResultFormatter:
    """Stateless renderer for executor responses."""

    def format(
        self,
        response: Response,
        style: OutputStyle | str = OutputStyle.TEXT,
    ) -> Iterator[OutputUnit]:
        """Render *response* in *style*.

        Raises:
            InvalidArgument: Unknown style, or (while iterating) tabular rows
                of heterogeneous width.
        """
        try:
            style = OutputStyle(style)
        except ValueError:
            raise InvalidArgument(
                f"Unknown output style: {style!r}",
                detail={"style": str(style), "allowed": [s.value for s in OutputStyle]},
            ) from None

        if isinstance(response, PageSequence):
            if style is OutputStyle.TEXT:
                return (_row_line(row, response.columns) for row in response.rows())
            return _table(response.rows(), response.columns)
        if isinstance(response, Operation):
            data = _operation_fields(response)
        elif isinstance(response, UnaryResponse):
            keys = ordered_keys(response.data, response.columns)
            data = {k: response.data[k] for k in keys if k in response.data}
        else:
            raise InvalidArgument(
                f"Cannot format {type(response).__name__}",
                detail={"type": type(response).__name__},
            )

        if style is OutputStyle.TEXT:
            return iter([f"{key}: {render_value(value)}" for key, value in data.items()])
        return iter([HeaderRow(data), [render_value(v) for v in data.values()]])


# ── Text helpers ─────────────────────────────────────────────────────


def _row_line(row: Row, columns: tuple[str, ...]) -> str:
    if isinstance(row, Mapping):
        return ", ".join(f"{k}: {render_value(row.get(k))}" for k in ordered_keys(row, columns))
    if isinstance(row, (list, tuple)):
        return ", ".join(render_value(v) for v in row)
    return render_value(row)


def _operation_fields(op: Operation) -> dict[str, Any]:
    data: dict[str, Any] = {"id": op.id, "operation": op.operation, "status": op.status.value}
    if op.status is OperationStatus.SUCCEEDED and op.result:
        data.update({f"result.{k}": v for k, v in op.result.items()})
    if op.status is OperationStatus.FAILED and op.error is not None:
        data["error.code"] = op.error.code
        data["error.message"] = op.error.message
    if op.metadata:
        data["metadata"] = op.metadata
    return data


# ── Tabular helpers ──────────────────────────────────────────────────


def _table(rows: Iterator[Row], columns: tuple[str, ...]) -> Iterator[list[str]]:
    """Stream rows as string lists, checking that every row has one shape."""
    header: list[str] = []
    width: int | None = None
    named: bool | None = None

    for number, row in enumerate(rows):
        is_named = isinstance(row, Mapping)
        if named is None:
            named = is_named
            if named:
                header = list(columns) if columns else list(row)
                width = len(header)
                yield HeaderRow(header)
            else:
                width = len(_as_sequence(row))
        elif is_named != named:
            raise _heterogeneous(number, "mixes named and positional rows")

        if named:
            if not columns and (len(row) != width or set(row) != set(header)):
                raise _heterogeneous(number, f"has fields {sorted(row)}, expected {header}")
            yield [render_value(row.get(k)) for k in header]
        else:
            values = _as_sequence(row)
            if len(values) != width:
                raise _heterogeneous(number, f"has {len(values)} values, expected {width}")
            yield [render_value(v) for v in values]


def _as_sequence(row: Row) -> list[Any]:
    if isinstance(row, (list, tuple)):
        return list(row)
    return [row]


def _heterogeneous(number: int, reason: str) -> InvalidArgument:
    return InvalidArgument(
        f"Cannot tabulate rows of different widths: row {number} {reason}",
        detail={"row": number},
    )
