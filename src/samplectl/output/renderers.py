"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import csv
import io
import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from samplectl.output.console import create_console, get_output, style_for_kind, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from samplectl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode.

    ``call`` prints its formatted output and nothing else, so quiet mode
    is the one to pipe into other tools.
    """
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    d = result.data
    if result.op == "call":
        if d.get("style") == "tabular":
            buf = io.StringIO()
            writer = csv.writer(buf, lineterminator="\n")
            if d.get("header"):
                writer.writerow(d["header"])
            writer.writerows(d.get("rows", []))
            return buf.getvalue().rstrip("\n")
        return "\n".join(d.get("lines", []))
    if result.op == "poll":
        return str(d.get("status", ""))
    items = d.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item["name"]) for item in items if isinstance(item, dict) and "name" in item)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="samplectl.ok")
    op = Text(f"  {result.op}", style="samplectl.op")
    console.print(label, op, sep="", end="")
    console.print()


def _field(console: Console, key: str, value: Any, *, style: str = "") -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="samplectl.key")
    if style:
        v = Text(str(value), style=style)
    elif key == "id" or key.endswith("_id"):
        v = Text(str(value), style="samplectl.id")
    elif key in ("resource", "resource_template"):
        v = Text(str(value), style="samplectl.path")
    elif isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v, sep="", end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    if span_data.get("annotations"):
        extras = [f"{ak}={av}" for ak, av in span_data["annotations"].items()]
        line += f"  ({', '.join(extras)})"

    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="samplectl.error")
    op = Text(f"  {result.op}", style="samplectl.op")
    code = Text(f"  [{err.code}]" if err else "", style="samplectl.key")
    dash = Text(" — ")
    console.print(label, op, code, dash, Text(msg), sep="")

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Call renderers ────────────────────────────────────────────────────


def _render_call(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render ``call``: header fields, then the formatted output itself."""
    d = result.data
    _status_line(console, result)
    _field(console, "operation", d["operation"])
    _field(console, "resource", d["resource"])
    if d.get("operation_id"):
        _field(console, "operation_id", d["operation_id"])
        _field(console, "status", d["status"], style=style_for_status(d["status"] or ""))
    if d.get("pages") is not None:
        _field(console, "pages", d["pages"])

    if d["style"] == "tabular":
        if d.get("rows"):
            console.print()
            console.print(_output_table(d.get("header"), d["rows"]))
    elif d.get("lines"):
        console.print()
        for line in d["lines"]:
            console.print(Text(f"  {line}"), soft_wrap=True)

    if verbose:
        _render_meta(console, result)


def _output_table(header: list[str] | None, rows: list[list[str]]) -> Table:
    table = Table(show_header=header is not None, show_lines=False, pad_edge=False, expand=False)
    width = len(header) if header is not None else max(len(row) for row in rows)
    for i in range(width):
        table.add_column(header[i] if header is not None else "")
    for row in rows:
        table.add_row(*(Text(str(v)) for v in row))
    return table


def _render_poll(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render ``poll``: operation state, then its result or error."""
    d = result.data
    _status_line(console, result)
    _field(console, "id", d["id"])
    _field(console, "operation", d["operation"])
    _field(console, "status", d["status"], style=style_for_status(d["status"]))
    _field(console, "polls", d["polls"])
    if d.get("error"):
        err = d["error"]
        _field(console, "error", f"{err['code']}: {err['message']}", style="samplectl.error")
    for key, value in (d.get("result") or {}).items():
        _field(console, f"result.{key}", value)
    if verbose:
        for key, value in (d.get("metadata") or {}).items():
            _field(console, f"metadata.{key}", value)
        _render_meta(console, result)


# ── Catalog renderers ─────────────────────────────────────────────────


def _render_operation_list(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render ``list_operations`` as a table."""
    items = result.data.get("items", [])
    _status_line(console, result)
    _field(console, "count", result.data.get("count", len(items)))
    if not items:
        if verbose:
            _render_meta(console, result)
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Name", style="samplectl.op", no_wrap=True)
    table.add_column("Kind")
    table.add_column("Resource", style="samplectl.path")
    table.add_column("Description")
    for item in items:
        table.add_row(
            item["name"],
            Text(item["kind"], style=style_for_kind(item["kind"])),
            item.get("resource_template") or "",
            item.get("description", ""),
        )
    console.print()
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_describe(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render ``describe``: operation summary and its field table."""
    d = result.data
    _status_line(console, result)
    _field(console, "name", d["name"])
    _field(console, "kind", d["kind"], style=style_for_kind(d["kind"]))
    if d.get("resource_template"):
        _field(console, "resource_template", d["resource_template"])
    if d.get("columns"):
        _field(console, "columns", ", ".join(d["columns"]))
    if d.get("description"):
        _field(console, "description", d["description"])

    fields = d.get("fields", [])
    if fields:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Field", no_wrap=True)
        table.add_column("Kind")
        table.add_column("Required")
        table.add_column("Repeated")
        table.add_column("Values")
        table.add_column("Default")
        for f in fields:
            table.add_row(
                f["path"],
                f["kind"],
                _cell(f["required"]),
                _cell(f["repeated"]),
                _cell(f["enum_values"]),
                _cell(f["default"]),
            )
        console.print()
        console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "call": _render_call,
    "poll": _render_poll,
    "list_operations": _render_operation_list,
    "describe": _render_describe,
}
