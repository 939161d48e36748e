"""Command: call one remote operation."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from samplectl.commands._base import SampleCommand

if TYPE_CHECKING:
    from samplectl.commands._context import AppContext
    from samplectl.services.result import ServiceResult


def parse_field_options(values: tuple[str, ...]) -> dict[str, Any]:
    """Turn repeated ``-f key=value`` options into a field mapping.

    Values that look like JSON arrays or objects are decoded; everything
    else stays a string for the request builder to convert. A key given
    more than once collects its values into a list.

    Raises:
        click.BadParameter: An option has no ``=`` or holds malformed JSON.
    """
    fields: dict[str, Any] = {}
    for item in values:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {item!r}", param_hint="'-f'")
        value: Any = raw
        if raw[:1] in ("[", "{"):
            try:
                value = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise click.BadParameter(f"invalid JSON for {key}: {exc}", param_hint="'-f'") from exc
        if key in fields:
            existing = fields[key]
            fields[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            fields[key] = value
    return fields


def write_output(result: ServiceResult, path: Path) -> None:
    """Write a call's formatted output: text lines, or CSV for tabular rows."""
    data = result.data
    with path.open("w", encoding="utf-8", newline="") as fh:
        if data["style"] == "tabular":
            writer = csv.writer(fh)
            if data.get("header") is not None:
                writer.writerow(data["header"])
            writer.writerows(data.get("rows") or [])
        else:
            for line in data.get("lines") or []:
                fh.write(f"{line}\n")


@click.command(
    cls=SampleCommand,
    examples=(
        "samplectl call livestream.getInput projects/p/locations/us-central1/inputs/in-1",
        "samplectl call livestream.listChannels projects/p/locations/us-central1 --style tabular",
        "samplectl call livestream.createInput projects/p/locations/us-central1 "
        "-f input_id=in-2 -f input.type=srt_push --wait",
        "samplectl call dlp.inspectContent projects/p/locations/global "
        "-f item.value='My phone number is (223) 456-7890' "
        "-f inspect_config.info_types=PHONE_NUMBER",
        "samplectl call analyticsdata.runReport properties/1234 "
        "-f 'metrics=[{\"name\": \"sessions\"}]' -f metric_aggregations=TOTAL",
        "samplectl call securitycenter.listNotificationConfigs organizations/42 "
        "--style tabular --output configs.csv",
    ),
)
@click.argument("operation")
@click.argument("resource")
@click.option(
    "-f",
    "--field",
    "field_options",
    multiple=True,
    metavar="KEY=VALUE",
    help="Request field; dotted keys reach nested messages. Repeatable.",
)
@click.option(
    "--style",
    type=click.Choice(["text", "tabular"]),
    default=None,
    help="Output style (default: [output] style).",
)
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Max rows to collect.")
@click.option("--wait", is_flag=True, help="Poll long-running operations until they finish.")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    default=None,
    help="Also write the output to FILE (CSV for tabular style).",
)
@click.pass_obj
def call(
    app: AppContext,
    operation: str,
    resource: str,
    field_options: tuple[str, ...],
    style: str | None,
    limit: int | None,
    wait: bool,
    output_path: Path | None,
) -> None:
    """Call OPERATION on RESOURCE and print the formatted result."""
    fields = parse_field_options(field_options)
    svc = app.call_service("call")
    result = svc.call(
        operation,
        resource,
        fields,
        style=style or app.settings.output.style,
        limit=limit,
        wait=wait,
        policy=app.settings.poll.to_policy(),
    )
    if result.ok and output_path is not None:
        write_output(result, output_path)
    app.emit(result)
