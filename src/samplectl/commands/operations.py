"""Command group: browse the operation registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from samplectl.commands._base import SampleGroup
from samplectl.domain.schema import OperationKind
from samplectl.services.catalog import CatalogService

if TYPE_CHECKING:
    from samplectl.commands._context import AppContext


@click.group(
    cls=SampleGroup,
    examples=(
        "samplectl operations list",
        "samplectl operations list --kind long_running",
        "samplectl operations show livestream.createInput",
    ),
)
def operations() -> None:
    """List and describe the operations samplectl can call."""


@operations.command(
    "list",
    examples=(
        "samplectl operations list",
        "samplectl operations list --kind listing",
        "samplectl operations list --prefix dlp.",
        "samplectl -q operations list",
    ),
)
@click.option(
    "--kind",
    type=click.Choice([k.value for k in OperationKind]),
    default=None,
    help="Only operations of this call kind.",
)
@click.option("--prefix", default=None, help="Only operations whose name starts with this.")
@click.pass_obj
def list_cmd(app: AppContext, kind: str | None, prefix: str | None) -> None:
    """List registered operations."""
    app.emit(CatalogService(app.registry).list_operations(kind=kind, prefix=prefix))


@operations.command(
    examples=(
        "samplectl operations show dlp.inspectContent",
        "samplectl --json operations show analyticsdata.runReport",
    ),
)
@click.argument("name")
@click.pass_obj
def show(app: AppContext, name: str) -> None:
    """Describe one operation's resource template and fields."""
    app.emit(CatalogService(app.registry).describe(name))
