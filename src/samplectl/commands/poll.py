"""Command: check on a long-running operation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from samplectl.commands._base import SampleCommand
from samplectl.transport.base import GET_OPERATION

if TYPE_CHECKING:
    from samplectl.commands._context import AppContext


@click.command(
    cls=SampleCommand,
    examples=(
        "samplectl poll projects/p/locations/us-central1/operations/op-1",
        "samplectl poll projects/p/locations/us-central1/operations/op-1 --wait",
        "samplectl -q poll projects/p/instances/i/databases/db/operations/op-7",
    ),
)
@click.argument("operation_id")
@click.option(
    "--operation",
    default=GET_OPERATION,
    show_default=True,
    help="Operation label recorded on the result.",
)
@click.option("--wait", is_flag=True, help="Keep polling with backoff until the operation is done.")
@click.pass_obj
def poll(app: AppContext, operation_id: str, operation: str, wait: bool) -> None:
    """Poll OPERATION_ID once, or until it finishes with --wait."""
    svc = app.call_service("poll")
    app.emit(
        svc.poll(
            operation_id,
            operation=operation,
            wait=wait,
            policy=app.settings.poll.to_policy(),
        )
    )
