"""Subcommand modules for samplectl.

Provides register_commands() which uses deferred imports to keep
``samplectl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    from samplectl.commands.operations import operations

    cli.add_command(operations)

    from samplectl.commands.call import call
    from samplectl.commands.poll import poll

    cli.add_command(call)
    cli.add_command(poll)
