"""Click base classes with an ``--examples`` flag.

Commands declare their examples as a sequence of command lines; ``--examples``
prints them indented under a heading and exits, keeping ``--help`` short.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import click


def format_examples(command_path: str, examples: Sequence[str]) -> str:
    """Render *examples* the way ``--examples`` prints them."""
    body = "\n".join(f"  {line}" for line in examples)
    return f"Examples for '{command_path}':\n\n{body}"


def _examples_option(examples: Sequence[str]) -> click.Option:
    def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if value and not ctx.resilient_parsing:
            click.echo(format_examples(ctx.command_path, examples))
            ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=show,
        help="Show usage examples.",
    )


class SampleCommand(click.Command):
    """Command that accepts ``examples=("samplectl ...", ...)``."""

    def __init__(self, *args: Any, examples: Sequence[str] = (), **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = tuple(examples)
        if self.examples:
            self.params.append(_examples_option(self.examples))


class SampleGroup(click.Group):
    """Group counterpart of :class:`SampleCommand`; its subcommands default to it."""

    command_class = SampleCommand

    def __init__(self, *args: Any, examples: Sequence[str] = (), **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = tuple(examples)
        if self.examples:
            self.params.append(_examples_option(self.examples))
