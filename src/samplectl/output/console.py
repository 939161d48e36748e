"""Rich Console factory and theme for samplectl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

SAMPLE_THEME = Theme(
    {
        "samplectl.ok": "bold green",
        "samplectl.error": "bold red",
        "samplectl.warning": "bold yellow",
        "samplectl.op": "bold cyan",
        "samplectl.key": "dim",
        "samplectl.id": "bold blue",
        "samplectl.path": "dim",
        "samplectl.status.running": "yellow",
        "samplectl.status.succeeded": "green",
        "samplectl.status.failed": "red",
        "samplectl.kind.unary": "blue",
        "samplectl.kind.listing": "cyan",
        "samplectl.kind.long_running": "magenta",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=SAMPLE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    buffer = console.file
    if not isinstance(buffer, StringIO):
        raise TypeError(f"Console writes to {type(buffer).__name__}, not a StringIO buffer")
    return buffer.getvalue()


def style_for_status(status: str) -> str:
    """Return the Rich style name for an operation status."""
    return f"samplectl.status.{status.lower()}" if status else ""


def style_for_kind(kind: str) -> str:
    """Return the Rich style name for an operation kind."""
    return f"samplectl.kind.{kind}" if kind else ""
