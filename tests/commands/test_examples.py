"""Tests for --examples flag on CLI commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from samplectl.cli import cli
from samplectl.commands._base import format_examples

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["call", "--examples"], ["samplectl call livestream.getInput", "--wait", "--output configs.csv"]),
    (["poll", "--examples"], ["samplectl poll", "--wait"]),
    (["operations", "--examples"], ["samplectl operations list", "samplectl operations show"]),
    (["operations", "list", "--examples"], ["--kind listing", "--prefix dlp."]),
    (["operations", "show", "--examples"], ["analyticsdata.runReport"]),
]


def _examples_id(item: tuple[list[str], list[str]]) -> str:
    """Generate a readable test ID from args."""
    args, _ = item
    return "_".join(a for a in args if a != "--examples")


@pytest.mark.parametrize(
    "args,expected_keywords",
    EXAMPLES_COMMANDS,
    ids=[_examples_id(item) for item in EXAMPLES_COMMANDS],
)
def test_examples_flag(
    cli_runner: CliRunner, args: list[str], expected_keywords: list[str]
) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "Examples for '" in result.output
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in examples output for {args}"


def test_examples_never_touch_transport(
    cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """No cassette is configured, yet --examples still succeeds."""
    monkeypatch.delenv("SAMPLECTL_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    result = cli_runner.invoke(cli, ["call", "--examples"])
    assert result.exit_code == 0


def test_format_examples() -> None:
    text = format_examples("samplectl poll", ["samplectl poll a", "samplectl poll b --wait"])
    assert text == "Examples for 'samplectl poll':\n\n  samplectl poll a\n  samplectl poll b --wait"


@pytest.mark.parametrize(
    "args",
    [["call", "--help"], ["poll", "--help"], ["operations", "--help"], ["operations", "list", "--help"]],
)
def test_examples_in_help(cli_runner: CliRunner, args: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "--examples" in result.output
