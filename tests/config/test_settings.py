"""Tests for SampleSettings — unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from samplectl.config.settings import SampleSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SAMPLECTL_CONFIG", "SAMPLECTL_OUTPUT__STYLE", "SAMPLECTL_TRANSPORT__KIND"):
        monkeypatch.delenv(name, raising=False)


class TestSampleSettingsDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        """With no TOML and no env vars, all fields use code defaults."""
        settings = SampleSettings.from_cli(root=tmp_path)
        assert settings.root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.quiet is False
        assert settings.verbose is False
        assert settings.transport.kind == "recorded"
        assert settings.output.style == "text"
        assert settings.poll.initial_delay == 1.0

    def test_frozen(self, tmp_path: Path) -> None:
        settings = SampleSettings.from_cli(root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "samplectl.toml").write_text(
            '[transport]\ncassette = "c.yaml"\n[output]\nstyle = "tabular"\nmax_rows = 50\n'
        )
        settings = SampleSettings.from_cli(root=tmp_path)
        assert settings.transport.cassette == Path("c.yaml")
        assert settings.output.style == "tabular"
        assert settings.output.max_rows == 50
        assert settings.config_path == (tmp_path / "samplectl.toml").resolve()

    def test_sparse_override(self, tmp_path: Path) -> None:
        """Only overridden fields change — rest keeps defaults."""
        (tmp_path / "samplectl.toml").write_text("[poll]\ntimeout = 5.0\n")
        settings = SampleSettings.from_cli(root=tmp_path)
        assert settings.poll.timeout == 5.0
        assert settings.poll.multiplier == 2.0

    def test_empty_toml_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "samplectl.toml").write_text("")
        settings = SampleSettings.from_cli(root=tmp_path)
        assert settings.output.style == "text"

    def test_invalid_toml_is_click_error(self, tmp_path: Path) -> None:
        (tmp_path / "samplectl.toml").write_text("[output\nstyle = ")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            SampleSettings.from_cli(root=tmp_path)

    def test_invalid_poll_section_is_click_error(self, tmp_path: Path) -> None:
        (tmp_path / "samplectl.toml").write_text("[poll]\ninitial_delay = 0\n")
        with pytest.raises(click.ClickException, match="poll.initial_delay"):
            SampleSettings.from_cli(root=tmp_path)

    def test_root_defaults_to_config_parent(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "samplectl.toml").write_text("")
        child = tmp_path / "sub"
        child.mkdir()
        monkeypatch.chdir(child)
        settings = SampleSettings.from_cli()
        assert settings.root == tmp_path.resolve()

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        other = tmp_path / "other.toml"
        other.write_text('[output]\nstyle = "tabular"\n')
        settings = SampleSettings.from_cli(config_path=str(other), root=tmp_path)
        assert settings.config_path == other
        assert settings.output.style == "tabular"

    def test_explicit_config_path_missing(self, tmp_path: Path) -> None:
        settings = SampleSettings.from_cli(config_path=str(tmp_path / "nope.toml"), root=tmp_path)
        assert settings.config_path is None


class TestPriority:
    def test_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "samplectl.toml").write_text('[output]\nstyle = "text"\n')
        monkeypatch.setenv("SAMPLECTL_OUTPUT__STYLE", "tabular")
        settings = SampleSettings.from_cli(root=tmp_path)
        assert settings.output.style == "tabular"

    def test_cli_flags_beat_everything(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SAMPLECTL_QUIET", "false")
        settings = SampleSettings.from_cli(root=tmp_path, quiet=True, json_output=True)
        assert settings.quiet is True
        assert settings.json_output is True


class TestResolvePath:
    def test_relative_joins_root(self, tmp_path: Path) -> None:
        settings = SampleSettings.from_cli(root=tmp_path)
        assert settings.resolve_path(Path("c.yaml")) == tmp_path / "c.yaml"

    def test_absolute_unchanged(self, tmp_path: Path) -> None:
        settings = SampleSettings.from_cli(root=tmp_path)
        absolute = tmp_path / "x" / "c.yaml"
        assert settings.resolve_path(absolute) == absolute
