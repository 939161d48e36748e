"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy plugin, registry, and transport
initialization and centralized result emission (stdout/stderr routing
+ exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click

from samplectl.domain.errors import SampleError
from samplectl.output.formatters import OutputSettings, format_result
from samplectl.services.result import ServiceResult

if TYPE_CHECKING:
    from samplectl.config.settings import SampleSettings
    from samplectl.domain.schema import OperationRegistry
    from samplectl.plugins.manager import PluginManager
    from samplectl.services.call import CallService
    from samplectl.transport.base import Transport


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  Plugins, the registry,
    and the transport are created on first use so ``--help`` and
    ``--version`` never load a cassette.
    """

    def __init__(self, settings: SampleSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None
        self._registry: OperationRegistry | None = None
        self._transport: Transport | None = None

        from samplectl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from samplectl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def plugins(self) -> PluginManager:
        """The plugin manager (discovered lazily on first access)."""
        if self._plugins is None:
            from samplectl.plugins.manager import PluginManager

            cfg = self.settings.plugins
            local_dir = self.settings.resolve_path(cfg.local_dir) if cfg.local_dir else None
            self._plugins = PluginManager()
            self._plugins.discover_and_load(local_dir=local_dir, disabled=cfg.disabled)
        return self._plugins

    @property
    def registry(self) -> OperationRegistry:
        """Every operation contributed by loaded plugins."""
        if self._registry is None:
            self._registry = self.plugins.build_registry()
        return self._registry

    @property
    def transport(self) -> Transport:
        """The configured transport.

        Raises:
            SampleError: No plugin can build ``[transport] kind``, or its
                configuration (e.g. the cassette) is invalid.
        """
        if self._transport is None:
            config = self.settings.transport
            if config.cassette is not None:
                config = config.model_copy(
                    update={"cassette": self.settings.resolve_path(config.cassette)}
                )
            self._transport = self.plugins.create_transport(config)
        return self._transport

    def call_service(self, op: str) -> CallService:
        """A CallService on the configured transport; emits *op* failure if there is none."""
        from samplectl.services.call import CallService

        try:
            transport = self.transport
        except SampleError as exc:
            self.fail(op, exc)
        return CallService(self.registry, transport, max_rows=self.settings.output.max_rows)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def fail(self, op: str, exc: SampleError) -> NoReturn:
        """Emit *exc* as the failure of *op* and exit 1."""
        self.emit(ServiceResult.failure(op, exc))
        raise SystemExit(1)
