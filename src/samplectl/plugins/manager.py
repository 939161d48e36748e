"""Plugin discovery and loading.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus local directory discovery from ``[plugins] local_dir``.
Capabilities: operation schemas for the registry, transport construction.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import pluggy

from samplectl.domain.errors import InvalidArgument, SampleError
from samplectl.domain.schema import OperationRegistry, OperationSchema
from samplectl.plugins.hookspecs import SamplectlHookSpec

if TYPE_CHECKING:
    from samplectl.config.models import TransportConfig
    from samplectl.transport.base import Transport

PROJECT_NAME = "samplectl"
ENTRY_POINT_GROUP = "samplectl.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(SamplectlHookSpec)
        self._loaded: bool = False

    def discover_and_load(
        self,
        *,
        local_dir: Path | None = None,
        disabled: Iterable[str] = (),
    ) -> list[str]:
        """Register built-ins, then discover entry-point and local plugins.

        Plugins named in *disabled* are blocked before discovery, built-ins
        included. Returns a list of loaded plugin names.
        """
        for name in disabled:
            self._pm.set_blocked(name)
        self._register_builtins()
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly (e.g. built-in plugins)."""
        resolved_name = name or plugin.__class__.__name__
        if self._pm.register(plugin, name=resolved_name) is None:
            logger.debug("Plugin %s is disabled", resolved_name)
            return
        logger.debug("Registered plugin: %s", resolved_name)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins, in registration order."""
        return [name for name, plugin in self._pm.list_name_plugin() if plugin is not None]

    # ------------------------------------------------------------------
    # Hook dispatch
    # ------------------------------------------------------------------

    def build_registry(self) -> OperationRegistry:
        """Collect operation schemas from every plugin into one registry.

        Implementations of the ``register_operations`` hook are taken from
        the hook relay in registration order; the first schema for a name
        wins and later duplicates are skipped with a warning. A plugin whose
        hook raises or returns garbage contributes nothing.
        """
        registry = OperationRegistry()
        for impl in self._pm.hook.register_operations.get_hookimpls():
            if impl.hookwrapper or impl.wrapper:
                continue
            plugin_name = impl.plugin_name
            try:
                schemas = impl.function()
            except Exception:
                logger.warning(
                    "Failed to collect operations from plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue
            if schemas is None:
                continue
            if not isinstance(schemas, (list, tuple)):
                logger.warning("Plugin %s returned non-list operation registrations", plugin_name)
                continue
            for schema in schemas:
                if not isinstance(schema, OperationSchema):
                    logger.warning(
                        "Skipping non-schema registration %r from plugin %s",
                        schema,
                        plugin_name,
                    )
                    continue
                try:
                    registry.register(schema)
                except ValueError:
                    logger.warning(
                        "Skipping duplicate operation %s from plugin %s",
                        schema.name,
                        plugin_name,
                    )
        logger.debug("Registry built with %d operations", len(registry))
        return registry

    def create_transport(self, config: TransportConfig) -> Transport:
        """Ask plugins for a transport matching ``config.kind``.

        Raises:
            InvalidArgument: No plugin handles the kind, or the handler failed.
        """
        try:
            transport = self._pm.hook.create_transport(config=config)
        except SampleError:
            raise
        except Exception as exc:
            logger.warning("Transport plugin failed for kind %s", config.kind, exc_info=True)
            raise InvalidArgument(
                f"Transport '{config.kind}' could not be created: {exc}",
                detail={"kind": config.kind},
            ) from exc
        if transport is None:
            raise InvalidArgument(
                f"No plugin provides transport '{config.kind}'",
                detail={"kind": config.kind, "plugins": self.list_plugin_names()},
            )
        return transport

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def _register_builtins(self) -> None:
        from samplectl.plugins.builtins.catalog import BuiltinOperationsPlugin
        from samplectl.plugins.builtins.recorded import RecordedTransportPlugin

        self.register_plugin(BuiltinOperationsPlugin(), name="builtin-operations")
        self.register_plugin(RecordedTransportPlugin(), name="recorded-transport")

    def _discover_local(self, local_dir: Path) -> None:
        """Scan *local_dir* for single-file Python plugins.

        Each ``*.py`` file (excluding ``_``-prefixed names) is loaded as a
        module. Classes inside the module that carry pluggy hookimpl-decorated
        methods are instantiated and registered.

        Errors are logged as warnings but never raised: a broken local plugin
        must not prevent the rest of the system from starting.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"samplectl_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name:
                    continue
                if not self._has_hook_impls(obj):
                    continue
                try:
                    instance = obj()
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )
                    continue
                self.register_plugin(instance, name=f"{module_name}.{obj.__name__}")

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin_name, plugin in list(self._pm.list_name_plugin()):
            if not inspect.isclass(plugin) or not self._has_hook_impls(plugin):
                continue
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue
            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("samplectl")`` sets a ``samplectl_impl``
        attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "samplectl_impl", None):
                return True
        return False
