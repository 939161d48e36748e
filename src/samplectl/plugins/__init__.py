"""Extension layer — plugin system via pluggy.

Discovery: built-ins, entry_points (pip-installed) via pluggy setuptools
entrypoints, and single-file plugins from a local directory.
INVARIANT: Plugin failures while building the registry are warnings, never errors.
"""

from samplectl.plugins.manager import PluginManager

__all__ = ["PluginManager"]
