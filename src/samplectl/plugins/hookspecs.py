"""Pluggy hook specifications for samplectl setup extensions.

Two setup-time hooks: one contributes operation schemas to the registry,
one builds the transport named by ``[transport] kind``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from samplectl.config.models import TransportConfig
    from samplectl.domain.schema import OperationSchema
    from samplectl.transport.base import Transport

hookspec = pluggy.HookspecMarker("samplectl")


class SamplectlHookSpec:
    """Hook specifications for the samplectl plugin system."""

    @hookspec
    def register_operations(self) -> list[OperationSchema] | None:
        """Return operation schemas to add to the registry."""

    @hookspec(firstresult=True)
    def create_transport(self, config: TransportConfig) -> Transport | None:
        """Return a transport for *config*, or None if this plugin doesn't handle its kind."""
