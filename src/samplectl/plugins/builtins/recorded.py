"""Built-in transport plugin serving YAML cassettes (``[transport] kind = "recorded"``)."""

from __future__ import annotations

import logging

import pluggy

from samplectl.config.models import TransportConfig
from samplectl.domain.errors import InvalidArgument
from samplectl.transport.recorded import RecordedTransport

hookimpl = pluggy.HookimplMarker("samplectl")

logger = logging.getLogger(__name__)

KIND = "recorded"


class RecordedTransportPlugin:
    """Builds a :class:`RecordedTransport` from ``[transport] cassette``."""

    @hookimpl
    def create_transport(self, config: TransportConfig) -> RecordedTransport | None:
        if config.kind != KIND:
            return None
        if config.cassette is None:
            raise InvalidArgument(
                "The recorded transport needs a cassette: set [transport] cassette",
                detail={"kind": KIND},
            )
        logger.debug("Replaying cassette %s", config.cassette)
        return RecordedTransport.from_file(config.cassette)
