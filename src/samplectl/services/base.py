"""BaseService — shared foundation for the samplectl service classes.

Every service receives the :class:`OperationRegistry` at construction time;
services that talk to a remote API additionally take a Transport. Services
convert library errors to failed ServiceResults through :meth:`_failure`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from samplectl.services.result import ServiceResult

if TYPE_CHECKING:
    from samplectl.domain.errors import SampleError
    from samplectl.domain.schema import OperationRegistry

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for service-layer classes.

    Usage::

        class CatalogService(BaseService):
            def describe(self, name: str) -> ServiceResult:
                try:
                    schema = self._registry.get(name)
                except SampleError as exc:
                    return self._failure("describe", exc)
                ...
    """

    def __init__(self, registry: OperationRegistry) -> None:
        self._registry = registry

    @staticmethod
    def _failure(op: str, exc: SampleError) -> ServiceResult:
        """Log *exc* and wrap it in a failed ServiceResult."""
        logger.debug("%s failed: %s %s", op, exc.code, exc.message)
        return ServiceResult.failure(op, exc)
