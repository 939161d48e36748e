"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``samplectl.toml`` only carries
overrides. A fresh project needs nothing but ``[transport] cassette``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from samplectl.services.polling import BackoffPolicy


class TransportConfig(BaseModel):
    """[transport] section."""

    model_config = {"frozen": True}

    kind: str = "recorded"
    cassette: Path | None = None


class OutputConfig(BaseModel):
    """[output] section."""

    model_config = {"frozen": True}

    style: Literal["text", "tabular"] = "text"
    max_rows: int | None = Field(default=None, ge=0)


class PollConfig(BaseModel):
    """[poll] section."""

    model_config = {"frozen": True}

    initial_delay: float = Field(default=1.0, gt=0)
    multiplier: float = Field(default=2.0, ge=1.0)
    max_delay: float = Field(default=30.0, gt=0)
    timeout: float | None = Field(default=600.0, gt=0)

    def to_policy(self) -> BackoffPolicy:
        """The backoff policy these settings describe."""
        return BackoffPolicy(
            initial_delay=self.initial_delay,
            multiplier=self.multiplier,
            max_delay=self.max_delay,
            timeout=self.timeout,
        )


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    local_dir: Path | None = None
    disabled: list[str] = Field(default_factory=list)
