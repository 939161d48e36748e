"""Log routing for samplectl.

stdout carries nothing but command results: rendered calls, tables, quiet
CSV and ``--json`` envelopes. Every log record goes to stderr, so a call can
be piped while its diagnostics stay on the terminal.

Two kinds of records share one stderr handler:
- structlog events (``call.unavailable``, telemetry spans) from the
  executor and services
- stdlib ``logging.getLogger(__name__)`` records from the builder, the
  recorded transport's replay and the plugin manager

``--verbose`` opens ``samplectl.*`` to DEBUG; otherwise only warnings (a
skipped plugin, an unavailable transport) are shown. ``--log-json`` swaps
the console renderer for one JSON object per line, with tracebacks
flattened into an ``exception`` string.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Third-party loggers that stay at WARNING even under --verbose.
_QUIET_LOGGERS = ("pluggy",)


def _shared_processors() -> list[structlog.types.Processor]:
    """Enrichment applied to structlog events and stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _final_processors(log_json: bool) -> list[structlog.types.Processor]:
    if log_json:
        return [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
    ]


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Send structlog events and stdlib records to one stderr handler.

    Safe to call more than once: the root handler is replaced, not added.

    Args:
        verbose: Enable DEBUG-level output for ``samplectl.*`` loggers.
        log_json: Render JSON lines instead of the console format.
    """
    shared = _shared_processors()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=_final_processors(log_json),
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("samplectl").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
