"""structlog configuration for chartfile.

Two output modes, both on stderr so stdout stays clean for results:
- Human (default): key=value console lines, colored on a terminal
- JSON (--log-json): one JSON object per event

The load pipeline logs through ``structlog.get_logger`` and the services
through plain ``logging``; both are rendered by the same handler, and both
pick up the document bound by :func:`document_context`.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog
from structlog.types import Processor


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderers(log_json: bool) -> list[Processor]:
    if log_json:
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Route chartfile's log events to stderr.

    Safe to call more than once: the root handler is replaced, not added.

    Args:
        verbose: Show chartfile's DEBUG events (pipeline layers, migration
            steps, file reads). When False, only WARNING and above.
        log_json: Render JSON lines instead of console lines.
    """
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_renderers(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.WARNING)
    logging.getLogger("chartfile").setLevel(logging.DEBUG if verbose else logging.WARNING)


@contextmanager
def document_context(path: Path) -> Iterator[None]:
    """Tag every event logged inside the block with ``document=<path>``."""
    with structlog.contextvars.bound_contextvars(document=str(path)):
        yield
