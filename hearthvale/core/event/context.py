"""
Event log context helpers for the Hearthvale EventBus.

Purpose
-------
Stamp the channel name and argument count onto every log record emitted
while a publish is dispatching, including records from subscriber code.

Design Decisions
----------------
- **Best-effort**: context setup can never break dispatch; failures are
  logged at debug level.
- **Scoped**: the context is reset when the publish returns, and nested
  (re-entrant) publishes stack naturally through the ContextVar token.
- **No payload values**: only the arity is recorded.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from hearthvale.core.logging.logger import LogContext, get_logger

logger = get_logger(__name__)


@contextmanager
def event_log_context(channel: str, arity: int) -> Iterator[None]:
    """
    Apply `event_name` / `event_arity` to the log context for the block.

    Examples
    --------
    >>> with event_log_context("Farming.CropHarvested", 3):
    ...     logger.info("dispatching")  # record carries event_name
    """
    scope: Optional[LogContext] = None
    try:
        scope = LogContext(event_name=channel, event_arity=arity)
        scope.__enter__()
    except Exception as exc:
        scope = None
        logger.debug(
            "Failed to apply event log context",
            extra={
                "channel": channel,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )

    try:
        yield
    finally:
        if scope is not None:
            scope.__exit__(None, None, None)
