"""Logging configuration for the client core."""

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from docchat.config import get_settings

# Context variable tagging log lines with the event being handled
event_id_var: ContextVar[str | None] = ContextVar("event_id", default=None)


class EventIdFilter(logging.Filter):
    """Add event ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add event_id to the log record.

        Args:
            record: Log record to filter

        Returns:
            True to allow the record to be logged
        """
        record.event_id = event_id_var.get() or "N/A"
        return True


def setup_logging() -> None:
    """Configure logging for the client.

    Installs a single stdout handler that tags records with the current
    event id and quiets the HTTP libraries.
    """
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(event_id)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    console_handler.addFilter(EventIdFilter())
    root_logger.addHandler(console_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured with level: {settings.log_level}")


@contextmanager
def event_scope(name: str) -> Iterator[str]:
    """Tag log lines emitted while handling one event.

    Nested scopes keep the outer event id.

    Args:
        name: Event name, logged at debug level

    Yields:
        The event ID in effect
    """
    current = event_id_var.get()
    if current is not None:
        yield current
        return
    token = event_id_var.set(uuid.uuid4().hex[:12])
    try:
        logging.getLogger(__name__).debug(f"Handling event: {name}")
        yield event_id_var.get()
    finally:
        event_id_var.reset(token)
