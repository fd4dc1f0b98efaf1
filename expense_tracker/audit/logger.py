"""
Activity Logger

DESIGN DECISION: Every mutation and sync is logged as a structured event.
This provides:
1. A log line behind every success/failure acknowledgment the UI shows
2. Debugging capability for backend failures that are otherwise swallowed
3. A record of known soft-failure states (orphaned default, partial sync)

The logger never raises - logging must not break a repository operation.
"""

import logging
from typing import Optional

import structlog

from expense_tracker.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivitySeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through stdlib logging at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


class ActivityLogger:
    """
    Central activity logging service.

    Repositories and the sync service hold one of these and report every
    outcome through it.
    """

    def __init__(self, logger_name: str = "expense_tracker.activity"):
        self._logger = structlog.get_logger(logger_name)
        self._last_event: Optional[ActivityEvent] = None

    @property
    def last_event(self) -> Optional[ActivityEvent]:
        """Most recent event, handy for acknowledgments and tests."""
        return self._last_event

    def log(self, event: ActivityEvent) -> None:
        """Log an activity event at the level matching its severity."""
        self._last_event = event
        log_dict = event.to_log_dict()

        try:
            if event.severity == ActivitySeverity.ERROR:
                self._logger.error("activity_event", **log_dict)
            elif event.severity == ActivitySeverity.WARNING:
                self._logger.warning("activity_event", **log_dict)
            elif event.severity == ActivitySeverity.DEBUG:
                self._logger.debug("activity_event", **log_dict)
            else:
                self._logger.info("activity_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            logging.getLogger(__name__).warning("activity log write failed: %s", e)

    def log_storage_error(
        self,
        operation: str,
        error: Exception,
        entity_type: Optional[str] = None,
    ) -> None:
        """Log a backend failure that the caller will see as False/None."""
        self.log(ActivityEventBuilder.storage_error(
            operation=operation,
            error_message=str(error),
            entity_type=entity_type,
        ))
