"""
Error Observers

Sinks for failures that must not interrupt editing.
"""

import logging

logger = logging.getLogger(__name__)


class LoggingErrorObserver:
    """Reports non-blocking failures to the service log"""

    def __init__(self, name: str = "campaign_wizard"):
        self._logger = logging.getLogger(f"{__name__}.{name}")

    def report(self, context: str, error: BaseException) -> None:
        self._logger.error(
            f"[{context}] {type(error).__name__}: {error}",
            exc_info=(type(error), error, error.__traceback__),
        )


__all__ = ["LoggingErrorObserver"]
