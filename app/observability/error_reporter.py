"""Observability collaborator for failures the caller never sees (e.g. audit writes)."""

import logging
from typing import Any, Mapping, Optional, Protocol

from app.observability.failure_classifier import FailureClassifier
from app.observability.metrics import MetricsCollector

ERRORS_REPORTED = "errors_reported"


class ErrorReporter(Protocol):
    """Fire-and-forget error sink. report() must never raise."""

    def report(self, error: BaseException, context: Mapping[str, Any]) -> None:
        ...


class LoggingErrorReporter:
    """Reports errors as structured log lines, classified, and counts them by category."""

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._metrics = metrics

    def report(self, error: BaseException, context: Mapping[str, Any]) -> None:
        category = FailureClassifier.classify(error)
        if self._metrics is not None:
            self._metrics.increment(ERRORS_REPORTED, category=category.value)
        self._logger.error(
            context.get("event", "error_reported"),
            exc_info=(type(error), error, error.__traceback__),
            extra={
                **{k: v for k, v in context.items() if k != "event"},
                "failure_category": category.value,
                "error": str(error),
            },
        )
