"""Observability layer: metrics, failure classification, error reporting. No external SaaS."""

from app.observability.error_reporter import ErrorReporter, LoggingErrorReporter
from app.observability.failure_classifier import FailureCategory, FailureClassifier
from app.observability.metrics import MetricsCollector

__all__ = [
    "ErrorReporter",
    "FailureCategory",
    "FailureClassifier",
    "LoggingErrorReporter",
    "MetricsCollector",
]
