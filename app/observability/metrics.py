"""Prometheus-style metrics collector. Thread-safe, in-memory. No real Prometheus dependency."""

import threading
from typing import Any


class MetricsCollector:
    """
    In-memory Prometheus-style registry. Tracks counters and histograms.
    Thread-safe. Exposes increment, observe_latency, export_metrics.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # Counters: name -> value, or name -> {"name:category=x" -> value}
        self._counters: dict[str, float] = {}
        self._counters_by_category: dict[str, dict[str, float]] = {}
        # Histograms: name -> observed latencies in ms
        self._histograms: dict[str, list[float]] = {}

    def increment(
        self,
        name: str,
        value: float = 1.0,
        *,
        category: str | None = None,
    ) -> None:
        """Increment a counter. Optional category for dimensional metrics (e.g. change kind)."""
        with self._lock:
            if category is None:
                self._counters[name] = self._counters.get(name, 0) + value
                return
            key = f"{name}:category={category}"
            labelled = self._counters_by_category.setdefault(name, {})
            labelled[key] = labelled.get(key, 0) + value

    def observe_latency(self, name: str, latency_ms: float) -> None:
        """Record a latency observation (histogram-style)."""
        with self._lock:
            self._histograms.setdefault(name, []).append(latency_ms)

    def get_counter(self, name: str, *, category: str | None = None) -> float:
        with self._lock:
            if category is None:
                return self._counters.get(name, 0)
            return self._counters_by_category.get(name, {}).get(f"{name}:category={category}", 0)

    def export_metrics(self) -> dict[str, Any]:
        """Export all metrics as a dict (simulated Prometheus-style)."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "counters_by_category": {
                    k: dict(v) for k, v in self._counters_by_category.items()
                },
                "histograms": {
                    k: {"count": len(v), "sum": sum(v)}
                    for k, v in self._histograms.items()
                },
            }

    def reset(self) -> None:
        """Reset all metrics (for tests)."""
        with self._lock:
            self._counters.clear()
            self._counters_by_category.clear()
            self._histograms.clear()
