"""
Loader call metrics.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class LoaderMetrics:
    """Metrics for a single loader."""

    total_flushes: int = 0
    successful_flushes: int = 0
    failed_flushes: int = 0
    total_keys: int = 0
    total_duration_ms: float = 0
    min_duration_ms: float = float("inf")
    max_duration_ms: float = 0
    last_flushed: datetime | None = None


@dataclass
class RecordStats:
    """Per-record loader counters."""

    loader_calls: int = 0
    keys_requested: int = 0
    failures: int = 0


class MetricsCollector:
    """Collect and report loader usage metrics."""

    def __init__(self):
        self._metrics: dict[str, LoaderMetrics] = {}

    def record_flush(
        self, loader_name: str, key_count: int, duration_ms: float, success: bool
    ) -> None:
        """Record one settled flush."""
        if loader_name not in self._metrics:
            self._metrics[loader_name] = LoaderMetrics()

        metrics = self._metrics[loader_name]
        metrics.total_flushes += 1
        metrics.total_keys += key_count

        if success:
            metrics.successful_flushes += 1
        else:
            metrics.failed_flushes += 1

        metrics.total_duration_ms += duration_ms
        metrics.min_duration_ms = min(metrics.min_duration_ms, duration_ms)
        metrics.max_duration_ms = max(metrics.max_duration_ms, duration_ms)
        metrics.last_flushed = datetime.now()

    def get_report(self) -> dict[str, Any]:
        """Generate metrics report."""
        report = {}

        for loader_name, metrics in self._metrics.items():
            avg_duration = (
                metrics.total_duration_ms / metrics.total_flushes
                if metrics.total_flushes > 0
                else 0
            )

            report[loader_name] = {
                "total_flushes": metrics.total_flushes,
                "successful": metrics.successful_flushes,
                "failed": metrics.failed_flushes,
                "success_rate": (
                    metrics.successful_flushes / metrics.total_flushes * 100
                    if metrics.total_flushes > 0
                    else 0
                ),
                "avg_keys_per_flush": (
                    round(metrics.total_keys / metrics.total_flushes, 2)
                    if metrics.total_flushes > 0
                    else 0
                ),
                "avg_duration_ms": round(avg_duration, 2),
                "min_duration_ms": round(metrics.min_duration_ms, 2),
                "max_duration_ms": round(metrics.max_duration_ms, 2),
                "last_flushed": (
                    metrics.last_flushed.isoformat() if metrics.last_flushed else None
                ),
            }

        return report

    def clear(self) -> None:
        """Drop all collected metrics."""
        self._metrics.clear()


# Global metrics collector
_metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the process-wide metrics collector."""
    return _metrics_collector


def get_metrics_report() -> dict:
    """Get current metrics report."""
    return _metrics_collector.get_report()


def reset_metrics() -> None:
    """Clear the process-wide metrics."""
    _metrics_collector.clear()
