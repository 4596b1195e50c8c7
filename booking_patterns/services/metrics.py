"""CloudWatch custom metrics emitter with background batching.

Publishes metrics for the remote model analyzer (call count, latency,
errors) and for every analysis run regardless of strategy (runs, bookings
processed, templates generated).

* Metrics are collected in a thread-safe in-memory buffer.
* A daemon thread flushes the buffer every ``FLUSH_INTERVAL_SECONDS``.
* Unless ``METRICS_ENABLED=true``, metrics are only logged at DEBUG level.
* Each ``put_metric_data`` call sends at most 1 000 data points.

>>> from booking_patterns.services.metrics import metrics
>>> metrics.record_success("anthropic", "analyze_patterns", latency_ms=812.0)
>>> metrics.record_analysis("deterministic", bookings=120, templates=14)
"""

from __future__ import annotations

import atexit
import logging
import os
import threading
import time
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "BookingPatterns"
FLUSH_INTERVAL_SECONDS = 60
MAX_BATCH_SIZE = 1_000  # CloudWatch API limit per PutMetricData call


class MetricsClient:
    """Batched CloudWatch metrics publisher."""

    def __init__(self) -> None:
        self._enabled = os.getenv("METRICS_ENABLED", "false").lower() == "true"
        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._cw_client = None  # lazy-init

        if self._enabled:
            self._start_flush_thread()

    def _get_cw_client(self):
        if self._cw_client is None:
            import boto3

            self._cw_client = boto3.client("cloudwatch")
        return self._cw_client

    @staticmethod
    def _datum(name: str, dimensions: list[dict[str, str]], value: float, unit: str) -> dict[str, Any]:
        return {
            "MetricName": name,
            "Dimensions": dimensions,
            "Timestamp": datetime.now(UTC),
            "Value": value,
            "Unit": unit,
        }

    # ── Remote calls ──────────────────────────────────────────────────

    def record_success(self, service: str, operation: str, latency_ms: float) -> None:
        """Record a successful remote call."""
        service_dim = [{"Name": "Service", "Value": service}]
        self._append(self._datum(
            "RemoteCall/RequestCount",
            service_dim + [{"Name": "Status", "Value": "success"}],
            1, "Count",
        ))
        self._append(self._datum(
            "RemoteCall/Latency",
            service_dim + [{"Name": "Operation", "Value": operation}],
            latency_ms, "Milliseconds",
        ))
        logger.debug("Metric: %s %s success latency=%.1fms", service, operation, latency_ms)

    def record_failure(
        self,
        service: str,
        operation: str,
        error_type: str,
        latency_ms: float = 0,
    ) -> None:
        """Record a failed remote call."""
        service_dim = [{"Name": "Service", "Value": service}]
        self._append(self._datum(
            "RemoteCall/RequestCount",
            service_dim + [{"Name": "Status", "Value": "failure"}],
            1, "Count",
        ))
        self._append(self._datum(
            "RemoteCall/ErrorCount",
            service_dim + [{"Name": "ErrorType", "Value": error_type}],
            1, "Count",
        ))
        if latency_ms > 0:
            self._append(self._datum(
                "RemoteCall/Latency",
                service_dim + [{"Name": "Operation", "Value": operation}],
                latency_ms, "Milliseconds",
            ))
        logger.debug(
            "Metric: %s %s failure error=%s latency=%.1fms",
            service, operation, error_type, latency_ms,
        )

    # ── Analysis runs ─────────────────────────────────────────────────

    def record_analysis(self, strategy: str, *, bookings: int, templates: int) -> None:
        """Record one completed analysis run."""
        strategy_dim = [{"Name": "Strategy", "Value": strategy}]
        self._append(self._datum("Analysis/Runs", strategy_dim, 1, "Count"))
        self._append(self._datum("Analysis/BookingsProcessed", strategy_dim, bookings, "Count"))
        self._append(self._datum("Analysis/TemplatesGenerated", strategy_dim, templates, "Count"))
        logger.debug(
            "Metric: analysis strategy=%s bookings=%d templates=%d",
            strategy, bookings, templates,
        )

    def flush(self) -> int:
        """Send buffered metrics to CloudWatch.  Returns count sent."""
        with self._lock:
            if not self._buffer:
                return 0
            batch = self._buffer[:]
            self._buffer.clear()

        if not self._enabled:
            logger.debug("Metrics flush skipped (not enabled): %d items", len(batch))
            return 0

        sent = 0
        try:
            cw = self._get_cw_client()
            for i in range(0, len(batch), MAX_BATCH_SIZE):
                chunk = batch[i : i + MAX_BATCH_SIZE]
                cw.put_metric_data(Namespace=NAMESPACE, MetricData=chunk)
                sent += len(chunk)
            logger.info("Flushed %d metrics to CloudWatch", sent)
        except Exception:
            logger.exception("Failed to flush metrics to CloudWatch")
        return sent

    # ── Internal ──────────────────────────────────────────────────────

    def _append(self, metric_data: dict[str, Any]) -> None:
        with self._lock:
            self._buffer.append(metric_data)

    def _start_flush_thread(self) -> None:
        def _loop():
            while True:
                time.sleep(FLUSH_INTERVAL_SECONDS)
                try:
                    self.flush()
                except Exception:
                    logger.exception("Metrics flush thread error")

        t = threading.Thread(target=_loop, daemon=True, name="metrics-flush")
        t.start()
        atexit.register(self.flush)
        logger.info("Metrics flush thread started (interval=%ds)", FLUSH_INTERVAL_SECONDS)


# ── Module-level singleton ──────────────────────────────────────────
metrics = MetricsClient()
