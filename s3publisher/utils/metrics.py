"""
Prometheus metrics for the publish step.

Metrics Provided:
    - s3_publish_runs_total: Counter of publish steps by outcome
    - s3_upload_requests_total: Counter of file uploads by status
    - s3_upload_bytes_total: Counter of uploaded bytes
    - s3_upload_duration_seconds: Histogram of per-file upload time
    - s3_api_errors_total: Counter of S3 API errors by operation and type
    - s3_api_duration_seconds: Histogram of S3 API call latency

Usage:
    from s3publisher.utils.metrics import get_metrics

    metrics = get_metrics()
    with metrics.track_upload():
        profile.upload(session, bucket, path, env, log)
    metrics.record_upload_success(bytes_uploaded=path.stat().st_size)

    # Expose for scraping while a long CLI run is in progress:
    python scripts/publish.py ... --metrics-port 9090
"""

import os
from contextlib import nullcontext
from typing import Any, ContextManager, Optional

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    REGISTRY,
    CollectorRegistry,
    start_http_server,
)

from s3publisher import __version__
from s3publisher.utils.logging import get_logger

logger = get_logger(__name__)


class PrometheusMetrics:
    """
    Centralized Prometheus metrics for the publisher.

    Example:
        >>> metrics = PrometheusMetrics(registry=CollectorRegistry())
        >>> metrics.record_upload_success(bytes_uploaded=1024)
    """

    def __init__(self, enabled: bool = True, registry: Optional[CollectorRegistry] = None) -> None:
        """
        Initialize metrics collectors.

        Args:
            enabled: Whether metrics collection is enabled
            registry: Custom Prometheus registry (uses default if None)
        """
        self.enabled = enabled
        self.registry = registry if registry is not None else REGISTRY

        if not self.enabled:
            logger.debug("Metrics collection disabled")
            return

        # ====================================================================
        # Publish step
        # ====================================================================

        self.publish_runs = Counter(
            name="s3_publish_runs_total",
            documentation="Total publish steps by outcome",
            labelnames=["outcome"],  # skipped, not_configured, completed, aborted, error
            registry=self.registry,
        )

        # ====================================================================
        # Uploads
        # ====================================================================

        self.upload_requests = Counter(
            name="s3_upload_requests_total",
            documentation="Total file uploads by status",
            labelnames=["status"],  # uploaded, not_found, transfer_error
            registry=self.registry,
        )

        self.upload_bytes = Counter(
            name="s3_upload_bytes_total",
            documentation="Total bytes uploaded to S3",
            registry=self.registry,
        )

        self.upload_duration = Histogram(
            name="s3_upload_duration_seconds",
            documentation="Time spent uploading one file",
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
            registry=self.registry,
        )

        # ====================================================================
        # S3 API
        # ====================================================================

        self.s3_api_errors = Counter(
            name="s3_api_errors_total",
            documentation="Total S3 API errors",
            labelnames=["operation", "error_type"],  # operation: put_object/list_buckets
            registry=self.registry,
        )

        self.s3_api_duration = Histogram(
            name="s3_api_duration_seconds",
            documentation="S3 API call latency",
            labelnames=["operation"],
            buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
            registry=self.registry,
        )

        self.app_info = Info(
            name="s3_publisher",
            documentation="Publisher metadata",
            registry=self.registry,
        )
        self.app_info.info({"version": __version__, "name": "s3-bucket-publisher"})

    def track_upload(self) -> ContextManager[Any]:
        """Context manager timing one file upload."""
        if not self.enabled:
            return nullcontext()
        return self.upload_duration.time()

    def track_s3_call(self, operation: str) -> ContextManager[Any]:
        """Context manager timing one S3 API call."""
        if not self.enabled:
            return nullcontext()
        return self.s3_api_duration.labels(operation=operation).time()

    def record_publish(self, outcome: str) -> None:
        if not self.enabled:
            return
        self.publish_runs.labels(outcome=outcome).inc()

    def record_upload_success(self, bytes_uploaded: int) -> None:
        """
        Record a successful upload.

        Args:
            bytes_uploaded: Size of the uploaded file
        """
        if not self.enabled:
            return
        self.upload_requests.labels(status="uploaded").inc()
        self.upload_bytes.inc(bytes_uploaded)

    def record_upload_not_found(self) -> None:
        if not self.enabled:
            return
        self.upload_requests.labels(status="not_found").inc()

    def record_upload_failure(self) -> None:
        if not self.enabled:
            return
        self.upload_requests.labels(status="transfer_error").inc()

    def record_s3_error(self, operation: str, error_type: str) -> None:
        """
        Record an S3 API error.

        Args:
            operation: S3 operation (put_object, list_buckets)
            error_type: Exception class name
        """
        if not self.enabled:
            return
        self.s3_api_errors.labels(operation=operation, error_type=error_type).inc()


# ============================================================================
# Global Metrics Instance
# ============================================================================

_metrics_instance: Optional[PrometheusMetrics] = None


def get_metrics() -> PrometheusMetrics:
    """
    Get global metrics instance (singleton).

    Collection is on unless METRICS_ENABLED=false.
    """
    global _metrics_instance

    if _metrics_instance is None:
        enabled = os.getenv("METRICS_ENABLED", "true").lower() == "true"
        _metrics_instance = PrometheusMetrics(enabled=enabled)

    return _metrics_instance


def start_metrics_server(port: int = 9090, addr: str = "0.0.0.0") -> None:
    """
    Expose /metrics over HTTP from a background thread.

    Args:
        port: Port to listen on (default: 9090)
        addr: Address to bind to (default: 0.0.0.0 - all interfaces)
    """
    logger.info(f"Starting Prometheus metrics server on {addr}:{port}")
    start_http_server(port=port, addr=addr)
