"""Tests for Prometheus metrics."""

import pytest
from prometheus_client import CollectorRegistry

from s3publisher.utils.metrics import PrometheusMetrics


@pytest.fixture
def metrics() -> PrometheusMetrics:
    return PrometheusMetrics(registry=CollectorRegistry())


def value(metrics: PrometheusMetrics, metric: str, **labels) -> float:
    return metrics.registry.get_sample_value(metric, labels or None)


class TestPrometheusMetrics:
    """Tests for PrometheusMetrics counters and histograms."""

    def test_record_publish(self, metrics):
        metrics.record_publish("completed")
        metrics.record_publish("completed")
        metrics.record_publish("aborted")

        assert value(metrics, "s3_publish_runs_total", outcome="completed") == 2
        assert value(metrics, "s3_publish_runs_total", outcome="aborted") == 1

    def test_upload_counters(self, metrics):
        metrics.record_upload_success(bytes_uploaded=1024)
        metrics.record_upload_success(bytes_uploaded=24)
        metrics.record_upload_not_found()
        metrics.record_upload_failure()

        assert value(metrics, "s3_upload_requests_total", status="uploaded") == 2
        assert value(metrics, "s3_upload_requests_total", status="not_found") == 1
        assert value(metrics, "s3_upload_requests_total", status="transfer_error") == 1
        assert value(metrics, "s3_upload_bytes_total") == 1048

    def test_track_upload_observes_duration(self, metrics):
        with metrics.track_upload():
            pass

        assert value(metrics, "s3_upload_duration_seconds_count") == 1

    def test_track_s3_call_and_errors(self, metrics):
        with metrics.track_s3_call("put_object"):
            pass
        metrics.record_s3_error("put_object", "ClientError")

        assert value(metrics, "s3_api_duration_seconds_count", operation="put_object") == 1
        assert (
            value(metrics, "s3_api_errors_total", operation="put_object", error_type="ClientError")
            == 1
        )

    def test_app_info(self, metrics):
        assert value(metrics, "s3_publisher_info", version="0.1.0", name="s3-bucket-publisher") == 1


class TestDisabledMetrics:
    """Disabled metrics accept every call and record nothing."""

    def test_disabled_is_noop(self):
        registry = CollectorRegistry()
        metrics = PrometheusMetrics(enabled=False, registry=registry)

        metrics.record_publish("completed")
        metrics.record_upload_success(bytes_uploaded=10)
        metrics.record_upload_not_found()
        metrics.record_upload_failure()
        metrics.record_s3_error("list_buckets", "EndpointConnectionError")
        with metrics.track_upload():
            pass
        with metrics.track_s3_call("list_buckets"):
            pass

        assert registry.get_sample_value("s3_publish_runs_total", {"outcome": "completed"}) is None
