"""Tests for the CloudWatch metrics client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from booking_patterns.services.metrics import NAMESPACE, MetricsClient


def _make_client(*, enabled: bool = False) -> MetricsClient:
    with patch.dict("os.environ", {"METRICS_ENABLED": str(enabled).lower()}), \
            patch.object(MetricsClient, "_start_flush_thread"):
        return MetricsClient()


class TestRemoteCallMetrics:
    """Verify that record_success / record_failure buffer the right data."""

    def test_record_success_appends_two_data_points(self):
        client = _make_client()
        client.record_success("anthropic", "analyze_patterns", latency_ms=123.4)
        names = {m["MetricName"] for m in client._buffer}
        assert names == {"RemoteCall/RequestCount", "RemoteCall/Latency"}

    def test_record_failure_appends_count_and_error(self):
        client = _make_client()
        client.record_failure("anthropic", "analyze_patterns", error_type="timeout")
        # No latency data point when latency is 0
        names = {m["MetricName"] for m in client._buffer}
        assert names == {"RemoteCall/RequestCount", "RemoteCall/ErrorCount"}

    def test_record_failure_with_latency_appends_three_data_points(self):
        client = _make_client()
        client.record_failure(
            "anthropic", "analyze_patterns",
            error_type="RateLimitError", latency_ms=500.0,
        )
        assert len(client._buffer) == 3

    def test_failure_dimensions_include_error_type(self):
        client = _make_client()
        client.record_failure("anthropic", "overall_insights", error_type="BadRequestError")
        error_metric = next(
            m for m in client._buffer
            if m["MetricName"] == "RemoteCall/ErrorCount"
        )
        dim_map = {d["Name"]: d["Value"] for d in error_metric["Dimensions"]}
        assert dim_map == {"Service": "anthropic", "ErrorType": "BadRequestError"}


class TestAnalysisMetrics:
    def test_record_analysis_appends_run_counters(self):
        client = _make_client()
        client.record_analysis("deterministic", bookings=120, templates=14)
        values = {m["MetricName"]: m["Value"] for m in client._buffer}
        assert values == {
            "Analysis/Runs": 1,
            "Analysis/BookingsProcessed": 120,
            "Analysis/TemplatesGenerated": 14,
        }

    def test_strategy_dimension(self):
        client = _make_client()
        client.record_analysis("remote_model", bookings=3, templates=1)
        for metric in client._buffer:
            assert metric["Dimensions"] == [{"Name": "Strategy", "Value": "remote_model"}]


class TestMetricsFlush:
    """Verify flush behaviour with and without CloudWatch enabled."""

    def test_flush_when_disabled_does_not_call_boto3(self):
        client = _make_client()
        client.record_success("anthropic", "analyze_patterns", latency_ms=100.0)
        with patch("boto3.client") as mock_boto:
            assert client.flush() == 0
        mock_boto.assert_not_called()

    def test_flush_clears_buffer(self):
        client = _make_client()
        client.record_analysis("deterministic", bookings=1, templates=1)
        client.flush()
        assert client._buffer == []

    def test_flush_when_enabled_calls_put_metric_data(self):
        client = _make_client(enabled=True)
        mock_cw = MagicMock()
        client._cw_client = mock_cw

        client.record_success("anthropic", "analyze_patterns", latency_ms=100.0)
        sent = client.flush()

        assert sent == 2
        mock_cw.put_metric_data.assert_called_once()
        call_args = mock_cw.put_metric_data.call_args
        assert call_args[1]["Namespace"] == NAMESPACE == "BookingPatterns"
        assert len(call_args[1]["MetricData"]) == 2

    def test_flush_errors_are_logged_not_raised(self):
        client = _make_client(enabled=True)
        mock_cw = MagicMock()
        mock_cw.put_metric_data.side_effect = RuntimeError("throttled")
        client._cw_client = mock_cw

        client.record_analysis("deterministic", bookings=1, templates=1)
        assert client.flush() == 0

    def test_flush_empty_buffer_returns_zero(self):
        assert _make_client(enabled=True).flush() == 0
