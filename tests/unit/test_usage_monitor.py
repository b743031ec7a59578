"""
Tests for the usage monitor.

Verifies:
✔ First latency sample sets the average, later ones weigh 0.1
✔ Error rate derived from counters
✔ record() never raises
✔ reset() clears everything
"""

import logging

import pytest

from reliability.usage_monitor import UsageMonitor


class TestUsageMonitor:
    def test_empty_snapshot(self):
        metrics = UsageMonitor().snapshot()
        assert metrics.request_count == 0
        assert metrics.error_rate == 0.0
        assert metrics.last_request_time is None

    def test_first_sample_sets_average(self):
        monitor = UsageMonitor()
        monitor.record(250, 10, 0.001, True, "gpt-4.1-mini")
        assert monitor.snapshot().rolling_average_latency_ms == 250

    def test_later_samples_are_weighted(self):
        monitor = UsageMonitor()
        monitor.record(100, 0, 0.0, True, "gpt-4.1-mini")
        monitor.record(200, 0, 0.0, True, "gpt-4.1-mini")
        assert monitor.snapshot().rolling_average_latency_ms == pytest.approx(110)

    def test_totals_and_error_rate(self):
        monitor = UsageMonitor()
        monitor.record(10, 100, 0.5, True, "gpt-4.1-mini")
        monitor.record(10, 50, 0.25, False, "gpt-4.1-mini")
        monitor.record(10, 0, 0.0, False, "gpt-4.1-mini")
        monitor.record(10, 0, 0.0, True, "gpt-4.1-mini")

        metrics = monitor.snapshot()
        assert metrics.request_count == 4
        assert metrics.total_tokens == 150
        assert metrics.total_cost == pytest.approx(0.75)
        assert metrics.error_count == 2
        assert metrics.error_rate == 0.5
        assert metrics.last_request_time is not None

    def test_bad_input_is_logged_not_raised(self, caplog):
        monitor = UsageMonitor()
        with caplog.at_level(logging.WARNING):
            monitor.record("not-a-number", 1, 0.0, True, "gpt-4.1-mini")
        assert monitor.snapshot().request_count == 0
        assert "Failed to record" in caplog.text

    def test_emits_structured_log(self, caplog):
        monitor = UsageMonitor(name="completion")
        with caplog.at_level(logging.INFO, logger="reliability.usage_monitor"):
            monitor.record(42, 7, 0.0001, True, "gpt-4.1-mini")
        record = next(r for r in caplog.records if r.getMessage() == "completion request metrics")
        assert record.metrics["tokens"] == 7
        assert record.metrics["model"] == "gpt-4.1-mini"

    def test_reset(self):
        monitor = UsageMonitor()
        monitor.record(10, 5, 0.1, False, "gpt-4.1-mini")
        monitor.reset()
        metrics = monitor.snapshot()
        assert metrics.request_count == 0
        assert metrics.error_count == 0
        assert metrics.total_cost == 0.0
        assert metrics.rolling_average_latency_ms == 0.0
