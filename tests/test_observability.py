"""
Tests for metrics and structured logging.
"""

import json
import logging

from roastshare.logging_config import HumanFormatter, JSONFormatter
from roastshare.observability.metrics import Counter, MetricsRegistry, Timer


class TestCounter:

    def test_increment(self):
        counter = Counter("test_counter")

        counter.inc()
        counter.inc(2)

        assert counter.get() == 3

    def test_labels_are_independent(self):
        counter = Counter("test_counter")

        counter.inc(labels={"strategy": "simple"})
        counter.inc(labels={"strategy": "chunked"})
        counter.inc(labels={"strategy": "simple"})

        assert counter.get(labels={"strategy": "simple"}) == 2
        assert counter.get(labels={"strategy": "chunked"}) == 1
        assert counter.get() == 0


class TestTimer:

    def test_sum_and_count(self):
        timer = Timer("test_timer")

        timer.observe(0.5)
        timer.observe(1.5)

        assert timer.items() == [({}, 2.0, 2)]


class TestMetricsRegistry:

    def test_pipeline_metrics_registered(self):
        registry = MetricsRegistry()

        names = set(registry.export_json()["counters"])

        assert names == {
            "roastshare_uploads_total",
            "roastshare_pipeline_errors_total",
            "roastshare_status_polls_total",
        }

    def test_export_prometheus(self):
        registry = MetricsRegistry()
        registry.increment("uploads_total", labels={"strategy": "chunked"})

        output = registry.export_prometheus()

        assert "# TYPE roastshare_uploads_total counter" in output
        assert 'roastshare_uploads_total{strategy="chunked"} 1' in output

    def test_reset(self):
        registry = MetricsRegistry()
        registry.increment("status_polls_total", 3)
        registry.timing("pipeline_duration_seconds", 1.2)

        registry.reset()

        assert registry.get("status_polls_total") == 0
        assert registry.export_json()["timers"]["roastshare_pipeline_duration_seconds"] == {}


class TestFormatters:

    def record(self, **extra):
        return logging.makeLogRecord({
            "name": "roastshare.media.uploader",
            "levelname": "INFO",
            "levelno": logging.INFO,
            "msg": "Upload complete",
            **extra,
        })

    def test_json_includes_pipeline_fields(self):
        line = JSONFormatter().format(self.record(media_id="123", strategy="chunked"))

        data = json.loads(line)
        assert data["message"] == "Upload complete"
        assert data["media_id"] == "123"
        assert data["strategy"] == "chunked"
        assert "segment_index" not in data

    def test_human_appends_media_id(self):
        line = HumanFormatter().format(self.record(media_id="123"))

        assert "[uploader" in line
        assert "(media_id=123)" in line
