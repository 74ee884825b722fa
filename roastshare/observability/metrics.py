"""
Metrics — In-process counters and timings for the media pipeline.

Write-only telemetry: nothing in the pipeline reads these back, so they
never couple one invocation to another.

## Usage

    from roastshare.observability.metrics import metrics

    metrics.increment("uploads_total", labels={"strategy": "chunked"})
    metrics.timing("pipeline_duration_seconds", 2.4)

    output = metrics.export_prometheus()
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Optional, Tuple


def _labels_key(labels: Optional[Dict[str, str]]) -> str:
    if not labels:
        return ""
    return ",".join(f"{k}={v}" for k, v in sorted(labels.items()))


def _parse_key(key: str) -> Dict[str, str]:
    if not key:
        return {}
    return dict(pair.split("=", 1) for pair in key.split(","))


class Counter:
    """A monotonically increasing counter."""

    def __init__(self, name: str, help_text: str = ""):
        self.name = name
        self.help_text = help_text
        self._values: Dict[str, float] = defaultdict(float)
        self._lock = Lock()

    def inc(self, value: float = 1, labels: Optional[Dict[str, str]] = None) -> None:
        with self._lock:
            self._values[_labels_key(labels)] += value

    def get(self, labels: Optional[Dict[str, str]] = None) -> float:
        return self._values.get(_labels_key(labels), 0)

    def items(self) -> List[Tuple[Dict[str, str], float]]:
        with self._lock:
            return [(_parse_key(k), v) for k, v in self._values.items()]


class Timer:
    """Sum and count of observed durations."""

    def __init__(self, name: str, help_text: str = ""):
        self.name = name
        self.help_text = help_text
        self._sums: Dict[str, float] = defaultdict(float)
        self._counts: Dict[str, int] = defaultdict(int)
        self._lock = Lock()

    def observe(self, seconds: float, labels: Optional[Dict[str, str]] = None) -> None:
        key = _labels_key(labels)
        with self._lock:
            self._sums[key] += seconds
            self._counts[key] += 1

    def items(self) -> List[Tuple[Dict[str, str], float, int]]:
        with self._lock:
            return [(_parse_key(k), self._sums[k], self._counts[k]) for k in self._sums]


class MetricsRegistry:
    """Named counters and timers with Prometheus and JSON export."""

    def __init__(self, prefix: str = "roastshare"):
        self.prefix = prefix
        self._counters: Dict[str, Counter] = {}
        self._timers: Dict[str, Timer] = {}
        self._lock = Lock()

        self.counter("uploads_total", "Completed platform uploads by strategy")
        self.counter("pipeline_errors_total", "Pipeline failures by kind")
        self.counter("status_polls_total", "Processing status queries")
        self.timer("pipeline_duration_seconds", "End-to-end process_and_upload time")

    def counter(self, name: str, help_text: str = "") -> Counter:
        full_name = f"{self.prefix}_{name}"
        with self._lock:
            if full_name not in self._counters:
                self._counters[full_name] = Counter(full_name, help_text)
            return self._counters[full_name]

    def timer(self, name: str, help_text: str = "") -> Timer:
        full_name = f"{self.prefix}_{name}"
        with self._lock:
            if full_name not in self._timers:
                self._timers[full_name] = Timer(full_name, help_text)
            return self._timers[full_name]

    def increment(self, name: str, value: float = 1, labels: Optional[Dict[str, str]] = None) -> None:
        self.counter(name).inc(value, labels)

    def timing(self, name: str, seconds: float, labels: Optional[Dict[str, str]] = None) -> None:
        self.timer(name).observe(seconds, labels)

    def get(self, name: str, labels: Optional[Dict[str, str]] = None) -> float:
        """Current value of a counter (0 if never incremented)."""
        return self.counter(name).get(labels)

    def reset(self) -> None:
        """Drop all recorded values (keeps registrations)."""
        with self._lock:
            for c in self._counters.values():
                c._values.clear()
            for t in self._timers.values():
                t._sums.clear()
                t._counts.clear()

    def export_prometheus(self) -> str:
        """Export in Prometheus text format."""
        lines = []
        for counter in self._counters.values():
            lines.append(f"# HELP {counter.name} {counter.help_text}")
            lines.append(f"# TYPE {counter.name} counter")
            for labels, value in counter.items():
                lines.append(f"{counter.name}{self._format_labels(labels)} {value}")
        for timer in self._timers.values():
            lines.append(f"# HELP {timer.name} {timer.help_text}")
            lines.append(f"# TYPE {timer.name} summary")
            for labels, total, count in timer.items():
                lbl = self._format_labels(labels)
                lines.append(f"{timer.name}_sum{lbl} {total}")
                lines.append(f"{timer.name}_count{lbl} {count}")
        return "\n".join(lines)

    def export_json(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "counters": {},
            "timers": {},
        }
        for name, counter in self._counters.items():
            result["counters"][name] = {
                _labels_key(labels) or "_": value for labels, value in counter.items()
            }
        for name, timer in self._timers.items():
            result["timers"][name] = {
                _labels_key(labels) or "_": {"sum": total, "count": count}
                for labels, total, count in timer.items()
            }
        return result

    def _format_labels(self, labels: Dict[str, str]) -> str:
        if not labels:
            return ""
        pairs = [f'{k}="{v}"' for k, v in sorted(labels.items())]
        return "{" + ",".join(pairs) + "}"


# Global metrics instance
metrics = MetricsRegistry()
