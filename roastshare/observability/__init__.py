"""
Observability Module — Pipeline metrics.
"""

from .metrics import Counter, MetricsRegistry, Timer, metrics

__all__ = [
    "metrics",
    "MetricsRegistry",
    "Counter",
    "Timer",
]
