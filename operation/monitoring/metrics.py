"""
Metrics collection for the planner engine.

One MetricsRegistry belongs to one engine instance; nothing here is global,
so engines created side by side (e.g. in tests) keep separate numbers.
"""

import time
from typing import Any, Dict, List

# Metric names recorded by the engine
ANSWERS_SUBMITTED = "answers_submitted"
ANSWERS_REJECTED = "answers_rejected"
XP_AWARDED = "xp_awarded"
XP_TOTAL = "xp"
PLANS_CREATED = "plans_created"
SNAPSHOT_COMPUTE = "compute_snapshot"
STATE_WRITE_FAILURES = "state_write_failures"


class Counter:
    """Counter metric that can only increase"""

    def __init__(self, name: str):
        self.name = name
        self._value = 0.0

    def inc(self, value: float = 1.0):
        """Increment counter"""
        if value < 0:
            raise ValueError("Counter can only increase")
        self._value += value

    def get(self) -> float:
        return self._value

    def reset(self):
        self._value = 0.0


class Gauge:
    """Gauge metric that can be set to any value"""

    def __init__(self, name: str):
        self.name = name
        self._value = 0.0

    def set(self, value: float):
        self._value = value

    def get(self) -> float:
        return self._value


class Timer:
    """Timer metric for measuring execution time (keeps the last 1000 durations)"""

    MAX_SAMPLES = 1000

    def __init__(self, name: str):
        self.name = name
        self._durations: List[float] = []
        self._count = 0

    def record(self, duration: float):
        """Record a duration in seconds"""
        self._durations.append(duration)
        if len(self._durations) > self.MAX_SAMPLES:
            self._durations = self._durations[-self.MAX_SAMPLES:]
        self._count += 1

    def get_stats(self) -> Dict[str, float]:
        """Get statistics (count, min, max, mean)"""
        if not self._durations:
            return {"count": self._count, "min": 0, "max": 0, "mean": 0}
        return {
            "count": self._count,
            "min": min(self._durations),
            "max": max(self._durations),
            "mean": sum(self._durations) / len(self._durations),
        }

    def reset(self):
        self._durations.clear()
        self._count = 0


class MetricsRegistry:
    """Registry of the metrics of one engine instance"""

    def __init__(self):
        self._counters: Dict[str, Counter] = {}
        self._gauges: Dict[str, Gauge] = {}
        self._timers: Dict[str, Timer] = {}
        self._created_at = time.time()

    def counter(self, name: str) -> Counter:
        """Get or create a counter"""
        if name not in self._counters:
            self._counters[name] = Counter(name)
        return self._counters[name]

    def gauge(self, name: str) -> Gauge:
        """Get or create a gauge"""
        if name not in self._gauges:
            self._gauges[name] = Gauge(name)
        return self._gauges[name]

    def timer(self, name: str) -> Timer:
        """Get or create a timer"""
        if name not in self._timers:
            self._timers[name] = Timer(name)
        return self._timers[name]

    def get_all_metrics(self) -> Dict[str, Any]:
        """Get all metrics as a flat dictionary"""
        metrics: Dict[str, Any] = {"uptime_seconds": time.time() - self._created_at}
        for name, counter in self._counters.items():
            metrics[f"counter_{name}"] = counter.get()
        for name, gauge in self._gauges.items():
            metrics[f"gauge_{name}"] = gauge.get()
        for name, timer in self._timers.items():
            metrics[f"timer_{name}"] = timer.get_stats()
        return metrics

    def reset_all(self):
        """Reset counters and timers (gauges keep their last value)"""
        for counter in self._counters.values():
            counter.reset()
        for timer in self._timers.values():
            timer.reset()
