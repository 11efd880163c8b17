"""
Performance monitoring utilities.
"""

import time
from contextlib import contextmanager

from operation.monitoring.metrics import MetricsRegistry


@contextmanager
def performance_timer(registry: MetricsRegistry, name: str):
    """
    Context manager recording the wall time of a block into a registry timer.

    Usage:
        with performance_timer(registry, "compute_snapshot"):
            # do something
    """
    timer = registry.timer(name)
    start = time.perf_counter()
    try:
        yield
    finally:
        timer.record(time.perf_counter() - start)
