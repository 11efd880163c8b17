# monitoring package
from .metrics import Counter, Gauge, Timer, MetricsRegistry
from .performance import performance_timer

__all__ = [
    'Counter',
    'Gauge',
    'Timer',
    'MetricsRegistry',
    'performance_timer'
]
