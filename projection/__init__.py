"""
Projection Module

Turns a plan's answers into a financial snapshot, a year-by-year schedule and
what-if comparisons.
"""

from .projection_engine import WhatIfResult, compute_snapshot, projection_schedule, round_money, what_if

__all__ = ['WhatIfResult', 'compute_snapshot', 'projection_schedule', 'round_money', 'what_if']
