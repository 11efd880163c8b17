"""
Progress Module

XP, ranks, streaks, weekly quests, monthly plans and the persisted progress
state of the user's plans.
"""

from .progress_manager import ProgressManager, derive_streak
from .quests import build_month_plan, generate_weekly_quests, week_key
from .ranks import get_next_rank, get_rank, rank_progress

__all__ = [
    'ProgressManager',
    'derive_streak',
    'build_month_plan',
    'generate_weekly_quests',
    'week_key',
    'get_rank',
    'get_next_rank',
    'rank_progress'
]
