"""
Progress Module Configuration

XP values, rank ladder and the constants behind weekly quests and monthly
plans.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

# =============================================================================
# XP TABLE
# =============================================================================

XP_TABLE: Dict[str, int] = {
    "open_app": 5,
    "complete_quest": 20,
    "complete_level": 50,
    "complete_question": 10,
    "comeback_bonus": 40,
    "monthly_success": 50,
    "monthly_adjusted": 30,
    "plan_adjusted": 5,
    "view_snapshot": 5,
}

# Days away after which opening the app earns the comeback bonus
COMEBACK_GAP_DAYS = 3

# =============================================================================
# RANKS
# =============================================================================

@dataclass(frozen=True)
class Rank:
    id: str
    emoji: str
    name: str
    min_xp: int
    description: str


RANKS: Tuple[Rank, ...] = (
    Rank("seedling", "🌱", "Seedling", 0, "Just started your journey"),
    Rank("consistent", "🔥", "Consistent Saver", 200, "Showing up every week"),
    Rank("planner", "📈", "Smart Planner", 500, "Your plan is working"),
    Rank("master", "🏆", "Financial Master", 1200, "Consistently hitting goals"),
    Rank("legend", "💎", "Legend", 3000, "Achieved your first major goal"),
)

# =============================================================================
# QUESTS & MONTHLY PLAN
# =============================================================================

# Days of the month on which the investment share is put to work
INVESTMENT_DATES: Tuple[int, ...] = (5, 15, 25)

# Share of monthly savings that goes to investments
INVESTMENT_SHARE = 0.4

WEEKS_PER_MONTH = 4

# Figures used for quests before the user has a snapshot
EXAMPLE_MONTHLY_SAVINGS = 10000
EXAMPLE_MONTHLY_EXPENSES = 20000

# =============================================================================
# PERSISTENCE KEYS
# =============================================================================

STATE_KEY = "fingame-state"
ROLLOVER_KEY_PREFIX = "rollover-"
