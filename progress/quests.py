"""
Calendar keys, weekly quest generation and the monthly plan breakdown.

Everything here is a pure function of a snapshot and a date; recording quest
outcomes and rollovers is the ProgressManager's job.
"""

from __future__ import annotations
import calendar
import math
import re
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

import pandas as pd

from state import FinancialSnapshot
from projection.projection_engine import round_money
from progress.config import (
    EXAMPLE_MONTHLY_EXPENSES,
    EXAMPLE_MONTHLY_SAVINGS,
    INVESTMENT_DATES,
    INVESTMENT_SHARE,
    ROLLOVER_KEY_PREFIX,
    WEEKS_PER_MONTH,
)

# =============================================================================
# CALENDAR KEYS
# =============================================================================

def week_key(day: date) -> str:
    """Week of the year as "YYYY-Www", weeks starting on Sunday with Jan 1 in week 1."""
    jan1 = date(day.year, 1, 1)
    jan1_weekday = (jan1.weekday() + 1) % 7      # Sunday = 0
    week = math.ceil(((day - jan1).days + jan1_weekday + 1) / 7)
    return f"{day.year}-W{week:02d}"


def month_key(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


_MONTH_KEY = re.compile(r"^(\d{4})-(\d{1,2})$")


def parse_month_key(key: str) -> Tuple[int, int]:
    """Split "YYYY-MM" (or "YYYY-M") into (year, month)."""
    match = _MONTH_KEY.match(key)
    if match is None:
        raise ValueError(f"Invalid month key: {key!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month key: {key!r}")
    return year, month


def next_month(year: int, month: int) -> Tuple[int, int]:
    return (year + 1, 1) if month == 12 else (year, month + 1)


def rollover_key(year: int, month: int) -> str:
    return f"{ROLLOVER_KEY_PREFIX}{month_key(year, month)}"


# =============================================================================
# WEEKLY QUESTS
# =============================================================================

@dataclass(frozen=True)
class Quest:
    id: str
    icon: str
    kind: str           # save | track | invest
    amount: int


def is_investment_week(day_of_month: int) -> bool:
    """True when an investment date falls within the next seven days (today included)."""
    return any(0 <= d - day_of_month < 7 for d in INVESTMENT_DATES)


def _monthly_figures(snapshot: Optional[FinancialSnapshot]) -> Tuple[int, int]:
    if snapshot is None:
        return EXAMPLE_MONTHLY_SAVINGS, EXAMPLE_MONTHLY_EXPENSES
    return snapshot.monthly_savings, snapshot.monthly_expenses


def generate_weekly_quests(
    snapshot: Optional[FinancialSnapshot],
    today: date,
    rollover_amount: float = 0,
) -> List[Quest]:
    """
    Build this week's quests from a snapshot.

    Args:
        snapshot: Active plan snapshot, or None to use example figures
        today: Current date
        rollover_amount: Target skipped last month and carried into this one;
            it is spread over the weekly saving quests

    Returns:
        List of Quest (save, track, and invest in an investment week)
    """
    monthly_savings, monthly_expenses = _monthly_figures(snapshot)
    quests = [
        Quest("save_week", "💰", "save",
              round_money((monthly_savings + rollover_amount) / WEEKS_PER_MONTH)),
        Quest("track_expenses", "🧾", "track", round_money(monthly_expenses / WEEKS_PER_MONTH)),
    ]
    if is_investment_week(today.day):
        quests.append(Quest(
            "invest_now", "📈", "invest",
            round_money(monthly_savings * INVESTMENT_SHARE / len(INVESTMENT_DATES)),
        ))
    return quests


# =============================================================================
# MONTHLY PLAN
# =============================================================================

@dataclass
class DayPlan:
    date: int
    savings_target: int
    spending_limit: int
    investment_amount: int
    is_investment_day: bool
    mission: Optional[str] = None       # "investment_day" | "week_checkpoint"


@dataclass
class WeekPlan:
    week_number: int
    savings_target: int
    spending_limit: int
    investment_amount: int
    days: List[DayPlan] = field(default_factory=list)


@dataclass
class MonthPlan:
    year: int
    month: int
    total_income: int
    planned_savings: int
    planned_investment: int
    max_spending: int
    rollover_amount: int
    weeks: List[WeekPlan] = field(default_factory=list)

    @property
    def days(self) -> List[DayPlan]:
        return [day for week in self.weeks for day in week.days]

    def to_frame(self) -> pd.DataFrame:
        """One row per day of the month."""
        rows = []
        for week in self.weeks:
            for day in week.days:
                rows.append({
                    "date": day.date,
                    "week": week.week_number,
                    "savings_target": day.savings_target,
                    "spending_limit": day.spending_limit,
                    "investment_amount": day.investment_amount,
                    "is_investment_day": day.is_investment_day,
                    "mission": day.mission,
                })
        return pd.DataFrame(rows).set_index("date")


def build_month_plan(
    snapshot: FinancialSnapshot,
    year: int,
    month: int,
    rollover_amount: float = 0,
) -> MonthPlan:
    """
    Break a snapshot down into weekly and daily targets for one month.

    A share of the monthly savings is invested on the investment dates, the
    rest is saved evenly; rollover from last month is added to the savings
    target. Weeks run Monday to Sunday.
    """
    days_in_month = calendar.monthrange(year, month)[1]
    monthly_investment = (
        round_money(snapshot.monthly_savings * INVESTMENT_SHARE) if snapshot.monthly_savings > 0 else 0
    )
    savings_only = snapshot.monthly_savings - monthly_investment + rollover_amount
    max_spending = snapshot.monthly_income - snapshot.monthly_savings

    weekly_savings = round_money(savings_only / WEEKS_PER_MONTH)
    weekly_investment = round_money(monthly_investment / WEEKS_PER_MONTH)
    weekly_spending = round_money(max_spending / WEEKS_PER_MONTH)
    daily_savings = round_money(savings_only / days_in_month)
    daily_spending = round_money(max_spending / days_in_month)

    investment_days = [d for d in INVESTMENT_DATES if d <= days_in_month]
    per_investment_day = round_money(monthly_investment / len(investment_days)) if investment_days else 0

    plan = MonthPlan(
        year=year,
        month=month,
        total_income=snapshot.monthly_income,
        planned_savings=round_money(savings_only),
        planned_investment=monthly_investment,
        max_spending=max_spending,
        rollover_amount=round_money(rollover_amount),
    )

    week = WeekPlan(1, weekly_savings, weekly_spending, weekly_investment)
    for day_number in range(1, days_in_month + 1):
        is_investment_day = day_number in investment_days
        if is_investment_day:
            mission = "investment_day"
        elif day_number % 7 == 0:
            mission = "week_checkpoint"
        else:
            mission = None
        week.days.append(DayPlan(
            date=day_number,
            savings_target=daily_savings,
            spending_limit=daily_spending,
            investment_amount=per_investment_day if is_investment_day else 0,
            is_investment_day=is_investment_day,
            mission=mission,
        ))
        # Monday = 0 ... Sunday = 6
        if date(year, month, day_number).weekday() == 6 or day_number == days_in_month:
            plan.weeks.append(week)
            week = WeekPlan(week.week_number + 1, weekly_savings, weekly_spending, weekly_investment)
    return plan
