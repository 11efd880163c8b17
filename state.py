from __future__ import annotations
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


STATE_VERSION = 1


class PlanKind(str, Enum):
    SAVING = "saving"
    GOAL = "goal"
    RETIREMENT = "retirement"


class QuestState(str, Enum):
    TODO = "todo"
    DONE = "done"
    SKIPPED = "skipped"


class MonthStatus(str, Enum):
    SUCCESS = "success"
    ADJUSTED = "adjusted"
    TRYING = "trying"
    ROLLOVER = "rollover"


# Months that keep a streak alive
QUALIFYING_MONTH_STATUSES = (MonthStatus.SUCCESS, MonthStatus.ADJUSTED)


class StateModel(BaseModel):
    """Base for everything that ends up in the persisted state document (camelCase on disk)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Answer(StateModel):
    question_id: str
    value: Union[int, float, str]
    label: str = ""


class FinancialSnapshot(StateModel):
    monthly_income: int
    monthly_expenses: int
    monthly_savings: int
    annual_savings: int
    savings_rate: float
    current_age: int
    retirement_age: int
    years_to_retire: int
    existing_savings: int
    retirement_fund: int
    inflation_adjusted: int
    retirement_needed: int
    retirement_monthly_expense: int
    years_in_retirement: int
    risk_tolerance: str
    safe_spending_range: Tuple[int, int]


class MonthlyLog(StateModel):
    month_key: str                      # "YYYY-MM"
    actual_savings: float = 0
    actual_investment: float = 0
    actual_expenses: float = 0
    target_savings: float = 0
    target_investment: float = 0
    spending_limit: float = 0
    rollover_amount: float = 0
    status: MonthStatus = MonthStatus.TRYING
    xp_earned: int = 0


class QuestStatus(StateModel):
    quest_id: str
    week_key: str                       # "YYYY-Www"
    status: QuestState = QuestState.TODO
    completed_at: Optional[datetime] = None


class Plan(StateModel):
    id: str
    kind: PlanKind
    display_name: str
    emoji: str = ""
    answers: List[Answer] = Field(default_factory=list)
    snapshot: Optional[FinancialSnapshot] = None
    monthly_logs: List[MonthlyLog] = Field(default_factory=list)
    created_at: datetime
    is_active: bool = False


class PersistedState(StateModel):
    version: int = STATE_VERSION
    xp: int = Field(default=0, ge=0)
    plans: List[Plan] = Field(default_factory=list)
    active_plan_id: Optional[str] = None
    quest_statuses: List[QuestStatus] = Field(default_factory=list)
    monthly_logs: List[MonthlyLog] = Field(default_factory=list)
    last_active_date: Optional[date] = None
