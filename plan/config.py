"""
Plan Module Configuration

This file contains the question catalogs (flows) for every plan kind, the
plan-kind presets shown on plan selection, and the predicate helpers that
decide which questions are visible and how their bounds resolve.

Flows are read-only at runtime.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from state import PlanKind

# Fallback for a dynamic bound whose governing answer is missing, so the
# slider stays usable before its dependency is answered.
DYNAMIC_BOUND_SENTINEL = 100_000_000

# =============================================================================
# QUESTION DEFINITIONS
# =============================================================================

class QuestionKind(str, Enum):
    CHOICE = "choice"
    SLIDER_NUMERIC = "slider-input"
    PLAIN_NUMERIC = "number-input"


@dataclass(frozen=True)
class Option:
    label: str
    value: Union[int, str]


@dataclass(frozen=True)
class DynamicBound:
    """Bound taken from the numeric answer of another question."""
    ref: str


@dataclass(frozen=True)
class VisibilityCondition:
    question_id: str
    accepted_values: Tuple[Union[int, str], ...]


@dataclass(frozen=True)
class QuestionSpec:
    id: str
    group_key: str
    kind: QuestionKind
    options: Tuple[Option, ...] = ()
    min: Optional[float] = None
    max: Union[float, DynamicBound, None] = None
    step: Optional[float] = None
    default_value: Optional[float] = None
    suffix: str = ""
    visibility_condition: Optional[VisibilityCondition] = None

    @property
    def is_numeric(self) -> bool:
        return self.kind in (QuestionKind.SLIDER_NUMERIC, QuestionKind.PLAIN_NUMERIC)

    def option_for(self, value) -> Optional[Option]:
        for option in self.options:
            if option.value == value:
                return option
        return None


@dataclass(frozen=True)
class PlanOption:
    kind: PlanKind
    emoji: str
    display_name: str


PLAN_OPTIONS: Tuple[PlanOption, ...] = (
    PlanOption(PlanKind.SAVING, "💰", "Saving Plan"),
    PlanOption(PlanKind.GOAL, "🎯", "Goal Plan"),
    PlanOption(PlanKind.RETIREMENT, "🏖️", "Retirement Plan"),
)

# -----------------------------------------------------------------------------
# Shared questions (income, expenses, savings, goals, behavior)
# -----------------------------------------------------------------------------

MONTHLY_INCOME = QuestionSpec(
    id="monthly_income",
    group_key="income",
    kind=QuestionKind.SLIDER_NUMERIC,
    min=1000,
    max=100_000_000,
    step=1000,
    default_value=30000,
    suffix="฿",
)

INCOME_STABILITY = QuestionSpec(
    id="income_stability",
    group_key="income",
    kind=QuestionKind.CHOICE,
    options=(
        Option("Very stable", "stable"),
        Option("Varies sometimes", "mixed"),
        Option("Very unstable", "variable"),
    ),
)

AVG_INCOME = QuestionSpec(
    id="avg_income",
    group_key="income",
    kind=QuestionKind.SLIDER_NUMERIC,
    min=1000,
    max=100_000_000,
    step=1000,
    default_value=25000,
    suffix="฿",
    visibility_condition=VisibilityCondition("income_stability", ("mixed", "variable")),
)

MONTHLY_EXPENSES = QuestionSpec(
    id="monthly_expenses",
    group_key="expenses",
    kind=QuestionKind.SLIDER_NUMERIC,
    min=0,
    max=DynamicBound("monthly_income"),
    step=500,
    default_value=20000,
    suffix="฿",
)

MIN_EXPENSES = QuestionSpec(
    id="min_expenses",
    group_key="expenses",
    kind=QuestionKind.SLIDER_NUMERIC,
    min=0,
    max=DynamicBound("monthly_expenses"),
    step=500,
    default_value=10000,
    suffix="฿",
)

MONTHLY_OBLIGATIONS = QuestionSpec(
    id="monthly_obligations",
    group_key="expenses",
    kind=QuestionKind.CHOICE,
    options=(
        Option("None", "none"),
        Option("A little", "some"),
        Option("Quite a lot", "heavy"),
    ),
)

CURRENT_SAVINGS = QuestionSpec(
    id="current_savings",
    group_key="savings",
    kind=QuestionKind.CHOICE,
    options=(
        Option("Under 10,000", 5000),
        Option("50,000+", 50000),
        Option("100,000+", 100000),
        Option("1,000,000+", 1000000),
        Option("Enter manually", "manual"),
    ),
)

CURRENT_SAVINGS_MANUAL = QuestionSpec(
    id="current_savings_manual",
    group_key="savings",
    kind=QuestionKind.PLAIN_NUMERIC,
    min=0,
    max=999_999_999,
    suffix="฿",
    visibility_condition=VisibilityCondition("current_savings", ("manual",)),
)

SAVING_GOAL = QuestionSpec(
    id="saving_goal",
    group_key="savings",
    kind=QuestionKind.PLAIN_NUMERIC,
    min=1,
    max=999_999_999,
    suffix="฿",
)

BIG_PURCHASE = QuestionSpec(
    id="big_purchase",
    group_key="goals",
    kind=QuestionKind.CHOICE,
    options=(
        Option("Home", "home"),
        Option("Car", "car"),
        Option("Travel", "travel"),
        Option("No, just saving", "none"),
    ),
)

BIG_PURCHASE_TIMELINE = QuestionSpec(
    id="big_purchase_timeline",
    group_key="goals",
    kind=QuestionKind.CHOICE,
    options=(
        Option("This year", "1"),
        Option("2–3 years", "2"),
        Option("5+ years", "5"),
        Option("Not sure yet", "unsure"),
    ),
    visibility_condition=VisibilityCondition("big_purchase", ("home", "car", "travel")),
)

EMERGENCY_READINESS = QuestionSpec(
    id="emergency_readiness",
    group_key="behavior",
    kind=QuestionKind.CHOICE,
    options=(
        Option("Less than 1 month", "less_1"),
        Option("1–3 months", "1_3"),
        Option("More than 3 months", "more_3"),
    ),
)

FINANCIAL_DISCIPLINE = QuestionSpec(
    id="financial_discipline",
    group_key="behavior",
    kind=QuestionKind.CHOICE,
    options=(
        Option("I follow my plan", "disciplined"),
        Option("I try but slip sometimes", "trying"),
        Option("I'm working on it", "learning"),
    ),
)

# -----------------------------------------------------------------------------
# Saving / goal specific
# -----------------------------------------------------------------------------

SAVING_TIMELINE = QuestionSpec(
    id="saving_timeline",
    group_key="goals",
    kind=QuestionKind.CHOICE,
    options=(
        Option("3 months", "3"),
        Option("6 months", "6"),
        Option("1 year", "12"),
        Option("3+ years", "36"),
    ),
)

GOAL_PRIORITY = QuestionSpec(
    id="goal_priority",
    group_key="goals",
    kind=QuestionKind.CHOICE,
    options=(
        Option("Speed: reach it ASAP", "speed"),
        Option("Balance: save and live well", "balance"),
        Option("Flexible: life happens", "flexible"),
    ),
)

# -----------------------------------------------------------------------------
# Retirement specific
# -----------------------------------------------------------------------------

CURRENT_AGE = QuestionSpec(
    id="current_age",
    group_key="retirement",
    kind=QuestionKind.SLIDER_NUMERIC,
    min=18,
    max=70,
    step=1,
    default_value=30,
)

RETIREMENT_AGE = QuestionSpec(
    id="retirement_age",
    group_key="retirement",
    kind=QuestionKind.SLIDER_NUMERIC,
    min=40,
    max=80,
    step=1,
    default_value=60,
)

EXPECTED_LIFESPAN = QuestionSpec(
    id="expected_lifespan",
    group_key="retirement",
    kind=QuestionKind.SLIDER_NUMERIC,
    min=60,
    max=100,
    step=1,
    default_value=80,
)

RETIREMENT_MONTHLY_EXPENSE = QuestionSpec(
    id="retirement_monthly_expense",
    group_key="retirement",
    kind=QuestionKind.SLIDER_NUMERIC,
    min=5000,
    max=500_000,
    step=1000,
    default_value=30000,
    suffix="฿",
)

RETIREMENT_SAVINGS = QuestionSpec(
    id="retirement_savings",
    group_key="retirement",
    kind=QuestionKind.CHOICE,
    options=(
        Option("Under 100,000", 50000),
        Option("100,000+", 100000),
        Option("500,000+", 500000),
        Option("1,000,000+", 1000000),
        Option("Enter manually", "manual"),
    ),
)

RETIREMENT_SAVINGS_MANUAL = QuestionSpec(
    id="retirement_savings_manual",
    group_key="retirement",
    kind=QuestionKind.PLAIN_NUMERIC,
    min=0,
    max=999_999_999,
    suffix="฿",
    visibility_condition=VisibilityCondition("retirement_savings", ("manual",)),
)

# =============================================================================
# FLOWS
# =============================================================================

_INCOME_AND_EXPENSES = (
    MONTHLY_INCOME,
    INCOME_STABILITY,
    AVG_INCOME,
    MONTHLY_EXPENSES,
    MIN_EXPENSES,
    MONTHLY_OBLIGATIONS,
)

_SAVINGS = (CURRENT_SAVINGS, CURRENT_SAVINGS_MANUAL, SAVING_GOAL)
_BEHAVIOR = (EMERGENCY_READINESS, FINANCIAL_DISCIPLINE)

FLOWS: Dict[PlanKind, Tuple[QuestionSpec, ...]] = {
    PlanKind.SAVING: _INCOME_AND_EXPENSES + _SAVINGS + _BEHAVIOR + (SAVING_TIMELINE,),
    PlanKind.GOAL: (
        _INCOME_AND_EXPENSES + _SAVINGS
        + (BIG_PURCHASE, BIG_PURCHASE_TIMELINE) + _BEHAVIOR + (GOAL_PRIORITY,)
    ),
    PlanKind.RETIREMENT: _INCOME_AND_EXPENSES + (
        CURRENT_AGE,
        RETIREMENT_AGE,
        EXPECTED_LIFESPAN,
        RETIREMENT_MONTHLY_EXPENSE,
        RETIREMENT_SAVINGS,
        RETIREMENT_SAVINGS_MANUAL,
    ) + _BEHAVIOR,
}

# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def check_flow(kind: PlanKind, flow: Tuple[QuestionSpec, ...]) -> None:
    """
    Validate that a flow can be resolved in one linear pass.

    Every visibility condition and dynamic bound must point at a question that
    appears earlier in the same flow, and ids must be unique.

    Raises:
        ValueError: on a duplicate id or a forward/unknown reference
    """
    seen: List[str] = []
    for question in flow:
        if question.id in seen:
            raise ValueError(f"Duplicate question id '{question.id}' in {kind.value} flow")
        refs = []
        if question.visibility_condition is not None:
            refs.append(question.visibility_condition.question_id)
        for bound in (question.min, question.max):
            if isinstance(bound, DynamicBound):
                refs.append(bound.ref)
        for ref in refs:
            if ref not in seen:
                raise ValueError(
                    f"Question '{question.id}' in {kind.value} flow references "
                    f"'{ref}' which is not an earlier question"
                )
        seen.append(question.id)


for _kind, _flow in FLOWS.items():
    check_flow(_kind, _flow)


def get_flow(kind: PlanKind) -> Tuple[QuestionSpec, ...]:
    """Get the ordered question catalog for a plan kind."""
    return FLOWS[PlanKind(kind)]


def get_plan_option(kind: PlanKind) -> PlanOption:
    """Get the display preset (emoji, default name) for a plan kind."""
    kind = PlanKind(kind)
    for option in PLAN_OPTIONS:
        if option.kind is kind:
            return option
    raise ValueError(f"No plan option for kind '{kind}'")


def find_question(question_id: str, kind: Optional[PlanKind] = None) -> Optional[QuestionSpec]:
    """Look a question up by id, within one flow or across all flows."""
    flows = [get_flow(kind)] if kind is not None else FLOWS.values()
    for flow in flows:
        for question in flow:
            if question.id == question_id:
                return question
    return None


def is_visible(spec: QuestionSpec, answers) -> bool:
    """
    Decide whether a question is shown given the answers so far.

    A question without a visibility condition is always shown. Otherwise the
    referenced answer must exist and its value must be one of the accepted
    values; a missing answer hides the question.
    """
    condition = spec.visibility_condition
    if condition is None:
        return True
    answer = answers.get(condition.question_id)
    if answer is None:
        return False
    return answer.value in condition.accepted_values


def resolve_bound(spec: QuestionSpec, which: str, answers) -> float:
    """
    Resolve the min or max bound of a numeric question.

    Args:
        spec: Question to resolve
        which: "min" or "max"
        answers: Answer store holding the answers so far

    Returns:
        The fixed bound, the referenced answer's value for a dynamic bound,
        or DYNAMIC_BOUND_SENTINEL when the reference is unanswered
    """
    if which not in ("min", "max"):
        raise ValueError(f"which must be 'min' or 'max', got {which!r}")
    bound = spec.min if which == "min" else spec.max
    if bound is None:
        return 0 if which == "min" else DYNAMIC_BOUND_SENTINEL
    if isinstance(bound, DynamicBound):
        value = answers.numeric(bound.ref)
        return DYNAMIC_BOUND_SENTINEL if value is None else value
    return bound
