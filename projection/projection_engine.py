# projection/projection_engine.py
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

import numpy as np
import pandas as pd

from state import Answer, FinancialSnapshot, PlanKind
from plan.answer_store import AnswerStore
from projection.config import (
    ANSWER_DEFAULTS,
    DEFAULT_EXISTING_SAVINGS,
    DEFAULT_EXTRA_SAVING,
    DEFAULT_RISK_TOLERANCE,
    GENERAL_SAVINGS_FIELDS,
    INFLATION_RATE,
    NOMINAL_RETURN,
    RETIREMENT_SAVINGS_FIELDS,
    SAFE_WITHDRAWAL_RATE,
    SPENDING_BAND,
)

AnswersLike = Union[AnswerStore, Iterable[Answer]]


def round_money(value: float) -> int:
    """Round half up to a whole currency unit."""
    return int(math.floor(value + 0.5))


def _as_store(answers: AnswersLike) -> AnswerStore:
    return answers if isinstance(answers, AnswerStore) else AnswerStore(answers)


def _existing_savings(answers: AnswerStore, fields: Tuple[str, str]) -> float:
    """
    Savings already put aside, from a bracket question and its manual override.

    The manual field wins while the bracket question is answered "manual" (or
    not answered at all); once a numeric bracket is picked, a leftover manual
    answer from before is ignored.
    """
    manual_field, bracket_field = fields
    bracket = answers.value(bracket_field)
    manual = answers.numeric(manual_field)
    if manual is not None and (bracket is None or bracket == "manual"):
        return manual
    bracket_value = answers.numeric(bracket_field)
    if bracket_value is not None:
        return bracket_value
    return DEFAULT_EXISTING_SAVINGS


@dataclass(frozen=True)
class ProjectionInputs:
    """Guarded inputs of a projection, before any growth math."""
    monthly_income: float
    monthly_expenses: float
    monthly_savings: float
    current_age: float
    retirement_age: float
    years_to_retire: float
    years_in_retirement: float
    existing_savings: float
    retirement_monthly_expense: float
    risk_tolerance: str

    @property
    def annual_savings(self) -> float:
        return self.monthly_savings * 12


def resolve_inputs(plan_kind: PlanKind, answers: AnswersLike) -> ProjectionInputs:
    """
    Read and guard the projection inputs from a plan's answers.

    All stored answers are read, including answers to questions that are
    currently hidden by a visibility condition.
    """
    store = _as_store(answers)
    plan_kind = PlanKind(plan_kind)

    monthly_income = store.numeric("monthly_income", ANSWER_DEFAULTS["monthly_income"])
    raw_expenses = store.numeric("monthly_expenses", ANSWER_DEFAULTS["monthly_expenses"])
    monthly_expenses = min(raw_expenses, monthly_income)
    monthly_savings = max(0, monthly_income - monthly_expenses)

    # Ages count whole years so the snapshot and the yearly schedule share one horizon
    current_age = math.floor(store.numeric("current_age", ANSWER_DEFAULTS["current_age"]))
    raw_retirement_age = math.floor(store.numeric("retirement_age", ANSWER_DEFAULTS["retirement_age"]))
    retirement_age = max(current_age + 1, raw_retirement_age)
    expected_lifespan = math.floor(store.numeric("expected_lifespan", ANSWER_DEFAULTS["expected_lifespan"]))

    if plan_kind is PlanKind.RETIREMENT:
        existing_savings = _existing_savings(store, RETIREMENT_SAVINGS_FIELDS)
        retirement_monthly_expense = store.numeric("retirement_monthly_expense", monthly_expenses)
    else:
        existing_savings = _existing_savings(store, GENERAL_SAVINGS_FIELDS)
        retirement_monthly_expense = monthly_expenses

    return ProjectionInputs(
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        monthly_savings=monthly_savings,
        current_age=current_age,
        retirement_age=retirement_age,
        years_to_retire=retirement_age - current_age,
        years_in_retirement=max(1, expected_lifespan - retirement_age),
        existing_savings=existing_savings,
        retirement_monthly_expense=retirement_monthly_expense,
        risk_tolerance=store.text("risk_tolerance", DEFAULT_RISK_TOLERANCE),
    )


def contributions_future_value(annual_savings: float, years: float, real_return: float) -> float:
    """Future value of yearly contributions; straight line when the rate or horizon is zero."""
    if years > 0 and real_return != 0:
        return annual_savings * ((1 + real_return) ** years - 1) / real_return
    return annual_savings * years


def compute_snapshot(
    plan_kind: PlanKind,
    answers: AnswersLike,
    nominal_return: float = NOMINAL_RETURN,
    inflation_rate: float = INFLATION_RATE,
) -> FinancialSnapshot:
    """
    Derive the financial snapshot of a plan from its answers.

    Pure function: the same answers always give the same snapshot. Money is
    kept in floating point until the end and rounded half up only when the
    snapshot is built.

    Args:
        plan_kind: Kind of the plan the answers belong to
        answers: AnswerStore or iterable of Answer
        nominal_return: Yearly return on existing savings
        inflation_rate: Yearly inflation

    Returns:
        FinancialSnapshot
    """
    inputs = resolve_inputs(plan_kind, answers)
    real_return = nominal_return - inflation_rate
    years = inputs.years_to_retire

    savings_rate = (
        inputs.monthly_savings / inputs.monthly_income * 100 if inputs.monthly_income > 0 else 0.0
    )

    fv_existing = inputs.existing_savings * (1 + nominal_return) ** years
    fv_contributions = contributions_future_value(inputs.annual_savings, years, real_return)
    retirement_fund = fv_existing + fv_contributions
    inflation_adjusted = retirement_fund / (1 + inflation_rate) ** years

    retirement_needed = inputs.retirement_monthly_expense * 12 * inputs.years_in_retirement

    safe_withdrawal = inflation_adjusted * SAFE_WITHDRAWAL_RATE
    low, high = SPENDING_BAND

    return FinancialSnapshot(
        monthly_income=round_money(inputs.monthly_income),
        monthly_expenses=round_money(inputs.monthly_expenses),
        monthly_savings=round_money(inputs.monthly_savings),
        annual_savings=round_money(inputs.annual_savings),
        savings_rate=savings_rate,
        current_age=round_money(inputs.current_age),
        retirement_age=round_money(inputs.retirement_age),
        years_to_retire=round_money(years),
        existing_savings=round_money(inputs.existing_savings),
        retirement_fund=round_money(retirement_fund),
        inflation_adjusted=round_money(inflation_adjusted),
        retirement_needed=round_money(retirement_needed),
        retirement_monthly_expense=round_money(inputs.retirement_monthly_expense),
        years_in_retirement=round_money(inputs.years_in_retirement),
        risk_tolerance=inputs.risk_tolerance,
        safe_spending_range=(
            round_money(safe_withdrawal * low / 12),
            round_money(safe_withdrawal * high / 12),
        ),
    )


def projection_schedule(
    plan_kind: PlanKind,
    answers: AnswersLike,
    nominal_return: float = NOMINAL_RETURN,
    inflation_rate: float = INFLATION_RATE,
) -> pd.DataFrame:
    """
    Year-by-year growth of a plan up to retirement.

    Uses the same formulas as compute_snapshot, so the last row's total
    matches the snapshot's retirement fund.

    Returns:
        DataFrame indexed by year (0 = today) with columns age, existing,
        contributions, total and inflation_adjusted
    """
    inputs = resolve_inputs(plan_kind, answers)
    real_return = nominal_return - inflation_rate
    horizon = int(inputs.years_to_retire)

    years = np.arange(horizon + 1, dtype=float)
    existing = inputs.existing_savings * np.power(1 + nominal_return, years)
    if real_return != 0:
        contributions = inputs.annual_savings * (np.power(1 + real_return, years) - 1) / real_return
    else:
        contributions = inputs.annual_savings * years
    total = existing + contributions
    inflation_adjusted = total / np.power(1 + inflation_rate, years)

    df = pd.DataFrame({
        "age": inputs.current_age + years,
        "existing": existing,
        "contributions": contributions,
        "total": total,
        "inflation_adjusted": inflation_adjusted,
    }, index=pd.Index(years.astype(int), name="year"))
    money = ["existing", "contributions", "total", "inflation_adjusted"]
    df[money] = np.floor(df[money] + 0.5).astype(int)
    df["age"] = df["age"].astype(int)
    return df


@dataclass(frozen=True)
class WhatIfResult:
    """Outcome of a what-if run next to the plan's own projection."""
    monthly_savings: int
    savings_rate: float
    years_to_retire: int
    retirement_fund: int
    inflation_adjusted: int
    safe_monthly_spending: int
    baseline_fund: int
    fund_difference: int
    months_difference: int


def what_if(
    plan_kind: PlanKind,
    answers: AnswersLike,
    monthly_income: Optional[float] = None,
    monthly_expenses: Optional[float] = None,
    current_age: Optional[int] = None,
    retirement_age: Optional[int] = None,
    extra_saving: float = DEFAULT_EXTRA_SAVING,
    nominal_return: float = NOMINAL_RETURN,
    inflation_rate: float = INFLATION_RATE,
) -> WhatIfResult:
    """
    Re-run a plan's projection with some inputs overridden.

    Inputs left as None keep the plan's own (guarded) values. Expenses are
    clamped to income and the retirement age is kept at least one year past
    the current age, as in compute_snapshot. The extra saving is added on top
    of what the budget already leaves over.

    Returns:
        WhatIfResult with the new fund, its difference to the plan's fund and
        that difference expressed in months of the new saving rate
    """
    if extra_saving < 0:
        raise ValueError(f"extra_saving must not be negative, got {extra_saving}")
    inputs = resolve_inputs(plan_kind, answers)
    baseline = compute_snapshot(plan_kind, answers, nominal_return, inflation_rate)

    income = inputs.monthly_income if monthly_income is None else max(0, monthly_income)
    expenses = inputs.monthly_expenses if monthly_expenses is None else max(0, monthly_expenses)
    expenses = min(expenses, income)
    monthly_savings = max(0, income - expenses + extra_saving)

    age = inputs.current_age if current_age is None else math.floor(current_age)
    target_age = inputs.retirement_age if retirement_age is None else math.floor(retirement_age)
    target_age = max(age + 1, target_age)
    years = target_age - age

    real_return = nominal_return - inflation_rate
    fund = (
        inputs.existing_savings * (1 + nominal_return) ** years
        + contributions_future_value(monthly_savings * 12, years, real_return)
    )
    inflation_adjusted = fund / (1 + inflation_rate) ** years

    difference = round_money(fund) - baseline.retirement_fund
    months = round_money(difference / (monthly_savings or 1)) if baseline.retirement_fund > 0 else 0

    return WhatIfResult(
        monthly_savings=round_money(monthly_savings),
        savings_rate=monthly_savings / income * 100 if income > 0 else 0.0,
        years_to_retire=years,
        retirement_fund=round_money(fund),
        inflation_adjusted=round_money(inflation_adjusted),
        safe_monthly_spending=round_money(inflation_adjusted * SAFE_WITHDRAWAL_RATE / 12),
        baseline_fund=baseline.retirement_fund,
        fund_difference=difference,
        months_difference=months,
    )
