"""
Projection Module Configuration

Economic assumptions and answer defaults used by the projection engine.
"""

from typing import Dict

# =============================================================================
# ECONOMIC ASSUMPTIONS
# =============================================================================

INFLATION_RATE = 0.03
NOMINAL_RETURN = 0.07
REAL_RETURN = NOMINAL_RETURN - INFLATION_RATE

SAFE_WITHDRAWAL_RATE = 0.04          # 4% rule
SPENDING_BAND = (0.8, 1.2)           # +-20% around the safe withdrawal

# =============================================================================
# ANSWER DEFAULTS (used when a question is unanswered)
# =============================================================================

ANSWER_DEFAULTS: Dict[str, float] = {
    "monthly_income": 30000,
    "monthly_expenses": 20000,
    "current_age": 30,
    "retirement_age": 60,
    "expected_lifespan": 80,
}

DEFAULT_RISK_TOLERANCE = "moderate"
DEFAULT_EXISTING_SAVINGS = 0

# Question ids holding existing savings, preferred first
RETIREMENT_SAVINGS_FIELDS = ("retirement_savings_manual", "retirement_savings")
GENERAL_SAVINGS_FIELDS = ("current_savings_manual", "current_savings")

# =============================================================================
# WHAT-IF CALCULATOR
# =============================================================================

# Extra monthly saving tried when the caller does not pick one
DEFAULT_EXTRA_SAVING = 1000
