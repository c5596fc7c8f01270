"""
Retirement Planning

Sizes the nest egg needed to fund a monthly spending target and the monthly
contribution that reaches it.
"""

from dataclasses import dataclass

from app.calculations.formatting import round_money
from app.calculations.validation import (
    growth_factor,
    require_finite_result,
    require_number,
    require_positive,
)
from app.exceptions import InvalidInputError

# Capital is sized for a 4% yearly withdrawal, independent of the expected
# return used for the accumulation phase
SAFE_WITHDRAWAL_RATE = 0.04
DEFAULT_ANNUAL_RETURN = 0.10


@dataclass(frozen=True)
class RetirementPlan:
    current_age: float
    retirement_age: float
    years_to_retirement: float
    monthly_need: float
    required_capital: float
    required_monthly_contribution: float
    annual_return_rate: float  # decimal


def calculate_retirement_plan(
    current_age: float,
    retirement_age: float,
    monthly_need: float,
    annual_return_rate: float = DEFAULT_ANNUAL_RETURN,
) -> RetirementPlan:
    """
    Calculate the capital and monthly saving needed to retire.

    required_capital = monthly_need * 12 / 4%; the contribution comes from
    the future value of an annuity at annual_return_rate / 12 per month.

    Args:
        current_age: Age today, in years
        retirement_age: Target retirement age, in years
        monthly_need: Desired monthly spending in retirement
        annual_return_rate: Expected annual return as decimal (default 10%)

    Returns:
        RetirementPlan
    """
    current_age = require_number(current_age, "idade_atual")
    retirement_age = require_number(retirement_age, "idade_aposentadoria")
    monthly_need = require_positive(monthly_need, "gasto_mensal")
    annual_return_rate = require_number(annual_return_rate, "taxa")

    if current_age < 0:
        raise InvalidInputError("idade_atual não pode ser negativa", field="idade_atual")
    if retirement_age <= current_age:
        raise InvalidInputError(
            "idade_aposentadoria deve ser maior que idade_atual",
            field="idade_aposentadoria",
        )
    if annual_return_rate <= -1:
        raise InvalidInputError("taxa deve ser maior que -100%", field="taxa")

    years = retirement_age - current_age
    months = years * 12
    monthly_rate = annual_return_rate / 12

    required_capital = require_finite_result(
        monthly_need * 12 / SAFE_WITHDRAWAL_RATE, "gasto_mensal"
    )

    growth = growth_factor(monthly_rate, months, "idade_aposentadoria")
    if monthly_rate == 0 or growth == 1:
        contribution = required_capital / months
    else:
        annuity_factor = (growth - 1) / monthly_rate
        contribution = required_capital / annuity_factor

    return RetirementPlan(
        current_age=current_age,
        retirement_age=retirement_age,
        years_to_retirement=years,
        monthly_need=monthly_need,
        required_capital=round_money(required_capital),
        required_monthly_contribution=round_money(contribution),
        annual_return_rate=annual_return_rate,
    )
