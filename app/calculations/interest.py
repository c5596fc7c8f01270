"""
Interest, Inflation and Growth Calculations

Simple and compound interest, purchasing-power erosion, the rule of 72 and
side-by-side comparison of fixed-rate investments.

Rates named ``*_percent`` are percentages (5 means 5%). Other rates are
decimals (0.05 means 5%).
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence

from app.calculations.formatting import round_money
from app.calculations.validation import (
    growth_factor,
    require_finite_result,
    require_non_negative,
    require_number,
    require_positive,
)
from app.exceptions import InvalidInputError

SIMPLE_INTEREST_FORMULA = "J = C × i × t"
COMPOUND_INTEREST_FORMULA = "M = C × (1 + i)^t"


@dataclass(frozen=True)
class SimpleInterestResult:
    capital: float
    rate: float  # percent per period
    periods: float
    interest: float
    final_amount: float
    formula: str = SIMPLE_INTEREST_FORMULA


@dataclass(frozen=True)
class CompoundInterestResult:
    capital: float
    rate: float  # percent per period
    periods: float
    interest: float
    final_amount: float
    rentability: float  # percent growth over the whole term
    formula: str = COMPOUND_INTEREST_FORMULA


@dataclass(frozen=True)
class InflationImpact:
    current_value: float
    annual_inflation_rate: float  # percent
    years: float
    future_value: float
    purchasing_power_loss: float
    loss_percent: float


@dataclass(frozen=True)
class DoublingTime:
    """
    Rule-of-72 estimate.

    72 / rate% is a heuristic, not the exact solution of (1 + r)^t = 2. It is
    closest for rates around 8% a year and drifts further away outside it.
    """

    annual_rate: float  # decimal
    years_to_double: float
    months_to_double: float


@dataclass(frozen=True)
class RankedInvestment:
    name: str
    principal: float
    rate: float  # decimal per period
    periods: float
    final_amount: float
    interest: float
    rentability: float  # percent


@dataclass(frozen=True)
class InvestmentComparison:
    investments: List[RankedInvestment]
    best: RankedInvestment
    worst: RankedInvestment


def calculate_simple_interest(
    capital: float, rate_percent: float, periods: float
) -> SimpleInterestResult:
    """
    Calculate simple interest.

    Args:
        capital: Principal amount
        rate_percent: Interest rate per period as a percentage (5 = 5%)
        periods: Number of periods

    Returns:
        SimpleInterestResult with money fields rounded to cents

    Raises:
        InvalidInputError: If an argument is missing or not numeric
    """
    capital = require_number(capital, "capital")
    rate_percent = require_number(rate_percent, "taxa")
    periods = require_non_negative(periods, "tempo")

    interest = require_finite_result(capital * (rate_percent / 100) * periods, "juros")
    final_amount = require_finite_result(capital + interest, "montante")

    return SimpleInterestResult(
        capital=capital,
        rate=rate_percent,
        periods=periods,
        interest=round_money(interest),
        final_amount=round_money(final_amount),
    )


def _compound(capital: float, rate: float, periods: float) -> float:
    amount = capital * growth_factor(rate, periods, "tempo")
    return require_finite_result(amount, "montante")


def calculate_compound_interest(
    capital: float, rate_percent: float, periods: float
) -> CompoundInterestResult:
    """
    Calculate compound interest.

    Args:
        capital: Principal amount
        rate_percent: Interest rate per period as a percentage (1 = 1%)
        periods: Number of compounding periods

    Returns:
        CompoundInterestResult with money fields rounded to cents
    """
    capital = require_number(capital, "capital")
    rate_percent = require_number(rate_percent, "taxa")
    periods = require_non_negative(periods, "tempo")

    if rate_percent <= -100:
        raise InvalidInputError("taxa deve ser maior que -100%", field="taxa")

    final_amount = _compound(capital, rate_percent / 100, periods)
    interest = final_amount - capital
    rentability = (interest / capital) * 100 if capital else 0.0
    require_finite_result(rentability, "rentabilidade")

    return CompoundInterestResult(
        capital=capital,
        rate=rate_percent,
        periods=periods,
        interest=round_money(interest),
        final_amount=round_money(final_amount),
        rentability=round_money(rentability),
    )


def calculate_inflation_impact(
    current_value: float, annual_inflation_percent: float, years: float
) -> InflationImpact:
    """
    Calculate how much purchasing power a value loses to inflation.

    future_value is what today's amount will be worth, in today's money,
    after `years` of inflation at the given annual percentage.
    """
    current_value = require_number(current_value, "valor")
    annual_inflation_percent = require_number(annual_inflation_percent, "inflacao")
    years = require_non_negative(years, "anos")

    if annual_inflation_percent <= -100:
        raise InvalidInputError("inflacao deve ser maior que -100%", field="inflacao")

    discount = growth_factor(annual_inflation_percent / 100, -years, "anos")
    future_value = require_finite_result(current_value * discount, "valor")
    loss = require_finite_result(current_value - future_value, "valor")
    loss_percent = (loss / current_value) * 100 if current_value else 0.0
    require_finite_result(loss_percent, "inflacao")

    return InflationImpact(
        current_value=current_value,
        annual_inflation_rate=annual_inflation_percent,
        years=years,
        future_value=round_money(future_value),
        purchasing_power_loss=round_money(loss),
        loss_percent=round_money(loss_percent),
    )


def calculate_doubling_time(annual_rate: float) -> DoublingTime:
    """Estimate years to double an investment with the rule of 72."""
    annual_rate = require_number(annual_rate, "taxa")
    if annual_rate == 0:
        raise InvalidInputError("taxa deve ser diferente de zero", field="taxa")

    years = require_finite_result(72 / (annual_rate * 100), "taxa")
    require_finite_result(years * 12, "taxa")

    return DoublingTime(
        annual_rate=annual_rate,
        years_to_double=years,
        months_to_double=years * 12,
    )


def compare_investments(investments: Sequence[Dict]) -> InvestmentComparison:
    """
    Rank fixed-rate investments by compound rentability.

    Args:
        investments: Items with ``name``, ``principal``, ``rate`` (decimal
            per period) and ``periods``

    Returns:
        InvestmentComparison sorted by rentability, highest first. Ties keep
        their input order.
    """
    if not investments:
        raise InvalidInputError("Informe ao menos um investimento", field="investimentos")

    ranked = []
    for index, item in enumerate(investments):
        name = item.get("name") or f"Investimento {index + 1}"
        principal = require_positive(item.get("principal"), "principal")
        rate = require_number(item.get("rate"), "rate")
        periods = require_non_negative(item.get("periods"), "periods")
        if rate <= -1:
            raise InvalidInputError("rate deve ser maior que -100%", field="rate")

        final_amount = _compound(principal, rate, periods)
        interest = final_amount - principal
        rentability = require_finite_result((interest / principal) * 100, "rate")
        ranked.append(
            RankedInvestment(
                name=name,
                principal=principal,
                rate=rate,
                periods=periods,
                final_amount=round_money(final_amount),
                interest=round_money(interest),
                rentability=rentability,
            )
        )

    # sorted() is stable
    ranked = sorted(ranked, key=lambda inv: inv.rentability, reverse=True)

    return InvestmentComparison(
        investments=ranked,
        best=ranked[0],
        worst=ranked[-1],
    )
