"""
Loan Amortization Calculations

Implements the fixed-installment payment (Excel's PMT), single-figure
financing quotes, and SAC / PRICE amortization schedules as used by
Brazilian lenders.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional, Union

from dateutil.relativedelta import relativedelta

from app.calculations.formatting import round_money
from app.calculations.validation import (
    growth_factor,
    require_finite_result,
    require_non_negative,
    require_positive,
    require_positive_int,
)
from app.exceptions import InvalidInputError

FINANCING_FORMULA = "PMT = PV × [(i × (1+i)^n) / ((1+i)^n - 1)]"

# Rows reported by a summarized schedule: the first few and the last one
SUMMARY_LEADING_ROWS = 3

MAX_TERM_YEARS = 100


class AmortizationSystem(str, Enum):
    """Amortization conventions."""

    SAC = "SAC"  # constant amortization, decreasing payments
    PRICE = "PRICE"  # constant payment (French system)


@dataclass(frozen=True)
class FinancingResult:
    principal: float
    rate: float  # percent per installment period
    installment_count: int
    installment_amount: float
    total_paid: float
    total_interest: float
    formula: str = FINANCING_FORMULA


@dataclass(frozen=True)
class AmortizationRow:
    """One installment, at full precision (round when presenting)."""

    installment: int
    payment: float
    amortization: float
    interest: float
    remaining_balance: float
    due_date: Optional[date] = None


@dataclass(frozen=True)
class AmortizationSchedule:
    convention: AmortizationSystem
    principal: float
    annual_rate: float  # decimal
    term_years: float
    total_months: int
    first_payment: float
    last_payment: float
    total_interest: float
    total_paid: float
    rows: List[AmortizationRow]


def calculate_payment(principal: float, period_rate: float, periods: int) -> float:
    """
    Calculate the fixed installment of an amortized loan.

    Matches Excel's PMT() function (as a positive number).

    Args:
        principal: Loan principal amount
        period_rate: Interest rate per period as decimal (e.g., 0.01 for 1%)
        periods: Number of installments

    Returns:
        Installment amount
    """
    if principal <= 0:
        return 0.0
    if periods <= 0:
        return 0.0

    # The annuity formula divides by zero here
    if period_rate == 0:
        return principal / periods

    growth = growth_factor(period_rate, periods, "parcelas")
    if growth == 1:
        # Rate too small to register in 1 + rate
        return principal / periods
    return require_finite_result(principal * (period_rate * growth) / (growth - 1), "valor")


def calculate_financing(
    principal: float, rate_percent: float, installment_count: int
) -> FinancingResult:
    """
    Quote a fixed-installment financing.

    Args:
        principal: Amount financed
        rate_percent: Interest rate per installment period as a percentage
        installment_count: Number of installments

    Returns:
        FinancingResult with money fields rounded to cents
    """
    principal = require_positive(principal, "valor")
    rate_percent = require_non_negative(rate_percent, "taxa")
    installment_count = require_positive_int(installment_count, "parcelas")

    installment = calculate_payment(principal, rate_percent / 100, installment_count)
    total_paid = require_finite_result(installment * installment_count, "valor")
    total_interest = total_paid - principal

    return FinancingResult(
        principal=principal,
        rate=rate_percent,
        installment_count=installment_count,
        installment_amount=round_money(installment),
        total_paid=round_money(total_paid),
        total_interest=round_money(total_interest),
    )


def _resolve_system(convention: Union[str, AmortizationSystem]) -> AmortizationSystem:
    if isinstance(convention, AmortizationSystem):
        return convention
    try:
        return AmortizationSystem(str(convention).strip().upper())
    except ValueError:
        raise InvalidInputError(
            f"Sistema de amortização inválido: {convention} (use SAC ou PRICE)",
            field="sistema",
        )


def generate_amortization_schedule(
    principal: float,
    annual_rate: float,
    term_years: float,
    convention: Union[str, AmortizationSystem] = AmortizationSystem.PRICE,
    start_date: Optional[date] = None,
    summarize: bool = True,
) -> AmortizationSchedule:
    """
    Generate a monthly SAC or PRICE amortization schedule.

    Every period is computed so totals are exact; with ``summarize`` only the
    first three rows and the final row are kept in ``rows``.

    Args:
        principal: Amount financed
        annual_rate: Annual interest rate as decimal (0.12 = 12% a year,
            charged as 1% a month)
        term_years: Loan term in years
        convention: "SAC" or "PRICE"
        start_date: Due date of the first installment (rows get no date
            when omitted)
        summarize: Keep only the leading and final rows

    Returns:
        AmortizationSchedule
    """
    system = _resolve_system(convention)
    principal = require_positive(principal, "valor")
    annual_rate = require_non_negative(annual_rate, "taxa")
    term_years = require_positive(term_years, "prazo")
    if term_years > MAX_TERM_YEARS:
        raise InvalidInputError(
            f"prazo máximo é de {MAX_TERM_YEARS} anos", field="prazo"
        )

    total_months = int(round(term_years * 12))
    if total_months < 1:
        raise InvalidInputError("prazo deve ter ao menos um mês", field="prazo")

    monthly_rate = annual_rate / 12
    fixed_payment = calculate_payment(principal, monthly_rate, total_months)
    fixed_amortization = principal / total_months

    balance = principal
    total_interest = 0.0
    first_payment = 0.0
    last_payment = 0.0
    rows = []

    for period in range(1, total_months + 1):
        interest = balance * monthly_rate

        if system is AmortizationSystem.SAC:
            amortization = fixed_amortization
            payment = amortization + interest
        else:
            payment = fixed_payment
            amortization = payment - interest

        balance -= amortization
        total_interest += interest

        if period == 1:
            first_payment = payment
        if period == total_months:
            last_payment = payment

        if not summarize or period <= SUMMARY_LEADING_ROWS or period == total_months:
            due_date = None
            if start_date is not None:
                due_date = start_date + relativedelta(months=period - 1)
            rows.append(
                AmortizationRow(
                    installment=period,
                    payment=payment,
                    amortization=amortization,
                    interest=interest,
                    remaining_balance=max(0.0, balance),
                    due_date=due_date,
                )
            )

    total_paid = require_finite_result(principal + total_interest, "valor")

    return AmortizationSchedule(
        convention=system,
        principal=principal,
        annual_rate=annual_rate,
        term_years=term_years,
        total_months=total_months,
        first_payment=round_money(first_payment),
        last_payment=round_money(last_payment),
        total_interest=round_money(total_interest),
        total_paid=round_money(total_paid),
        rows=rows,
    )

