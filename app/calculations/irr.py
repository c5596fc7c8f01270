"""
NPV and IRR Calculations

Net present value of an investment followed by periodic cash flows, and an
internal rate of return estimate with a fixed tolerance and iteration cap.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from app.calculations.validation import require_finite_result, require_number
from app.exceptions import InvalidInputError

MAX_ITERATIONS = 100
NPV_TOLERANCE = 0.01
DEFAULT_GUESS = 0.1
STEP = 0.001
DERIVATIVE_EPSILON = 1e-10


@dataclass(frozen=True)
class IRREstimate:
    """
    Result of an IRR search.

    ``converged`` is False when the iteration cap was hit before |NPV| fell
    under the tolerance; ``rate`` is then the last rate tried.
    """

    rate: float
    iterations: int
    converged: bool


@dataclass(frozen=True)
class NPVResult:
    initial_investment: float
    cash_flows: List[float]
    discount_rate: float
    npv: float
    is_viable: bool
    estimated_irr: Optional[float]


def _validate_flows(cash_flows: Sequence[float]) -> List[float]:
    if cash_flows is None:
        raise InvalidInputError("fluxos de caixa são obrigatórios", field="fluxos")
    return [require_number(cf, f"fluxos[{i}]") for i, cf in enumerate(cash_flows)]


def npv_at(initial_investment: float, cash_flows: Sequence[float], rate: float) -> float:
    """NPV with the investment at t=0 and the first flow at t=1."""
    npv = -initial_investment
    for period, cf in enumerate(cash_flows, start=1):
        npv += cf * (1 + rate) ** -period
    return npv


def _npv_derivative(cash_flows: Sequence[float], rate: float) -> float:
    """Derivative of NPV with respect to rate (for Newton-Raphson)."""
    dnpv = 0.0
    for period, cf in enumerate(cash_flows, start=1):
        dnpv -= period * cf * (1 + rate) ** -(period + 1)
    return dnpv


def _step_search(initial_investment: float, cash_flows: Sequence[float]) -> IRREstimate:
    """
    Fixed-step search: move the rate 0.001 towards the sign of NPV.

    Cheap and predictable, but it only covers 10% ± 10 points in 100 steps,
    so it cannot reach rates far from the starting guess.
    """
    rate = DEFAULT_GUESS
    iterations = 0
    try:
        while iterations < MAX_ITERATIONS:
            npv = npv_at(initial_investment, cash_flows, rate)
            if abs(npv) < NPV_TOLERANCE:
                break
            rate += STEP if npv > 0 else -STEP
            iterations += 1

        converged = abs(npv_at(initial_investment, cash_flows, rate)) < NPV_TOLERANCE
    except OverflowError:
        raise InvalidInputError(
            "fluxos de caixa grandes demais para calcular", field="fluxos"
        )
    return IRREstimate(rate=rate, iterations=iterations, converged=converged)


def _newton_search(initial_investment: float, cash_flows: Sequence[float]) -> IRREstimate:
    rate = DEFAULT_GUESS

    for iteration in range(MAX_ITERATIONS):
        try:
            npv = npv_at(initial_investment, cash_flows, rate)
            dnpv = _npv_derivative(cash_flows, rate)
        except (ZeroDivisionError, OverflowError):
            return _step_search(initial_investment, cash_flows)

        if abs(npv) < NPV_TOLERANCE:
            return IRREstimate(rate=rate, iterations=iteration, converged=True)

        if abs(dnpv) < DERIVATIVE_EPSILON:
            return _step_search(initial_investment, cash_flows)

        new_rate = rate - npv / dnpv
        if not math.isfinite(new_rate):
            return _step_search(initial_investment, cash_flows)
        if new_rate <= -1:
            # Stay inside the domain of (1 + r)^-t
            new_rate = (rate - 1) / 2
        rate = new_rate

    try:
        converged = abs(npv_at(initial_investment, cash_flows, rate)) < NPV_TOLERANCE
    except (ZeroDivisionError, OverflowError):
        converged = False
    return IRREstimate(rate=rate, iterations=MAX_ITERATIONS, converged=converged)


def estimate_irr(
    initial_investment: float,
    cash_flows: Sequence[float],
    method: str = "newton",
) -> IRREstimate:
    """
    Estimate the IRR of an investment.

    Both methods start at 10%, stop once |NPV| < 0.01 and give up after 100
    iterations without raising. "newton" uses Newton-Raphson (falling back
    to the step search on a flat derivative); "step" moves the rate by a
    fixed 0.001 per iteration.

    Args:
        initial_investment: Amount invested at t=0 (positive number)
        cash_flows: Flows for periods 1..N
        method: "newton" or "step"

    Returns:
        IRREstimate (rate as decimal)
    """
    initial_investment = require_number(initial_investment, "investimento")
    flows = _validate_flows(cash_flows)
    if not flows:
        raise InvalidInputError("Informe ao menos um fluxo de caixa", field="fluxos")

    if method == "newton":
        return _newton_search(initial_investment, flows)
    if method == "step":
        return _step_search(initial_investment, flows)
    raise InvalidInputError(f"Método de TIR desconhecido: {method}", field="metodo")


def calculate_npv(
    initial_investment: float,
    cash_flows: Sequence[float],
    discount_rate: float,
) -> NPVResult:
    """
    Calculate NPV (Net Present Value) and estimate IRR.

    Args:
        initial_investment: Amount invested at t=0 (positive number)
        cash_flows: Flows for periods 1..N
        discount_rate: Discount rate per period as decimal (0.10 = 10%)

    Returns:
        NPVResult; the project is viable when NPV > 0
    """
    initial_investment = require_number(initial_investment, "investimento")
    discount_rate = require_number(discount_rate, "taxa")
    flows = _validate_flows(cash_flows)

    if discount_rate <= -1:
        raise InvalidInputError("taxa deve ser maior que -100%", field="taxa")

    try:
        npv = npv_at(initial_investment, flows, discount_rate)
    except OverflowError:
        raise InvalidInputError("taxa: valores grandes demais para calcular", field="taxa")
    require_finite_result(npv, "fluxos")
    irr = estimate_irr(initial_investment, flows).rate if flows else None

    return NPVResult(
        initial_investment=initial_investment,
        cash_flows=flows,
        discount_rate=discount_rate,
        npv=npv,
        is_viable=npv > 0,
        estimated_irr=irr,
    )
