"""
Financial calculation API endpoints.

``/calculo/{tipo}`` is the loose, chat-style calculator that takes a JSON
object of named numbers. The ``/calculate/*`` endpoints are typed.
"""

from dataclasses import asdict
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException
from pydantic import BaseModel, Field

from app.calculations import amortization, interest, irr, retirement
from app.calculations.formatting import format_currency, round_money
from app.exceptions import InvalidInputError, UnsupportedOperationError

router = APIRouter()

# Canonical kind -> accepted aliases
KIND_ALIASES = {
    "juros-simples": "juros-simples",
    "simple-interest": "juros-simples",
    "juros-compostos": "juros-compostos",
    "compound-interest": "juros-compostos",
    "financiamento": "financiamento",
    "financing": "financiamento",
}
SUPPORTED_KINDS = ["juros-simples", "juros-compostos", "financiamento"]

EXAMPLES = {
    "juros-simples": {"capital": 1000, "taxa": 5, "tempo": 12},
    "juros-compostos": {"capital": 1000, "taxa": 1, "tempo": 12},
    "financiamento": {"valor": 100000, "taxa": 1.5, "parcelas": 60},
}


def _simple_interest(dados: Dict[str, Any]) -> Dict[str, Any]:
    result = interest.calculate_simple_interest(
        dados.get("capital"), dados.get("taxa"), dados.get("tempo")
    )
    return {
        "capital": result.capital,
        "taxa": result.rate,
        "tempo": result.periods,
        "juros": result.interest,
        "montante": result.final_amount,
        "formula": result.formula,
    }


def _compound_interest(dados: Dict[str, Any]) -> Dict[str, Any]:
    result = interest.calculate_compound_interest(
        dados.get("capital"), dados.get("taxa"), dados.get("tempo")
    )
    return {
        "capital": result.capital,
        "taxa": result.rate,
        "tempo": result.periods,
        "juros": result.interest,
        "montante": result.final_amount,
        "rentabilidade": result.rentability,
        "formula": result.formula,
    }


def _financing(dados: Dict[str, Any]) -> Dict[str, Any]:
    result = amortization.calculate_financing(
        dados.get("valor"), dados.get("taxa"), dados.get("parcelas")
    )
    return {
        "valor_financiado": result.principal,
        "taxa_mensal": result.rate,
        "numero_parcelas": result.installment_count,
        "valor_prestacao": result.installment_amount,
        "total_pago": result.total_paid,
        "total_juros": result.total_interest,
        "formula": result.formula,
    }


CALCULATORS = {
    "juros-simples": _simple_interest,
    "juros-compostos": _compound_interest,
    "financiamento": _financing,
}


def resolve_kind(tipo: str) -> str:
    """Map a requested kind (Portuguese or English) to its canonical name."""
    kind = KIND_ALIASES.get(tipo.strip().lower())
    if kind is None:
        raise UnsupportedOperationError(tipo, SUPPORTED_KINDS)
    return kind


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.post("/calculo/{tipo}")
async def calculate_by_kind(tipo: str, dados: Optional[Dict[str, Any]] = Body(None)):
    """Run one of the chat calculators on a JSON object of named numbers."""
    dados = dados or {}
    try:
        kind = resolve_kind(tipo)
    except UnsupportedOperationError as e:
        raise HTTPException(
            status_code=400,
            detail={"error": str(e), "tipos_disponiveis": e.supported},
        )

    try:
        resultado = CALCULATORS[kind](dados)
    except InvalidInputError as e:
        raise HTTPException(
            status_code=400,
            detail={"error": str(e), "campo": e.field, "exemplo": EXAMPLES[kind]},
        )

    return {
        "tipo": kind,
        "dados": dados,
        "resultado": resultado,
        "timestamp": _timestamp(),
    }


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    principal: float
    annual_rate: float = Field(..., description="Annual rate as decimal (0.12 = 12%)")
    term_years: float
    system: str = "PRICE"
    start_date: Optional[date] = None
    full_schedule: bool = False


@router.post("/calculate/amortization")
async def calculate_amortization(inputs: AmortizationInput):
    """Generate a SAC or PRICE amortization schedule."""
    schedule = amortization.generate_amortization_schedule(
        principal=inputs.principal,
        annual_rate=inputs.annual_rate,
        term_years=inputs.term_years,
        convention=inputs.system,
        start_date=inputs.start_date,
        summarize=not inputs.full_schedule,
    )

    return {
        "system": schedule.convention.value,
        "principal": schedule.principal,
        "annual_rate": schedule.annual_rate,
        "term_years": schedule.term_years,
        "total_months": schedule.total_months,
        "first_payment": schedule.first_payment,
        "last_payment": schedule.last_payment,
        "total_interest": schedule.total_interest,
        "total_paid": schedule.total_paid,
        "schedule": [
            {
                "installment": row.installment,
                "due_date": row.due_date.isoformat() if row.due_date else None,
                "payment": round_money(row.payment),
                "amortization": round_money(row.amortization),
                "interest": round_money(row.interest),
                "remaining_balance": round_money(row.remaining_balance),
            }
            for row in schedule.rows
        ],
        "formatted": {
            "first_payment": format_currency(schedule.first_payment),
            "last_payment": format_currency(schedule.last_payment),
            "total_interest": format_currency(schedule.total_interest),
            "total_paid": format_currency(schedule.total_paid),
        },
    }


class InflationInput(BaseModel):
    current_value: float
    annual_inflation_rate: float = Field(..., description="Percent per year (4 = 4%)")
    years: float


@router.post("/calculate/inflation")
async def calculate_inflation(inputs: InflationInput):
    """Purchasing power lost to inflation."""
    result = interest.calculate_inflation_impact(
        inputs.current_value, inputs.annual_inflation_rate, inputs.years
    )
    return asdict(result)


class DoublingTimeInput(BaseModel):
    annual_rate: float = Field(..., description="Annual rate as decimal (0.08 = 8%)")


@router.post("/calculate/doubling-time")
async def calculate_doubling_time(inputs: DoublingTimeInput):
    """Rule-of-72 doubling time (an approximation)."""
    return asdict(interest.calculate_doubling_time(inputs.annual_rate))


class RetirementInput(BaseModel):
    current_age: float
    retirement_age: float
    monthly_need: float
    annual_return_rate: float = retirement.DEFAULT_ANNUAL_RETURN


@router.post("/calculate/retirement")
async def calculate_retirement(inputs: RetirementInput):
    """Capital and monthly contribution needed to retire."""
    plan = retirement.calculate_retirement_plan(
        inputs.current_age,
        inputs.retirement_age,
        inputs.monthly_need,
        inputs.annual_return_rate,
    )
    return asdict(plan)


class NPVInput(BaseModel):
    """Input for NPV calculation."""

    initial_investment: float
    cash_flows: List[float]
    discount_rate: float = Field(..., description="Per-period rate as decimal")


class NPVResponse(BaseModel):
    """Response with NPV calculation."""

    initial_investment: float
    cash_flows: List[float]
    discount_rate: float
    npv: float
    is_viable: bool
    estimated_irr: Optional[float] = None


@router.post("/calculate/npv", response_model=NPVResponse)
async def calculate_npv(inputs: NPVInput):
    """Net present value with an IRR estimate."""
    result = irr.calculate_npv(inputs.initial_investment, inputs.cash_flows, inputs.discount_rate)
    return NPVResponse(
        initial_investment=result.initial_investment,
        cash_flows=result.cash_flows,
        discount_rate=result.discount_rate,
        npv=round_money(result.npv),
        is_viable=result.is_viable,
        estimated_irr=result.estimated_irr,
    )


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    initial_investment: float
    cash_flows: List[float]
    method: str = "newton"


@router.post("/calculate/irr")
async def calculate_irr(inputs: IRRInput):
    """Estimate the internal rate of return."""
    return asdict(irr.estimate_irr(inputs.initial_investment, inputs.cash_flows, inputs.method))


class InvestmentInput(BaseModel):
    name: str
    principal: float
    rate: float = Field(..., description="Per-period rate as decimal")
    periods: float


class CompareInput(BaseModel):
    investments: List[InvestmentInput]


@router.post("/calculate/compare")
async def compare_investments(inputs: CompareInput):
    """Rank investments by compound rentability."""
    comparison = interest.compare_investments([inv.model_dump() for inv in inputs.investments])
    return asdict(comparison)
