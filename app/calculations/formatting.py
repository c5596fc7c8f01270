"""
Presentation helpers for Brazilian currency and percentages.
"""

from decimal import Context, Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")

# Enough digits to quantize any finite float to cents
MONEY_CONTEXT = Context(prec=350, rounding=ROUND_HALF_UP)


def _to_cents(value: float) -> Decimal:
    return Decimal(str(value)).quantize(CENT, context=MONEY_CONTEXT)


def round_money(value: float) -> float:
    """Round to cents, half away from zero (Excel/JS toFixed style, not banker's)."""
    return float(_to_cents(value))


def format_currency(value: float) -> str:
    """
    Format a value as Brazilian reais.

    The separator after "R$" is a plain space, as in the chat templates
    (Intl's pt-BR currency style emits U+00A0 there).

    >>> format_currency(1234.5)
    'R$ 1.234,50'
    """
    amount = _to_cents(value)
    sign = "-" if amount < 0 else ""
    text = f"{abs(amount):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"{sign}R$ {text}"


def format_number(value: float) -> str:
    """Format a plain number with pt-BR separators, dropping zero decimals."""
    amount = _to_cents(value)
    if amount == amount.to_integral_value(context=MONEY_CONTEXT):
        text = f"{amount:,.0f}"
    else:
        text = f"{amount:,.2f}"
    return text.replace(",", "X").replace(".", ",").replace("X", ".")


def format_percent(value: float, decimals: int = 2) -> str:
    """Format a decimal rate (0.125) as a percentage string ('12.50%')."""
    return f"{value * 100:.{decimals}f}%"
