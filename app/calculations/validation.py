"""
Input checks shared by the calculators.

Numbers are validated by presence and type. Zero is a legitimate value and
is only rejected where a formula divides by it.
"""

import math
from numbers import Real
from typing import Any

from app.exceptions import InvalidInputError


def require_number(value: Any, field: str) -> float:
    """Return value as float, or raise InvalidInputError."""
    if value is None:
        raise InvalidInputError(f"{field} é obrigatório", field=field)
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} deve ser numérico", field=field)
    if isinstance(value, str):
        try:
            value = float(value.strip().replace(",", "."))
        except ValueError:
            raise InvalidInputError(f"{field} deve ser numérico", field=field)
    if not isinstance(value, Real):
        raise InvalidInputError(f"{field} deve ser numérico", field=field)
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise InvalidInputError(f"{field} deve ser um número finito", field=field)
    return number


def require_non_negative(value: Any, field: str) -> float:
    number = require_number(value, field)
    if number < 0:
        raise InvalidInputError(f"{field} não pode ser negativo", field=field)
    return number


def require_positive(value: Any, field: str) -> float:
    number = require_number(value, field)
    if number <= 0:
        raise InvalidInputError(f"{field} deve ser maior que zero", field=field)
    return number


def require_positive_int(value: Any, field: str) -> int:
    number = require_positive(value, field)
    if not number.is_integer():
        raise InvalidInputError(f"{field} deve ser um número inteiro", field=field)
    return int(number)


def require_finite_result(value: float, field: str) -> float:
    """Reject a computed value that overflowed to inf or became NaN."""
    if math.isnan(value) or math.isinf(value):
        raise InvalidInputError(
            f"{field}: valores grandes demais para calcular", field=field
        )
    return value


def growth_factor(rate: float, periods: float, field: str) -> float:
    """(1 + rate) ** periods, raising InvalidInputError when it overflows."""
    try:
        factor = (1 + rate) ** periods
    except OverflowError:
        raise InvalidInputError(
            f"{field}: valores grandes demais para calcular", field=field
        )
    return require_finite_result(factor, field)
