"""
Financial Calculation Engine

Pure, stateless calculators for interest, financing, amortization,
inflation, retirement and investment analysis. Every function validates its
inputs, raises InvalidInputError on bad data and returns a frozen record.
"""

from app.calculations import amortization, formatting, interest, irr, retirement

__all__ = ["amortization", "formatting", "interest", "irr", "retirement"]
