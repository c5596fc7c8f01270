"""
Error taxonomy shared by the calculation engine and the front-ends.
"""

from typing import Iterable, Optional


class FinancialAssistantError(Exception):
    """Base class for application errors."""


class InvalidInputError(FinancialAssistantError, ValueError):
    """A required parameter is missing, non-numeric or out of range."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class UnsupportedOperationError(FinancialAssistantError, ValueError):
    """Unknown calculation kind."""

    def __init__(self, kind: str, supported: Iterable[str]):
        self.kind = kind
        self.supported = list(supported)
        super().__init__(f"Tipo de cálculo não suportado: {kind}")


class UpstreamServiceError(FinancialAssistantError, RuntimeError):
    """The language model or the messaging channel failed."""

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}")
        self.service = service
