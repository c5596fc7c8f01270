"""
API routes for the financial assistant.
"""

from fastapi import APIRouter

from app.api import calculations, questions, whatsapp


def build_router(rest_enabled: bool = True, messaging_enabled: bool = True) -> APIRouter:
    """Assemble the routers enabled by the configured transport."""
    router = APIRouter()

    if rest_enabled:
        router.include_router(calculations.router, tags=["calculations"])
        router.include_router(questions.router, tags=["questions"])

    if messaging_enabled:
        router.include_router(whatsapp.router, prefix="/whatsapp", tags=["whatsapp"])

    return router
