"""
Main FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api import build_router
from app.config import Settings, get_settings
from app.exceptions import (
    InvalidInputError,
    UnsupportedOperationError,
    UpstreamServiceError,
)
from app.logging_config import configure_logging
from app.services.assistant import get_assistant
from app.services.conversation import ConversationService
from app.services.whatsapp import get_whatsapp_channel

logger = logging.getLogger(__name__)


def _register_whatsapp_handler(settings: Settings) -> None:
    assistant = get_assistant() if settings.ai_enabled else None
    if assistant is not None and not assistant.available:
        assistant = None
    conversation = ConversationService(assistant=assistant, ai_enabled=settings.ai_enabled)
    get_whatsapp_channel().on_receive(conversation.handle)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application for the configured transport."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        logger.info(
            f"{settings.app_name} {settings.version} starting "
            f"(transport={settings.transport}, ai={settings.ai_enabled}, "
            f"whatsapp={settings.messaging_enabled})"
        )
        if settings.messaging_enabled:
            _register_whatsapp_handler(settings)
        yield
        logger.info(f"{settings.app_name} shutting down")

    app = FastAPI(
        title=settings.app_name,
        description="Financial assistant: calculators over REST and WhatsApp, AI answers via Gemini",
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.include_router(
        build_router(
            rest_enabled=settings.rest_enabled,
            messaging_enabled=settings.messaging_enabled,
        ),
        prefix="/api",
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=400, content={"error": str(exc), "campo": exc.field})

    @app.exception_handler(UnsupportedOperationError)
    async def unsupported_handler(request: Request, exc: UnsupportedOperationError):
        return JSONResponse(
            status_code=400,
            content={"error": str(exc), "tipos_disponiveis": exc.supported},
        )

    @app.exception_handler(UpstreamServiceError)
    async def upstream_handler(request: Request, exc: UpstreamServiceError):
        logger.error(f"Upstream failure on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=502,
            content={"error": "Serviço externo indisponível", "service": exc.service},
        )

    @app.get("/")
    async def home():
        """Service description and endpoint catalogue."""
        endpoints = {
            "GET /health": "Health check do serviço",
        }
        if settings.rest_enabled:
            endpoints.update(
                {
                    "POST /api/consulta": "Consulta geral ao assistente financeiro",
                    "POST /api/calculo/juros-simples": "Cálculo de juros simples",
                    "POST /api/calculo/juros-compostos": "Cálculo de juros compostos",
                    "POST /api/calculo/financiamento": "Cálculo de financiamento",
                    "POST /api/calculate/amortization": "Tabela SAC ou PRICE",
                    "POST /api/calculate/inflation": "Impacto da inflação",
                    "POST /api/calculate/doubling-time": "Regra dos 72",
                    "POST /api/calculate/retirement": "Planejamento de aposentadoria",
                    "POST /api/calculate/npv": "VPL e TIR",
                    "POST /api/calculate/irr": "TIR estimada",
                    "POST /api/calculate/compare": "Comparação de investimentos",
                }
            )
        if settings.messaging_enabled:
            endpoints.update(
                {
                    "GET /api/whatsapp/status": "Status da conexão WhatsApp",
                    "GET /api/whatsapp/webhook": "Verificação do webhook (Meta)",
                    "POST /api/whatsapp/webhook": "Mensagens recebidas do WhatsApp",
                }
            )
        return {
            "service": settings.app_name,
            "version": settings.version,
            "transport": settings.transport,
            "endpoints": endpoints,
            "examples": {
                "consulta": {"pergunta": "Como funciona o CDI?"},
                "juros_simples": {"capital": 1000, "taxa": 5, "tempo": 12},
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring."""
        status = {
            "status": "healthy",
            "version": settings.version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "transport": settings.transport,
            "ai_enabled": settings.ai_enabled,
            "whatsapp_enabled": settings.messaging_enabled,
        }
        if settings.messaging_enabled:
            status["whatsapp"] = get_whatsapp_channel().status()
        return status

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run("app.main:app", host=_settings.host, port=_settings.port)
