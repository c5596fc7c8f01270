"""
Free-form financial questions answered by the language model.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.api.dependencies import get_text_completion
from app.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


class QuestionInput(BaseModel):
    pergunta: Optional[str] = None


class AnswerResponse(BaseModel):
    pergunta: str
    resposta: str
    timestamp: str


@router.post("/consulta", response_model=AnswerResponse)
async def ask_question(inputs: QuestionInput, assistant=Depends(get_text_completion)):
    """Answer a financial question."""
    if not inputs.pergunta or not inputs.pergunta.strip():
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Pergunta é obrigatória",
                "exemplo": {"pergunta": "Como calcular juros compostos?"},
            },
        )

    if assistant is None:
        raise HTTPException(status_code=503, detail="Serviço de IA indisponível")

    try:
        resposta = await assistant.complete(inputs.pergunta.strip())
    except UpstreamServiceError as e:
        logger.error(f"Question failed: {e}")
        raise HTTPException(
            status_code=502,
            detail="Desculpe, não consegui processar sua pergunta no momento. Tente novamente.",
        )

    return AnswerResponse(
        pergunta=inputs.pergunta,
        resposta=resposta,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
