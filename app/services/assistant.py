"""
Language-model assistant backed by Google Gemini.

Answers free-form financial questions. Any failure of the model surfaces as
UpstreamServiceError so callers can answer the user with a fallback text.
"""

import logging
from typing import Optional, Protocol

from google import genai
from google.genai import types

from app.config import get_settings
from app.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "Gemini"

SYSTEM_PROMPT = """Você é um Assistente Financeiro Especializado com 15 anos de experiência em:

ESPECIALIDADES:
- Planejamento financeiro pessoal e empresarial
- Análise de investimentos (ações, fundos, renda fixa, criptomoedas)
- Controle de gastos e orçamento familiar
- Educação financeira
- Análise de crédito e financiamentos
- Impostos e declaração de renda
- Previdência e aposentadoria

DIRETRIZES DE RESPOSTA:
1. Seja profissional, claro e didático
2. Forneça exemplos práticos e cálculos quando relevante
3. Inclua avisos sobre riscos quando necessário
4. Sugira próximos passos concretos
5. Mantenha respostas concisas mas completas (máximo 500 palavras)

LIMITAÇÕES:
- Não forneça conselhos de investimento específicos sem análise completa
- Mencione que recomendações devem ser validadas com profissionais
- Não prometa retornos garantidos

Responda sempre em português brasileiro."""


class TextCompletion(Protocol):
    """Anything that turns a financial question into an answer."""

    async def complete(self, prompt: str) -> str:
        ...


class GeminiAssistant:
    """TextCompletion implementation using the Gemini API."""

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model_name = model_name or settings.gemini_model
        self.client = None
        self.generation_config = types.GenerateContentConfig(system_instruction=SYSTEM_PROMPT)

        if self.api_key:
            self.client = genai.Client(api_key=self.api_key)
            logger.info(f"Gemini assistant initialized with model {self.model_name}")
        else:
            logger.warning("GEMINI_API_KEY not configured. AI answers disabled.")

    @property
    def available(self) -> bool:
        return self.client is not None

    async def complete(self, prompt: str) -> str:
        """
        Ask the model a question.

        Args:
            prompt: User question in natural language

        Returns:
            Model answer as plain text

        Raises:
            UpstreamServiceError: If the model is not configured, the call
                fails, or the answer is empty/blocked
        """
        if self.client is None:
            raise UpstreamServiceError(SERVICE_NAME, "API key not configured")

        logger.info(f"Sending question to {self.model_name} ({len(prompt)} chars)")
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=self.generation_config,
            )
            text = response.text
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise UpstreamServiceError(SERVICE_NAME, str(e)) from e

        if not text or not text.strip():
            logger.error("Gemini returned an empty answer")
            raise UpstreamServiceError(SERVICE_NAME, "empty answer")

        return text.strip()


# Singleton instance
_assistant: Optional[GeminiAssistant] = None


def get_assistant() -> GeminiAssistant:
    """Get the assistant singleton."""
    global _assistant
    if _assistant is None:
        _assistant = GeminiAssistant()
    return _assistant
