"""
Chat front-end: turns WhatsApp text into calculator results or AI answers.

Calculator commands take three positional numbers. Anything that is not a
command is sent to the language model as a financial question.
"""

import logging
import random
from typing import Callable, List, Optional, Sequence

from app.calculations.amortization import calculate_financing
from app.calculations.formatting import format_currency, format_number
from app.calculations.interest import (
    calculate_compound_interest,
    calculate_simple_interest,
)
from app.exceptions import InvalidInputError, UpstreamServiceError
from app.services.assistant import TextCompletion
from app.services.whatsapp import IncomingMessage

logger = logging.getLogger(__name__)

HELP_TEXT = """🤖 *Assistente Financeiro*

*Comandos disponíveis:*
• Faça perguntas sobre finanças
• /juros [capital] [taxa] [tempo] - Juros simples
• /compostos [capital] [taxa] [tempo] - Juros compostos
• /financiamento [valor] [taxa] [parcelas]
• /calculadora - Ferramentas de cálculo
• /dicas - Dica financeira rápida

*Exemplos:*
• "Como investir em renda fixa?"
• "/juros 1000 5 12"
• "/compostos 1000 5 12"
• "/financiamento 100000 1.5 60\""""

WELCOME_TEXT = """🏦 *Assistente Financeiro Inteligente*

Olá! Sou seu assistente financeiro pessoal, especializado em:

💰 *Planejamento Financeiro*
📊 *Análise de Investimentos*
📈 *Controle de Gastos*
🎯 *Educação Financeira*

Envie suas dúvidas em linguagem natural ou digite /ajuda para ver os comandos.

Estou aqui para ajudar! 🚀"""

CALCULATOR_TEXT = """🧮 *Calculadoras Financeiras*

• /juros 1000 5 12 - Juros simples (capital, taxa % ao período, períodos)
• /compostos 1000 1 12 - Juros compostos
• /financiamento 100000 1.5 60 - Prestação fixa (valor, taxa % ao mês, parcelas)

Para SAC/Price, inflação, aposentadoria e VPL use a API REST em /api/calculate."""

TIPS = [
    "💰 *Regra 50-30-20:* 50% necessidades, 30% desejos, 20% poupança",
    "📈 *Diversificação:* Nunca coloque todos os ovos na mesma cesta",
    "🎯 *Reserva de emergência:* 6 meses de gastos essenciais",
    "📊 *Renda fixa primeiro:* Construa base sólida antes de arriscar",
    "💡 *Educação financeira:* Invista em conhecimento primeiro",
    "⚡ *Automatize:* Configure investimentos automáticos",
    "🔍 *Compare sempre:* Taxas, tarifas e condições",
    "📱 *Controle gastos:* Use apps para monitorar despesas",
]

AI_SIGNATURE = "_Digite /help para ver mais comandos_"
AI_ERROR_TEXT = (
    "⚠️ Desculpe, não consegui processar sua pergunta no momento. "
    "Tente reformular ou tente novamente."
)
AI_DISABLED_TEXT = (
    "🤖 As respostas por IA estão desativadas no momento.\n\n"
    "Você ainda pode usar as calculadoras. Digite /help para ver os comandos."
)

USAGE = {
    "/juros": "/juros [capital] [taxa] [tempo]  ex.: /juros 1000 5 12",
    "/compostos": "/compostos [capital] [taxa] [tempo]  ex.: /compostos 1000 5 12",
    "/financiamento": "/financiamento [valor] [taxa] [parcelas]  ex.: /financiamento 100000 1.5 60",
}


def _parse_numbers(args: Sequence[str]) -> List[float]:
    try:
        return [float(arg.replace(",", ".")) for arg in args[:3]]
    except ValueError:
        raise InvalidInputError("Os parâmetros devem ser numéricos")


def format_simple_interest(capital: float, rate: float, periods: float) -> str:
    result = calculate_simple_interest(capital, rate, periods)
    return f"""💰 *Juros Simples*

Capital: {format_currency(result.capital)}
Taxa: {format_number(result.rate)}% ao período
Tempo: {format_number(result.periods)} períodos

*Resultado:*
Juros: {format_currency(result.interest)}
Montante: {format_currency(result.final_amount)}

Fórmula: {result.formula}"""


def format_compound_interest(capital: float, rate: float, periods: float) -> str:
    result = calculate_compound_interest(capital, rate, periods)
    return f"""📈 *Juros Compostos*

Capital: {format_currency(result.capital)}
Taxa: {format_number(result.rate)}% ao período
Tempo: {format_number(result.periods)} períodos

*Resultado:*
Juros: {format_currency(result.interest)}
Montante: {format_currency(result.final_amount)}
Rentabilidade: {format_number(result.rentability)}%

Fórmula: {result.formula}"""


def format_financing(principal: float, rate: float, installments: float) -> str:
    result = calculate_financing(principal, rate, installments)
    return f"""🏠 *Financiamento*

Valor: {format_currency(result.principal)}
Taxa: {format_number(result.rate)}% ao mês
Parcelas: {result.installment_count}x

*Resultado:*
Prestação: {format_currency(result.installment_amount)}
Total Pago: {format_currency(result.total_paid)}
Total Juros: {format_currency(result.total_interest)}

Fórmula: {result.formula}"""


CALCULATORS = {
    "/juros": format_simple_interest,
    "/compostos": format_compound_interest,
    "/financiamento": format_financing,
}

STATIC_COMMANDS = {
    "/help": HELP_TEXT,
    "/ajuda": HELP_TEXT,
    "/start": WELCOME_TEXT,
    "/inicio": WELCOME_TEXT,
    "/calculadora": CALCULATOR_TEXT,
}


class ConversationService:
    """Produces the reply for one incoming chat message."""

    def __init__(
        self,
        assistant: Optional[TextCompletion] = None,
        ai_enabled: bool = True,
        choose_tip: Callable[[Sequence[str]], str] = random.choice,
    ):
        self.assistant = assistant
        self.ai_enabled = ai_enabled and assistant is not None
        self.choose_tip = choose_tip

    async def reply(self, text: str) -> str:
        message = (text or "").strip()
        if not message:
            return HELP_TEXT

        parts = message.split()
        command = parts[0].lower()

        if command in STATIC_COMMANDS:
            return STATIC_COMMANDS[command]

        if command == "/dicas":
            tip = self.choose_tip(TIPS)
            return (
                f"💡 *Dica Financeira do Dia*\n\n{tip}\n\n"
                "_Quer mais dicas personalizadas? Envie sua situação financeira!_"
            )

        if command in CALCULATORS:
            return self._calculate(command, parts[1:])

        return await self.ask(message)

    async def handle(self, message: IncomingMessage) -> str:
        """Reply to a WhatsApp message (the channel's on_receive handler)."""
        return await self.reply(message.text)

    def _calculate(self, command: str, args: Sequence[str]) -> str:
        if len(args) < 3:
            return f"ℹ️ Uso: {USAGE[command]}"
        try:
            numbers = _parse_numbers(args)
            return CALCULATORS[command](*numbers)
        except InvalidInputError as e:
            logger.info(f"Invalid calculator input for {command}: {e}")
            return f"⚠️ {e}\n\nUso: {USAGE[command]}"

    async def ask(self, question: str) -> str:
        """Forward a question to the language model."""
        if not self.ai_enabled:
            return AI_DISABLED_TEXT

        try:
            answer = await self.assistant.complete(question)
        except UpstreamServiceError as e:
            logger.error(f"AI answer failed: {e}")
            return AI_ERROR_TEXT

        return f"🤖 *Assistente Financeiro*\n\n{answer}\n\n{AI_SIGNATURE}"
