"""
Tests for the chat command front-end.
"""

import pytest

from app.services.conversation import (
    AI_DISABLED_TEXT,
    AI_ERROR_TEXT,
    AI_SIGNATURE,
    CALCULATOR_TEXT,
    HELP_TEXT,
    TIPS,
    WELCOME_TEXT,
    ConversationService,
)
from app.services.whatsapp import IncomingMessage

from conftest import FakeAssistant


@pytest.fixture
def conversation(fake_assistant):
    return ConversationService(assistant=fake_assistant, choose_tip=lambda tips: tips[0])


class TestStaticCommands:
    """Test menu and tip commands."""

    @pytest.mark.anyio
    @pytest.mark.parametrize("command", ["/help", "/ajuda", "/HELP"])
    async def test_help(self, conversation, command):
        assert await conversation.reply(command) == HELP_TEXT

    @pytest.mark.anyio
    @pytest.mark.parametrize("command", ["/start", "/inicio"])
    async def test_welcome(self, conversation, command):
        assert await conversation.reply(command) == WELCOME_TEXT

    @pytest.mark.anyio
    async def test_calculator_menu(self, conversation):
        assert await conversation.reply("/calculadora") == CALCULATOR_TEXT

    @pytest.mark.anyio
    async def test_tip(self, conversation):
        reply = await conversation.reply("/dicas")
        assert TIPS[0] in reply

    @pytest.mark.anyio
    async def test_empty_message(self, conversation, fake_assistant):
        assert await conversation.reply("   ") == HELP_TEXT
        assert fake_assistant.questions == []


class TestCalculatorCommands:
    """Test /juros, /compostos and /financiamento."""

    @pytest.mark.anyio
    async def test_simple_interest(self, conversation):
        reply = await conversation.reply("/juros 1000 5 12")
        assert "Juros: R$ 600,00" in reply
        assert "Montante: R$ 1.600,00" in reply
        assert "J = C × i × t" in reply

    @pytest.mark.anyio
    async def test_compound_interest(self, conversation):
        reply = await conversation.reply("/compostos 1000 1 12")
        assert "Montante: R$ 1.126,83" in reply
        assert "Juros: R$ 126,83" in reply

    @pytest.mark.anyio
    async def test_financing(self, conversation):
        reply = await conversation.reply("/financiamento 1000 5 12")
        assert "Prestação: R$ 112,83" in reply
        assert "Parcelas: 12x" in reply

    @pytest.mark.anyio
    async def test_comma_decimal(self, conversation):
        reply = await conversation.reply("/juros 1000 2,5 10")
        assert "Juros: R$ 250,00" in reply

    @pytest.mark.anyio
    async def test_zero_rate(self, conversation):
        reply = await conversation.reply("/juros 1000 0 12")
        assert "Montante: R$ 1.000,00" in reply

    @pytest.mark.anyio
    async def test_missing_arguments(self, conversation, fake_assistant):
        reply = await conversation.reply("/juros 1000 5")
        assert reply.startswith("ℹ️ Uso: /juros")
        assert fake_assistant.questions == []

    @pytest.mark.anyio
    async def test_non_numeric_arguments(self, conversation, fake_assistant):
        reply = await conversation.reply("/financiamento mil 5 12")
        assert reply.startswith("⚠️")
        assert "Uso: /financiamento" in reply
        assert fake_assistant.questions == []

    @pytest.mark.anyio
    async def test_result_out_of_range(self, conversation, fake_assistant):
        reply = await conversation.reply("/compostos 1000 50 100000")
        assert reply.startswith("⚠️")
        assert "Uso: /compostos" in reply
        assert fake_assistant.questions == []

    @pytest.mark.anyio
    async def test_fractional_installments(self, conversation):
        reply = await conversation.reply("/financiamento 1000 5 12.5")
        assert "parcelas deve ser um número inteiro" in reply


class TestQuestions:
    """Test forwarding to the language model."""

    @pytest.mark.anyio
    async def test_question_forwarded(self, conversation, fake_assistant):
        reply = await conversation.reply("  Vale a pena investir em CDB?  ")
        assert fake_assistant.questions == ["Vale a pena investir em CDB?"]
        assert "Resposta de teste" in reply
        assert reply.endswith(AI_SIGNATURE)

    @pytest.mark.anyio
    async def test_unknown_command_forwarded(self, conversation, fake_assistant):
        await conversation.reply("/saldo")
        assert fake_assistant.questions == ["/saldo"]

    @pytest.mark.anyio
    async def test_upstream_failure(self):
        conversation = ConversationService(assistant=FakeAssistant(fail=True))
        assert await conversation.reply("O que é Selic?") == AI_ERROR_TEXT

    @pytest.mark.anyio
    async def test_ai_disabled(self, fake_assistant):
        conversation = ConversationService(assistant=fake_assistant, ai_enabled=False)
        assert await conversation.reply("O que é Selic?") == AI_DISABLED_TEXT
        assert fake_assistant.questions == []

    @pytest.mark.anyio
    async def test_no_assistant(self):
        conversation = ConversationService(assistant=None)
        assert await conversation.reply("O que é Selic?") == AI_DISABLED_TEXT

    @pytest.mark.anyio
    async def test_calculators_work_without_ai(self):
        conversation = ConversationService(assistant=None, ai_enabled=False)
        reply = await conversation.reply("/juros 1000 5 12")
        assert "Juros: R$ 600,00" in reply

    @pytest.mark.anyio
    async def test_handle_incoming_message(self, conversation):
        reply = await conversation.handle(IncomingMessage(sender="5511999999999", text="/juros 1000 5 12"))
        assert "Juros: R$ 600,00" in reply
