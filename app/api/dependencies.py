"""
FastAPI dependencies wiring the external capabilities into the routes.
"""

from fastapi import Depends

from app.config import Settings, get_settings
from app.services.assistant import GeminiAssistant, get_assistant
from app.services.conversation import ConversationService
from app.services.whatsapp import WhatsAppChannel, get_whatsapp_channel


def get_text_completion(settings: Settings = Depends(get_settings)):
    """The language model, or None when AI answers are disabled."""
    if not settings.ai_enabled:
        return None
    assistant: GeminiAssistant = get_assistant()
    return assistant if assistant.available else None


def get_channel() -> WhatsAppChannel:
    return get_whatsapp_channel()


def get_conversation(
    assistant=Depends(get_text_completion),
    settings: Settings = Depends(get_settings),
) -> ConversationService:
    return ConversationService(assistant=assistant, ai_enabled=settings.ai_enabled)


def get_receiving_channel(
    channel: WhatsAppChannel = Depends(get_channel),
    conversation: ConversationService = Depends(get_conversation),
) -> WhatsAppChannel:
    """The channel, with the conversation as its handler unless one is registered."""
    if channel.handler is None:
        channel.on_receive(conversation.handle)
    return channel
