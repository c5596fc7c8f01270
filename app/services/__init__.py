"""
Application services module.
"""

from app.services.assistant import GeminiAssistant, TextCompletion, get_assistant
from app.services.conversation import ConversationService
from app.services.whatsapp import MessageChannel, WhatsAppChannel, get_whatsapp_channel

__all__ = [
    "ConversationService",
    "GeminiAssistant",
    "MessageChannel",
    "TextCompletion",
    "WhatsAppChannel",
    "get_assistant",
    "get_whatsapp_channel",
]
