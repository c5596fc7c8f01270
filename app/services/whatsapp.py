"""
WhatsApp messaging channel over the Meta Graph API (WhatsApp Cloud API).

Outgoing text goes through the /messages endpoint; incoming text arrives on
the webhook and is handed to a registered handler whose reply is sent back.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

import httpx

from app.config import get_settings
from app.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "WhatsApp"
GRAPH_API_BASE_URL = "https://graph.facebook.com"
MAX_MESSAGE_LENGTH = 4096

ERROR_REPLY = (
    "❌ Desculpe, ocorreu um erro ao processar sua mensagem. "
    "Tente novamente ou digite /help para ver os comandos disponíveis."
)


@dataclass(frozen=True)
class IncomingMessage:
    """A text message received on the webhook."""

    sender: str
    text: str
    message_id: Optional[str] = None
    timestamp: Optional[str] = None


MessageHandler = Callable[[IncomingMessage], Awaitable[str]]


class MessageChannel(Protocol):
    """Send text to a recipient and hand received text to a handler."""

    async def send(self, recipient: str, text: str) -> Optional[str]:
        ...

    def on_receive(self, handler: MessageHandler) -> None:
        ...


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """Split text into chunks under the API limit, preferring line breaks."""
    chunks = []
    remaining = text
    while len(remaining) > limit:
        cut = remaining.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(remaining[:cut])
        remaining = remaining[cut:].lstrip("\n")
    if remaining:
        chunks.append(remaining)
    return chunks


def is_private_sender(sender: str) -> bool:
    """Groups and status broadcasts are not answered."""
    return "@g.us" not in sender and "@broadcast" not in sender


def parse_incoming(payload: Dict[str, Any]) -> List[IncomingMessage]:
    """
    Extract text messages from a webhook notification.

    Status updates, non-text messages, groups and broadcasts are skipped.
    """
    messages = []
    for entry in payload.get("entry") or []:
        for change in entry.get("changes") or []:
            value = change.get("value") or {}
            for raw in value.get("messages") or []:
                if raw.get("type") != "text":
                    continue
                sender = str(raw.get("from") or "")
                body = ((raw.get("text") or {}).get("body") or "").strip()
                if not sender or not body or not is_private_sender(sender):
                    continue
                messages.append(
                    IncomingMessage(
                        sender=sender,
                        text=body,
                        message_id=raw.get("id"),
                        timestamp=raw.get("timestamp"),
                    )
                )
    return messages


class WhatsAppChannel:
    """MessageChannel implementation for the WhatsApp Cloud API."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        phone_number_id: Optional[str] = None,
        verify_token: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.access_token = access_token if access_token is not None else settings.whatsapp_access_token
        self.phone_number_id = (
            phone_number_id if phone_number_id is not None else settings.whatsapp_phone_number_id
        )
        self.verify_token = verify_token if verify_token is not None else settings.whatsapp_verify_token
        self.api_version = api_version or settings.whatsapp_api_version
        self.timeout = timeout or settings.whatsapp_timeout
        self.transport = transport
        self.handler: Optional[MessageHandler] = None
        self.last_error: Optional[str] = None

        if not self.configured:
            logger.warning("WhatsApp credentials not configured. Replies will not be sent.")

    @property
    def configured(self) -> bool:
        return bool(self.access_token and self.phone_number_id)

    @property
    def messages_url(self) -> str:
        return f"{GRAPH_API_BASE_URL}/{self.api_version}/{self.phone_number_id}/messages"

    def status(self) -> Dict[str, Any]:
        return {
            "configured": self.configured,
            "handler_registered": self.handler is not None,
            "last_error": self.last_error,
        }

    def on_receive(self, handler: MessageHandler) -> None:
        """Register the coroutine that produces the reply for each message."""
        self.handler = handler

    def verify_webhook(self, mode: Optional[str], token: Optional[str], challenge: Optional[str]) -> Optional[str]:
        """Answer Meta's subscription handshake; None when it must be refused."""
        if mode == "subscribe" and self.verify_token and token == self.verify_token:
            return challenge
        return None

    async def send(self, recipient: str, text: str) -> Optional[str]:
        """
        Send a text message, split into API-sized chunks.

        Args:
            recipient: WhatsApp id (phone number without '+')
            text: Message body

        Returns:
            Id of the last message accepted by the API, if reported

        Raises:
            UpstreamServiceError: On missing credentials, network errors or
                non-2xx responses
        """
        if not self.configured:
            raise UpstreamServiceError(SERVICE_NAME, "credentials not configured")
        if not recipient or not text:
            raise UpstreamServiceError(SERVICE_NAME, "recipient and text are required")

        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        message_id = None

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for chunk in split_message(text):
                payload = {
                    "messaging_product": "whatsapp",
                    "to": recipient,
                    "type": "text",
                    "text": {"preview_url": False, "body": chunk},
                }
                try:
                    response = await client.post(self.messages_url, headers=headers, json=payload)
                except httpx.TimeoutException as e:
                    self.last_error = "timeout"
                    raise UpstreamServiceError(SERVICE_NAME, "timeout sending message") from e
                except httpx.RequestError as e:
                    self.last_error = str(e)
                    raise UpstreamServiceError(SERVICE_NAME, f"request error: {e}") from e

                if not response.is_success:
                    self.last_error = f"HTTP {response.status_code}"
                    logger.error(
                        f"Failed to send WhatsApp message: {response.status_code} - {response.text[:500]}"
                    )
                    raise UpstreamServiceError(SERVICE_NAME, f"HTTP {response.status_code}")

                try:
                    data = response.json()
                except ValueError:
                    data = {}
                message_id = (data.get("messages") or [{}])[0].get("id")

        self.last_error = None
        logger.info(f"WhatsApp message sent to {recipient}")
        return message_id

    async def dispatch(self, payload: Dict[str, Any]) -> int:
        """
        Handle a webhook notification: reply to every text message in it
        with the handler registered through on_receive.

        Handler failures are answered with an apology; send failures are
        logged. Returns the number of messages handled.
        """
        if self.handler is None:
            logger.warning("WhatsApp message received but no handler is registered")
            return 0

        handled = 0
        for message in parse_incoming(payload):
            logger.info(f"Message received from {message.sender}: {message.text[:80]}")
            try:
                reply = await self.handler(message)
            except Exception:
                logger.exception(f"Error handling message from {message.sender}")
                reply = ERROR_REPLY

            try:
                await self.send(message.sender, reply)
            except UpstreamServiceError as e:
                logger.error(f"Could not reply to {message.sender}: {e}")
            handled += 1

        return handled


# Singleton instance
_channel: Optional[WhatsAppChannel] = None


def get_whatsapp_channel() -> WhatsAppChannel:
    """Get the WhatsApp channel singleton."""
    global _channel
    if _channel is None:
        _channel = WhatsAppChannel()
    return _channel
