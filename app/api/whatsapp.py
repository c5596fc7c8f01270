"""
WhatsApp webhook endpoints.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse

from app.api.dependencies import get_channel, get_receiving_channel
from app.services.whatsapp import WhatsAppChannel

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/status")
async def whatsapp_status(channel: WhatsAppChannel = Depends(get_channel)):
    """Connection state of the WhatsApp channel."""
    return channel.status()


@router.get("/webhook", response_class=PlainTextResponse)
async def verify_webhook(
    mode: Optional[str] = Query(None, alias="hub.mode"),
    token: Optional[str] = Query(None, alias="hub.verify_token"),
    challenge: Optional[str] = Query(None, alias="hub.challenge"),
    channel: WhatsAppChannel = Depends(get_channel),
):
    """Meta subscription handshake."""
    answer = channel.verify_webhook(mode, token, challenge)
    if answer is None:
        logger.warning("WhatsApp webhook verification refused")
        raise HTTPException(status_code=403, detail="Verification failed")
    return answer


@router.post("/webhook")
async def receive_webhook(
    request: Request,
    channel: WhatsAppChannel = Depends(get_receiving_channel),
):
    """Reply to incoming WhatsApp messages."""
    try:
        payload: Dict[str, Any] = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    handled = await channel.dispatch(payload)
    return {"status": "ok", "handled": handled}
