"""Telegram webhook — chat front-end over the archive."""

import logging

from fastapi import APIRouter, Depends

from seen.application.schemas import TelegramUpdate
from seen.application.services import MessageService
from seen.domain.exceptions import AuthorizationError
from seen.infrastructure.dependencies import get_message_service, get_telegram_client
from seen.infrastructure.telegram.telegram_client import TelegramClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/telegram", tags=["Telegram"])


@router.post("/webhook")
async def telegram_webhook(
    update: TelegramUpdate,
    service: MessageService = Depends(get_message_service),
    telegram: TelegramClient = Depends(get_telegram_client),
) -> dict:
    """Handle one Telegram update and reply in the originating chat.

    Always acknowledges with 200 so Telegram does not redeliver the update.
    """
    message = update.message
    if message is None or not message.text:
        return {"ok": True, "handled": False}

    chat_id = message.chat.id
    try:
        reply = await service.handle(chat_id, message.text)
    except AuthorizationError:
        # Unknown chats get no reply
        return {"ok": True, "handled": False}

    delivered = await telegram.send_message(chat_id, reply)
    return {"ok": True, "handled": True, "delivered": delivered}
