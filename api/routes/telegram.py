"""
Telegram webhook route for Prompt Desk Bot.

Each update is handled to completion: routed through the conversation
engine, then its replies and forwards are delivered in order.
"""

import logging
import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, HTTPException

from bot.models import Forward
from ..channels.telegram import parse_update
from ..middleware.metrics import record_effect, record_turn
from ..services import get_services

logger = logging.getLogger(__name__)

router = APIRouter()

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


@router.post("/telegram/webhook")
async def telegram_webhook(
    update: Dict[str, Any],
    secret_token: Optional[str] = Header(default=None, alias=SECRET_HEADER),
):
    """
    Receive a Telegram update.

    Always acknowledges processed updates so Telegram does not redeliver;
    a failed turn is logged and dropped.
    """
    services = get_services()
    expected = services.settings.webhook_secret if services.settings else None
    if expected and secret_token != expected:
        raise HTTPException(status_code=401, detail="Invalid webhook secret")
    if not services.is_ready:
        raise HTTPException(status_code=503, detail="Bot not initialized")

    message = parse_update(update)
    if message is None:
        record_turn("ignored")
        return {"ok": True, "handled": False}

    start = time.time()
    try:
        turn = await services.router.route(message)
    except Exception:
        logger.exception(f"Turn failed for conversation {message.conversation_id}")
        record_turn("failed")
        return {"ok": False, "handled": True}
    record_turn("handled", time.time() - start)

    if services.channel is not None:
        results = await services.channel.deliver(turn)
        for effect, result in zip(turn.effects, results):
            record_effect("forward" if isinstance(effect, Forward) else "reply", result.success)
    else:
        for reply in turn.replies:
            logger.info(f"[no channel] -> {reply.conversation_id}: {reply.text}")

    return {"ok": True, "handled": True, "effects": len(turn.effects)}
