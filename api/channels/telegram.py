"""
Telegram Channel Provider for Prompt Desk Bot.

Talks to the Telegram Bot API over HTTPS and converts webhook updates
into inbound messages for the router.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from bot.models import Forward, IncomingMessage, Reply

from .base import ChannelProvider, ChannelResponse

logger = logging.getLogger(__name__)


def reply_markup(keyboard: List[List[str]]) -> Dict[str, Any]:
    """Build a resized reply keyboard from rows of labels."""
    return {
        "keyboard": [[{"text": label} for label in row] for row in keyboard],
        "resize_keyboard": True,
    }


def parse_update(update: Dict[str, Any]) -> Optional[IncomingMessage]:
    """Extract a text message from a webhook update. Non-text updates give None."""
    message = update.get("message") or update.get("edited_message")
    if not message or "text" not in message:
        return None
    chat = message.get("chat") or {}
    sender = message.get("from") or {}
    author_id = sender.get("id", chat.get("id"))
    return IncomingMessage(
        conversation_id=str(chat.get("id")),
        author_id=str(author_id),
        author_display_name=sender.get("username") or "Unknown User",
        source_message_id=message.get("message_id"),
        text=message["text"],
    )


class TelegramChannel(ChannelProvider):
    """Telegram via the Bot API."""

    def __init__(
        self,
        api_token: str,
        base_url: str = "https://api.telegram.org",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _url(self, method: str) -> str:
        return f"{self.base_url}/bot{self.api_token}/{method}"

    async def _call(self, method: str, payload: Dict[str, Any]) -> ChannelResponse:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.post(self._url(method), json=payload, timeout=self.timeout)
                resp.raise_for_status()
                data = resp.json()
                if not data.get("ok"):
                    return ChannelResponse(success=False, error=data.get("description"))
                result = data.get("result") or {}
                return ChannelResponse(success=True, message_id=result.get("message_id"))
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Telegram {method} failed: {e}")
            return ChannelResponse(success=False, error=str(e))

    async def send_message(self, reply: Reply) -> ChannelResponse:
        payload: Dict[str, Any] = {"chat_id": reply.conversation_id, "text": reply.text}
        if reply.menu:
            payload["reply_markup"] = reply_markup(reply.menu)
        return await self._call("sendMessage", payload)

    async def forward_message(self, forward: Forward) -> ChannelResponse:
        return await self._call("forwardMessage", {
            "chat_id": forward.conversation_id,
            "from_chat_id": forward.from_conversation_id,
            "message_id": forward.source_message_id,
        })

    async def health_check(self) -> bool:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.get(self._url("getMe"), timeout=5)
                return resp.status_code == 200
        except httpx.HTTPError:
            return False
