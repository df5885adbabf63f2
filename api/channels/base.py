"""
Abstract Channel Provider for Prompt Desk Bot.

Base class for messaging channel integrations, plus turn delivery.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from bot.models import Forward, Reply, Turn

logger = logging.getLogger(__name__)


@dataclass
class ChannelResponse:
    """Response from channel send operation."""
    success: bool
    message_id: Optional[int] = None
    error: Optional[str] = None


class ChannelProvider(ABC):
    """Abstract base class for messaging channels."""

    @abstractmethod
    async def send_message(self, reply: Reply) -> ChannelResponse:
        """Send a text message, optionally with a reply keyboard."""
        ...

    @abstractmethod
    async def forward_message(self, forward: Forward) -> ChannelResponse:
        """Forward an earlier message into a conversation."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if channel is operational."""
        ...

    async def deliver(self, turn: Turn) -> List[ChannelResponse]:
        """
        Send a turn's effects in order, one attempt each.

        A failed effect is logged and the rest of the turn still goes out.
        """
        results = []
        for effect in turn.effects:
            if isinstance(effect, Forward):
                result = await self.forward_message(effect)
            else:
                result = await self.send_message(effect)
            if not result.success:
                logger.warning(f"Delivery to {effect.conversation_id} failed: {result.error}")
            results.append(result)
        return results
