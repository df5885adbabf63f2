"""
Service initialization and dependency injection for Prompt Desk Bot API.

Creates and manages the store, admin registry, router and channel.
"""

import logging
from typing import Optional

from config.settings import get_settings, Settings
from bot.admins import AdminRegistry
from bot.router import Router, create_router
from bot.store import DocumentStore, InMemoryDocumentStore

from .channels.base import ChannelProvider
from .channels.telegram import TelegramChannel

logger = logging.getLogger(__name__)


class Services:
    """Container for all application services."""

    def __init__(self):
        self.settings: Optional[Settings] = None
        self.store: Optional[DocumentStore] = None
        self.registry: Optional[AdminRegistry] = None
        self.router: Optional[Router] = None
        self.channel: Optional[ChannelProvider] = None
        self._initialized = False

    async def initialize(self, store: Optional[DocumentStore] = None, channel: Optional[ChannelProvider] = None):
        """Initialize all services. Store and channel may be injected."""
        if self._initialized:
            return

        self.settings = get_settings()
        self.store = store or await self._init_store()
        await self._init_router()
        self.channel = channel or self._init_channel()
        self._initialized = True
        logger.info("All services initialized successfully")

    async def _init_store(self) -> DocumentStore:
        s = self.settings
        if not s.database_url:
            logger.warning("DATABASE_URL not set, using in-memory store")
            return InMemoryDocumentStore()

        from database.session import init_db
        from database.repositories import DocumentRepository

        session_factory = await init_db(s.database_url)
        logger.info("Document repository ready")
        return DocumentRepository(session_factory)

    async def _init_router(self):
        s = self.settings
        self.registry = await AdminRegistry.load(self.store, s.default_admin_id)
        self.router = create_router(
            self.store,
            self.registry,
            label_max_chars=s.label_max_chars,
            operator_width=s.keyboard_width_operator,
            participant_width=s.keyboard_width_participant,
        )
        logger.info("Conversation router ready")

    def _init_channel(self) -> Optional[ChannelProvider]:
        s = self.settings
        if not s.has_telegram:
            logger.warning("TELEGRAM_API_TOKEN not set, replies will not be delivered")
            return None
        logger.info("Telegram channel ready")
        return TelegramChannel(
            api_token=s.telegram_api_token,
            base_url=s.telegram_api_base,
            timeout=s.send_timeout,
        )

    async def shutdown(self):
        if self.store is not None and not isinstance(self.store, InMemoryDocumentStore):
            from database.session import close_db
            await close_db()
        self._initialized = False

    @property
    def is_ready(self) -> bool:
        return self._initialized and self.router is not None

    def health(self) -> dict:
        """Return health status of all services."""
        return {
            "initialized": self._initialized,
            "store": self.store is not None,
            "router": self.router is not None,
            "channel": self.channel is not None,
            "admins": len(self.registry) if self.registry else 0,
        }


# Singleton
_services = Services()


def get_services() -> Services:
    """Get the global services instance."""
    return _services


async def initialize_services(**overrides):
    """Initialize all services (called at startup)."""
    await _services.initialize(**overrides)
