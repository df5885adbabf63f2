"""
Admin registry: the set of author ids that get the operator role.
"""

import logging
from typing import Iterable, Set

from .models import Role
from .store import ADMINS, DocumentStore

logger = logging.getLogger(__name__)


class AdminRegistry:
    """Membership lookup over a set loaded once at startup."""

    def __init__(self, admin_ids: Iterable[str] = ()):
        self._admin_ids: Set[str] = {str(a) for a in admin_ids}

    @classmethod
    async def load(cls, store: DocumentStore, default_admin_id: str) -> "AdminRegistry":
        """Load admins from the store, seeding default_admin_id when none exist."""
        records = await store.find_all(ADMINS)
        if not records:
            await store.insert(ADMINS, {"author_id": str(default_admin_id)})
            logger.info(f"Seeded admin registry with {default_admin_id}")
            return cls([default_admin_id])
        registry = cls(r["author_id"] for r in records if r.get("author_id"))
        logger.info(f"Loaded {len(registry)} admins")
        return registry

    def is_admin(self, author_id: str) -> bool:
        return str(author_id) in self._admin_ids

    def role_of(self, author_id: str) -> Role:
        return Role.OPERATOR if self.is_admin(author_id) else Role.PARTICIPANT

    def __len__(self) -> int:
        return len(self._admin_ids)
