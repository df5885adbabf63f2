"""
DocumentStore protocol for Prompt Desk Bot.

Abstracts record persistence so the conversation engine can work
with either in-memory dicts or a database backend.
"""

import copy
import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

# Collection names
ADMINS = "admins"
CURRENT_PROMPT = "current_prompt"
ARCHIVED_PROMPTS = "archived_prompts"
ANSWERS = "answers"
FREE_QUESTIONS = "free_questions"
COMMENTS = "comments"
INFO_NOTES = "info_notes"

COLLECTIONS = (
    ADMINS, CURRENT_PROMPT, ARCHIVED_PROMPTS,
    ANSWERS, FREE_QUESTIONS, COMMENTS, INFO_NOTES,
)


def matches(record: Record, filter: Optional[Record]) -> bool:
    """Field-equality match; an empty filter matches everything."""
    if not filter:
        return True
    return all(record.get(key) == value for key, value in filter.items())


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for the persistence gateway."""

    async def find_all(self, collection: str, filter: Optional[Record] = None) -> List[Record]:
        """Return matching records in insertion order."""
        ...

    async def find_one(self, collection: str, filter: Optional[Record] = None) -> Optional[Record]:
        """Return the first matching record or None."""
        ...

    async def insert(self, collection: str, record: Record) -> Record:
        """Insert a record and return it."""
        ...

    async def delete_one(self, collection: str, filter: Optional[Record] = None) -> bool:
        """Delete the first matching record. Returns True if one was removed."""
        ...


class InMemoryDocumentStore:
    """Dict-backed store, used for tests and for running without a database."""

    def __init__(self):
        self._collections: Dict[str, List[Record]] = defaultdict(list)

    async def find_all(self, collection: str, filter: Optional[Record] = None) -> List[Record]:
        return [
            copy.deepcopy(r) for r in self._collections[collection] if matches(r, filter)
        ]

    async def find_one(self, collection: str, filter: Optional[Record] = None) -> Optional[Record]:
        for record in self._collections[collection]:
            if matches(record, filter):
                return copy.deepcopy(record)
        return None

    async def insert(self, collection: str, record: Record) -> Record:
        self._collections[collection].append(copy.deepcopy(record))
        logger.debug(f"Inserted into {collection}: {record.get('id')}")
        return record

    async def delete_one(self, collection: str, filter: Optional[Record] = None) -> bool:
        records = self._collections[collection]
        for idx, record in enumerate(records):
            if matches(record, filter):
                del records[idx]
                return True
        return False

    def count(self, collection: str) -> int:
        return len(self._collections[collection])
