"""
Repository classes for Prompt Desk Bot data access layer.

DocumentRepository implements the DocumentStore protocol on top of the
documents table. Each call runs in its own transaction.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bot.errors import StoreError
from bot.store import Record, matches

from .models import Document

logger = logging.getLogger(__name__)


class DocumentRepository:
    """Data access for bot collections."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str, collection: str) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"{operation} on {collection} failed: {e}")
                raise StoreError(operation, collection, e) from e

    async def _rows(self, session: AsyncSession, collection: str) -> List[Document]:
        result = await session.execute(
            select(Document)
            .where(Document.collection == collection)
            .order_by(Document.pk.asc())
        )
        return list(result.scalars().all())

    async def find_all(self, collection: str, filter: Optional[Record] = None) -> List[Record]:
        async with self._session("find_all", collection) as session:
            rows = await self._rows(session, collection)
            return [dict(row.data) for row in rows if matches(row.data, filter)]

    async def find_one(self, collection: str, filter: Optional[Record] = None) -> Optional[Record]:
        async with self._session("find_one", collection) as session:
            q = select(Document).where(Document.collection == collection)
            if filter and set(filter) == {"id"}:
                q = q.where(Document.record_id == filter["id"])
            result = await session.execute(q.order_by(Document.pk.asc()))
            for row in result.scalars():
                if matches(row.data, filter):
                    return dict(row.data)
            return None

    async def insert(self, collection: str, record: Record) -> Record:
        async with self._session("insert", collection) as session:
            session.add(Document(
                collection=collection,
                record_id=record.get("id"),
                data=dict(record),
            ))
            await session.flush()
        return record

    async def delete_one(self, collection: str, filter: Optional[Record] = None) -> bool:
        async with self._session("delete_one", collection) as session:
            for row in await self._rows(session, collection):
                if matches(row.data, filter):
                    await session.execute(delete(Document).where(Document.pk == row.pk))
                    return True
            return False
