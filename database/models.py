"""
SQLAlchemy ORM models for Prompt Desk Bot.

Every bot collection (admins, prompts, submissions, info notes) is stored
as JSON documents in a single table, partitioned by collection name.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, JSON, Index
from sqlalchemy.orm import DeclarativeBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Document(Base):
    __tablename__ = "documents"

    # Autoincrement pk doubles as insertion order
    pk = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String(50), nullable=False)
    record_id = Column(String(36), nullable=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        Index("ix_doc_collection_pk", "collection", "pk"),
        Index("ix_doc_collection_record", "collection", "record_id"),
    )
