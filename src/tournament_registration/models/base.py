"""
Shared declarative base and column helpers for all registration models.

All models should import Base from this module so that Alembic sees
a single metadata registry.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def new_id() -> str:
    """Primary keys are uuid4 strings, portable across PostgreSQL and SQLite."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


def id_column():
    return Column(String(36), primary_key=True, default=new_id)
