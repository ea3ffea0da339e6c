"""
Tournament model.

Every registrable entity belongs to exactly one tournament; the
tournament id is used alongside country to scope every query.
"""

from sqlalchemy import Column, String, Boolean, Date, Text
from .base import Base, TimestampMixin, id_column, utcnow


class Tournament(TimestampMixin, Base):
    """A Campeonato or Copa Panamericana edition."""
    __tablename__ = "tournaments"

    id = id_column()
    name = Column(String(255), nullable=False, unique=True)
    short_name = Column(String(100), nullable=False)
    type = Column(String(50), nullable=False, index=True)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    location = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    def __init__(self, **kwargs):
        kwargs.setdefault('is_active', True)
        now = utcnow()
        kwargs.setdefault('created_at', now)
        kwargs.setdefault('updated_at', now)
        super().__init__(**kwargs)

    @property
    def competition_year(self) -> int:
        return self.start_date.year

    def __repr__(self):
        return f"<Tournament(id={self.id}, short_name='{self.short_name}', type='{self.type}')>"
