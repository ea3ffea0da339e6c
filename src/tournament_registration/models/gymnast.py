"""
Gymnast model.

Athlete master data keyed by FIG licence id. Rows are upserted when a
choreography that includes the athlete is registered.
"""

from sqlalchemy import Column, String, Boolean, Date, Integer
from .base import Base, TimestampMixin, id_column, utcnow


class Gymnast(TimestampMixin, Base):
    __tablename__ = "gymnasts"

    id = id_column()
    fig_id = Column(String(50), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    full_name = Column(String(255), nullable=False)
    gender = Column(String(10), nullable=False)
    country = Column(String(10), nullable=False, index=True)
    date_of_birth = Column(Date, nullable=False)
    discipline = Column(String(10), nullable=False, default="AER")
    license_valid = Column(Boolean, nullable=False, default=True)
    license_expiry_date = Column(Date, nullable=True)
    age = Column(Integer, nullable=False)
    category = Column(String(20), nullable=False)
    is_local = Column(Boolean, nullable=False, default=False)
    image_url = Column(String(500), nullable=True)

    def __init__(self, **kwargs):
        kwargs.setdefault('discipline', 'AER')
        kwargs.setdefault('license_valid', True)
        kwargs.setdefault('is_local', False)
        if 'full_name' not in kwargs:
            kwargs['full_name'] = f"{kwargs.get('first_name', '')} {kwargs.get('last_name', '')}".strip()
        now = utcnow()
        kwargs.setdefault('created_at', now)
        kwargs.setdefault('updated_at', now)
        super().__init__(**kwargs)

    def __repr__(self):
        return f"<Gymnast(fig_id='{self.fig_id}', name='{self.full_name}', country='{self.country}')>"
