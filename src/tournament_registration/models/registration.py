"""
Registrable entity models: choreographies, coaches, judges and support staff.

All four share the registration columns (tournament, country, status,
club, notes, timestamps) through RegistrationMixin. The country column is
always written from the acting credential, never from client input.
"""

from sqlalchemy import Column, String, Integer, Boolean, Text, ForeignKey, Table, false
from sqlalchemy.orm import declared_attr, relationship
from .base import Base, TimestampMixin, id_column, utcnow
from .enums import RegistrationStatus

choreography_gymnasts = Table(
    "choreography_gymnasts",
    Base.metadata,
    Column("choreography_id", String(36), ForeignKey("choreographies.id", ondelete="CASCADE"), primary_key=True),
    Column("gymnast_id", String(36), ForeignKey("gymnasts.id", ondelete="CASCADE"), primary_key=True),
)


class RegistrationMixin(TimestampMixin):
    """Columns shared by every registrable entity."""

    @declared_attr
    def tournament_id(cls):
        return Column(String(36), ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True)

    country = Column(String(10), nullable=False, index=True)
    status = Column(
        String(20),
        nullable=False,
        default=RegistrationStatus.PENDING.value,
        server_default=RegistrationStatus.PENDING.value,
    )
    club = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    def _apply_defaults(self, kwargs):
        kwargs.setdefault('status', RegistrationStatus.PENDING.value)
        now = utcnow()
        kwargs.setdefault('created_at', now)
        kwargs.setdefault('updated_at', now)
        return kwargs


class Choreography(RegistrationMixin, Base):
    """A routine entered by a country in a category, performed by 1-8 gymnasts."""
    __tablename__ = "choreographies"

    id = id_column()
    name = Column(String(255), nullable=False)
    category = Column(String(20), nullable=False)
    type = Column(String(10), nullable=False)
    gymnast_count = Column(Integer, nullable=False)
    oldest_gymnast_age = Column(Integer, nullable=False)

    gymnasts = relationship(
        "Gymnast",
        secondary=choreography_gymnasts,
        lazy="selectin",
    )

    def __init__(self, **kwargs):
        super().__init__(**self._apply_defaults(kwargs))

    def __repr__(self):
        return f"<Choreography(id={self.id}, name='{self.name}', country='{self.country}', status='{self.status}')>"


class Coach(RegistrationMixin, Base):
    __tablename__ = "coaches"

    id = id_column()
    fig_id = Column(String(50), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    full_name = Column(String(255), nullable=False)
    gender = Column(String(10), nullable=False)
    level = Column(String(50), nullable=True)
    level_description = Column(String(255), nullable=True)
    is_local = Column(Boolean, nullable=False, default=False, server_default=false())
    image_url = Column(String(500), nullable=True)

    def __init__(self, **kwargs):
        kwargs.setdefault('is_local', False)
        super().__init__(**self._apply_defaults(kwargs))

    def __repr__(self):
        return f"<Coach(id={self.id}, fig_id='{self.fig_id}', country='{self.country}', status='{self.status}')>"


class Judge(RegistrationMixin, Base):
    __tablename__ = "judges"

    id = id_column()
    fig_id = Column(String(50), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    full_name = Column(String(255), nullable=False)
    birth = Column(String(20), nullable=False)
    gender = Column(String(10), nullable=False)
    category = Column(String(20), nullable=False)
    category_description = Column(String(255), nullable=False)
    image_url = Column(String(500), nullable=True)

    def __init__(self, **kwargs):
        super().__init__(**self._apply_defaults(kwargs))

    def __repr__(self):
        return f"<Judge(id={self.id}, fig_id='{self.fig_id}', country='{self.country}', status='{self.status}')>"


class SupportStaff(RegistrationMixin, Base):
    """Delegation leaders, medics and companions travelling with a delegation."""
    __tablename__ = "support_staff"

    id = id_column()
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(String(30), nullable=False)
    gender = Column(String(10), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    image_url = Column(String(500), nullable=True)

    def __init__(self, **kwargs):
        if not kwargs.get('full_name'):
            kwargs['full_name'] = f"{kwargs.get('first_name', '')} {kwargs.get('last_name', '')}".strip()
        super().__init__(**self._apply_defaults(kwargs))

    def __repr__(self):
        return f"<SupportStaff(id={self.id}, role='{self.role}', country='{self.country}', status='{self.status}')>"


REGISTRABLE_MODELS = {
    "choreographies": Choreography,
    "coaches": Coach,
    "judges": Judge,
    "support": SupportStaff,
}
