"""
User model for delegates and tournament organisers.

A user's country is fixed and determines every row the user can see
or write. Organisers carry the ADMIN role and the pseudo-country "ADMIN".
"""

from sqlalchemy import Column, String, Boolean, DateTime
from .base import Base, TimestampMixin, id_column, utcnow
from .enums import UserRole


class User(TimestampMixin, Base):
    """Delegation account authenticated with a username and bcrypt hash."""
    __tablename__ = "users"

    id = id_column()
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    country = Column(String(10), nullable=False, index=True)
    role = Column(String(20), nullable=False, default=UserRole.DELEGATE.value)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    def __init__(self, **kwargs):
        kwargs.setdefault('role', UserRole.DELEGATE.value)
        kwargs.setdefault('is_active', True)

        now = utcnow()
        kwargs.setdefault('created_at', now)
        kwargs.setdefault('updated_at', now)

        super().__init__(**kwargs)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', country='{self.country}', role='{self.role}')>"
