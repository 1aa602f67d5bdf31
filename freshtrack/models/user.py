"""User model."""

from sqlalchemy import Boolean, Column, Integer, String

from freshtrack.database import Base
from freshtrack.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication and ownership."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    # Opt-out for the scheduled expiry and low-stock checks
    notifications_enabled = Column(Boolean, default=True, nullable=False)
