"""User model definitions."""

from enum import Enum

from sqlalchemy import CheckConstraint, Column, Integer, String

from task_api.database import Base, UTCDateTime, utcnow


class UserRole(str, Enum):
    USER = 'user'
    ADMIN = 'admin'


class User(Base):
    """Represents an application user."""
    __tablename__ = 'users'
    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin')", name='ck_users_role'),
    )

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)
