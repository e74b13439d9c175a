"""Task model definitions."""

from enum import Enum

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Text

from task_api.database import Base, UTCDateTime, utcnow


class TaskStatus(str, Enum):
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'


class TaskPriority(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


class Task(Base):
    """Represents a work item owned by a single user."""
    __tablename__ = 'tasks'
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'in_progress', 'completed')", name='ck_tasks_status'),
        CheckConstraint("priority IN ('low', 'medium', 'high')", name='ck_tasks_priority'),
        Index('idx_tasks_user_id', 'user_id'),
        Index('idx_tasks_status', 'status'),
    )

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default='')
    status = Column(String(20), nullable=False, default=TaskStatus.PENDING.value)
    priority = Column(String(20), nullable=False, default=TaskPriority.MEDIUM.value)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)
