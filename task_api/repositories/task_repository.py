"""Ownership-scoped persistence for tasks.

Every query except :func:`list_all_tasks` carries ``Task.user_id == owner_id``
in its WHERE clause, so a task owned by someone else behaves exactly like a
task that does not exist. Updates and deletes are single conditional
statements; there is no separate existence check to race against.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from task_api.core import config
from task_api.core.errors import NotFoundError
from task_api.core.validation import parse_choice, parse_positive_int, require_text
from task_api.database import utcnow
from task_api.models.task import Task, TaskPriority, TaskStatus
from task_api.models.user import User

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200
# Largest value a 64-bit signed INTEGER column can hold.
MAX_ROW_ID = 2 ** 63 - 1
TASK_NOT_FOUND_MESSAGE = 'Task not found'


@dataclass
class TaskPage:
    items: list[Task]
    total: int
    page: int


@dataclass
class OwnedTask:
    task: Task
    username: str
    email: str


def _is_storable_id(task_id: int) -> bool:
    return 1 <= task_id <= MAX_ROW_ID


def _newest_first():
    return Task.created_at.desc(), Task.id.desc()


def _owner_filters(owner_id: int, status=None, priority=None) -> list:
    filters = [Task.user_id == owner_id]
    if status:
        filters.append(Task.status == parse_choice(TaskStatus, status, 'status').value)
    if priority:
        filters.append(Task.priority == parse_choice(TaskPriority, priority, 'priority').value)
    return filters


def _clean_fields(title, description, status, priority) -> dict:
    return {
        'title': require_text(title, 'title', MAX_TITLE_LENGTH),
        'description': description or '',
        'status': parse_choice(TaskStatus, status, 'status').value,
        'priority': parse_choice(TaskPriority, priority, 'priority').value,
    }


def list_tasks(
    db: Session,
    owner_id: int,
    status: str | None = None,
    priority: str | None = None,
    page: int = 1,
    limit: int = config.TASKS_DEFAULT_PAGE_SIZE,
) -> TaskPage:
    page = parse_positive_int(page, 'page')
    limit = parse_positive_int(limit, 'limit', maximum=config.TASKS_MAX_PAGE_SIZE)
    filters = _owner_filters(owner_id, status, priority)
    offset = (page - 1) * limit

    items = []
    # No stored row can sit past MAX_ROW_ID, and the driver rejects larger integers.
    if offset <= MAX_ROW_ID:
        items = (
            db.query(Task)
            .filter(*filters)
            .order_by(*_newest_first())
            .offset(offset)
            .limit(min(limit, MAX_ROW_ID))
            .all()
        )
    # Counted separately so paging never changes the reported total.
    total = db.query(func.count(Task.id)).filter(*filters).scalar() or 0

    return TaskPage(items=items, total=total, page=page)


def get_task(db: Session, task_id: int, owner_id: int) -> Task:
    if not _is_storable_id(task_id):
        raise NotFoundError(TASK_NOT_FOUND_MESSAGE)
    task = db.query(Task).filter(Task.id == task_id, Task.user_id == owner_id).first()
    if task is None:
        raise NotFoundError(TASK_NOT_FOUND_MESSAGE)
    return task


def create_task(
    db: Session,
    owner_id: int,
    title: str,
    description: str | None = None,
    status: str | None = None,
    priority: str | None = None,
) -> Task:
    fields = _clean_fields(
        title,
        description,
        status or TaskStatus.PENDING,
        priority or TaskPriority.MEDIUM,
    )
    task = Task(user_id=owner_id, **fields)
    db.add(task)
    try:
        db.commit()
    except IntegrityError as exc:
        # Owner row vanished after the token was issued.
        db.rollback()
        raise NotFoundError('User not found') from exc
    db.refresh(task)

    logger.info('Created task', extra={'user_id': owner_id, 'task_id': task.id})
    return task


def update_task(
    db: Session,
    task_id: int,
    owner_id: int,
    title: str,
    description: str | None,
    status: str,
    priority: str,
) -> Task:
    fields = _clean_fields(title, description, status, priority)
    if not _is_storable_id(task_id):
        raise NotFoundError(TASK_NOT_FOUND_MESSAGE)

    result = db.execute(
        update(Task)
        .where(Task.id == task_id, Task.user_id == owner_id)
        .values(**fields, updated_at=utcnow())
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFoundError(TASK_NOT_FOUND_MESSAGE)

    # Read back inside the same transaction as the write.
    task = db.query(Task).populate_existing().filter(Task.id == task_id).one()
    db.commit()

    logger.info('Updated task', extra={'user_id': owner_id, 'task_id': task_id})
    return task


def delete_task(db: Session, task_id: int, owner_id: int) -> None:
    if not _is_storable_id(task_id):
        raise NotFoundError(TASK_NOT_FOUND_MESSAGE)
    result = db.execute(
        delete(Task).where(Task.id == task_id, Task.user_id == owner_id)
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFoundError(TASK_NOT_FOUND_MESSAGE)
    db.commit()

    logger.info('Deleted task', extra={'user_id': owner_id, 'task_id': task_id})


def list_all_tasks(db: Session) -> list[OwnedTask]:
    """Every task across all owners, with owner identity. Admin use only."""
    rows = (
        db.query(Task, User.username, User.email)
        .join(User, Task.user_id == User.id)
        .order_by(*_newest_first())
        .all()
    )
    return [OwnedTask(task=task, username=username, email=email) for task, username, email in rows]
