import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from task_api.auth.dependencies import Principal, get_current_user, require_role
from task_api.core import config
from task_api.core.envelope import success_response
from task_api.core.errors import InternalError
from task_api.database import get_db
from task_api.models.task import TaskPriority, TaskStatus
from task_api.models.user import UserRole
from task_api.repositories import task_repository

router = APIRouter(tags=['tasks'])

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = task_repository.MAX_TITLE_LENGTH


def _validate_title(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError('Title is required.')
    if len(normalized) > MAX_TITLE_LENGTH:
        raise ValueError(f'Title must be {MAX_TITLE_LENGTH} characters or fewer.')
    return normalized


class TaskCreateRequest(BaseModel):
    title: str
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _validate_title(value)


class TaskUpdateRequest(BaseModel):
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _validate_title(value)


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    user_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AdminTaskResponse(TaskResponse):
    username: str
    email: str


def _store_failure(db: Session, message: str) -> InternalError:
    db.rollback()
    logger.exception(message)
    return InternalError(message)


@router.get('')
def list_my_tasks(
    status_filter: TaskStatus | None = Query(default=None, alias='status'),
    priority: TaskPriority | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=config.TASKS_DEFAULT_PAGE_SIZE, ge=1, le=config.TASKS_MAX_PAGE_SIZE),
    principal: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        result = task_repository.list_tasks(
            db,
            principal.id,
            status=status_filter,
            priority=priority,
            page=page,
            limit=limit,
        )
    except SQLAlchemyError as exc:
        raise _store_failure(db, 'Error fetching tasks') from exc

    return success_response(
        data=[TaskResponse.model_validate(task) for task in result.items],
        count=len(result.items),
        total=result.total,
        page=result.page,
    )


# Registered before /{task_id} so "admin" is never parsed as an id.
@router.get('/admin/all')
def list_all_tasks(
    principal: Principal = Depends(require_role([UserRole.ADMIN])),
    db: Session = Depends(get_db),
):
    try:
        rows = task_repository.list_all_tasks(db)
    except SQLAlchemyError as exc:
        raise _store_failure(db, 'Error fetching tasks') from exc

    data = [
        AdminTaskResponse(
            **TaskResponse.model_validate(row.task).model_dump(),
            username=row.username,
            email=row.email,
        )
        for row in rows
    ]
    logger.info('Admin listed %d tasks', len(data), extra={'user_id': principal.id})
    return success_response(data=data, count=len(data))


@router.get('/{task_id}')
def get_my_task(
    task_id: int,
    principal: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        task = task_repository.get_task(db, task_id, principal.id)
    except SQLAlchemyError as exc:
        raise _store_failure(db, 'Error fetching task') from exc

    return success_response(data=TaskResponse.model_validate(task))


@router.post('', status_code=status.HTTP_201_CREATED)
def create_my_task(
    data: TaskCreateRequest,
    principal: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        task = task_repository.create_task(
            db,
            principal.id,
            title=data.title,
            description=data.description,
            status=data.status,
            priority=data.priority,
        )
    except SQLAlchemyError as exc:
        raise _store_failure(db, 'Error creating task') from exc

    return success_response(
        data=TaskResponse.model_validate(task),
        message='Task created successfully',
        status_code=status.HTTP_201_CREATED,
    )


@router.put('/{task_id}')
def update_my_task(
    task_id: int,
    data: TaskUpdateRequest,
    principal: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        task = task_repository.update_task(
            db,
            task_id,
            principal.id,
            title=data.title,
            description=data.description,
            status=data.status,
            priority=data.priority,
        )
    except SQLAlchemyError as exc:
        raise _store_failure(db, 'Error updating task') from exc

    return success_response(data=TaskResponse.model_validate(task), message='Task updated successfully')


@router.delete('/{task_id}')
def delete_my_task(
    task_id: int,
    principal: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        task_repository.delete_task(db, task_id, principal.id)
    except SQLAlchemyError as exc:
        raise _store_failure(db, 'Error deleting task') from exc

    return success_response(message='Task deleted successfully')
