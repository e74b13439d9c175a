import logging
from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from task_api.auth import jwt_handler
from task_api.auth.dependencies import Principal, get_current_user
from task_api.core.envelope import success_response
from task_api.core.errors import InternalError
from task_api.database import get_db
from task_api.models.user import User, UserRole
from task_api.repositories import user_repository

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str
    role: UserRole = UserRole.USER

    @field_validator('username', 'email')
    @classmethod
    def strip_whitespace(cls, value: str) -> str:
        return value.strip()


class LoginRequest(BaseModel):
    identifier: str
    password: str

    @field_validator('identifier')
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Username or email is required.')
        return normalized


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


def _auth_payload(user: User) -> dict:
    token = jwt_handler.create_access_token(user_id=user.id, role=user.role)
    return {'user': UserResponse.model_validate(user), 'token': token}


def _store_failure(db: Session, message: str) -> InternalError:
    db.rollback()
    logger.exception(message)
    return InternalError(message)


@router.post('/register', status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    try:
        user = user_repository.create_user(
            db,
            username=data.username,
            email=data.email,
            password=data.password,
            role=data.role,
        )
    except SQLAlchemyError as exc:
        raise _store_failure(db, 'Error registering user') from exc

    return success_response(
        data=_auth_payload(user),
        message='User registered successfully',
        status_code=status.HTTP_201_CREATED,
    )


@router.post('/login')
def login(data: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = user_repository.authenticate_user(db, data.identifier, data.password)
    except SQLAlchemyError as exc:
        raise _store_failure(db, 'Error logging in') from exc

    return success_response(data=_auth_payload(user), message='Login successful')


@router.get('/me')
def me(principal: Principal = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        user = user_repository.get_user(db, principal.id)
    except SQLAlchemyError as exc:
        raise _store_failure(db, 'Error fetching user') from exc

    return success_response(data={'user': UserResponse.model_validate(user)})
