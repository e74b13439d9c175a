import logging

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from task_api.auth.passwords import hash_password, verify_password
from task_api.core import config
from task_api.core.errors import AuthError, AuthErrorKind, NotFoundError, ValidationError
from task_api.core.validation import parse_choice, require_text
from task_api.models.user import User, UserRole

logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 50
MIN_USERNAME_LENGTH = 3
MAX_EMAIL_LENGTH = 100
INVALID_CREDENTIALS_MESSAGE = 'Invalid credentials'


def normalize_email(value) -> str:
    email = require_text(value, 'email', MAX_EMAIL_LENGTH).lower()
    local_part, _, domain = email.partition('@')
    if not local_part or '.' not in domain:
        raise ValidationError('Email must be a valid email address.')
    return email


def _validate_username(value) -> str:
    username = require_text(value, 'username', MAX_USERNAME_LENGTH)
    if len(username) < MIN_USERNAME_LENGTH:
        raise ValidationError(f'Username must be at least {MIN_USERNAME_LENGTH} characters.')
    # Login treats any identifier containing @ as an email.
    if '@' in username:
        raise ValidationError('Username cannot contain "@".')
    return username


def _validate_password(value) -> str:
    if not isinstance(value, str) or len(value) < config.PASSWORD_MIN_LENGTH:
        raise ValidationError(f'Password must be at least {config.PASSWORD_MIN_LENGTH} characters.')
    return value


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    role: str | UserRole = UserRole.USER,
) -> User:
    username = _validate_username(username)
    email = normalize_email(email)
    password = _validate_password(password)
    role = parse_choice(UserRole, role, 'role')

    existing = db.query(User).filter(
        or_(User.username == username, User.email == email),
    ).first()
    if existing is not None:
        if existing.username == username:
            raise ValidationError('Username already exists.')
        raise ValidationError('Email already exists.')

    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(password),
        role=role.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # A concurrent registration won the unique constraint.
        db.rollback()
        raise ValidationError('Username or email already exists.') from exc
    db.refresh(user)

    logger.info('Registered user %s', user.username, extra={'user_id': user.id})
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError('User not found')
    return user


def find_by_identifier(db: Session, identifier: str) -> User | None:
    """Look a user up by email when ``identifier`` contains ``@``, else by username."""
    identifier = (identifier or '').strip()
    if not identifier:
        return None
    if '@' in identifier:
        return db.query(User).filter(func.lower(User.email) == identifier.lower()).first()
    return db.query(User).filter(User.username == identifier).first()


def authenticate_user(db: Session, identifier: str, password: str) -> User:
    user = find_by_identifier(db, identifier)
    if user is None or not verify_password(password or '', user.hashed_password):
        logger.info('Failed login attempt', extra={'error_kind': AuthError.kind})
        raise AuthError(AuthErrorKind.INVALID, INVALID_CREDENTIALS_MESSAGE)
    return user
