import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key-with-enough-length-for-hs256')

from task_api.auth import jwt_handler  # noqa: E402
from task_api.database import Base, build_engine, build_session_factory, init_schema  # noqa: E402
from task_api.main import create_app  # noqa: E402
from task_api.models.user import User  # noqa: E402
from task_api.repositories import user_repository  # noqa: E402


@pytest.fixture
def engine():
    engine = build_engine('sqlite://', poolclass=StaticPool)
    init_schema(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(engine):
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    with TestClient(create_app(engine=engine)) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    def _make_user(username: str, role: str = 'user', password: str = 'secret1') -> User:
        return user_repository.create_user(
            db,
            username=username,
            email=f'{username}@example.com',
            password=password,
            role=role,
        )

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        token = jwt_handler.create_access_token(user_id=user.id, role=user.role)
        return {'Authorization': f'Bearer {token}'}

    return _auth_headers
