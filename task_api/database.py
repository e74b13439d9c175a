from datetime import datetime, timezone
from typing import Iterator

from fastapi import Request
from sqlalchemy import DateTime, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.types import TypeDecorator

from task_api.core import config

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime column that always reads back in UTC.

    SQLite drops the offset on storage, so naive values coming back from the
    driver are tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        if value is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def build_engine(database_url: str | None = None, **engine_kwargs) -> Engine:
    url = database_url or config.DATABASE_URL
    if url.startswith('sqlite'):
        engine_kwargs.setdefault('connect_args', {'check_same_thread': False})
    else:
        engine_kwargs.setdefault('pool_size', config.DB_POOL_SIZE)
        engine_kwargs.setdefault('max_overflow', config.DB_MAX_OVERFLOW)
        engine_kwargs.setdefault('pool_timeout', config.DB_POOL_TIMEOUT)
        engine_kwargs.setdefault('pool_pre_ping', True)
    engine_kwargs.setdefault('echo', config.DB_ECHO)

    engine = create_engine(url, **engine_kwargs)
    if engine.dialect.name == 'sqlite':
        event.listen(engine, 'connect', _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    # Rows returned by update/delete statements stay readable after commit.
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def init_schema(engine: Engine) -> None:
    from task_api.models import task, user  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
