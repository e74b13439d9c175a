import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from task_api.core import config
from task_api.core.logging_setup import setup_logging
from task_api.database import build_engine, build_session_factory, init_schema
from task_api.error_handlers import register_error_handlers
from task_api.middleware import log_requests
from task_api.routes import auth_routes, task_routes

logger = logging.getLogger(__name__)


def create_app(engine: Engine | None = None) -> FastAPI:
    setup_logging(config.LOG_LEVEL, config.LOG_FORMAT)
    config.validate_runtime_config()

    owns_engine = engine is None
    engine = engine or build_engine()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            init_schema(engine)
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
        yield
        if owns_engine:
            engine.dispose()

    app = FastAPI(title='Task Manager API', lifespan=lifespan)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    app.middleware('http')(log_requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    register_error_handlers(app)

    @app.get('/')
    def root():
        return {'success': True, 'message': 'Task Manager API Running'}

    app.include_router(auth_routes.router, prefix='/auth')
    app.include_router(task_routes.router, prefix='/tasks')
    return app


app = create_app()
