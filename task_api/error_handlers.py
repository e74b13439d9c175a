"""Exception handlers that turn known failures into the response envelope.

Anything else propagates to :func:`task_api.middleware.log_requests`.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from task_api.core.envelope import error_response
from task_api.core.errors import AppError, ValidationError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    # 5xx errors are logged with their traceback where they are raised.
    if exc.status_code < 500:
        logger.info(exc.message, extra={'error_kind': exc.kind, 'path': request.url.path})
    return error_response(exc)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = ValidationError.default_message
    if errors:
        first = errors[0]
        location = '.'.join(str(part) for part in first.get('loc', ()) if part != 'body')
        message = f"{location}: {first.get('msg')}" if location else str(first.get('msg'))
    logger.info('Request validation failed', extra={'error_kind': ValidationError.kind, 'path': request.url.path})
    return error_response(ValidationError(message))
