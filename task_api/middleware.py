"""HTTP middleware that writes one access log line per request."""

import logging
import time

from fastapi import Request

from task_api.core.envelope import error_response
from task_api.core.errors import InternalError

logger = logging.getLogger('task_api.access')


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


async def log_requests(request: Request, call_next):
    """Log method, path, status, duration and caller for every request.

    Exceptions no handler claimed are logged here once, with traceback, and
    answered with the internal error envelope.
    """
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            'Unhandled exception',
            extra={'method': request.method, 'path': request.url.path},
        )
        response = error_response(InternalError())

    duration_ms = round((time.perf_counter() - started) * 1000, 2)
    status_code = response.status_code
    logger.log(
        _level_for(status_code),
        '%s %s %s %.2fms',
        request.method,
        request.url.path,
        status_code,
        duration_ms,
        extra={
            'method': request.method,
            'path': request.url.path,
            'status_code': status_code,
            'duration_ms': duration_ms,
            'user_id': getattr(request.state, 'user_id', None),
        },
    )
    return response
