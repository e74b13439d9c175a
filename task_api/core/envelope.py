from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from task_api.core.errors import AppError


def build_envelope(
    success: bool,
    *,
    message: str | None = None,
    data: Any = None,
    error: str | None = None,
    **meta: Any,
) -> dict:
    """Return the response body shared by every endpoint, omitting unset keys."""
    envelope: dict[str, Any] = {'success': success}
    if message is not None:
        envelope['message'] = message
    if data is not None:
        envelope['data'] = jsonable_encoder(data)
    if error is not None:
        envelope['error'] = error
    envelope.update({key: value for key, value in meta.items() if value is not None})
    return envelope


def success_response(
    data: Any = None,
    message: str | None = None,
    status_code: int = status.HTTP_200_OK,
    **meta: Any,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=build_envelope(True, message=message, data=data, **meta),
    )


def error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=build_envelope(False, message=exc.message, error=exc.kind),
    )
