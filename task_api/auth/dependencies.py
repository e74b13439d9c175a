import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from task_api.auth import jwt_handler
from task_api.core.errors import AuthError, AuthErrorKind, ForbiddenError

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Authenticated identity for the current request."""
    id: int
    role: str


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal:
    if credentials is None:
        raise AuthError(AuthErrorKind.MISSING)

    try:
        claims = jwt_handler.decode_access_token(credentials.credentials)
    except jwt_handler.TokenError as exc:
        if exc.kind is jwt_handler.TokenErrorKind.EXPIRED:
            raise AuthError(AuthErrorKind.EXPIRED) from exc
        raise AuthError(AuthErrorKind.INVALID) from exc

    # Read by the access log middleware.
    request.state.user_id = claims.user_id
    return Principal(id=claims.user_id, role=claims.role)


def require_role(allowed_roles: Iterable[str]) -> Callable[..., Principal]:
    """Build a dependency that admits only principals holding one of ``allowed_roles``.

    The returned dependency authenticates first, so a missing or bad token is
    still reported as 401 rather than 403.
    """
    allowed = frozenset(str(getattr(role, 'value', role)) for role in allowed_roles)

    def check_role(principal: Principal = Depends(get_current_user)) -> Principal:
        if principal.role not in allowed:
            logger.warning(
                'Role %s denied; requires one of %s',
                principal.role,
                sorted(allowed),
                extra={'user_id': principal.id, 'error_kind': ForbiddenError.kind},
            )
            raise ForbiddenError(f'Requires role: {", ".join(sorted(allowed))}')
        return principal

    return check_role
