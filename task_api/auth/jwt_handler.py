from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

import jwt

from task_api.core import config


class TokenErrorKind(str, Enum):
    MALFORMED = "Malformed"
    EXPIRED = "Expired"


class TokenError(Exception):
    def __init__(self, kind: TokenErrorKind, detail: str = ""):
        self.kind = kind
        super().__init__(detail or kind.value)


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str


def create_access_token(user_id: int, role: str, expires_minutes: int | None = None) -> str:
    expire_minutes = expires_minutes or config.JWT_EXPIRES_MINUTES
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + timedelta(minutes=expire_minutes)
    payload = {"sub": str(user_id), "role": role, "exp": expire, "iat": issued_at}
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    try:
        payload = jwt.decode(
            token,
            config.JWT_SECRET_KEY,
            algorithms=[config.JWT_ALGORITHM],
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenError(TokenErrorKind.EXPIRED) from exc
    except jwt.InvalidTokenError as exc:
        raise TokenError(TokenErrorKind.MALFORMED, str(exc)) from exc

    role = payload.get("role")
    if not isinstance(role, str) or not role:
        raise TokenError(TokenErrorKind.MALFORMED, "Token is missing the role claim")
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise TokenError(TokenErrorKind.MALFORMED, "Token subject is not a user id") from exc

    return TokenClaims(user_id=user_id, role=role)
