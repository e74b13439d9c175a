import os

from dotenv import load_dotenv

load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


def _get_optional_int(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    return int(value)


APP_ENV = os.getenv("APP_ENV", "development")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tasks.db")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
DB_ECHO = _get_bool(os.getenv("DB_ECHO"), default=False)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:3000"])

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")

PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", "6"))
TASKS_DEFAULT_PAGE_SIZE = 10
# Unset means no upper bound on the page size.
TASKS_MAX_PAGE_SIZE = _get_optional_int(os.getenv("TASKS_MAX_PAGE_SIZE"))


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if JWT_EXPIRES_MINUTES <= 0:
        raise RuntimeError("JWT_EXPIRES_MINUTES must be a positive number of minutes.")
