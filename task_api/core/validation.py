from enum import Enum
from typing import TypeVar

from task_api.core.errors import ValidationError

E = TypeVar('E', bound=Enum)


def parse_choice(enum_cls: type[E], value, field_name: str) -> E:
    """Coerce ``value`` to a member of ``enum_cls`` or raise ValidationError."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise ValidationError(f'Invalid {field_name}. Must be one of: {allowed}.') from None


def require_text(value, field_name: str, max_length: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{field_name.capitalize()} is required.')
    normalized = value.strip()
    if len(normalized) > max_length:
        raise ValidationError(f'{field_name.capitalize()} must be {max_length} characters or fewer.')
    return normalized


def parse_positive_int(value, field_name: str, maximum: int | None = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field_name.capitalize()} must be a positive integer.') from None
    if number < 1:
        raise ValidationError(f'{field_name.capitalize()} must be a positive integer.')
    if maximum is not None and number > maximum:
        raise ValidationError(f'{field_name.capitalize()} must be {maximum} or less.')
    return number
