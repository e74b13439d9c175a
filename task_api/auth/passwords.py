"""Password hashing and verification.

Hashes are produced by pwdlib's recommended hasher (Argon2id), which embeds a
per-password random salt and its cost parameters in the stored string.
"""

from functools import lru_cache

from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError


@lru_cache(maxsize=1)
def get_password_hasher() -> PasswordHash:
    return PasswordHash.recommended()


def hash_password(password: str) -> str:
    return get_password_hasher().hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if ``plain_password`` matches ``hashed_password``.

    A mismatch, an empty hash, or a hash no configured hasher recognizes is
    reported as False rather than raised.
    """
    if not hashed_password:
        return False
    try:
        return get_password_hasher().verify(plain_password, hashed_password)
    except UnknownHashError:
        return False
