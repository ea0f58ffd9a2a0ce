"""Authentication module."""

from cinecrib.auth.dependencies import get_current_user, get_optional_user
from cinecrib.auth.passwords import hash_password, verify_password

__all__ = [
    "get_current_user",
    "get_optional_user",
    "hash_password",
    "verify_password",
]
