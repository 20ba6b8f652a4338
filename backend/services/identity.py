"""
Identity tokens shared by users, photos and comments.

Every entity is addressed by an opaque 24-character hexadecimal token. Tokens
coming from clients are checked for shape before any store lookup so that a
malformed token is reported differently from a missing entity.
"""
import re
import secrets

from services.errors import ValidationError

IDENTITY_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


def new_identity() -> str:
    """Generate a fresh identity token."""
    return secrets.token_hex(12)


def is_valid_identity(value) -> bool:
    return isinstance(value, str) and IDENTITY_PATTERN.match(value) is not None


def normalize_identity(value: str, kind: str = "ID") -> str:
    """
    Validate a client-supplied identity and return its canonical lowercase form.

    Raises:
        ValidationError: If the token is not 24 hexadecimal characters.
    """
    if not is_valid_identity(value):
        raise ValidationError(f"Invalid {kind} format")
    return value.lower()
