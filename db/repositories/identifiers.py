"""
db/repositories/identifiers.py

UUID coercion for ids that reach repositories as plain strings.
"""

from __future__ import annotations

import uuid

from db.repositories.errors import InvalidIdentifierError


def to_uuid(value: object, *, kind: str) -> uuid.UUID:
    """
    ``to_uuid("upload-42", kind="upload")`` raises InvalidIdentifierError.
    """

    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError as exc:
        raise InvalidIdentifierError(f"Invalid {kind} id: {value!r}") from exc
