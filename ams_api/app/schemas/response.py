"""
Response envelopes returned by every action.

Actions never raise for expected failures; they return either a
``Response`` (``message`` plus an optional ``reason``) or an
``ErrorResponse`` (``error`` kind plus optional ``details``).  Both
serialize through ``to_dict`` which strips ``None`` values at every
level before the payload is sent.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class ErrorKind(str, Enum):
    VALIDATION = "ValidationError"
    MISSING_PROPERTIES = "MissingProperties"
    NOT_FOUND = "NotFound"
    DUPLICATE_EMAIL = "DuplicateEmail"
    STORAGE = "StorageError"
    UNAUTHORIZED = "Unauthorized"


def remove_empty(value: Any) -> Any:
    """Recursively drop ``None`` entries from dictionaries and lists."""
    if isinstance(value, dict):
        return {k: remove_empty(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [remove_empty(v) for v in value if v is not None]
    return value


class Response(BaseModel):
    """Successful result of an action."""

    message: Any = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> dict:
        return remove_empty(self.model_dump(mode="json"))


class ErrorResponse(BaseModel):
    """Expected failure of an action."""

    error: ErrorKind
    details: Any = None

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self) -> dict:
        return remove_empty(self.model_dump(mode="json"))


# Returned by the router when the authentication gate rejects a request.
# Compare by identity.
UNAUTHORIZED = ErrorResponse(error=ErrorKind.UNAUTHORIZED, details="unauth")
