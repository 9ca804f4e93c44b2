"""
Exceptions and the guard that turns storage failures into responses.

``StoreError`` is raised by storage backends.  Actions are wrapped in
``store_errors_as_response`` so callers always receive an
``ErrorResponse`` when the store is unreachable or returns bad data.
``RoutingError`` marks a request for an unknown context or action; it
is raised, not returned, because it is a caller mistake.
"""

import logging
from functools import wraps

from ..schemas.response import ErrorKind, ErrorResponse

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the storage backend cannot complete an operation."""


class RoutingError(LookupError):
    """Raised when a request names an unknown context or action."""


def store_errors_as_response(method):
    """Wrap an async action so ``StoreError`` becomes an ``ErrorResponse``."""
    @wraps(method)
    async def wrapper(*args, **kwargs):
        try:
            return await method(*args, **kwargs)
        except StoreError as e:
            logger.error("Storage failure in %s: %s", method.__name__, e)
            return ErrorResponse(error=ErrorKind.STORAGE, details=str(e))

    return wrapper
