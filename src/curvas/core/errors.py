"""Error taxonomy for the ticketing core.

Every error carries a stable human-readable message and the HTTP status the
API layer reports it with.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


class CurvasError(Exception):
    """Base class for classified failures."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(CurvasError):
    """Unknown match, curva, ticket or user."""

    status_code = 404


class InvalidStateError(CurvasError):
    """Operation conflicts with the current state (finished match, closed curva...)."""

    status_code = 409


class InvalidInputError(CurvasError):
    """Malformed request data: bad quantity, score, slot or missing identifiers."""

    status_code = 400


class InternalError(CurvasError):
    """Unexpected persistence failure or unrecoverable allocation conflict."""

    status_code = 500


class MalformedCurvaError(InternalError):
    """Stored curva data is corrupt (missing id, non-list result columns)."""


def translate_errors(message: str) -> Callable[[F], F]:
    """
    Service-boundary guard: classified errors pass through, persistence errors
    become ``InternalError(message)``.
    """

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await fn(*args, **kwargs)
            except CurvasError:
                raise
            except SQLAlchemyError as exc:
                logger.exception("%s: %s", message, exc)
                raise InternalError(message) from exc

        return wrapper  # type: ignore[return-value]

    return decorator
