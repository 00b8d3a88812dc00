"""
Repository error translation
Every repository call surfaces storage failures as RepositoryError
"""

import asyncio
import functools
import logging

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    ProgrammingError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from satellite.domain.exceptions import RepositoryError, RepositoryErrorKind

logger = logging.getLogger(__name__)


def classify(error: BaseException) -> RepositoryError:
    """Map a driver / SQLAlchemy exception to a RepositoryError"""
    if isinstance(error, RepositoryError):
        return error

    if isinstance(error, (PoolTimeoutError, asyncio.TimeoutError)):
        kind = RepositoryErrorKind.TIMEOUT
    elif isinstance(error, IntegrityError):
        kind = RepositoryErrorKind.CONSTRAINT
    elif isinstance(error, ProgrammingError):
        kind = RepositoryErrorKind.QUERY
    elif isinstance(error, InterfaceError) or (
        isinstance(error, DBAPIError) and error.connection_invalidated
    ):
        kind = RepositoryErrorKind.CONNECTION
    elif isinstance(error, OperationalError):
        # Operational errors cover connection, auth and timeout failures alike
        return RepositoryError.from_exception(error)
    elif isinstance(error, (ConnectionError, OSError)):
        kind = RepositoryErrorKind.CONNECTION
    else:
        return RepositoryError.from_exception(error)

    wrapped = RepositoryError(f"{kind.value.lower()} error: {error}", kind=kind, cause=error)
    return wrapped


def wrap_repository_errors(func):
    """Decorator for async repository methods"""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except RepositoryError:
            raise
        except (SQLAlchemyError, ConnectionError, OSError, asyncio.TimeoutError) as exc:
            error = classify(exc)
            logger.error(f"{func.__qualname__} failed ({error.kind.value}): {exc}")
            raise error from exc

    return wrapper
