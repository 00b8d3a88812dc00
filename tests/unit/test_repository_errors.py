"""
Unit Tests for repository error classification
"""

import asyncio

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from satellite.api.errors import repository_error_code
from satellite.domain.exceptions import RepositoryError, RepositoryErrorKind
from satellite.infrastructure.db.errors import classify, wrap_repository_errors


def test_integrity_error_is_constraint():
    error = classify(IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed")))
    assert error.kind == RepositoryErrorKind.CONSTRAINT


def test_programming_error_is_query():
    error = classify(ProgrammingError("SELECT", {}, Exception("no such table: settings")))
    assert error.kind == RepositoryErrorKind.QUERY


@pytest.mark.parametrize("message,kind", [
    ("connection refused", RepositoryErrorKind.CONNECTION),
    ("password authentication failed for user", RepositoryErrorKind.AUTHENTICATION),
    ("canceling statement due to statement timeout", RepositoryErrorKind.TIMEOUT),
])
def test_operational_error_classified_by_message(message, kind):
    error = classify(OperationalError("SELECT 1", {}, Exception(message)))
    assert error.kind == kind


def test_timeout_error_is_timeout():
    assert classify(asyncio.TimeoutError()).kind == RepositoryErrorKind.TIMEOUT


def test_os_error_is_connection():
    assert classify(ConnectionRefusedError("refused")).kind == RepositoryErrorKind.CONNECTION


def test_unknown_message_is_unknown():
    error = RepositoryError.from_exception(Exception("something odd"))
    assert error.kind == RepositoryErrorKind.UNKNOWN
    assert error.safe_message == "Database operation failed"


def test_classify_keeps_repository_errors():
    original = RepositoryError("boom", kind=RepositoryErrorKind.QUERY)
    assert classify(original) is original


def test_http_codes():
    assert repository_error_code(RepositoryError("x", kind=RepositoryErrorKind.CONNECTION)) == "DATABASE_CONNECTION_ERROR"
    assert repository_error_code(RepositoryError("x", kind=RepositoryErrorKind.CONSTRAINT)) == "DATABASE_CONSTRAINT_ERROR"
    assert repository_error_code(RepositoryError("x")) == "DATABASE_ERROR"


@pytest.mark.asyncio
async def test_wrap_repository_errors_translates_and_chains():
    cause = IntegrityError("INSERT", {}, Exception("duplicate key"))

    @wrap_repository_errors
    async def save():
        raise cause

    with pytest.raises(RepositoryError) as exc_info:
        await save()

    assert exc_info.value.kind == RepositoryErrorKind.CONSTRAINT
    assert exc_info.value.cause is cause
    assert exc_info.value.__cause__ is cause


@pytest.mark.asyncio
async def test_wrap_repository_errors_leaves_other_errors_alone():

    @wrap_repository_errors
    async def save():
        raise TypeError("bad field")

    with pytest.raises(TypeError):
        await save()
