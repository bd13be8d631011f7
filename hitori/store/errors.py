"""Errors raised by the post store."""

import contextlib
import sqlite3
from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories surfaced to callers."""
    CONSTRAINT_VIOLATION = "constraint_violation"
    IO_FAILURE = "io_failure"
    DECODE_FAILURE = "decode_failure"
    QUERY_FAILURE = "query_failure"


class StoreError(Exception):
    """A store operation failed. Terminal for the call that raised it."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.QUERY_FAILURE):
        super().__init__(message)
        self.message = message
        self.kind = kind

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_exception(cls, exc: BaseException, context: str) -> "StoreError":
        """Wrap an engine, filesystem or decoding failure."""
        return cls(f"{context} failed: {exc}", classify(exc))


def classify(exc: BaseException) -> ErrorKind:
    """Map an underlying exception to an ErrorKind."""
    if isinstance(exc, sqlite3.IntegrityError):
        return ErrorKind.CONSTRAINT_VIOLATION
    if isinstance(exc, sqlite3.OperationalError) and "unable to open" in str(exc):
        return ErrorKind.IO_FAILURE
    if isinstance(exc, OSError):
        return ErrorKind.IO_FAILURE
    # raised while reading a TEXT column that is not valid UTF-8
    if isinstance(exc, sqlite3.OperationalError) and "could not decode" in str(exc).lower():
        return ErrorKind.DECODE_FAILURE
    if isinstance(exc, sqlite3.Error):
        return ErrorKind.QUERY_FAILURE
    # pydantic's ValidationError is a ValueError too
    if isinstance(exc, (ValueError, TypeError)):
        return ErrorKind.DECODE_FAILURE
    return ErrorKind.QUERY_FAILURE


@contextlib.contextmanager
def translate_errors(context: str):
    """Re-raise sqlite, OS and decoding failures as StoreError."""
    try:
        yield
    except StoreError:
        raise
    except (sqlite3.Error, OSError, ValueError, TypeError) as e:
        raise StoreError.from_exception(e, context) from e
