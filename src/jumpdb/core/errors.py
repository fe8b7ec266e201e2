"""Exceptions raised by the jumpdb codec and store."""

from __future__ import annotations

import os
from typing import Optional, Union

PathLike = Union[str, "os.PathLike[str]"]


class DecodeError(ValueError):
    """Buffer is not a valid jumpdb database."""


class UnsupportedVersion(DecodeError):
    def __init__(self, version: int, expected: int) -> None:
        super().__init__(f"Unsupported database version: {version} (expected {expected})")
        self.version = version
        self.expected = expected


class Truncated(DecodeError):
    """A length prefix or fixed field runs past the end of the buffer."""


class TrailingBytes(Truncated):
    """Bytes remain after the last record."""


class BadUtf8(DecodeError):
    def __init__(self, offset: int, cause: UnicodeDecodeError) -> None:
        super().__init__(f"Invalid UTF-8 in path at offset {offset}: {cause.reason}")
        self.offset = offset
        self.cause = cause


class DatabaseError(Exception):
    """
    Store-level failure annotated with the path it concerns.

    Attributes:
        path: File or directory the failed operation was acting on
        cause: Underlying OSError or DecodeError
    """

    action = "database error"

    def __init__(self, path: PathLike, cause: Optional[BaseException] = None) -> None:
        self.path = os.fspath(path)
        self.cause = cause
        message = f"{self.action}: {self.path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class NotReadable(DatabaseError):
    action = "could not read from database"


class NotWritable(DatabaseError):
    action = "could not write database"


class CorruptDatabase(DatabaseError):
    action = "could not deserialize database"


class CreateDataDirFailed(DatabaseError):
    action = "unable to create data directory"


__all__ = [
    "DecodeError",
    "UnsupportedVersion",
    "Truncated",
    "TrailingBytes",
    "BadUtf8",
    "DatabaseError",
    "NotReadable",
    "NotWritable",
    "CorruptDatabase",
    "CreateDataDirFailed",
]
