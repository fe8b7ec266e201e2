"""jumpdb core functionality."""

from .codec import decode_dirs, encode_dirs
from .constants import DB_FILENAME, VERSION
from .database import Database, DatabaseFile
from .errors import (
    BadUtf8,
    CorruptDatabase,
    CreateDataDirFailed,
    DatabaseError,
    DecodeError,
    NotReadable,
    NotWritable,
    TrailingBytes,
    Truncated,
    UnsupportedVersion,
)
from .models import Dir, Epoch, Rank
from .stream import Stream

__all__ = [
    "Database",
    "DatabaseFile",
    "Stream",
    "Dir",
    "Epoch",
    "Rank",
    "encode_dirs",
    "decode_dirs",
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
    "DB_FILENAME",
    "VERSION",
]
