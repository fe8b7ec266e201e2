"""jumpdb - frecency-ranked directory store."""

__version__ = "0.3.0"

from .core import (  # noqa: E402
    DB_FILENAME,
    VERSION,
    CorruptDatabase,
    Database,
    DatabaseError,
    DatabaseFile,
    Dir,
    Stream,
)

__all__ = [
    "Database",
    "DatabaseFile",
    "Stream",
    "Dir",
    "DatabaseError",
    "CorruptDatabase",
    "DB_FILENAME",
    "VERSION",
]
