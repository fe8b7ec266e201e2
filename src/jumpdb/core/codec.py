"""
Binary codec for the directory list.

Layout (little-endian)::

    u32 version = 3
    u32 count
    count x { u32 path_len, path bytes, f32 rank, u64 last_accessed }
"""

from __future__ import annotations

from typing import Iterable, List, Union

from jumpdb.core.constants import (
    HEADER_SIZE,
    HEADER_STRUCT,
    PATH_LEN_SIZE,
    PATH_LEN_STRUCT,
    RECORD_FIXED_SIZE,
    RECORD_FIXED_STRUCT,
    VERSION,
)
from jumpdb.core.errors import BadUtf8, TrailingBytes, Truncated, UnsupportedVersion
from jumpdb.core.models import Dir

Buffer = Union[bytes, bytearray, memoryview]


def encode_dirs(dirs: Iterable[Dir]) -> bytes:
    """Serialize records in their current order."""
    records = list(dirs)
    parts = [HEADER_STRUCT.pack(VERSION, len(records))]

    for record in records:
        path_bytes = record.path.encode("utf-8")
        parts.append(PATH_LEN_STRUCT.pack(len(path_bytes)))
        parts.append(path_bytes)
        parts.append(RECORD_FIXED_STRUCT.pack(record.rank, record.last_accessed))

    return b"".join(parts)


def decode_dirs(buffer: Buffer) -> List[Dir]:
    """
    Parse a serialized directory list.

    Raises:
        UnsupportedVersion: If the version tag is not 3
        Truncated: If a header, length prefix, or field overruns the buffer
        TrailingBytes: If bytes remain after the last record
        BadUtf8: If a path is not valid UTF-8
    """
    view = memoryview(buffer)
    size = len(view)

    if size < HEADER_SIZE:
        # Enough bytes for a tag still get the version check first
        if size >= 4:
            (version,) = PATH_LEN_STRUCT.unpack_from(view, 0)
            if version != VERSION:
                raise UnsupportedVersion(version, VERSION)
        raise Truncated(f"Header truncated: {size} bytes (need {HEADER_SIZE})")

    version, count = HEADER_STRUCT.unpack_from(view, 0)
    if version != VERSION:
        raise UnsupportedVersion(version, VERSION)

    dirs: List[Dir] = []
    offset = HEADER_SIZE

    for index in range(count):
        if offset + PATH_LEN_SIZE > size:
            raise Truncated(f"Record {index}: path length prefix truncated at offset {offset}")
        (path_len,) = PATH_LEN_STRUCT.unpack_from(view, offset)
        offset += PATH_LEN_SIZE

        if path_len > size - offset:
            raise Truncated(
                f"Record {index}: path length {path_len} exceeds remaining {size - offset} bytes"
            )
        try:
            path = str(view[offset : offset + path_len], "utf-8")
        except UnicodeDecodeError as exc:
            raise BadUtf8(offset, exc) from exc
        offset += path_len

        if offset + RECORD_FIXED_SIZE > size:
            raise Truncated(f"Record {index}: rank/last_accessed truncated at offset {offset}")
        rank, last_accessed = RECORD_FIXED_STRUCT.unpack_from(view, offset)
        offset += RECORD_FIXED_SIZE

        dirs.append(Dir(path=path, rank=rank, last_accessed=last_accessed))

    if offset != size:
        raise TrailingBytes(f"{size - offset} trailing bytes after {count} records")

    return dirs


__all__ = ["encode_dirs", "decode_dirs"]
