"""
Database session and on-disk store.

`DatabaseFile` owns the data directory and the bytes read from it;
`DatabaseFile.open()` returns a `Database` holding the decoded records.
Changes are written back by `Database.save()` or when the session is
closed (explicitly or by leaving a ``with`` block). A ``with`` block left
by a `DatabaseError`, such as a failed explicit save, closes the session
without another save attempt.
"""

from __future__ import annotations

import contextlib
import os
import sys
import tempfile
import time
from operator import attrgetter
from pathlib import Path
from typing import Any, Iterator, List, Optional, Union

from jumpdb.core.codec import decode_dirs, encode_dirs
from jumpdb.core.constants import (
    AGE_TARGET_RATIO,
    BASE_RANK,
    DB_FILENAME,
    MAX_EPOCH,
    PROGRAM_NAME,
    RENAME_MAX_TRIES,
    RENAME_MAX_WAIT,
    RENAME_MIN_WAIT,
    TEMP_FILE_PREFIX,
)
from jumpdb.core.errors import (
    CorruptDatabase,
    CreateDataDirFailed,
    DatabaseError,
    DecodeError,
    NotReadable,
    NotWritable,
)
from jumpdb.core.models import Dir, Epoch, Rank, to_f32
from jumpdb.core.stream import Stream
from jumpdb.monitoring.metrics import (
    AGED_EVICTIONS,
    DEDUP_MERGES,
    RENAME_RETRIES,
    SAVE_DURATION,
    SAVES,
)
from jumpdb.utils.logging import get_logger
from jumpdb.utils.retry import retry

logger = get_logger(__name__)

# Replacing a file another process holds open can fail transiently on Windows.
RETRY_RENAME = os.name == "nt"


def db_path(data_dir: Union[str, Path]) -> Path:
    return Path(data_dir) / DB_FILENAME


@retry(
    max_attempts=RENAME_MAX_TRIES,
    min_wait=RENAME_MIN_WAIT,
    max_wait=RENAME_MAX_WAIT,
    exceptions=(PermissionError,),
    on_retry=lambda _exc: RENAME_RETRIES.inc(),
)
def _replace_with_retry(src: str, dst: Path) -> None:
    os.replace(src, dst)


def persist(src: str, dst: Path) -> None:
    """Atomically move `src` over `dst` (same directory, same filesystem)."""
    if RETRY_RENAME:
        _replace_with_retry(src, dst)
    else:
        os.replace(src, dst)


class Database:
    """
    In-memory directory list bound to a data directory.

    Attributes:
        dirs: Directory records in storage order
        modified: True while the records differ from the last save
        data_dir: Directory the records are saved into
    """

    def __init__(
        self,
        dirs: List[Dir],
        data_dir: Path,
        modified: bool = False,
    ) -> None:
        self.dirs = dirs
        self.data_dir = data_dir
        self.modified = modified
        self._open_streams = 0
        self._closed = False

    # Registry

    def add(self, path: str, now: Epoch) -> None:
        """Add a new directory or increment its rank. Also updates its last accessed time."""
        if not path:
            raise ValueError("path cannot be empty")
        if not 0 <= now <= MAX_EPOCH:
            raise ValueError(f"now out of range for u64 epoch: {now}")
        self._ensure_mutable()

        for record in self.dirs:
            if record.path == path:
                record.last_accessed = now
                record.rank = to_f32(record.rank + BASE_RANK)
                break
        else:
            self.dirs.append(Dir(path=path, rank=BASE_RANK, last_accessed=now))

        self.modified = True

    def remove(self, path: str) -> bool:
        """
        Remove the directory with `path`.

        Order is not preserved: the last record takes the removed slot.
        """
        self._ensure_mutable()

        for idx, record in enumerate(self.dirs):
            if record.path == path:
                last = self.dirs.pop()
                if idx < len(self.dirs):
                    self.dirs[idx] = last
                self.modified = True
                return True

        return False

    def dedup(self) -> None:
        """Merge records sharing a path: ranks are summed, the latest access wins."""
        self._ensure_mutable()

        # Stable sort, so the earlier of two equal paths survives the merge
        self.dirs.sort(key=attrgetter("path"))

        merged: List[Dir] = []
        merges = 0
        for record in self.dirs:
            if merged and merged[-1].path == record.path:
                survivor = merged[-1]
                survivor.rank = to_f32(survivor.rank + record.rank)
                survivor.last_accessed = max(survivor.last_accessed, record.last_accessed)
                merges += 1
            else:
                merged.append(record)

        self.dirs = merged
        if merges:
            self.modified = True
            DEDUP_MERGES.inc(merges)
            logger.debug("database_deduplicated", merges=merges, records=len(merged))

    def age(self, max_age: Rank) -> None:
        """
        Scale ranks down once their total exceeds `max_age`.

        The total lands at 90% of `max_age`; records whose rank falls below
        a single visit are dropped.
        """
        self._ensure_mutable()

        sum_age = sum(record.rank for record in self.dirs)
        if sum_age <= max_age or sum_age == 0:
            return

        factor = AGE_TARGET_RATIO * max_age / sum_age
        survivors: List[Dir] = []
        for record in self.dirs:
            record.rank = to_f32(record.rank * factor)
            if record.rank >= BASE_RANK:
                survivors.append(record)

        evicted = len(self.dirs) - len(survivors)
        self.dirs = survivors
        self.modified = True

        AGED_EVICTIONS.inc(evicted)
        logger.info(
            "database_aged",
            total_rank=sum_age,
            max_age=max_age,
            factor=factor,
            evicted=evicted,
            remaining=len(survivors),
        )

    def get(self, path: str) -> Optional[Dir]:
        for record in self.dirs:
            if record.path == path:
                return record
        return None

    def stream(self, now: Epoch) -> Stream:
        """Score-ordered view of the records at instant `now`."""
        return Stream(self, now)

    def _ensure_mutable(self) -> None:
        if self._closed:
            raise RuntimeError("Database is already closed")
        if self._open_streams:
            raise RuntimeError("Database is in use by an open stream")

    def _acquire_stream(self) -> None:
        self._open_streams += 1

    def _release_stream(self) -> None:
        self._open_streams -= 1

    # Persistence

    def save(self) -> None:
        """
        Write the records to ``db.zo`` if anything changed.

        The new contents go to a temporary sibling file which then replaces
        ``db.zo``, so readers see either the old file or the new one.

        Raises:
            NotWritable: If the temporary file cannot be created or written,
                or the replace fails
        """
        if not self.modified:
            return

        started = time.perf_counter()
        try:
            size = self._write()
        except DatabaseError:
            SAVES.labels(outcome="error").inc()
            raise

        self.modified = False
        SAVES.labels(outcome="ok").inc()
        SAVE_DURATION.observe(time.perf_counter() - started)
        logger.debug(
            "database_saved",
            path=str(db_path(self.data_dir)),
            records=len(self.dirs),
            size_bytes=size,
        )

    def _write(self) -> int:
        buffer = encode_dirs(self.dirs)

        try:
            fd, tmp_name = tempfile.mkstemp(prefix=TEMP_FILE_PREFIX, dir=self.data_dir)
        except OSError as exc:
            raise NotWritable(self.data_dir, exc) from exc

        target = db_path(self.data_dir)
        try:
            try:
                with os.fdopen(fd, "wb") as f:
                    # Preallocation is an optimization some filesystems refuse
                    with contextlib.suppress(OSError):
                        os.ftruncate(f.fileno(), len(buffer))
                    f.write(buffer)
            except OSError as exc:
                raise NotWritable(tmp_name, exc) from exc

            try:
                persist(tmp_name, target)
            except OSError as exc:
                raise NotWritable(target, exc) from exc
        except DatabaseError:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise

        return len(buffer)

    def close(self) -> None:
        """
        Release the session, saving pending changes.

        Errors cannot be returned from here; they are reported on stderr.
        """
        if self._closed:
            return
        self._closed = True

        try:
            self.save()
        except DatabaseError as exc:
            logger.error("database_save_failed", path=exc.path, error=str(exc))
            print(f"{PROGRAM_NAME}: {exc}", file=sys.stderr)

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self.dirs)

    def __iter__(self) -> Iterator[Dir]:
        return iter(self.dirs)

    def __contains__(self, path: str) -> bool:
        return self.get(path) is not None

    def __enter__(self) -> "Database":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Any,
    ) -> None:
        if isinstance(exc, DatabaseError):
            # The caller reports the error; saving again would repeat it.
            self._closed = True
            return
        self.close()

    def __repr__(self) -> str:
        return (
            f"Database(data_dir={str(self.data_dir)!r}, "
            f"records={len(self.dirs)}, modified={self.modified})"
        )


class DatabaseFile:
    """
    Handle on a data directory and the raw bytes of its ``db.zo``.

    The handle must stay alive as long as any `Database` opened from it.
    """

    def __init__(self, data_dir: Union[str, Path]) -> None:
        self.data_dir = Path(data_dir)
        self.buffer = b""

    @property
    def path(self) -> Path:
        return db_path(self.data_dir)

    def open(self) -> Database:
        """
        Read and decode ``db.zo``.

        A missing file is an empty database: the data directory is created
        but the file itself is only written by the first save.

        Raises:
            NotReadable: If the file exists but cannot be read
            CorruptDatabase: If the contents fail to decode
            CreateDataDirFailed: If the data directory cannot be created
        """
        # Read the whole file; databases are small and decode from one buffer.
        path = self.path
        try:
            self.buffer = path.read_bytes()
        except FileNotFoundError:
            try:
                self.data_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise CreateDataDirFailed(self.data_dir, exc) from exc
            logger.debug("database_created_data_dir", data_dir=str(self.data_dir))
            return Database(dirs=[], data_dir=self.data_dir)
        except OSError as exc:
            raise NotReadable(path, exc) from exc

        try:
            dirs = decode_dirs(self.buffer)
        except DecodeError as exc:
            raise CorruptDatabase(path, exc) from exc

        logger.debug("database_opened", path=str(path), records=len(dirs))
        return Database(dirs=dirs, data_dir=self.data_dir)


__all__ = ["Database", "DatabaseFile", "db_path", "persist"]
