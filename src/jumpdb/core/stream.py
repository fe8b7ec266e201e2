"""Filtered, score-ordered iteration over a database."""

from __future__ import annotations

import os
import string
from operator import itemgetter
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Set, Tuple

from jumpdb.core.models import Dir, Epoch

if TYPE_CHECKING:
    from jumpdb.core.database import Database

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)
_SEPARATORS = tuple(sep for sep in (os.sep, os.altsep) if sep)


def fold_case(value: str) -> str:
    """Lowercase ASCII letters only; other characters compare as-is."""
    return value.translate(_ASCII_LOWER)


def match_keywords(path: str, keywords: List[str]) -> bool:
    """
    Check `path` against already case-folded `keywords`.

    Keywords must appear in order. The last one must match inside the final
    path component; each earlier one must appear before the match after it.
    """
    if not keywords:
        return True

    *earlier, last = keywords
    remaining = fold_case(path)

    idx = remaining.rfind(last)
    if idx == -1:
        return False
    tail = remaining[idx + len(last):]
    if any(sep in tail for sep in _SEPARATORS):
        return False
    remaining = remaining[:idx]

    for keyword in reversed(earlier):
        idx = remaining.rfind(keyword)
        if idx == -1:
            return False
        remaining = remaining[:idx]

    return True


class Stream:
    """
    Lazy iterator of ``(path, score)`` pairs, highest score first.

    Ordering is fixed at construction; ties keep storage order. Filters are
    applied while iterating. The database refuses structural changes until
    the stream is exhausted or closed. Use it as a context manager or call
    `close()` when stopping early: release on garbage collection is a
    fallback and may come late.
    """

    def __init__(self, db: "Database", now: Epoch) -> None:
        self.now = now
        self._db: Optional["Database"] = None
        self._pending: List[Tuple[float, Dir]] = []
        self._pos = 0
        self._keywords: List[str] = []
        self._excluded: Set[str] = set()
        self._check_exists = False

        scored = [(record.score(now), record) for record in db.dirs]
        # reverse=True keeps equal scores in their original order
        scored.sort(key=itemgetter(0), reverse=True)
        self._pending = scored

        db._acquire_stream()
        self._db = db

    def with_keywords(self, keywords: Iterable[str]) -> "Stream":
        self._keywords = [fold_case(keyword) for keyword in keywords]
        return self

    def with_exclude(self, path: str) -> "Stream":
        self._excluded.add(path)
        return self

    def with_exists(self, exists: bool) -> "Stream":
        self._check_exists = exists
        return self

    def _accepts(self, record: Dir) -> bool:
        if record.path in self._excluded:
            return False
        if not match_keywords(record.path, self._keywords):
            return False
        if self._check_exists and not os.path.exists(record.path):
            return False
        return True

    def __iter__(self) -> "Stream":
        return self

    def __next__(self) -> Tuple[str, float]:
        while self._pos < len(self._pending):
            score, record = self._pending[self._pos]
            self._pos += 1
            if self._accepts(record):
                return record.path, score

        self.close()
        raise StopIteration

    def close(self) -> None:
        """Stop iterating and release the database."""
        self._pos = len(self._pending)
        db, self._db = self._db, None
        if db is not None:
            db._release_stream()

    def __enter__(self) -> "Stream":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def __del__(self) -> None:
        # Fallback only; timing depends on the garbage collector.
        self.close()


__all__ = ["Stream", "fold_case", "match_keywords"]
