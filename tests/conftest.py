import logging
import sys
from pathlib import Path
from typing import Callable, Iterable, Tuple

import pytest
import structlog

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from jumpdb.core import Database, Dir  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast unit tests")
    config.addinivalue_line(
        "markers",
        "integration: tests that touch the filesystem end to end or run the CLI",
    )


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo configure_logging() calls made by CLI tests."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Data directory that does not exist yet."""
    return tmp_path / "data"


@pytest.fixture
def make_db(tmp_path: Path) -> Callable[[Iterable[Tuple[str, float, int]]], Database]:
    """Build an in-memory database from (path, rank, last_accessed) tuples."""

    def _make(records: Iterable[Tuple[str, float, int]]) -> Database:
        dirs = [Dir(path=p, rank=r, last_accessed=t) for p, r, t in records]
        return Database(dirs=dirs, data_dir=tmp_path)

    return _make
