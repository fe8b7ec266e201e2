"""Tests for environment-driven configuration."""
import os
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from jumpdb.config import StoreConfig  # noqa: E402

pytestmark = pytest.mark.unit


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ("JUMPDB_DATA_DIR", "JUMPDB_MAXAGE", "JUMPDB_EXCLUDE_DIRS", "LOG_LEVEL", "JUMPDB_JSON_LOGS"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_from_env_requires_data_dir(clean_env: pytest.MonkeyPatch) -> None:
    with pytest.raises(RuntimeError, match="JUMPDB_DATA_DIR"):
        StoreConfig.from_env()


def test_from_env_defaults(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    clean_env.setenv("JUMPDB_DATA_DIR", str(tmp_path))

    config = StoreConfig.from_env()

    assert config.data_dir == tmp_path
    assert config.max_age == 10000.0
    assert config.exclude_dirs == []
    assert config.log_level == "INFO"
    assert config.json_logs is False


def test_from_env_overrides(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    clean_env.setenv("JUMPDB_DATA_DIR", str(tmp_path))
    clean_env.setenv("JUMPDB_MAXAGE", "500")
    clean_env.setenv("JUMPDB_EXCLUDE_DIRS", os.pathsep.join(["/home/me", "", "/tmp"]))
    clean_env.setenv("LOG_LEVEL", "debug")
    clean_env.setenv("JUMPDB_JSON_LOGS", "TRUE")

    config = StoreConfig.from_env()

    assert config.max_age == 500.0
    assert config.exclude_dirs == ["/home/me", "/tmp"]
    assert config.log_level == "debug"
    assert config.json_logs is True


def test_max_age_must_be_positive(tmp_path: Path) -> None:
    with pytest.raises(ValidationError, match="max_age must be positive"):
        StoreConfig(data_dir=tmp_path, max_age=0)
