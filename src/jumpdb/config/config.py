"""Configuration management."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, field_validator

from jumpdb.core.constants import DEFAULT_MAX_AGE


class StoreConfig(BaseModel):
    """Store and CLI configuration."""

    data_dir: Path = Field(
        ...,
        description="Directory holding db.zo and its temporary siblings",
    )
    max_age: float = Field(
        DEFAULT_MAX_AGE,
        description="Total rank above which aging scales every record down",
    )
    exclude_dirs: List[str] = Field(
        default_factory=list,
        description="Exact paths never reported by queries",
    )
    log_level: str = Field(
        "INFO",
        description="Logging level for CLI runs",
    )
    json_logs: bool = Field(
        False,
        description="Render logs as JSON instead of console lines",
    )

    @field_validator("max_age")
    @classmethod
    def _positive_max_age(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("max_age must be positive")
        return value

    @classmethod
    def from_env(cls) -> "StoreConfig":
        data_dir = os.getenv("JUMPDB_DATA_DIR")
        if not data_dir:
            raise RuntimeError("JUMPDB_DATA_DIR must be set")

        exclude_raw = os.getenv("JUMPDB_EXCLUDE_DIRS", "")
        exclude_dirs = [p for p in exclude_raw.split(os.pathsep) if p]

        return cls(
            data_dir=Path(data_dir),
            max_age=float(os.getenv("JUMPDB_MAXAGE", str(DEFAULT_MAX_AGE))),
            exclude_dirs=exclude_dirs,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            json_logs=os.getenv("JUMPDB_JSON_LOGS", "false").lower() == "true",
        )


__all__ = ["StoreConfig"]
