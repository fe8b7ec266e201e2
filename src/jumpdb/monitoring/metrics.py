"""Prometheus metrics for the jumpdb store."""

from prometheus_client import (
    Counter,
    Histogram,
)

# Counters
SAVES = Counter(
    "jumpdb_saves_total",
    "Database saves by outcome",
    ["outcome"],
)
RENAME_RETRIES = Counter(
    "jumpdb_rename_retries_total",
    "Atomic replace attempts retried after a sharing violation",
)
AGED_EVICTIONS = Counter(
    "jumpdb_aged_evictions_total",
    "Records dropped because aging pushed their rank below 1.0",
)
DEDUP_MERGES = Counter(
    "jumpdb_dedup_merges_total",
    "Duplicate records merged by dedup",
)

# Histograms
SAVE_DURATION = Histogram(
    "jumpdb_save_duration_seconds",
    "Duration of encode + write + atomic replace",
)

__all__ = [
    "SAVES",
    "RENAME_RETRIES",
    "AGED_EVICTIONS",
    "DEDUP_MERGES",
    "SAVE_DURATION",
]
