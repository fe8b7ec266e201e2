"""
Monitoring utilities for jumpdb.
"""

from jumpdb.monitoring.metrics import (
    AGED_EVICTIONS,
    DEDUP_MERGES,
    RENAME_RETRIES,
    SAVE_DURATION,
    SAVES,
)

__all__ = [
    "SAVES",
    "RENAME_RETRIES",
    "AGED_EVICTIONS",
    "DEDUP_MERGES",
    "SAVE_DURATION",
]
