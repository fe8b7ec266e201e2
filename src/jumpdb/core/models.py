"""
jumpdb data models and scoring helpers.
"""

from dataclasses import dataclass

from jumpdb.core.constants import DECAY_FLOOR, DECAY_TABLE, F32_STRUCT

# Seconds since the Unix epoch, always supplied by the caller.
Epoch = int
# Accumulated visit weight, stored as IEEE-754 binary32.
Rank = float


def to_f32(value: float) -> Rank:
    """Round a Python float to the nearest binary32 value."""
    return F32_STRUCT.unpack(F32_STRUCT.pack(value))[0]


def decay(elapsed: int) -> float:
    """
    Recency multiplier for a record last visited `elapsed` seconds ago.

    Negative values (clock skew, future timestamps) count as "just now".
    """
    for limit, multiplier in DECAY_TABLE:
        if elapsed < limit:
            return multiplier
    return DECAY_FLOOR


@dataclass
class Dir:
    """
    A single directory record.

    Attributes:
        path: Path exactly as the caller supplied it (never normalized)
        rank: Accumulated visit weight (binary32 precision)
        last_accessed: Epoch seconds of the most recent visit
    """

    path: str
    rank: Rank
    last_accessed: Epoch

    def score(self, now: Epoch) -> float:
        """Frecency score at instant `now`."""
        return self.rank * decay(now - self.last_accessed)

    def __repr__(self) -> str:
        return (
            f"Dir(path={self.path!r}, "
            f"rank={self.rank:g}, "
            f"last_accessed={self.last_accessed})"
        )
