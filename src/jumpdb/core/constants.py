"""
jumpdb format constants, struct layouts, and scoring tables.
"""
import struct

# Format version written at offset 0. Readers refuse anything else.
VERSION = 3

# Header: version(4) + count(4) = 8 bytes
HEADER_STRUCT = struct.Struct("<II")

# Path length prefix preceding each record's UTF-8 path
PATH_LEN_STRUCT = struct.Struct("<I")

# Record fixed part after the path: rank(f32) + last_accessed(u64) = 12 bytes
RECORD_FIXED_STRUCT = struct.Struct("<fQ")

# Single binary32 value, used to keep in-memory ranks at on-disk precision
F32_STRUCT = struct.Struct("<f")

# Sizes
HEADER_SIZE = HEADER_STRUCT.size  # 8 bytes
PATH_LEN_SIZE = PATH_LEN_STRUCT.size  # 4 bytes
RECORD_FIXED_SIZE = RECORD_FIXED_STRUCT.size  # 12 bytes

MAX_PATH_LENGTH = 0xFFFFFFFF  # u32 length prefix
MAX_EPOCH = 0xFFFFFFFFFFFFFFFF  # u64 seconds

# Files inside the data directory
DB_FILENAME = "db.zo"
TEMP_FILE_PREFIX = ".tmp"

# Rank granted by a single visit; aging evicts anything decayed below it
BASE_RANK = 1.0
AGE_TARGET_RATIO = 0.9
DEFAULT_MAX_AGE = 10000.0

# Recency buckets: (upper bound in seconds, multiplier)
HOUR = 60 * 60
DAY = 24 * HOUR
WEEK = 7 * DAY
DECAY_TABLE = (
    (HOUR, 4.0),
    (DAY, 2.0),
    (WEEK, 0.5),
)
DECAY_FLOOR = 0.25

# Rename retry on platforms where replacing an open file can fail transiently
RENAME_MAX_TRIES = 10
RENAME_MIN_WAIT = 0.050  # seconds
RENAME_MAX_WAIT = 0.150  # seconds

PROGRAM_NAME = "jumpdb"
