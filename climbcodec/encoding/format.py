"""Climb envelope format constants.

The encoded blob is a deflate-compressed, canonically serialized JSON envelope:

    version            — format version, readers refuse unknown values
    id, title, ...     — descriptive recording fields
    originalPointCount — sample count, checked after decode
    encodedPoints      — reference point plus per-sample quantized deltas
"""

# File extension used by the CLI
FILE_EXTENSION = ".climb"

# Version of the envelope format
FORMAT_VERSION = 1

# Quantization steps for format version 1
POSITION_STEP = 0.01  # meters
VELOCITY_STEP = 0.1  # meters per second
TIME_STEP = 0.01  # seconds

# Known format versions -> (position_step, velocity_step, time_step)
FORMAT_STEPS: dict[int, tuple[float, float, float]] = {
    FORMAT_VERSION: (POSITION_STEP, VELOCITY_STEP, TIME_STEP),
}

# Time deltas are stored as signed 16-bit integers
TIME_DELTA_MIN = -(2**15)
TIME_DELTA_MAX = 2**15 - 1

# Quantized integers must stay exactly representable as float64
MAX_QUANTIZED = 2**53

# Compression settings, 9 favors ratio over speed
COMPRESSION_LEVEL = 9

# Envelope defaults for absent descriptive fields
DEFAULT_TITLE = "Untitled climb"
DEFAULT_AUTHOR = "Unknown"
DEFAULT_MAP = "Peak"
DEFAULT_BIOME = "Unknown"
DEFAULT_DIFFICULTY = "Medium"
DEFAULT_GAME_VERSION = "1.0"
DEFAULT_ASCENT_LEVEL = 1

# Heuristic sizes used by estimate_ratio (bytes)
RAW_BYTES_PER_SAMPLE = 190
ENCODED_BYTES_PER_SAMPLE = 9
RAW_BYTES_PER_METADATA = 40
ENCODED_BYTES_PER_METADATA = 16
ENVELOPE_OVERHEAD_BYTES = 360
