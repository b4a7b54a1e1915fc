"""climbcodec — compact, exact-to-a-centimeter storage for climb recordings.

Delta-encodes and quantizes a time series of positions and velocities,
wraps it in a versioned envelope and deflates the result.

Quick start:
    from climbcodec import ClimbCodec, Recording, Sample

    recording = Recording(
        title="North face",
        author="ridge_runner",
        samples=[
            Sample(position=(0.0, 0.0, 0.0), timestamp=0.0, velocity=(0.5, 0.0, 0.0)),
            Sample(position=(0.01, 0.0, 0.0), timestamp=0.1, velocity=(0.5, 0.0, 0.0)),
        ],
    )

    codec = ClimbCodec()
    blob = codec.encode(recording)     # bytes
    restored = codec.decode(blob)      # Recording, within half a step of the input

    # Diagnostics
    codec.validate(blob)
    codec.estimate_ratio(recording)
    codec.compression_stats(recording)
"""

__version__ = "0.1.0"

from climbcodec.codec import ClimbCodec, decode, encode
from climbcodec.errors import (
    ClimbCodecError,
    CorruptPayload,
    CorruptPointBlock,
    DeltaOverflow,
    EmptyRecording,
    IntegrityMismatch,
    InvalidSample,
    UnsupportedVersion,
)
from climbcodec.utils.schema import CodecConfig, Recording, Sample

__all__ = [
    "ClimbCodec",
    "ClimbCodecError",
    "CodecConfig",
    "CorruptPayload",
    "CorruptPointBlock",
    "DeltaOverflow",
    "EmptyRecording",
    "IntegrityMismatch",
    "InvalidSample",
    "Recording",
    "Sample",
    "UnsupportedVersion",
    "decode",
    "encode",
    "__version__",
]
