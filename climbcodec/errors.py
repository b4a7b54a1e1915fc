"""Error taxonomy for the climb codec.

Every failure is terminal and raised synchronously to the caller.
The codec never retries and never truncates data to recover.
"""

from __future__ import annotations


class ClimbCodecError(ValueError):
    """Base class for all codec errors."""


class InvalidSample(ClimbCodecError):
    """A coordinate, velocity, timestamp or summary value is not finite or out of order."""


class EmptyRecording(ClimbCodecError):
    """A recording with no samples was handed to the encoder."""


class DeltaOverflow(ClimbCodecError):
    """A time gap between consecutive samples does not fit the 16-bit delta field."""


class CorruptPayload(ClimbCodecError):
    """The blob cannot be decompressed or does not hold a well-formed envelope."""


class UnsupportedVersion(ClimbCodecError):
    """The envelope carries a format version this decoder does not know."""

    def __init__(self, version: object, known: list[int] | None = None) -> None:
        self.version = version
        self.known = sorted(known or [])
        super().__init__(
            f"Unsupported format version {version!r}. Known: {self.known}"
        )


class CorruptPointBlock(ClimbCodecError):
    """The encoded point block arrays are inconsistent."""


class IntegrityMismatch(ClimbCodecError):
    """The decoded sample count does not match originalPointCount."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Envelope declares {expected} points but {actual} were decoded"
        )


__all__ = [
    "ClimbCodecError",
    "CorruptPayload",
    "CorruptPointBlock",
    "DeltaOverflow",
    "EmptyRecording",
    "IntegrityMismatch",
    "InvalidSample",
    "UnsupportedVersion",
]
