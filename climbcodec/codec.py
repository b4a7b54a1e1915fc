"""ClimbCodec — the single entry point for encoding and decoding climbs.

Usage:
    from climbcodec import ClimbCodec, Recording, Sample

    codec = ClimbCodec()
    blob = codec.encode(recording)          # bytes, safe to store or send
    restored = codec.decode(blob)           # Recording

    codec.validate(blob)                    # True / False
    codec.estimate_ratio(recording)         # cheap size heuristic

Pipeline:
    samples -> point delta encoder -> envelope -> canonical JSON -> compressor
"""

from __future__ import annotations

import logging

from climbcodec.encoding.compressor import Compressor, ZlibCompressor
from climbcodec.encoding.envelope import (
    build_envelope,
    envelope_to_recording,
    parse_envelope,
    serialize_envelope,
)
from climbcodec.encoding.format import (
    ENCODED_BYTES_PER_METADATA,
    ENCODED_BYTES_PER_SAMPLE,
    ENVELOPE_OVERHEAD_BYTES,
    FORMAT_STEPS,
    RAW_BYTES_PER_METADATA,
    RAW_BYTES_PER_SAMPLE,
)
from climbcodec.errors import ClimbCodecError
from climbcodec.utils.schema import CodecConfig, CompressionStats, Envelope, Recording

logger = logging.getLogger(__name__)


class ClimbCodec:
    """Stateless encoder/decoder for climb recordings.

    Instances hold only immutable configuration and may be shared
    across threads.

    Args:
        config: Format version and quantization steps. Defaults to format v1.
        compressor: Byte compressor. Defaults to zlib at the config's level.
    """

    def __init__(
        self,
        config: CodecConfig | None = None,
        compressor: Compressor | None = None,
    ) -> None:
        self.config = config or CodecConfig()
        self.compressor = compressor or ZlibCompressor(self.config.compression_level)
        self._versions = dict(FORMAT_STEPS)
        self._versions[self.config.format_version] = self.config.steps

    @property
    def known_versions(self) -> list[int]:
        return sorted(self._versions)

    # --- Encode ---

    def build_envelope(self, recording: Recording) -> Envelope:
        """Wrap a recording into an envelope without serializing it."""
        return build_envelope(recording, self.config.format_version, *self.config.steps)

    def encode(self, recording: Recording) -> bytes:
        """Encode a recording to an opaque compressed blob.

        Raises:
            EmptyRecording: if the recording has no samples.
            InvalidSample: on non-finite values or decreasing timestamps.
            DeltaOverflow: if a time gap is too large for the delta field.
        """
        payload = serialize_envelope(self.build_envelope(recording))
        blob = self.compressor.compress(payload)
        logger.debug(
            "Encoded recording %s: %d points, %d -> %d bytes (%s)",
            recording.id,
            len(recording.samples),
            len(payload),
            len(blob),
            self.compressor.name,
        )
        return blob

    # --- Decode ---

    def decode_envelope(self, data: bytes) -> Envelope:
        """Decompress and parse a blob into its envelope."""
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"decode() expects bytes, got {type(data).__name__}")
        payload = self.compressor.decompress(bytes(data))
        return parse_envelope(payload, self._versions)

    def decode(self, data: bytes) -> Recording:
        """Decode a blob produced by :meth:`encode`.

        Raises:
            CorruptPayload: if the blob cannot be decompressed or parsed.
            UnsupportedVersion: if the envelope version is unknown.
            CorruptPointBlock: if the point arrays are inconsistent.
            IntegrityMismatch: if the sample count does not match.
        """
        return self.decode_with_envelope(data)[1]

    def decode_with_envelope(self, data: bytes) -> tuple[Envelope, Recording]:
        """Decode a blob once, returning the parsed envelope alongside the recording."""
        envelope = self.decode_envelope(data)
        recording = envelope_to_recording(envelope, *self._versions[envelope.version])
        logger.debug(
            "Decoded recording %s: %d points (format v%d)",
            recording.id,
            len(recording.samples),
            envelope.version,
        )
        return envelope, recording

    # --- Diagnostics ---

    def validate(self, data: bytes) -> bool:
        """True if the blob decodes to a recording with at least one sample."""
        try:
            recording = self.decode(data)
        except ClimbCodecError as exc:
            logger.warning("Blob failed validation: %s: %s", type(exc).__name__, exc)
            return False
        return len(recording.samples) > 0

    def estimate_ratio(self, recording: Recording) -> float:
        """Rough raw-JSON to encoded size ratio. Nothing is compressed."""
        n = len(recording.samples)
        m = sum(1 for s in recording.samples if s.metadata)
        raw = ENVELOPE_OVERHEAD_BYTES + n * RAW_BYTES_PER_SAMPLE + m * RAW_BYTES_PER_METADATA
        encoded = (
            ENVELOPE_OVERHEAD_BYTES
            + n * ENCODED_BYTES_PER_SAMPLE
            + m * ENCODED_BYTES_PER_METADATA
        )
        return raw / encoded

    def compression_stats(self, recording: Recording) -> CompressionStats:
        """Encode the recording and report the measured sizes."""
        envelope = self.build_envelope(recording)
        payload = serialize_envelope(envelope)
        blob = self.compressor.compress(payload)
        return CompressionStats(
            point_count=envelope.original_point_count,
            metadata_count=len(envelope.encoded_points.metadata_indices),
            raw_bytes=len(recording.to_json().encode("utf-8")),
            envelope_bytes=len(payload),
            compressed_bytes=len(blob),
            compressor=self.compressor.name,
        )

    def __repr__(self) -> str:
        return (
            f"ClimbCodec(version={self.config.format_version}, "
            f"steps={self.config.steps}, compressor={self.compressor!r})"
        )


def encode(recording: Recording) -> bytes:
    """Encode with the default format v1 codec."""
    return ClimbCodec().encode(recording)


def decode(data: bytes) -> Recording:
    """Decode with the default format v1 codec."""
    return ClimbCodec().decode(data)
