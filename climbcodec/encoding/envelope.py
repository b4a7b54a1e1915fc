"""Envelope builder and parser.

The envelope wraps a recording's descriptive fields and its encoded
point block into one versioned record, serialized as canonical JSON
(sorted keys, compact separators) so equal input gives equal bytes.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from typing import Collection

from pydantic import ValidationError

from climbcodec.encoding.format import (
    DEFAULT_ASCENT_LEVEL,
    DEFAULT_AUTHOR,
    DEFAULT_BIOME,
    DEFAULT_DIFFICULTY,
    DEFAULT_GAME_VERSION,
    DEFAULT_MAP,
    DEFAULT_TITLE,
    FORMAT_VERSION,
    POSITION_STEP,
    TIME_STEP,
    VELOCITY_STEP,
)
from climbcodec.encoding.points import decode_points, encode_points
from climbcodec.errors import (
    CorruptPayload,
    IntegrityMismatch,
    InvalidSample,
    UnsupportedVersion,
)
from climbcodec.stats import span, total_distance
from climbcodec.utils.schema import Envelope, Recording

logger = logging.getLogger(__name__)


def _to_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _finite(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise InvalidSample(f"Recording field '{name}' is not finite: {value}")
    return value


def build_envelope(
    recording: Recording,
    version: int = FORMAT_VERSION,
    position_step: float = POSITION_STEP,
    velocity_step: float = VELOCITY_STEP,
    time_step: float = TIME_STEP,
) -> Envelope:
    """Wrap a recording into a versioned envelope.

    Empty descriptive fields get their defaults; missing summary
    metrics are derived from the samples.
    """
    samples = recording.samples
    block = encode_points(samples, position_step, velocity_step, time_step)

    start_time = _to_utc(recording.start_time)
    end_time = _to_utc(recording.end_time)

    if recording.duration is not None:
        duration = recording.duration
    elif start_time is not None and end_time is not None:
        duration = (end_time - start_time).total_seconds()
    else:
        duration = span(samples)

    start_altitude = recording.start_altitude
    if start_altitude is None:
        start_altitude = samples[0].position[1]
    end_altitude = recording.end_altitude
    if end_altitude is None:
        end_altitude = samples[-1].position[1]
    length = recording.length_meters
    if length is None:
        length = total_distance(samples)

    author = recording.author or DEFAULT_AUTHOR

    return Envelope(
        version=version,
        id=recording.id,
        title=recording.title or DEFAULT_TITLE,
        author=author,
        player_name=recording.player_name or author,
        map=recording.map or DEFAULT_MAP,
        biome_name=recording.biome_name or DEFAULT_BIOME,
        difficulty=recording.difficulty or DEFAULT_DIFFICULTY,
        game_version=recording.game_version or DEFAULT_GAME_VERSION,
        mod_version=recording.mod_version,
        climb_code=recording.climb_code,
        tags=list(recording.tags),
        start_time=start_time,
        end_time=end_time,
        duration=_finite("duration", duration),
        start_altitude=_finite("startAltitude", start_altitude),
        end_altitude=_finite("endAltitude", end_altitude),
        length_meters=_finite("lengthMeters", length),
        ascent_level=(
            recording.ascent_level
            if recording.ascent_level is not None
            else DEFAULT_ASCENT_LEVEL
        ),
        original_point_count=len(samples),
        encoded_points=block,
    )


def serialize_envelope(envelope: Envelope) -> bytes:
    """Canonical UTF-8 JSON bytes for an envelope."""
    return envelope.to_canonical_json().encode("utf-8")


def _reject_constant(token: str) -> float:
    raise ValueError(f"Non-finite number {token} in envelope")


def parse_envelope(data: bytes, known_versions: Collection[int] = (FORMAT_VERSION,)) -> Envelope:
    """Parse canonical envelope bytes.

    The version field is checked before anything else is validated.

    Raises:
        CorruptPayload: if the bytes are not a well-formed envelope.
        UnsupportedVersion: if the version is not in ``known_versions``.
    """
    try:
        raw = json.loads(data, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise CorruptPayload(f"Envelope is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise CorruptPayload(f"Envelope must be a JSON object, got {type(raw).__name__}")

    version = raw.get("version")
    if not isinstance(version, int) or isinstance(version, bool):
        raise CorruptPayload(f"Envelope has no integer version field: {version!r}")
    if version not in known_versions:
        raise UnsupportedVersion(version, list(known_versions))

    try:
        return Envelope.model_validate(raw)
    except ValidationError as exc:
        raise CorruptPayload(
            f"Envelope does not match format version {version} "
            f"({exc.error_count()} error(s)): {exc.errors()[0]['loc']}"
        ) from exc


def envelope_to_recording(
    envelope: Envelope,
    position_step: float = POSITION_STEP,
    velocity_step: float = VELOCITY_STEP,
    time_step: float = TIME_STEP,
) -> Recording:
    """Rebuild a recording from a parsed envelope.

    Raises:
        CorruptPointBlock: if the point block is inconsistent.
        IntegrityMismatch: if the decoded count differs from originalPointCount.
    """
    samples = decode_points(envelope.encoded_points, position_step, velocity_step, time_step)
    if len(samples) != envelope.original_point_count:
        raise IntegrityMismatch(envelope.original_point_count, len(samples))

    return Recording(
        id=envelope.id,
        title=envelope.title,
        author=envelope.author,
        player_name=envelope.player_name,
        map=envelope.map,
        biome_name=envelope.biome_name,
        difficulty=envelope.difficulty,
        game_version=envelope.game_version,
        mod_version=envelope.mod_version,
        climb_code=envelope.climb_code,
        tags=list(envelope.tags),
        start_time=envelope.start_time,
        end_time=envelope.end_time,
        duration=envelope.duration,
        start_altitude=envelope.start_altitude,
        end_altitude=envelope.end_altitude,
        length_meters=envelope.length_meters,
        ascent_level=envelope.ascent_level,
        samples=samples,
    )
