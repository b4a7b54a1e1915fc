"""Point delta encoder and decoder.

A sample sequence becomes one exact reference point plus, per sample:

    deltaPositions  — quantized position step from the previous sample (3 ints)
    deltaTimes      — quantized time step from the previous sample (int16)
    velocities      — quantized absolute velocity (3 ints)
    grounded/flying — flags, copied verbatim

Metadata is kept sparse: only samples with a non-empty map are listed.

Deltas are differences of quantized offsets from the reference, so
rounding error does not accumulate along the sequence. Decoding is a
prefix sum over those integers followed by one multiply per sample.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from climbcodec.encoding.format import (
    MAX_QUANTIZED,
    POSITION_STEP,
    TIME_DELTA_MAX,
    TIME_DELTA_MIN,
    TIME_STEP,
    VELOCITY_STEP,
)
from climbcodec.encoding.quantize import dequantize, quantize
from climbcodec.errors import (
    CorruptPointBlock,
    DeltaOverflow,
    EmptyRecording,
    InvalidSample,
)
from climbcodec.utils.schema import EncodedPointBlock, Sample

logger = logging.getLogger(__name__)


def _require_finite(name: str, values: np.ndarray) -> None:
    """Raise InvalidSample naming the first sample with a non-finite value."""
    bad = ~np.isfinite(values)
    if bad.ndim > 1:
        bad = bad.any(axis=1)
    idx = np.flatnonzero(bad)
    if idx.size:
        i = int(idx[0])
        raise InvalidSample(f"Sample {i} has a non-finite {name}: {values[i].tolist()}")


def encode_points(
    samples: Sequence[Sample],
    position_step: float = POSITION_STEP,
    velocity_step: float = VELOCITY_STEP,
    time_step: float = TIME_STEP,
) -> EncodedPointBlock:
    """Delta-encode and quantize an ordered sample sequence.

    Args:
        samples: Non-empty sequence with non-decreasing timestamps.
        position_step: Position quantization step in meters.
        velocity_step: Velocity quantization step in m/s.
        time_step: Time quantization step in seconds.

    Returns:
        A new EncodedPointBlock. The input is never modified.

    Raises:
        EmptyRecording: if ``samples`` is empty.
        InvalidSample: on non-finite values or decreasing timestamps.
        DeltaOverflow: if a time gap does not fit a signed 16-bit delta.
    """
    if len(samples) == 0:
        raise EmptyRecording("Cannot encode a recording with no samples")

    positions = np.array([s.position for s in samples], dtype=np.float64)
    times = np.array([s.timestamp for s in samples], dtype=np.float64)
    velocities = np.array([s.velocity for s in samples], dtype=np.float64)

    _require_finite("position", positions)
    _require_finite("timestamp", times)
    _require_finite("velocity", velocities)

    backwards = np.flatnonzero(np.diff(times) < 0)
    if backwards.size:
        i = int(backwards[0]) + 1
        raise InvalidSample(
            f"Timestamp decreases at sample {i}: {times[i - 1]} -> {times[i]}"
        )

    ref_position = positions[0]
    ref_time = times[0]

    # Offsets from the reference, so q[0] is always zero
    q_positions = quantize(positions - ref_position, position_step)
    q_times = quantize(times - ref_time, time_step)

    delta_positions = np.diff(q_positions, axis=0, prepend=q_positions[:1])
    delta_times = np.diff(q_times, prepend=q_times[:1])

    overflow = np.flatnonzero((delta_times > TIME_DELTA_MAX) | (delta_times < TIME_DELTA_MIN))
    if overflow.size:
        i = int(overflow[0])
        raise DeltaOverflow(
            f"Gap of {times[i] - times[i - 1]:.2f}s before sample {i} exceeds the "
            f"{TIME_DELTA_MAX * time_step:.2f}s delta range"
        )

    q_velocities = quantize(velocities, velocity_step)

    metadata_indices = [i for i, s in enumerate(samples) if s.metadata]
    metadata_values = [dict(samples[i].metadata) for i in metadata_indices]

    logger.debug(
        "Encoded %d points (%d with metadata)", len(samples), len(metadata_indices)
    )

    return EncodedPointBlock(
        reference_position=tuple(ref_position.tolist()),
        reference_time=float(ref_time),
        delta_positions=[tuple(row) for row in delta_positions.tolist()],
        delta_times=delta_times.tolist(),
        velocities=[tuple(row) for row in q_velocities.tolist()],
        grounded_flags=[bool(s.is_grounded) for s in samples],
        flying_flags=[bool(s.is_flying) for s in samples],
        metadata_indices=metadata_indices,
        metadata_values=metadata_values,
    )


def _check_block(block: EncodedPointBlock) -> int:
    """Validate array shapes and ranges. Returns the sample count."""
    lengths = {
        "deltaPositions": len(block.delta_positions),
        "deltaTimes": len(block.delta_times),
        "velocities": len(block.velocities),
        "groundedFlags": len(block.grounded_flags),
        "flyingFlags": len(block.flying_flags),
    }
    if len(set(lengths.values())) != 1:
        raise CorruptPointBlock(f"Per-sample arrays disagree in length: {lengths}")

    n = lengths["deltaPositions"]
    if n == 0:
        raise CorruptPointBlock("Point block holds no samples")

    if len(block.metadata_indices) != len(block.metadata_values):
        raise CorruptPointBlock(
            f"{len(block.metadata_indices)} metadata indices but "
            f"{len(block.metadata_values)} metadata maps"
        )

    prev = -1
    for idx in block.metadata_indices:
        if idx <= prev or idx >= n:
            raise CorruptPointBlock(f"Metadata index {idx} out of order or out of range [0, {n})")
        prev = idx

    if not all(np.isfinite(block.reference_position)) or not np.isfinite(block.reference_time):
        raise CorruptPointBlock("Reference point is not finite")

    for dt in block.delta_times:
        if dt < TIME_DELTA_MIN or dt > TIME_DELTA_MAX:
            raise CorruptPointBlock(f"Time delta {dt} outside the 16-bit range")

    return n


def _as_int_array(name: str, values: list) -> np.ndarray:
    try:
        arr = np.asarray(values, dtype=np.int64)
    except OverflowError as exc:
        raise CorruptPointBlock(f"{name} holds integers out of range") from exc
    if arr.size and np.abs(arr).max() > MAX_QUANTIZED:
        raise CorruptPointBlock(f"{name} holds integers out of range")
    return arr


def decode_points(
    block: EncodedPointBlock,
    position_step: float = POSITION_STEP,
    velocity_step: float = VELOCITY_STEP,
    time_step: float = TIME_STEP,
) -> list[Sample]:
    """Reconstruct the sample sequence from an encoded point block.

    Raises:
        CorruptPointBlock: if the block's arrays are inconsistent.
    """
    n = _check_block(block)

    delta_positions = _as_int_array("deltaPositions", block.delta_positions).reshape(n, 3)
    delta_times = _as_int_array("deltaTimes", block.delta_times)
    q_velocities = _as_int_array("velocities", block.velocities).reshape(n, 3)

    ref_position = np.asarray(block.reference_position, dtype=np.float64)
    positions = ref_position + dequantize(np.cumsum(delta_positions, axis=0), position_step)
    times = block.reference_time + dequantize(np.cumsum(delta_times), time_step)
    velocities = dequantize(q_velocities, velocity_step)

    metadata = dict(zip(block.metadata_indices, block.metadata_values))

    samples = [
        Sample(
            position=tuple(pos),
            timestamp=t,
            velocity=tuple(vel),
            is_grounded=grounded,
            is_flying=flying,
            metadata=dict(metadata.get(i, {})),
        )
        for i, (pos, t, vel, grounded, flying) in enumerate(
            zip(
                positions.tolist(),
                times.tolist(),
                velocities.tolist(),
                block.grounded_flags,
                block.flying_flags,
            )
        )
    ]

    logger.debug("Decoded %d points (%d with metadata)", n, len(metadata))
    return samples
