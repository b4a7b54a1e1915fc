"""Summary statistics and validation for climb recordings.

Usage:
    from climbcodec.stats import summarize, validation_errors

    summary = summarize(recording)
    print(summary.total_distance, summary.difficulty)

    for problem in validation_errors(recording):
        print(problem)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from climbcodec.utils.schema import Recording, Sample

# Minimum path length for a climb worth publishing (meters)
MIN_CLIMB_LENGTH = 10.0

DIFFICULTY_LABELS = {
    1: "Easy",
    2: "Medium",
    3: "Hard",
    4: "Very Hard",
    5: "Extreme",
}


@dataclass
class ClimbSummary:
    """Derived metrics for one recording."""

    num_samples: int
    duration: float
    total_distance: float
    average_speed: float
    max_speed: float
    min_altitude: float
    max_altitude: float
    elevation_gain: float
    ascent_level: int
    difficulty: str
    biome: str

    def __repr__(self) -> str:
        return (
            f"ClimbSummary(samples={self.num_samples}, distance={self.total_distance:.1f}m, "
            f"ascent_level={self.ascent_level})"
        )


def _positions(samples: Sequence[Sample]) -> np.ndarray:
    return np.array([s.position for s in samples], dtype=np.float64).reshape(-1, 3)


def _timestamps(samples: Sequence[Sample]) -> np.ndarray:
    return np.array([s.timestamp for s in samples], dtype=np.float64)


def span(samples: Sequence[Sample]) -> float:
    """Seconds between the first and last sample."""
    if len(samples) < 2:
        return 0.0
    return float(samples[-1].timestamp - samples[0].timestamp)


def total_distance(samples: Sequence[Sample]) -> float:
    """Length of the path through all sample positions, in meters."""
    if len(samples) < 2:
        return 0.0
    steps = np.diff(_positions(samples), axis=0)
    return float(np.linalg.norm(steps, axis=1).sum())


def max_speed(samples: Sequence[Sample]) -> float:
    """Highest speed between consecutive samples, ignoring zero time gaps."""
    if len(samples) < 2:
        return 0.0
    dist = np.linalg.norm(np.diff(_positions(samples), axis=0), axis=1)
    dt = np.diff(_timestamps(samples))
    moving = dt > 0
    if not moving.any():
        return 0.0
    return float(np.max(dist[moving] / dt[moving]))


def average_speed(samples: Sequence[Sample], duration: float | None = None) -> float:
    """Path length divided by duration (sample span if not given)."""
    if duration is None:
        duration = span(samples)
    if duration <= 0:
        return 0.0
    return total_distance(samples) / duration


def altitude_range(samples: Sequence[Sample]) -> tuple[float, float]:
    """(min, max) of the vertical (y) coordinate."""
    if len(samples) == 0:
        return (0.0, 0.0)
    y = _positions(samples)[:, 1]
    return (float(y.min()), float(y.max()))


def elevation_gain(samples: Sequence[Sample]) -> float:
    if len(samples) == 0:
        return 0.0
    return float(samples[-1].position[1] - samples[0].position[1])


def ascent_level(samples: Sequence[Sample], duration: float | None = None) -> int:
    """Score a climb from 1 (easy) to 5 (extreme).

    Points are awarded for elevation gain, path length and duration,
    and adjusted by average speed: slow climbs are harder, very fast
    ones are likely an easier route.
    """
    if len(samples) == 0:
        return 1
    if duration is None:
        duration = span(samples)

    gain = elevation_gain(samples)
    distance = total_distance(samples)
    minutes = duration / 60.0

    score = 0
    if gain > 1000:
        score += 3
    elif gain > 500:
        score += 2
    elif gain > 200:
        score += 1

    if distance > 5000:
        score += 2
    elif distance > 2000:
        score += 1

    if minutes > 60:
        score += 2
    elif minutes > 30:
        score += 1

    speed = average_speed(samples, duration)
    if speed < 2:
        score += 1
    elif speed > 10:
        score -= 1

    return int(np.clip(1 + score // 2, 1, 5))


def difficulty_label(level: int) -> str:
    return DIFFICULTY_LABELS.get(level, "Medium")


def detect_biome(samples: Sequence[Sample]) -> str:
    """Classify the climb area from its mean altitude and position."""
    if len(samples) == 0:
        return "Unknown"
    x, y, z = _positions(samples).mean(axis=0)

    if y > 2000:
        return "High Mountain"
    if y > 1000:
        return "Mountain"
    if y > 500:
        return "Hills"
    if abs(x) < 500 and abs(z) < 500:
        return "Valley"
    return "Plains"


def summarize(recording: Recording) -> ClimbSummary:
    """Compute all derived metrics for a recording."""
    samples = recording.samples
    duration = recording.duration if recording.duration is not None else span(samples)
    low, high = altitude_range(samples)
    level = ascent_level(samples, duration)
    return ClimbSummary(
        num_samples=len(samples),
        duration=duration,
        total_distance=total_distance(samples),
        average_speed=average_speed(samples, duration),
        max_speed=max_speed(samples),
        min_altitude=low,
        max_altitude=high,
        elevation_gain=elevation_gain(samples),
        ascent_level=level,
        difficulty=difficulty_label(level),
        biome=detect_biome(samples),
    )


def validation_errors(recording: Recording) -> list[str]:
    """List reasons a recording is not fit to publish. Empty means valid."""
    errors = []
    if not recording.title:
        errors.append("Title is required")
    if not recording.author:
        errors.append("Author is required")
    if len(recording.samples) == 0:
        errors.append("Climb must have recorded points")

    duration = recording.duration if recording.duration is not None else span(recording.samples)
    if duration <= 0:
        errors.append("Duration must be greater than 0")

    if recording.samples and total_distance(recording.samples) < MIN_CLIMB_LENGTH:
        errors.append("Climb distance seems too short")

    return errors


def is_valid(recording: Recording) -> bool:
    return not validation_errors(recording)
