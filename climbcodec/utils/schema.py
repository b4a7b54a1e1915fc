"""Pydantic models for climb recordings and their encoded form."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

import numpy as np
from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    FiniteFloat,
    PositiveFloat,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from climbcodec.encoding.format import (
    COMPRESSION_LEVEL,
    FORMAT_STEPS,
    FORMAT_VERSION,
    POSITION_STEP,
    TIME_STEP,
    VELOCITY_STEP,
)

Vec3 = tuple[float, float, float]
FiniteVec3 = tuple[FiniteFloat, FiniteFloat, FiniteFloat]
IntVec3 = tuple[int, int, int]

_WIRE_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# ── Per-sample metadata values ─────────────────────────────


class NumberValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["number"] = "number"
    value: int | FiniteFloat


class TextValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: str


class FlagValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["flag"] = "flag"
    value: bool


class TimestampValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["timestamp"] = "timestamp"
    value: AwareDatetime


MetadataValue = Annotated[
    Union[NumberValue, TextValue, FlagValue, TimestampValue],
    Field(discriminator="kind"),
]

_VARIANTS = (NumberValue, TextValue, FlagValue, TimestampValue)


def to_metadata_value(raw: Any) -> Any:
    """Wrap a plain Python scalar into its tagged metadata variant.

    Already-tagged values (model instances or dicts with a ``kind`` key)
    pass through for the discriminated union to validate.
    """
    if isinstance(raw, _VARIANTS):
        return raw
    if isinstance(raw, dict) and "kind" in raw:
        return raw
    if isinstance(raw, np.generic):
        raw = raw.item()
    # bool is an int subclass, check it first
    if isinstance(raw, bool):
        return {"kind": "flag", "value": raw}
    if isinstance(raw, (int, float)):
        return {"kind": "number", "value": raw}
    if isinstance(raw, str):
        return {"kind": "text", "value": raw}
    if isinstance(raw, datetime):
        if raw.tzinfo is None:
            raw = raw.replace(tzinfo=timezone.utc)
        return {"kind": "timestamp", "value": raw}
    raise ValueError(f"Unsupported metadata value type: {type(raw).__name__}")


def _coerce_vec3(v: Any) -> Any:
    if isinstance(v, np.ndarray):
        return tuple(v.tolist())
    return v


def _coerce_metadata(v: Any) -> Any:
    if v is None:
        return {}
    if not isinstance(v, dict):
        return v
    out = {}
    for key, raw in v.items():
        if not isinstance(key, str):
            raise ValueError(f"Metadata keys must be strings, got {type(key).__name__}")
        out[key] = to_metadata_value(raw)
    return out


# ── Recording ──────────────────────────────────────────────


class Sample(BaseModel):
    """One timestamped position/velocity observation."""

    model_config = _WIRE_CONFIG

    position: Vec3
    timestamp: float
    velocity: Vec3 = (0.0, 0.0, 0.0)
    is_grounded: bool = False
    is_flying: bool = False
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)

    @field_validator("position", "velocity", mode="before")
    @classmethod
    def coerce_vector(cls, v: Any) -> Any:
        return _coerce_vec3(v)

    @field_validator("metadata", mode="before")
    @classmethod
    def coerce_metadata(cls, v: Any) -> Any:
        return _coerce_metadata(v)

    def metadata_dict(self) -> dict[str, Any]:
        """Metadata as plain Python values."""
        return {k: m.value for k, m in self.metadata.items()}


class Recording(BaseModel):
    """A climb recording: ordered samples plus descriptive fields.

    Optional fields left empty are filled with documented defaults
    when the recording is wrapped into an envelope.
    """

    model_config = _WIRE_CONFIG

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str = ""
    author: str = ""
    player_name: str = ""
    map: str = ""
    biome_name: str = ""
    difficulty: str = ""
    game_version: str = ""
    mod_version: str = ""
    climb_code: str = ""
    tags: list[str] = Field(default_factory=list)
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: float | None = None  # seconds
    start_altitude: float | None = None
    end_altitude: float | None = None
    length_meters: float | None = None
    ascent_level: int | None = None
    samples: list[Sample] = Field(default_factory=list)

    @property
    def num_samples(self) -> int:
        return len(self.samples)

    def __len__(self) -> int:
        return len(self.samples)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, data: str | bytes) -> Recording:
        return cls.model_validate_json(data)


# ── Encoded form ───────────────────────────────────────────


class EncodedPointBlock(BaseModel):
    """Reference point plus per-sample quantized deltas and sparse metadata."""

    model_config = _WIRE_CONFIG

    reference_position: FiniteVec3
    reference_time: FiniteFloat
    delta_positions: list[IntVec3] = Field(default_factory=list)
    delta_times: list[int] = Field(default_factory=list)
    velocities: list[IntVec3] = Field(default_factory=list)
    grounded_flags: list[bool] = Field(default_factory=list)
    flying_flags: list[bool] = Field(default_factory=list)
    metadata_indices: list[int] = Field(default_factory=list)
    metadata_values: list[dict[str, MetadataValue]] = Field(default_factory=list)


class Envelope(BaseModel):
    """Versioned record combining descriptive fields and the point block."""

    model_config = _WIRE_CONFIG

    version: int
    id: str
    title: str
    author: str
    player_name: str
    map: str
    biome_name: str
    difficulty: str
    game_version: str
    mod_version: str
    climb_code: str = ""
    tags: list[str] = Field(default_factory=list)
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: FiniteFloat
    start_altitude: FiniteFloat
    end_altitude: FiniteFloat
    length_meters: FiniteFloat
    ascent_level: int
    original_point_count: int
    encoded_points: EncodedPointBlock

    def to_canonical_json(self) -> str:
        """Deterministic JSON text: sorted keys, compact separators."""
        return json.dumps(
            self.model_dump(mode="json", by_alias=True),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )


# ── Configuration and statistics ───────────────────────────


class CodecConfig(BaseModel):
    """Quantization steps and compression level for one format version."""

    model_config = ConfigDict(frozen=True)

    format_version: int = FORMAT_VERSION
    position_step: PositiveFloat = POSITION_STEP
    velocity_step: PositiveFloat = VELOCITY_STEP
    time_step: PositiveFloat = TIME_STEP
    compression_level: int = Field(default=COMPRESSION_LEVEL, ge=0, le=9)

    @model_validator(mode="after")
    def check_known_version(self) -> CodecConfig:
        known = FORMAT_STEPS.get(self.format_version)
        if known is not None and known != self.steps:
            raise ValueError(
                f"Format version {self.format_version} is fixed to steps {known}, "
                f"got {self.steps}. Use a new format version for other steps."
            )
        return self

    @property
    def steps(self) -> tuple[float, float, float]:
        """(position_step, velocity_step, time_step)"""
        return (self.position_step, self.velocity_step, self.time_step)


class CompressionStats(BaseModel):
    """Measured sizes of one encoded recording."""

    point_count: int
    metadata_count: int
    raw_bytes: int  # plain JSON of the recording
    envelope_bytes: int  # canonical envelope before compression
    compressed_bytes: int
    compressor: str

    @property
    def ratio(self) -> float:
        if self.compressed_bytes == 0:
            return 0.0
        return self.raw_bytes / self.compressed_bytes

    @property
    def bytes_per_point(self) -> float:
        return self.compressed_bytes / max(self.point_count, 1)
