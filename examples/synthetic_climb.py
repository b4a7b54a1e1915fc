"""climbcodec Example: Encode a synthetic climb

Simulates a player zig-zagging up a slope at 10 samples per second,
encodes the recording, and checks the round trip.

Run:
    python examples/synthetic_climb.py

Output:
    - Creates synthetic_climb.climb
    - Prints sizes and the worst reconstruction error
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import numpy as np

from climbcodec import ClimbCodec, Recording, Sample
from climbcodec.stats import summarize


def simulate_climb(seconds: float = 120.0, rate: float = 10.0, seed: int = 0) -> Recording:
    """Zig-zag up a slope, pausing at a ledge halfway."""
    rng = np.random.default_rng(seed)
    n = int(seconds * rate)
    t = np.arange(n) / rate

    x = 8.0 * np.sin(t / 6.0)
    y = 0.9 * t + rng.normal(0.0, 0.02, n)
    z = 0.4 * t
    positions = np.stack([x, y, z], axis=1)
    velocities = np.gradient(positions, t, axis=0)

    samples = []
    for i in range(n):
        metadata = {}
        if i == n // 2:
            metadata = {"event": "ledge", "stamina": 0.41}
        samples.append(Sample(
            position=positions[i],
            timestamp=float(t[i]),
            velocity=velocities[i],
            is_grounded=bool(i % 25),
            metadata=metadata,
        ))

    start = datetime.now(timezone.utc)
    return Recording(
        title="Synthetic zig-zag",
        author="example",
        tags=["synthetic"],
        start_time=start,
        end_time=start + timedelta(seconds=seconds),
        samples=samples,
    )


def main() -> None:
    recording = simulate_climb()
    codec = ClimbCodec()

    blob = codec.encode(recording)
    path = Path("synthetic_climb.climb")
    path.write_bytes(blob)

    stats = codec.compression_stats(recording)
    print(f"Points:      {stats.point_count}")
    print(f"Raw JSON:    {stats.raw_bytes} bytes")
    print(f"Envelope:    {stats.envelope_bytes} bytes")
    print(f"Compressed:  {stats.compressed_bytes} bytes ({stats.ratio:.1f}x)")
    print(f"Estimated:   {codec.estimate_ratio(recording):.1f}x")

    restored = codec.decode(path.read_bytes())
    before = np.array([s.position for s in recording.samples])
    after = np.array([s.position for s in restored.samples])
    print(f"Max position error: {np.abs(before - after).max():.4f} m")

    print(summarize(restored))


if __name__ == "__main__":
    main()
