from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache
import numpy as np
import pandas as pd
import pandera as pa
from plotly.graph_objects import Figure, Scatter
from tremor.hazard import SeismicParameters
from tremor.utils import YamlMixin, IntensityModes, enum_value

PEAK_FRACTION = 0.6  # the bell curve completes at 60% of the event
SNAPSHOT_BLEND_WINDOW = 0.5  # [s]
PLAYBACK_SNAP_WINDOW = 0.1  # [s]

TimelineDataFrame = pd.DataFrame
"""
one row per sampled time, index t [s]
      intensity  columns  beams  slabs  foundation
0.00   0.000000    0.000  0.000  0.000       0.000
0.25   0.000137    0.025  0.025  0.012       0.038
"""

timeline_schema = pa.DataFrameSchema(
    columns={
        "intensity": pa.Column(float, pa.Check.in_range(0.0, 1.0), coerce=True),
        "columns": pa.Column(float, pa.Check.in_range(0.0, 1.0), coerce=True),
        "beams": pa.Column(float, pa.Check.in_range(0.0, 1.0), coerce=True),
        "slabs": pa.Column(float, pa.Check.in_range(0.0, 1.0), coerce=True),
        "foundation": pa.Column(float, pa.Check.in_range(0.0, 1.0), coerce=True),
    },
    index=pa.Index(float, coerce=True, name="t"),
)


@dataclass(frozen=True)
class StressLevels:
    """normalized 0-1 stress per structural component"""

    columns: float = 0.0
    beams: float = 0.0
    slabs: float = 0.0
    foundation: float = 0.0

    def lerp(self, other: "StressLevels", progress: float) -> "StressLevels":
        return StressLevels(
            columns=self.columns + (other.columns - self.columns) * progress,
            beams=self.beams + (other.beams - self.beams) * progress,
            slabs=self.slabs + (other.slabs - self.slabs) * progress,
            foundation=self.foundation
            + (other.foundation - self.foundation) * progress,
        )

    def to_dict(self) -> dict[str, float]:
        return dict(
            columns=self.columns,
            beams=self.beams,
            slabs=self.slabs,
            foundation=self.foundation,
        )


@dataclass(frozen=True)
class CriticalPoint:
    description: str
    location: str
    damage_level: str


@dataclass(frozen=True)
class Snapshot(YamlMixin):
    time_point: float
    seismic_intensity: float
    stress_levels: StressLevels
    max_deformation: float
    description: str
    critical_points: tuple[CriticalPoint, ...] = field(default_factory=tuple)


# (duration fraction, intensity, stress levels, max deformation, description, critical points)
# the last keyframe sits exactly at the end of the event, the others are floored to whole seconds
KEYFRAMES: tuple = (
    (
        0.0,
        0.0,
        StressLevels(0.0, 0.0, 0.0, 0.0),
        0.0,
        "Initial state before earthquake",
        (),
    ),
    (
        0.1,
        0.2,
        StressLevels(0.1, 0.1, 0.05, 0.15),
        0.1,
        "P-wave arrival - Initial compression waves detected",
        (CriticalPoint("First ground movement", "Foundation", "None"),),
    ),
    (
        0.25,
        0.5,
        StressLevels(0.3, 0.35, 0.2, 0.4),
        0.4,
        "S-wave arrival - Stronger shear waves causing significant lateral movement",
        (
            CriticalPoint(
                "Lateral forces begin affecting columns", "Lower columns", "Minor"
            ),
            CriticalPoint(
                "Foundation experiencing stress",
                "Foundation-column connections",
                "Minor",
            ),
        ),
    ),
    (
        0.5,
        1.0,
        StressLevels(0.8, 0.9, 0.7, 0.75),
        1.0,
        "Peak intensity - Maximum ground acceleration and structural stress",
        (
            CriticalPoint("Maximum lateral displacement", "Upper floors", "Severe"),
            CriticalPoint(
                "Beam-column connections under high stress",
                "Connection points",
                "Moderate",
            ),
            CriticalPoint(
                "Potential cracking in concrete elements", "Lower columns", "Moderate"
            ),
        ),
    ),
    (
        0.75,
        0.6,
        StressLevels(0.5, 0.6, 0.4, 0.5),
        0.6,
        "Declining intensity - Reduced ground motion but cumulative structural damage",
        (
            CriticalPoint(
                "Residual deformation in structure", "Overall building", "Moderate"
            ),
            CriticalPoint(
                "Potential permanent damage to connections",
                "Beam-column joints",
                "Moderate",
            ),
        ),
    ),
    (
        1.0,
        0.1,
        StressLevels(0.3, 0.4, 0.2, 0.3),
        0.2,
        "Final state - Residual deformation and structural assessment",
        (
            CriticalPoint(
                "Permanent structural deformation", "Multiple locations", "Minor"
            ),
            CriticalPoint(
                "Potential hidden damage requiring inspection",
                "Connection points",
                "Minor",
            ),
        ),
    ),
)


@lru_cache(maxsize=32)
def build_snapshots(duration: float) -> tuple[Snapshot, ...]:
    """
    six keyframes: initial, P-wave, S-wave, peak, decline, final.
    cached per duration, callers get the same read-only tuple back.
    """
    snapshots = []
    last = len(KEYFRAMES) - 1
    for ix, (fraction, intensity, stress, deformation, description, points) in enumerate(
        KEYFRAMES
    ):
        time_point = float(duration) if ix == last else float(np.floor(duration * fraction))
        snapshots.append(
            Snapshot(
                time_point=time_point,
                seismic_intensity=intensity,
                stress_levels=stress,
                max_deformation=deformation,
                description=description,
                critical_points=points,
            )
        )
    return tuple(snapshots)


def continuous_intensity(seismic: SeismicParameters, t: float | np.ndarray):
    """
    bell curve over the first 60% of the event, attenuated by
    magnitude, distance and depth, with a +/-10% 10 rad/s flutter.
    accepts scalars or arrays of times, clipped to [0, 1].
    """
    t = np.asarray(t, dtype=float)
    progress = np.minimum(t / (seismic.duration * PEAK_FRACTION), 1.0)
    base = np.where(
        progress < 0.5,
        4 * progress**2 * (1 - progress),
        4 * (1 - progress) ** 2 * progress,
    )
    magnitude_factor = 10 ** ((seismic.magnitude - 4) / 2) / 10
    distance_factor = np.exp(-seismic.distance / 100)
    depth_factor = np.exp(-seismic.depth / 50)
    frequency_mod = np.sin(10 * t) * 0.1 + 1
    intensity = base * magnitude_factor * distance_factor * depth_factor * frequency_mod
    intensity = np.clip(intensity, 0.0, 1.0)
    if intensity.ndim == 0:
        return float(intensity)
    return intensity


def nearest_snapshot(snapshots: tuple[Snapshot, ...], t: float) -> int:
    """index of the keyframe closest to t, the earliest one wins ties"""
    nearest = 0
    nearest_diff = abs(snapshots[0].time_point - t)
    for ix, snapshot in enumerate(snapshots[1:], start=1):
        diff = abs(snapshot.time_point - t)
        if diff < nearest_diff:
            nearest, nearest_diff = ix, diff
    return nearest


def blended_intensity(
    seismic: SeismicParameters,
    t: float,
    snapshot: Snapshot,
) -> float:
    """
    keyframe intensity near the keyframe, easing linearly into the
    continuous curve over 0.5 s either side of it.
    """
    diff = abs(t - snapshot.time_point)
    if diff < SNAPSHOT_BLEND_WINDOW:
        weight = 1 - diff / SNAPSHOT_BLEND_WINDOW
        return snapshot.seismic_intensity * weight + continuous_intensity(
            seismic, t
        ) * (1 - weight)
    return snapshot.seismic_intensity


def compute_intensity(
    seismic: SeismicParameters,
    elapsed_time: float,
    mode: IntensityModes | str = IntensityModes.CONTINUOUS,
    selected: int | None = None,
) -> float:
    """
    normalized [0, 1] intensity.
    in snapshot mode the selected keyframe is used, or the nearest one when none is selected.
    """
    mode = enum_value(mode)
    if mode == IntensityModes.CONTINUOUS.value:
        return continuous_intensity(seismic, elapsed_time)
    if mode != IntensityModes.SNAPSHOT.value:
        raise ValueError(f"unknown intensity mode '{mode}'")
    snapshots = build_snapshots(seismic.duration)
    if selected is None:
        selected = nearest_snapshot(snapshots, elapsed_time)
    return blended_intensity(seismic, elapsed_time, snapshots[selected])


def interpolate_stress_levels(
    snapshots: tuple[Snapshot, ...], t: float
) -> StressLevels:
    prev, nxt = snapshots[0], snapshots[-1]
    for a, b in zip(snapshots[:-1], snapshots[1:]):
        if a.time_point <= t <= b.time_point:
            prev, nxt = a, b
            break
    span = nxt.time_point - prev.time_point
    progress = 0.0 if span == 0 else (t - prev.time_point) / span
    return prev.stress_levels.lerp(nxt.stress_levels, progress)


def nearest_critical_points(
    snapshots: tuple[Snapshot, ...], t: float
) -> tuple[CriticalPoint, ...]:
    return snapshots[nearest_snapshot(snapshots, t)].critical_points


def advance_playback(
    snapshots: tuple[Snapshot, ...], t: float, dt: float, duration: float
) -> float:
    """
    next playback time: snaps onto a keyframe within 0.1 s
    and wraps to 0 at the end of the event.
    a playhead leaving the keyframe it sits on is not pulled back.
    """
    new_time = t + dt
    nearest = snapshots[nearest_snapshot(snapshots, new_time)]
    leaving = (
        abs(nearest.time_point - t) < PLAYBACK_SNAP_WINDOW
        and new_time > nearest.time_point
    )
    if abs(nearest.time_point - new_time) < PLAYBACK_SNAP_WINDOW and not leaving:
        return nearest.time_point
    return 0.0 if new_time >= duration else new_time


def intensity_timeline(
    seismic: SeismicParameters,
    times: np.ndarray | list[float] | None = None,
    num: int = 200,
) -> TimelineDataFrame:
    if times is None:
        times = np.linspace(0, seismic.duration, num)
    times = np.asarray(times, dtype=float)
    snapshots = build_snapshots(seismic.duration)
    stresses = [interpolate_stress_levels(snapshots, t).to_dict() for t in times]
    df = pd.DataFrame(stresses, index=pd.Index(times, name="t"))
    df.insert(0, "intensity", continuous_intensity(seismic, times))
    return timeline_schema.validate(df)


def intensity_figure(seismic: SeismicParameters, num: int = 200) -> Figure:
    df = intensity_timeline(seismic, num=num)
    snapshots = build_snapshots(seismic.duration)
    fig = Figure()
    fig.add_trace(
        Scatter(
            x=df.index,
            y=df["intensity"],
            mode="lines",
            name="continuous",
            line=dict(width=1.0, color="Black"),
        )
    )
    fig.add_trace(
        Scatter(
            x=[s.time_point for s in snapshots],
            y=[s.seismic_intensity for s in snapshots],
            mode="markers",
            name="snapshots",
            text=[s.description for s in snapshots],
            marker=dict(size=8, color="red"),
        )
    )
    fig.update_layout(
        xaxis_title="t (s)",
        yaxis_title="intensity",
        title_text=f"M{seismic.magnitude:.1f} {seismic.richter_class}",
    )
    return fig
