from __future__ import annotations
from dataclasses import dataclass
import numpy as np
from tremor.utils import YamlMixin, MaterialTypes
from tremor.materials import displacement_factor, response_factor

MAX_COLLAPSE_DRIFT = 20.0  # [%]
PERIOD_PER_FLOOR = 0.1  # [s]


@dataclass
class ResponseMetrics(YamlMixin):
    max_displacement: float = 0.0  # [m] at roof
    inter_story_drift: float = 0.0  # [%]
    natural_period: float = 0.0  # [s]
    structural_response_factor: float = 0.0

    @property
    def summary(self) -> dict:
        return {
            "u_max [m]": self.max_displacement,
            "drift [%]": self.inter_story_drift,
            "T [s]": self.natural_period,
            "response factor": self.structural_response_factor,
        }


def max_displacement(
    height: float,
    magnitude: float,
    stiffness: float,
    damping_ratio: float,
    material: MaterialTypes | str,
) -> float:
    """
    roof displacement in m, grows with magnitude and height
    and shrinks with stiffness and damping.
    stiffness or damping of 0 gives inf/nan, callers validate ranges.
    """
    num = magnitude * height * displacement_factor(material)
    den = np.float64(stiffness * 20 * damping_ratio * 10)
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(num / den)


def structural_response_factor(
    magnitude: float,
    stiffness: float,
    damping_ratio: float,
    material: MaterialTypes | str,
) -> float:
    """how much the structure amplifies ground motion"""
    num = magnitude * response_factor(material)
    den = np.float64(stiffness * damping_ratio * 5)
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(num / den)


def natural_period(floors: int) -> float:
    return PERIOD_PER_FLOOR * floors


def inter_story_drift(
    displacement: float,
    height: float,
    *,
    time_since_collapse: float | None = None,
) -> float:
    """
    drift in % of height.
    after collapse it grows by (1 + dt/2), capped at 20%.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        drift = float(np.float64(displacement) / height * 100)
    if time_since_collapse is None:
        return drift
    amplified = drift * (1 + time_since_collapse / 2)
    return min(MAX_COLLAPSE_DRIFT, amplified)


def response_metrics(
    *,
    height: float,
    floors: int,
    magnitude: float,
    stiffness: float,
    damping_ratio: float,
    material: MaterialTypes | str,
    time_since_collapse: float | None = None,
) -> ResponseMetrics:
    u = max_displacement(height, magnitude, stiffness, damping_ratio, material)
    return ResponseMetrics(
        max_displacement=u,
        inter_story_drift=inter_story_drift(
            u, height, time_since_collapse=time_since_collapse
        ),
        natural_period=natural_period(floors),
        structural_response_factor=structural_response_factor(
            magnitude, stiffness, damping_ratio, material
        ),
    )
