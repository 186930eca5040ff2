from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
import numpy as np
from tremor.utils import YamlMixin, MaterialTypes, CollapseLatchViolation, clamp
from tremor.materials import collapse_vulnerability

COLLAPSE_RISK_TRIGGER = 0.5
EARLIEST_COLLAPSE = 4.0  # [s] at risk == 1
COLLAPSE_DELAY_SPAN = 15.0  # [s] added as risk drops towards 0


class CollapseStates(Enum):
    STANDING = "standing"
    COLLAPSED = "collapsed"

    @classmethod
    def list(cls):
        return list(map(lambda c: c.value, cls))


def structural_factor(stiffness: float, damping_ratio: float) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        return float((10 - stiffness) / 10 * (1 / np.float64(damping_ratio * 15)))


def collapse_risk(
    magnitude: float,
    stiffness: float,
    damping_ratio: float,
    material: MaterialTypes | str,
) -> float:
    """
    [0, 1] severity combining magnitude, material vulnerability
    and stiffness/damping. zero below magnitude 4.
    """
    raw = (
        (magnitude * 0.15 - 0.6)
        * collapse_vulnerability(material)
        * structural_factor(stiffness, damping_ratio)
    )
    return clamp(raw, 0.0, 1.0)


def collapse_threshold(risk: float) -> float:
    """elapsed time [s] after which a risky building comes down"""
    if risk > 0:
        return EARLIEST_COLLAPSE + (1 - risk) * COLLAPSE_DELAY_SPAN
    return np.inf


def collapse_triggered(risk: float, elapsed_time: float) -> bool:
    return risk > COLLAPSE_RISK_TRIGGER and elapsed_time > collapse_threshold(risk)


@dataclass
class CollapseState(YamlMixin):
    """
    one-way latch owned by the caller, one per run.
    Standing -> Collapsed happens at most once, collapse_time is
    the first tick where the predicate held and is never moved.
    """

    has_collapsed: bool = False
    collapse_time: float | None = None

    def __post_init__(self):
        if self.has_collapsed and self.collapse_time is None:
            raise CollapseLatchViolation("collapsed state without an onset time")
        if not self.has_collapsed and self.collapse_time is not None:
            raise CollapseLatchViolation(
                f"standing state with onset time {self.collapse_time}"
            )

    @property
    def state(self) -> CollapseStates:
        return CollapseStates.COLLAPSED if self.has_collapsed else CollapseStates.STANDING

    def observe(self, triggered: bool, elapsed_time: float) -> "CollapseState":
        """latch on the first triggered tick, ignore everything afterwards"""
        if not self.has_collapsed and triggered:
            self.has_collapsed = True
            self.collapse_time = elapsed_time
        return self

    def time_since_collapse(self, elapsed_time: float) -> float | None:
        if not self.has_collapsed:
            return None
        return elapsed_time - self.collapse_time

    def check_follows(self, previous: "CollapseState") -> None:
        """raises if this state heals or moves the onset of `previous`"""
        if not previous.has_collapsed:
            return
        if not self.has_collapsed or self.collapse_time != previous.collapse_time:
            raise CollapseLatchViolation(
                f"collapse at t={previous.collapse_time} cannot become {self}"
            )

    def reset(self) -> None:
        self.has_collapsed = False
        self.collapse_time = None

    def copy(self) -> "CollapseState":
        return replace(self)


def update_collapse(
    state: CollapseState,
    *,
    magnitude: float,
    stiffness: float,
    damping_ratio: float,
    material: MaterialTypes | str,
    elapsed_time: float,
) -> CollapseState:
    risk = collapse_risk(magnitude, stiffness, damping_ratio, material)
    return state.observe(collapse_triggered(risk, elapsed_time), elapsed_time)
