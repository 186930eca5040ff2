from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np
import pandas as pd
from tremor.utils import (
    YamlMixin,
    DamageStatus,
    MaterialTypes,
    STRUCTURAL_COMPONENTS,
    NON_STRUCTURAL_COMPONENTS,
    COMPONENTS,
    clamp,
)
from tremor.materials import component_vulnerability

# (upper bound [%], status, colour hint)
DAMAGE_BANDS: tuple = (
    (10.0, DamageStatus.UNDAMAGED, "green"),
    (25.0, DamageStatus.MINOR, "lime"),
    (50.0, DamageStatus.MODERATE, "yellow"),
    (75.0, DamageStatus.SEVERE, "orange"),
    (np.inf, DamageStatus.CRITICAL, "red"),
)

# share of the base damage each component sees up the height of the building
HEIGHT_WEIGHTS = {
    "columns": 1.2,
    "beams": 1.0,
    "slabs": 0.8,
    "foundation": 0.7,
    "facades": 1.0,
    "interior_walls": 0.9,
    "utilities": 0.8,
}

# (start %, ramp %) of each component over the 3s collapse progression
COLLAPSE_PROGRESSION = {
    "columns": (80.0, 20.0),
    "beams": (75.0, 25.0),
    "slabs": (70.0, 30.0),
    "foundation": (60.0, 40.0),
    "facades": (90.0, 10.0),
    "interior_walls": (85.0, 15.0),
    "utilities": (100.0, 0.0),
}
COLLAPSE_RAMP_SECONDS = 3.0


def _band(value: float) -> tuple:
    for band in DAMAGE_BANDS:
        if value < band[0]:
            return band
    return DAMAGE_BANDS[-1]


def damage_status(value: float) -> DamageStatus:
    """
    <10 Undamaged, <25 Minor, <50 Moderate, <75 Severe, else Critical
    """
    return _band(value)[1]


def damage_color(value: float) -> str:
    return _band(value)[2]


@dataclass
class ComponentState:
    value: float = 0.0  # [%]
    status: str = DamageStatus.UNDAMAGED.value

    @classmethod
    def from_value(cls, value: float) -> "ComponentState":
        return cls(value=float(value), status=damage_status(value).value)

    @classmethod
    def critical(cls, value: float) -> "ComponentState":
        return cls(value=float(value), status=DamageStatus.CRITICAL.value)

    @property
    def color(self) -> str:
        return damage_color(self.value)


@dataclass
class ComponentDamage(YamlMixin):
    columns: ComponentState = field(default_factory=ComponentState)
    beams: ComponentState = field(default_factory=ComponentState)
    slabs: ComponentState = field(default_factory=ComponentState)
    foundation: ComponentState = field(default_factory=ComponentState)
    facades: ComponentState = field(default_factory=ComponentState)
    interior_walls: ComponentState = field(default_factory=ComponentState)
    utilities: ComponentState = field(default_factory=ComponentState)

    def __post_init__(self):
        for name in COMPONENTS:
            state = getattr(self, name)
            if isinstance(state, dict):
                setattr(self, name, ComponentState(**state))

    @property
    def structural(self) -> dict[str, ComponentState]:
        return {name: getattr(self, name) for name in STRUCTURAL_COMPONENTS}

    @property
    def non_structural(self) -> dict[str, ComponentState]:
        return {name: getattr(self, name) for name in NON_STRUCTURAL_COMPONENTS}

    def status_of(self, name: str) -> str:
        return getattr(self, name).status

    def is_status(self, name: str, *statuses: DamageStatus) -> bool:
        return self.status_of(name) in [s.value for s in statuses]

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for name in COMPONENTS:
            state = getattr(self, name)
            category = (
                "structural" if name in STRUCTURAL_COMPONENTS else "nonstructural"
            )
            rows.append(
                dict(
                    component=name,
                    category=category,
                    value=state.value,
                    status=state.status,
                )
            )
        return pd.DataFrame(rows).set_index("component")


def assess_component_damage(
    *,
    magnitude: float,
    structural_response_factor: float,
    stiffness: float,
    damping_ratio: float,
    material: MaterialTypes | str,
) -> ComponentDamage:
    """
    value = base * vulnerability * stiffness_factor * damping_factor * height_weight
    clipped to [0, 100], where base = M * response_factor * 10.
    stiffer and better damped buildings take less damage.
    """
    base = magnitude * structural_response_factor * 10
    stiffness_factor = (11 - stiffness) / 5
    with np.errstate(divide="ignore", invalid="ignore"):
        damping_factor = float(0.05 / np.float64(damping_ratio))
    vulnerability = component_vulnerability(material)
    states = {}
    for name in COMPONENTS:
        raw = (
            base
            * vulnerability[name]
            * stiffness_factor
            * damping_factor
            * HEIGHT_WEIGHTS[name]
        )
        states[name] = ComponentState.from_value(clamp(raw, 0, 100))
    return ComponentDamage(**states)


def collapse_component_damage(time_since_collapse: float) -> ComponentDamage:
    """
    after collapse every component is Critical and ramps to 100%
    over 3 seconds, utilities are gone at once.
    """
    progress = min(1.0, time_since_collapse / COLLAPSE_RAMP_SECONDS)
    states = {}
    for name, (start, ramp) in COLLAPSE_PROGRESSION.items():
        states[name] = ComponentState.critical(min(100.0, start + progress * ramp))
    return ComponentDamage(**states)
