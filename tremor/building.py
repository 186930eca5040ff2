from __future__ import annotations
from dataclasses import dataclass, field
from tremor.utils import (
    YamlMixin,
    MaterialTypes,
    InvalidParametersException,
    enum_value,
)

REINFORCEMENT_LEVELS: tuple = ("light", "medium", "heavy")
CONNECTION_TYPES: tuple = ("rigid", "semi-rigid", "pinned")
SLAB_TYPES: tuple = ("one-way", "two-way", "flat")
FOUNDATION_TYPES: tuple = ("isolated", "strip", "raft", "pile")

STIFFNESS_RANGE: tuple[float, float] = (1.0, 10.0)
DAMPING_RANGE: tuple[float, float] = (0.01, 0.1)


@dataclass
class ColumnSpec:
    width: float = 0.5
    reinforcement: str = "medium"
    connection: str = "rigid"


@dataclass
class BeamSpec:
    width: float = 0.3
    depth: float = 0.6
    reinforcement: str = "medium"
    connection: str = "rigid"


@dataclass
class SlabSpec:
    thickness: float = 0.2
    reinforcement: str = "medium"
    type: str = "two-way"


@dataclass
class FoundationSpec:
    type: str = "isolated"
    depth: float = 2.0


@dataclass
class StructuralComponents:
    columns: ColumnSpec = field(default_factory=ColumnSpec)
    beams: BeamSpec = field(default_factory=BeamSpec)
    slabs: SlabSpec = field(default_factory=SlabSpec)
    foundation: FoundationSpec = field(default_factory=FoundationSpec)

    def __post_init__(self):
        if isinstance(self.columns, dict):
            self.columns = ColumnSpec(**self.columns)
        if isinstance(self.beams, dict):
            self.beams = BeamSpec(**self.beams)
        if isinstance(self.slabs, dict):
            self.slabs = SlabSpec(**self.slabs)
        if isinstance(self.foundation, dict):
            self.foundation = FoundationSpec(**self.foundation)

    def errors(self) -> list[str]:
        errors = []
        for name, spec in (("columns", self.columns), ("beams", self.beams)):
            if spec.reinforcement not in REINFORCEMENT_LEVELS:
                errors.append(f"{name}.reinforcement={spec.reinforcement}")
            if spec.connection not in CONNECTION_TYPES:
                errors.append(f"{name}.connection={spec.connection}")
        if self.slabs.reinforcement not in REINFORCEMENT_LEVELS:
            errors.append(f"slabs.reinforcement={self.slabs.reinforcement}")
        if self.slabs.type not in SLAB_TYPES:
            errors.append(f"slabs.type={self.slabs.type}")
        if self.foundation.type not in FOUNDATION_TYPES:
            errors.append(f"foundation.type={self.foundation.type}")
        return errors


@dataclass
class BuildingParameters(YamlMixin):
    """
    rectangular building, uniform storeys.
    stiffness is a 1-10 index, not a physical stiffness.
    edited only between runs.
    """

    height: float = 50.0
    width: float = 20.0
    depth: float = 20.0
    floors: int = 6
    stiffness: float = 5.0
    damping_ratio: float = 0.05
    material: str = MaterialTypes.CONCRETE.value
    components: StructuralComponents | None = None

    def __post_init__(self):
        self.material = enum_value(self.material)
        if isinstance(self.components, dict):
            self.components = StructuralComponents(**self.components)

    @property
    def storey_height(self) -> float:
        return self.height / self.floors

    def validate(self) -> None:
        errors = []
        for name in ("height", "width", "depth"):
            value = getattr(self, name)
            if value <= 0:
                errors.append(f"{name}={value} must be positive")
        if self.floors < 1:
            errors.append(f"floors={self.floors} must be >= 1")
        lo, hi = STIFFNESS_RANGE
        if not lo <= self.stiffness <= hi:
            errors.append(f"stiffness={self.stiffness} must be in [{lo}, {hi}]")
        lo, hi = DAMPING_RANGE
        if not lo <= self.damping_ratio <= hi:
            errors.append(f"damping_ratio={self.damping_ratio} must be in [{lo}, {hi}]")
        if self.material not in MaterialTypes.list():
            errors.append(
                f"material={self.material} must be one of {MaterialTypes.list()}"
            )
        if self.components is not None:
            errors += self.components.errors()
        if errors:
            raise InvalidParametersException("; ".join(errors))
