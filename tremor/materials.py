from __future__ import annotations
from dataclasses import dataclass, field
from tremor.utils import (
    YamlMixin,
    MaterialTypes,
    InvalidParametersException,
    enum_value,
)

# empirical constants, not derived from a physical model.
# displacement and response amplification use different tables on purpose.
DISPLACEMENT_FACTORS = {
    MaterialTypes.CONCRETE.value: 0.8,
    MaterialTypes.STEEL.value: 1.0,
    MaterialTypes.WOOD.value: 1.5,
}
RESPONSE_FACTORS = {
    MaterialTypes.CONCRETE.value: 0.9,
    MaterialTypes.STEEL.value: 1.1,
    MaterialTypes.WOOD.value: 1.4,
}
# inverse of strength, used by the collapse predicate
COLLAPSE_VULNERABILITY = {
    MaterialTypes.CONCRETE.value: 0.7,
    MaterialTypes.STEEL.value: 0.8,
    MaterialTypes.WOOD.value: 1.3,
}
# structural component vulnerability by material
COMPONENT_VULNERABILITY = {
    MaterialTypes.CONCRETE.value: {
        "columns": 0.8,
        "beams": 0.9,
        "slabs": 0.75,
        "foundation": 0.6,
    },
    MaterialTypes.STEEL.value: {
        "columns": 0.7,
        "beams": 0.8,
        "slabs": 0.85,
        "foundation": 0.7,
    },
    MaterialTypes.WOOD.value: {
        "columns": 1.2,
        "beams": 1.1,
        "slabs": 1.0,
        "foundation": 0.9,
    },
}
# non-structural elements are more fragile regardless of the frame material
NON_STRUCTURAL_VULNERABILITY = {
    "facades": 1.3,
    "interior_walls": 1.2,
    "utilities": 1.4,
}
# inter-storey drift thresholds [%] separating the 4 damage levels
DRIFT_THRESHOLDS = {
    MaterialTypes.CONCRETE.value: (0.5, 1.0, 2.0),
    MaterialTypes.STEEL.value: (0.7, 1.5, 2.5),
    MaterialTypes.WOOD.value: (0.4, 0.8, 1.5),
}


def _lookup(table: dict, material: MaterialTypes | str):
    """unknown materials fall back to wood, the most vulnerable row."""
    return table.get(enum_value(material), table[MaterialTypes.WOOD.value])


def displacement_factor(material: MaterialTypes | str) -> float:
    return _lookup(DISPLACEMENT_FACTORS, material)


def response_factor(material: MaterialTypes | str) -> float:
    return _lookup(RESPONSE_FACTORS, material)


def collapse_vulnerability(material: MaterialTypes | str) -> float:
    return _lookup(COLLAPSE_VULNERABILITY, material)


def component_vulnerability(material: MaterialTypes | str) -> dict[str, float]:
    return {**_lookup(COMPONENT_VULNERABILITY, material), **NON_STRUCTURAL_VULNERABILITY}


def drift_thresholds(material: MaterialTypes | str) -> tuple[float, float, float]:
    return _lookup(DRIFT_THRESHOLDS, material)


class MaterialProperties:
    """
    each material knows how much it deforms relative to
    its reference modulus and how much stress it can take
    relative to its reference strength.
    """

    REFERENCE_MODULUS: float = 1.0
    REFERENCE_STRENGTH: float = 1.0

    @property
    def strength(self) -> float:
        raise NotImplementedError

    @property
    def detailing_factor(self) -> float:
        return 1.0

    @property
    def deformation_factor(self) -> float:
        """higher modulus => less deformation"""
        return self.REFERENCE_MODULUS / self.elastic_modulus * self.detailing_factor

    @property
    def stress_capacity_factor(self) -> float:
        return self.strength / self.REFERENCE_STRENGTH


@dataclass
class ConcreteProperties(MaterialProperties):
    """units: MPa and GPa"""

    compressive_strength: float = 30.0
    tensile_strength: float = 3.0
    elastic_modulus: float = 25.0
    reinforcement: str = "standard"

    REFERENCE_MODULUS = 25.0
    REFERENCE_STRENGTH = 30.0
    REINFORCEMENT_FACTORS = {
        "standard": 1.0,
        "high-strength": 0.8,
        "fiber-reinforced": 0.7,
    }

    @property
    def strength(self) -> float:
        return self.compressive_strength

    @property
    def detailing_factor(self) -> float:
        return self.REINFORCEMENT_FACTORS.get(self.reinforcement, 1.0)


@dataclass
class SteelProperties(MaterialProperties):
    yield_strength: float = 350.0
    tensile_strength: float = 450.0
    elastic_modulus: float = 200.0
    connection: str = "welded"

    REFERENCE_MODULUS = 200.0
    REFERENCE_STRENGTH = 350.0
    CONNECTION_FACTORS = {
        "welded": 1.0,
        "bolted": 1.2,
        "riveted": 1.1,
    }

    @property
    def strength(self) -> float:
        return self.yield_strength

    @property
    def detailing_factor(self) -> float:
        return self.CONNECTION_FACTORS.get(self.connection, 1.0)


@dataclass
class WoodProperties(MaterialProperties):
    bending_strength: float = 20.0
    compression_strength: float = 15.0
    elastic_modulus: float = 10.0
    grade: str = "structural"

    REFERENCE_MODULUS = 10.0
    REFERENCE_STRENGTH = 20.0
    GRADE_FACTORS = {
        "structural": 1.0,
        "construction": 1.3,
        "premium": 0.9,
    }

    @property
    def strength(self) -> float:
        return self.bending_strength

    @property
    def detailing_factor(self) -> float:
        return self.GRADE_FACTORS.get(self.grade, 1.0)


@dataclass
class MaterialParameters(YamlMixin):
    concrete: ConcreteProperties = field(default_factory=ConcreteProperties)
    steel: SteelProperties = field(default_factory=SteelProperties)
    wood: WoodProperties = field(default_factory=WoodProperties)
    active: str = MaterialTypes.CONCRETE.value

    def __post_init__(self):
        self.active = enum_value(self.active)
        if isinstance(self.concrete, dict):
            self.concrete = ConcreteProperties(**self.concrete)
        if isinstance(self.steel, dict):
            self.steel = SteelProperties(**self.steel)
        if isinstance(self.wood, dict):
            self.wood = WoodProperties(**self.wood)

    @property
    def active_properties(self) -> MaterialProperties:
        return getattr(self, self.active)

    @property
    def deformation_factor(self) -> float:
        return self.active_properties.deformation_factor

    @property
    def stress_capacity_factor(self) -> float:
        return self.active_properties.stress_capacity_factor

    def validate(self) -> None:
        errors = []
        if self.active not in MaterialTypes.list():
            errors.append(f"active={self.active} must be one of {MaterialTypes.list()}")
        for name in MaterialTypes.list():
            props = getattr(self, name)
            if props.elastic_modulus <= 0:
                errors.append(f"{name}.elastic_modulus must be positive")
            if props.strength <= 0:
                errors.append(f"{name} strength must be positive")
        if errors:
            raise InvalidParametersException("; ".join(errors))
