from __future__ import annotations
from dataclasses import dataclass, field, replace
import numpy as np
from plotly.colors import find_intermediate_color
from tremor.utils import YamlMixin, ElementTypes, enum_value
from tremor.materials import MaterialParameters
from tremor.building import StructuralComponents

# the z twist is the base skew, x adds a lighter second-axis tilt on top
X_SKEW = 0.1
Z_SKEW = 0.2

# (reinforcement, connection) multipliers by element type
COLUMN_REINFORCEMENT_FACTORS = {"heavy": 0.7, "medium": 1.0, "light": 1.3}
COLUMN_CONNECTION_FACTORS = {"rigid": 1.0, "semi-rigid": 1.2, "pinned": 1.5}
BEAM_REINFORCEMENT_FACTORS = {"heavy": 0.8, "medium": 1.0, "light": 1.2}
STRESS_REINFORCEMENT_FACTORS = {"heavy": 1.2, "medium": 1.0, "light": 0.8}

# blue -> green -> yellow -> red
STRESS_COLOR_STOPS: tuple = (
    "rgb(0, 102, 255)",
    "rgb(51, 255, 0)",
    "rgb(255, 230, 0)",
    "rgb(255, 0, 0)",
)
ZERO_STRESS_COLOR = "rgb(0, 0, 255)"


@dataclass
class ElementState(YamlMixin):
    """rest (or deformed) placement of one renderable element"""

    type: str = ElementTypes.COLUMN.value
    id: int = 0
    position: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    rotation: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    stress: float = 0.0

    def __post_init__(self):
        self.type = enum_value(self.type)
        self.position = [float(p) for p in self.position]
        self.rotation = [float(r) for r in self.rotation]

    @property
    def key(self) -> tuple[str, int]:
        return (self.type, self.id)


@dataclass
class AnalysisResult:
    """
    output of the external element interaction analysis,
    displacement [mm] and joint rotation [rad].
    """

    displacement: float | None = None
    rotation: float | None = None
    stress_concentration: float = 0.0

    @property
    def is_degenerate(self) -> bool:
        values = (self.displacement, self.rotation)
        if any(v is None for v in values):
            return True
        return not bool(np.all(np.isfinite(values)))


def element_factor(
    element_type: ElementTypes | str, components: StructuralComponents | None
) -> float:
    if components is None:
        return 1.0
    element_type = enum_value(element_type)
    if element_type == ElementTypes.COLUMN.value:
        columns = components.columns
        return COLUMN_REINFORCEMENT_FACTORS.get(
            columns.reinforcement, 1.0
        ) * COLUMN_CONNECTION_FACTORS.get(columns.connection, 1.0)
    if element_type == ElementTypes.BEAM.value:
        return BEAM_REINFORCEMENT_FACTORS.get(components.beams.reinforcement, 1.0)
    return 1.0


def deformation_scale(
    slider: float,
    intensity: float,
    materials: MaterialParameters | None = None,
    element_type: ElementTypes | str = ElementTypes.COLUMN,
    components: StructuralComponents | None = None,
) -> float:
    material_factor = 1.0 if materials is None else materials.deformation_factor
    return slider * intensity * material_factor * element_factor(element_type, components)


def map_deformation(
    element: ElementState,
    result: AnalysisResult | None,
    materials: MaterialParameters | None,
    scale: float,
    intensity: float,
    components: StructuralComponents | None = None,
) -> ElementState:
    """
    position += s * d * (sin r, cos r, 0)
    rotation += (0.1 r s, 0, 0.2 r s)
    a missing or non-finite result leaves the element at rest.
    """
    if result is None or result.is_degenerate:
        return replace(element)
    s = deformation_scale(scale, intensity, materials, element.type, components)
    d, r = result.displacement, result.rotation
    offset = s * d * np.array([np.sin(r), np.cos(r), 0.0])
    position = np.asarray(element.position) + offset
    rx, ry, rz = element.rotation
    return replace(
        element,
        position=position.tolist(),
        rotation=[rx + r * s * X_SKEW, ry, rz + r * s * Z_SKEW],
        stress=result.stress_concentration,
    )


def map_deformations(
    elements: list[ElementState],
    results: dict[tuple[str, int], AnalysisResult],
    materials: MaterialParameters | None,
    scale: float,
    intensity: float,
    components: StructuralComponents | None = None,
) -> list[ElementState]:
    return [
        map_deformation(
            element,
            results.get(element.key),
            materials,
            scale,
            intensity,
            components,
        )
        for element in elements
    ]


def max_stress_capacity(
    results: list[AnalysisResult],
    materials: MaterialParameters | None = None,
    components: StructuralComponents | None = None,
) -> float:
    """colour-scale ceiling, stronger materials take more stress before going red"""
    if not results:
        return 1.0
    base = max(r.stress_concentration or 0 for r in results)
    factor = 1.0 if materials is None else materials.stress_capacity_factor
    if components is not None:
        factor *= STRESS_REINFORCEMENT_FACTORS.get(components.columns.reinforcement, 1.0)
    return base * factor


def stress_color(stress: float, max_stress: float) -> str:
    if max_stress == 0:
        return ZERO_STRESS_COLOR
    t = min(stress / max_stress, 1.0)
    if t <= 0.33:
        low, high, frac = STRESS_COLOR_STOPS[0], STRESS_COLOR_STOPS[1], t * 3
    elif t <= 0.66:
        low, high, frac = STRESS_COLOR_STOPS[1], STRESS_COLOR_STOPS[2], (t - 0.33) * 3
    else:
        low, high, frac = STRESS_COLOR_STOPS[2], STRESS_COLOR_STOPS[3], (t - 0.66) * 3
    return find_intermediate_color(low, high, min(max(frac, 0.0), 1.0), colortype="rgb")
