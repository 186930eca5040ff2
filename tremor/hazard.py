from __future__ import annotations
from dataclasses import dataclass
from tremor.utils import (
    YamlMixin,
    SoilTypes,
    InvalidParametersException,
    PresetNotFoundException,
    enum_value,
)


@dataclass
class SeismicParameters(YamlMixin):
    """
    one earthquake event. the engine never mutates it,
    a new run is started whenever the caller swaps it.
    distance is epicentral distance and depth is hypocentral depth, both km.
    """

    magnitude: float = 5.5
    duration: float = 30.0
    distance: float = 50.0
    depth: float = 10.0
    soil: str = SoilTypes.MEDIUM.value
    epicenter_x: float = 0.0
    epicenter_y: float = 0.0
    wave_velocity: float = 1.5

    def __post_init__(self):
        self.soil = enum_value(self.soil)

    def validate(self) -> None:
        errors = []
        if not 0 < self.magnitude <= 10:
            errors.append(f"magnitude={self.magnitude} must be in (0, 10]")
        if self.duration <= 0:
            errors.append(f"duration={self.duration} must be positive")
        if self.distance < 0:
            errors.append(f"distance={self.distance} must be >= 0")
        if self.depth < 0:
            errors.append(f"depth={self.depth} must be >= 0")
        if self.soil not in SoilTypes.list():
            errors.append(f"soil={self.soil} must be one of {SoilTypes.list()}")
        if errors:
            raise InvalidParametersException("; ".join(errors))

    @classmethod
    def from_preset(cls, preset_id: str) -> "SeismicParameters":
        preset = HistoricalEarthquake.find(preset_id)
        return preset.parameters

    @property
    def richter_class(self) -> str:
        return richter_description(self.magnitude)

    @property
    def potential_damage(self) -> str:
        return potential_damage_description(self.magnitude)

    @property
    def affected_radius(self) -> int:
        """rough felt radius in km"""
        return round(self.magnitude * 2)

    @property
    def summary(self) -> dict:
        return {
            "magnitude": self.magnitude,
            "richter": self.richter_class,
            "damage": self.potential_damage,
            "radius [km]": self.affected_radius,
        }


@dataclass
class HistoricalEarthquake(YamlMixin):
    id: str
    name: str
    description: str = ""
    magnitude: float = 5.5
    depth: float = 10.0
    distance: float = 50.0
    duration: float = 30.0
    epicenter_x: float = 0.0
    epicenter_y: float = 0.0
    wave_velocity: float = 1.5
    soil: str = SoilTypes.MEDIUM.value

    @property
    def parameters(self) -> SeismicParameters:
        return SeismicParameters(
            magnitude=self.magnitude,
            duration=self.duration,
            distance=self.distance,
            depth=self.depth,
            soil=self.soil,
            epicenter_x=self.epicenter_x,
            epicenter_y=self.epicenter_y,
            wave_velocity=self.wave_velocity,
        )

    @classmethod
    def find(cls, preset_id: str) -> "HistoricalEarthquake":
        for preset in HISTORICAL_EARTHQUAKES:
            if preset.id == preset_id:
                return preset
        raise PresetNotFoundException(f"no historical earthquake '{preset_id}'")

    @classmethod
    def options(cls) -> list[dict]:
        return [{"label": p.name, "value": p.id} for p in HISTORICAL_EARTHQUAKES]


HISTORICAL_EARTHQUAKES: tuple[HistoricalEarthquake, ...] = (
    HistoricalEarthquake(
        id="tohoku2011",
        name="Tohoku, Japan (2011)",
        description="One of the most powerful earthquakes ever recorded, causing a devastating tsunami.",
        magnitude=9.0,
        depth=29,
        distance=120,
        duration=180,
        epicenter_x=-5,
        epicenter_y=-7,
        wave_velocity=2.5,
    ),
    HistoricalEarthquake(
        id="haiti2010",
        name="Haiti (2010)",
        description="Catastrophic earthquake that caused extensive damage to infrastructure.",
        magnitude=7.0,
        depth=13,
        distance=45,
        duration=35,
        epicenter_x=-2,
        epicenter_y=-3,
        wave_velocity=1.8,
    ),
    HistoricalEarthquake(
        id="chile1960",
        name="Valdivia, Chile (1960)",
        description="The most powerful earthquake ever recorded (9.5), causing tsunamis across the Pacific.",
        magnitude=9.5,
        depth=33,
        distance=150,
        duration=210,
        epicenter_x=-8,
        epicenter_y=-10,
        wave_velocity=3.0,
    ),
    HistoricalEarthquake(
        id="sanFrancisco1906",
        name="San Francisco (1906)",
        description="Historic earthquake that destroyed much of San Francisco through fire and building collapse.",
        magnitude=7.9,
        depth=8,
        distance=35,
        duration=45,
        epicenter_x=-1,
        epicenter_y=-2,
        wave_velocity=1.5,
    ),
    HistoricalEarthquake(
        id="kobe1995",
        name="Kobe, Japan (1995)",
        description="One of the most destructive earthquakes to hit Japan, causing extensive damage to infrastructure.",
        magnitude=6.9,
        depth=16,
        distance=40,
        duration=20,
        epicenter_x=-3,
        epicenter_y=-4,
        wave_velocity=1.7,
    ),
    HistoricalEarthquake(
        id="sumatra2004",
        name="Sumatra, Indonesia (2004)",
        description="Triggered a devastating tsunami that killed over 230,000 people across multiple countries.",
        magnitude=9.1,
        depth=30,
        distance=180,
        duration=240,
        epicenter_x=-9,
        epicenter_y=-8,
        wave_velocity=2.8,
    ),
    HistoricalEarthquake(
        id="mexico1985",
        name="Mexico City (1985)",
        description="Famous for demonstrating the effects of soil amplification in a sedimentary basin.",
        magnitude=8.0,
        depth=18,
        distance=75,
        duration=60,
        epicenter_x=-6,
        epicenter_y=-5,
        wave_velocity=2.0,
        soil=SoilTypes.VERY_SOFT.value,
    ),
    HistoricalEarthquake(
        id="christchurch2011",
        name="Christchurch, NZ (2011)",
        description="Moderate earthquake that caused significant damage due to liquefaction and proximity to the city.",
        magnitude=6.3,
        depth=5,
        distance=25,
        duration=15,
        epicenter_x=-1,
        epicenter_y=-1,
        wave_velocity=1.2,
        soil=SoilTypes.SOFT.value,
    ),
)


# (upper bound, richter class, potential damage)
MAGNITUDE_BANDS: tuple = (
    (2.0, "Micro (< 2.0)", "Micro earthquake. Not felt."),
    (
        4.0,
        "Minor (2.0-3.9)",
        "Minor earthquake. Often felt, but only causes minor damage.",
    ),
    (
        5.0,
        "Light (4.0-4.9)",
        "Light earthquake. Felt by all. Slight damage to well-built structures.",
    ),
    (
        6.0,
        "Moderate (5.0-5.9)",
        "Moderate earthquake. Causes damage to poorly constructed buildings.",
    ),
    (
        7.0,
        "Strong (6.0-6.9)",
        "Strong earthquake. Causes damage to most buildings, can be destructive in populated areas.",
    ),
    (
        8.0,
        "Major (7.0-7.9)",
        "Major earthquake. Causes serious damage over larger areas. Can be destructive in areas up to about 100 km across.",
    ),
    (
        float("inf"),
        "Great (>= 8.0)",
        "Great earthquake. Can cause serious damage in areas several hundred km across. Major devastation.",
    ),
)


def _magnitude_band(magnitude: float) -> tuple:
    for band in MAGNITUDE_BANDS:
        if magnitude < band[0]:
            return band
    return MAGNITUDE_BANDS[-1]


def richter_description(magnitude: float) -> str:
    return _magnitude_band(magnitude)[1]


def potential_damage_description(magnitude: float) -> str:
    return _magnitude_band(magnitude)[2]
