from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np
import pandas as pd
from tremor.utils import YamlMixin, IntensityModes, enum_value, format_time
from tremor.hazard import SeismicParameters
from tremor.building import BuildingParameters
from tremor.materials import MaterialParameters
from tremor.response import ResponseMetrics, response_metrics
from tremor.damage import (
    ComponentDamage,
    assess_component_damage,
    collapse_component_damage,
)
from tremor.collapse import CollapseState, collapse_risk, update_collapse
from tremor.classifier import DamageReport, classify_damage
from tremor.timelapse import compute_intensity
from tremor.deformation import (
    AnalysisResult,
    ElementState,
    map_deformation,
    map_deformations,
)

__all__ = [
    "compute_response",
    "assess_component_damage",
    "classify_damage",
    "compute_intensity",
    "map_deformation",
    "component_damage_for",
    "Simulation",
    "SimulationResult",
]


def compute_response(
    building: BuildingParameters,
    seismic: SeismicParameters,
    elapsed_time: float,
    collapse_state: CollapseState | None = None,
) -> tuple[ResponseMetrics, CollapseState]:
    """
    one tick of the response calculator + collapse latch.
    the latch is owned by the caller and updated in place,
    a fresh one is created when none is given.
    """
    state = collapse_state if collapse_state is not None else CollapseState()
    update_collapse(
        state,
        magnitude=seismic.magnitude,
        stiffness=building.stiffness,
        damping_ratio=building.damping_ratio,
        material=building.material,
        elapsed_time=elapsed_time,
    )
    metrics = response_metrics(
        height=building.height,
        floors=building.floors,
        magnitude=seismic.magnitude,
        stiffness=building.stiffness,
        damping_ratio=building.damping_ratio,
        material=building.material,
        time_since_collapse=state.time_since_collapse(elapsed_time),
    )
    return metrics, state


def component_damage_for(
    building: BuildingParameters,
    seismic: SeismicParameters,
    metrics: ResponseMetrics,
    collapse_state: CollapseState,
    elapsed_time: float,
) -> ComponentDamage:
    """the collapse progression overrides the regular assessment"""
    if collapse_state.has_collapsed:
        return collapse_component_damage(collapse_state.time_since_collapse(elapsed_time))
    return assess_component_damage(
        magnitude=seismic.magnitude,
        structural_response_factor=metrics.structural_response_factor,
        stiffness=building.stiffness,
        damping_ratio=building.damping_ratio,
        material=building.material,
    )


@dataclass
class SimulationResult(YamlMixin):
    elapsed_time: float
    metrics: ResponseMetrics
    component_damage: ComponentDamage
    collapse: CollapseState
    report: DamageReport
    intensity: float = 0.0

    @property
    def has_collapsed(self) -> bool:
        return self.collapse.has_collapsed

    @property
    def summary(self) -> dict:
        return {
            "t": format_time(self.elapsed_time),
            **self.metrics.summary,
            "damage": self.report.damage_level,
            "safety": self.report.safety_status,
            "collapse": self.has_collapsed,
        }


@dataclass
class Simulation:
    """
    one run: fixed parameters plus the collapse latch.
    the animation clock lives outside, call tick(t) with increasing t.
    swapping any parameter set through `update` starts a new run.
    """

    building: BuildingParameters = field(default_factory=BuildingParameters)
    seismic: SeismicParameters = field(default_factory=SeismicParameters)
    materials: MaterialParameters | None = None
    intensity_mode: str = IntensityModes.CONTINUOUS.value
    selected_snapshot: int | None = None
    _collapse: CollapseState = field(default_factory=CollapseState)

    def __post_init__(self):
        self.intensity_mode = enum_value(self.intensity_mode)
        if self.materials is None:
            self.materials = MaterialParameters(active=self.building.material)

    @property
    def collapse(self) -> CollapseState:
        return self._collapse.copy()

    @property
    def collapse_risk(self) -> float:
        return collapse_risk(
            self.seismic.magnitude,
            self.building.stiffness,
            self.building.damping_ratio,
            self.building.material,
        )

    def restart(self) -> None:
        self._collapse.reset()

    def update(
        self,
        *,
        building: BuildingParameters | None = None,
        seismic: SeismicParameters | None = None,
        materials: MaterialParameters | None = None,
    ) -> None:
        if building is not None:
            self.building = building
        if seismic is not None:
            self.seismic = seismic
        if materials is not None:
            self.materials = materials
        self.restart()

    def tick(self, elapsed_time: float) -> SimulationResult:
        previous = self._collapse.copy()
        metrics, state = compute_response(
            self.building, self.seismic, elapsed_time, self._collapse
        )
        state.check_follows(previous)
        damage = component_damage_for(
            self.building, self.seismic, metrics, state, elapsed_time
        )
        report = classify_damage(metrics, damage, state, material=self.building.material)
        intensity = compute_intensity(
            self.seismic,
            elapsed_time,
            self.intensity_mode,
            self.selected_snapshot,
        )
        return SimulationResult(
            elapsed_time=elapsed_time,
            metrics=metrics,
            component_damage=damage,
            collapse=state.copy(),
            report=report,
            intensity=intensity,
        )

    def deform(
        self,
        elements: list[ElementState],
        results: dict[tuple[str, int], AnalysisResult],
        scale: float,
        elapsed_time: float,
    ) -> list[ElementState]:
        """render transforms at `elapsed_time` for this run's materials and components"""
        intensity = compute_intensity(
            self.seismic,
            elapsed_time,
            self.intensity_mode,
            self.selected_snapshot,
        )
        return map_deformations(
            elements,
            results,
            self.materials,
            scale,
            intensity,
            self.building.components,
        )

    def run(self, times: list[float] | np.ndarray) -> list[SimulationResult]:
        return [self.tick(float(t)) for t in times]

    def results_frame(self, times: list[float] | np.ndarray) -> pd.DataFrame:
        """one row per tick, handy for plotting the whole run"""
        rows = []
        for result in self.run(times):
            rows.append(
                dict(
                    t=result.elapsed_time,
                    intensity=result.intensity,
                    drift=result.metrics.inter_story_drift,
                    displacement=result.metrics.max_displacement,
                    damage_level=result.report.damage_level,
                    safety=result.report.safety_status,
                    collapse=result.has_collapsed,
                    **{
                        name: state.value
                        for name, state in {
                            **result.component_damage.structural,
                            **result.component_damage.non_structural,
                        }.items()
                    },
                )
            )
        return pd.DataFrame(rows).set_index("t")
