from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np
from tremor.utils import (
    YamlMixin,
    MaterialTypes,
    DamageLevels,
    DamageStatus,
    SafetyStatus,
    enum_value,
)
from tremor.materials import drift_thresholds
from tremor.response import ResponseMetrics
from tremor.damage import ComponentDamage
from tremor.collapse import CollapseState

RESIDUAL_DRIFT_LIMIT = 2.5  # [%]

DAMAGE_LEVEL_COLORS = {
    DamageLevels.NONE_TO_SLIGHT: "green",
    DamageLevels.MODERATE: "yellow",
    DamageLevels.EXTENSIVE: "orange",
    DamageLevels.COMPLETE: "red",
    DamageLevels.COMPLETE_COLLAPSE: "red",
}

COLLAPSE_ACTIONS: tuple = (
    "IMMEDIATE EVACUATION - Building has structurally collapsed",
    "Contact emergency services and structural engineers",
    "Establish safety perimeter around the building",
    "Account for all building occupants",
    "Do not attempt to enter the building under any circumstances",
)

# (severe damage inspection, moderate damage check)
MATERIAL_INSPECTIONS = {
    MaterialTypes.CONCRETE.value: (
        "Inspect for concrete spalling and exposed rebar",
        "Check for concrete cracking and rebar exposure",
    ),
    MaterialTypes.STEEL.value: (
        "Inspect for buckling, connection failure, and weld fractures",
        "Inspect steel connections and welds",
    ),
    MaterialTypes.WOOD.value: (
        "Inspect for member splitting, connection failure, and joint displacement",
        "Examine wood joints and connections",
    ),
}


@dataclass
class DamageReport(YamlMixin):
    damage_level: str = DamageLevels.NONE_TO_SLIGHT.value
    damage_color: str = "green"
    safety_status: str = SafetyStatus.SAFE.value
    recommended_actions: list[str] = field(default_factory=list)


def determine_damage_level(
    inter_story_drift: float,
    structural_response_factor: float,
    material: MaterialTypes | str,
) -> DamageLevels:
    """
    three drift thresholds per material, loosened or tightened
    by 1 / response factor. a zero factor pushes them to inf.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        t1, t2, t3 = (
            float(t / np.float64(structural_response_factor))
            for t in drift_thresholds(material)
        )
    if inter_story_drift < t1:
        return DamageLevels.NONE_TO_SLIGHT
    elif inter_story_drift < t2:
        return DamageLevels.MODERATE
    elif inter_story_drift < t3:
        return DamageLevels.EXTENSIVE
    return DamageLevels.COMPLETE


def assess_safety(
    level: DamageLevels,
    component_damage: ComponentDamage,
    collapse_state: CollapseState | None = None,
) -> SafetyStatus:
    """component damage wins over the aggregate drift level"""
    if collapse_state is not None and collapse_state.has_collapsed:
        return SafetyStatus.COLLAPSE
    if component_damage.is_status(
        "columns", DamageStatus.CRITICAL
    ) or component_damage.is_status("foundation", DamageStatus.CRITICAL):
        return SafetyStatus.IMMEDIATE_EVACUATION
    if component_damage.is_status(
        "columns", DamageStatus.SEVERE
    ) or component_damage.is_status("beams", DamageStatus.SEVERE):
        return SafetyStatus.EVACUATION_RECOMMENDED
    if level == DamageLevels.NONE_TO_SLIGHT:
        return SafetyStatus.SAFE
    elif level == DamageLevels.MODERATE:
        return SafetyStatus.CAUTION
    return SafetyStatus.EVACUATION_RECOMMENDED


def recommended_actions(
    level: DamageLevels,
    material: MaterialTypes | str,
    inter_story_drift: float,
    component_damage: ComponentDamage,
    collapse_state: CollapseState | None = None,
) -> list[str]:
    if collapse_state is not None and collapse_state.has_collapsed:
        return list(COLLAPSE_ACTIONS)

    severe_inspection, moderate_check = MATERIAL_INSPECTIONS.get(
        enum_value(material), MATERIAL_INSPECTIONS[MaterialTypes.WOOD.value]
    )
    damage = component_damage
    actions = []
    if damage.is_status("columns", DamageStatus.CRITICAL):
        actions.append("IMMEDIATE EVACUATION - Risk of structural collapse")
        actions.append("Emergency shoring of compromised columns")
    elif damage.is_status("columns", DamageStatus.SEVERE) or damage.is_status(
        "beams", DamageStatus.SEVERE
    ):
        actions.append("Evacuation recommended until structural assessment")
        actions.append("Detailed engineering evaluation of load path integrity")
        actions.append(severe_inspection)
    elif level == DamageLevels.MODERATE:
        actions.append("Structural engineering inspection required")
        actions.append("Temporary evacuation may be necessary during inspection")
        if damage.is_status("foundation", DamageStatus.MODERATE, DamageStatus.SEVERE):
            actions.append("Foundation inspection for settlement and cracking")
        actions.append(moderate_check)
    elif level == DamageLevels.NONE_TO_SLIGHT:
        actions.append("Visual inspection of structural elements")
        actions.append("Check for non-structural damage")
        if damage.is_status("utilities", DamageStatus.MODERATE, DamageStatus.SEVERE):
            actions.append("Inspect utility systems for damage or leaks")

    if damage.is_status("facades", DamageStatus.SEVERE, DamageStatus.CRITICAL):
        actions.append(
            "Secure or remove damaged facade elements to prevent falling hazards"
        )
    if inter_story_drift > RESIDUAL_DRIFT_LIMIT:
        actions.append("Residual drift assessment before reoccupancy")
    return actions


def classify_damage(
    metrics: ResponseMetrics,
    component_damage: ComponentDamage,
    collapse_state: CollapseState,
    *,
    material: MaterialTypes | str,
) -> DamageReport:
    """builds a fresh report every call, nothing is mutated"""
    if collapse_state.has_collapsed:
        level = DamageLevels.COMPLETE_COLLAPSE
    else:
        level = determine_damage_level(
            metrics.inter_story_drift, metrics.structural_response_factor, material
        )
    safety = assess_safety(level, component_damage, collapse_state)
    actions = recommended_actions(
        level,
        material,
        metrics.inter_story_drift,
        component_damage,
        collapse_state,
    )
    return DamageReport(
        damage_level=level.value,
        damage_color=DAMAGE_LEVEL_COLORS[level],
        safety_status=safety.value,
        recommended_actions=actions,
    )
