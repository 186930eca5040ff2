from tremor.simulation import (
    compute_response,
    assess_component_damage,
    classify_damage,
    compute_intensity,
    map_deformation,
    Simulation,
)

__version__ = "0.1.0"
