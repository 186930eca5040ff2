from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
import pandas as pd
import yaml
from plotly.graph_objects import Figure, Bar
from plotly.colors import n_colors
from shortuuid import uuid
from human_id import generate_id
from tremor.utils import NamedYamlMixin, RunNotFoundException, RUNS_DIR, find_files
from tremor.hazard import SeismicParameters
from tremor.building import BuildingParameters
from tremor.materials import MaterialParameters
from tremor.simulation import SimulationResult

MAX_COMPARED_RUNS = 3
COMPARED_METRICS: tuple = (
    "max_displacement",
    "inter_story_drift",
    "structural_response_factor",
    "natural_period",
)

colors = n_colors("rgb(0, 0, 0)", "rgb(200, 200, 200)", MAX_COMPARED_RUNS, colortype="rgb")


@dataclass
class RunRecord(NamedYamlMixin):
    """what a saved run looks like on disk: inputs plus the headline results"""

    id: str = field(default_factory=lambda: str(uuid()))
    name: str = field(default_factory=lambda: str(generate_id()))
    date: str = field(
        default_factory=lambda: datetime.now().isoformat(timespec="seconds")
    )
    building: BuildingParameters = field(default_factory=BuildingParameters)
    seismic: SeismicParameters = field(default_factory=SeismicParameters)
    materials: MaterialParameters = field(default_factory=MaterialParameters)
    results: dict = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.building, dict):
            self.building = BuildingParameters.from_dict(self.building)
        if isinstance(self.seismic, dict):
            self.seismic = SeismicParameters.from_dict(self.seismic)
        if isinstance(self.materials, dict):
            self.materials = MaterialParameters.from_dict(self.materials)

    @property
    def name_yml(self) -> str:
        return f"{self.id}.yml"

    @classmethod
    def from_result(
        cls,
        result: SimulationResult,
        *,
        building: BuildingParameters,
        seismic: SeismicParameters,
        materials: MaterialParameters,
        name: str | None = None,
    ) -> "RunRecord":
        results = {
            **result.metrics.to_dict,
            "elapsed_time": result.elapsed_time,
            "damage_level": result.report.damage_level,
            "safety_status": result.report.safety_status,
            "has_collapsed": result.has_collapsed,
        }
        record = cls(
            building=building, seismic=seismic, materials=materials, results=results
        )
        if name:
            record.name = name
        return record


class RunRepository(ABC):
    @abstractmethod
    def save(self, record: RunRecord) -> RunRecord:
        pass

    @abstractmethod
    def list(self) -> list[RunRecord]:
        pass

    def get(self, run_id: str) -> RunRecord:
        for record in self.list():
            if record.id == run_id:
                return record
        raise RunNotFoundException(f"run '{run_id}' not found")


@dataclass
class InMemoryRunRepository(RunRepository):
    records: list[RunRecord] = field(default_factory=list)

    def save(self, record: RunRecord) -> RunRecord:
        self.records = [r for r in self.records if r.id != record.id] + [record]
        return record

    def list(self) -> list[RunRecord]:
        return list(self.records)


@dataclass
class YamlRunRepository(RunRepository):
    """one yaml document per run inside `folder`, ordered by save date"""

    folder: Path = RUNS_DIR

    def __post_init__(self):
        self.folder = Path(self.folder)

    def save(self, record: RunRecord) -> RunRecord:
        record.to_file(self.folder)
        return record

    def list(self) -> list[RunRecord]:
        if not self.folder.exists():
            return []
        records = []
        for filename in find_files(self.folder, only_yml=True):
            try:
                records.append(RunRecord.from_file(self.folder / filename))
            except (yaml.YAMLError, TypeError) as e:
                print(f"YamlRunRepository.list: skipping {filename}", e)
        return sorted(records, key=lambda r: r.date)

    def delete(self, run_id: str) -> None:
        self.get(run_id).delete(self.folder)


@dataclass
class RunComparison:
    """side by side view of up to 3 saved runs"""

    repository: RunRepository
    selected: list[str] = field(default_factory=list)

    def toggle(self, run_id: str) -> bool:
        """returns False when the selection is already full"""
        if run_id in self.selected:
            self.selected.remove(run_id)
            return True
        if len(self.selected) >= MAX_COMPARED_RUNS:
            return False
        self.selected.append(run_id)
        return True

    @property
    def records(self) -> list[RunRecord]:
        return [self.repository.get(run_id) for run_id in self.selected]

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for record in self.records:
            rows.append(
                dict(
                    name=record.name,
                    magnitude=record.seismic.magnitude,
                    material=record.building.material,
                    **{m: record.results.get(m) for m in COMPARED_METRICS},
                    damage_level=record.results.get("damage_level"),
                    has_collapsed=record.results.get("has_collapsed", False),
                )
            )
        columns = [
            "name",
            "magnitude",
            "material",
            *COMPARED_METRICS,
            "damage_level",
            "has_collapsed",
        ]
        return pd.DataFrame(rows, columns=columns).set_index("name")

    def figure(self, metric: str = "inter_story_drift") -> Figure:
        df = self.to_frame()
        fig = Figure()
        for (name, row), color in zip(df.iterrows(), colors):
            fig.add_trace(Bar(x=[name], y=[row[metric]], name=name, marker_color=color))
        fig.update_layout(
            plot_bgcolor="white",
            yaxis_title=metric,
            showlegend=False,
        )
        return fig
