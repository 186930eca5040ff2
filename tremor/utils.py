from __future__ import annotations
from enum import Enum
from pathlib import Path
from typing import Any
from dataclasses import asdict
import yaml
import json
import os
import numpy as np

ROOT_DIR = Path(__file__).parent.parent
MODELS_DIR = ROOT_DIR / "models"
RUNS_DIR = MODELS_DIR / "runs"


class TremorException(Exception):
    pass


class InvalidParametersException(TremorException):
    pass


class CollapseLatchViolation(TremorException):
    """a collapsed run was asked to heal or to move its onset time."""

    pass


class RunNotFoundException(TremorException):
    pass


class PresetNotFoundException(TremorException):
    pass


def find_files(
    folder: Path,
    *,
    files_only=True,
    ignore_hidden=True,
    only_yml=True,
    suffix: str | None = None,
    return_sorted=True,
):
    all_files_or_dirs = os.listdir(folder)
    filters = []
    if files_only:
        filters.append(lambda f: os.path.isfile(os.path.join(folder, f)))

    if ignore_hidden:
        filters.append(lambda f: not f.startswith("."))

    if suffix:
        filters.append(lambda f: suffix in f)
    elif only_yml:
        filters.append(lambda f: ".yml" in f)

    files = list(
        filter(
            lambda file_or_dir: all(fil(file_or_dir) for fil in filters),
            all_files_or_dirs,
        )
    )
    if return_sorted:
        files = sorted(files)

    return files


class MaterialTypes(Enum):
    CONCRETE = "concrete"
    STEEL = "steel"
    WOOD = "wood"

    @classmethod
    def list(cls):
        return list(map(lambda c: c.value, cls))


class SoilTypes(Enum):
    ROCK = "rock"
    STIFF = "stiff"
    MEDIUM = "medium"
    SOFT = "soft"
    VERY_SOFT = "very-soft"

    @classmethod
    def list(cls):
        return list(map(lambda c: c.value, cls))


class DamageStatus(Enum):
    """qualitative band for a 0-100 damage percentage"""

    UNDAMAGED = "Undamaged"
    MINOR = "Minor"
    MODERATE = "Moderate"
    SEVERE = "Severe"
    CRITICAL = "Critical"

    @classmethod
    def list(cls):
        return list(map(lambda c: c.value, cls))


class DamageLevels(Enum):
    NONE_TO_SLIGHT = "None to Slight"
    MODERATE = "Moderate"
    EXTENSIVE = "Extensive"
    COMPLETE = "Complete"
    COMPLETE_COLLAPSE = "Complete Collapse"

    @classmethod
    def list(cls):
        return list(map(lambda c: c.value, cls))


class SafetyStatus(Enum):
    SAFE = "Safe"
    CAUTION = "Caution - Inspection Required"
    EVACUATION_RECOMMENDED = "Unsafe - Evacuation Recommended"
    IMMEDIATE_EVACUATION = "Unsafe - Immediate Evacuation Required"
    COLLAPSE = "BUILDING COLLAPSE - EVACUATION REQUIRED"

    @classmethod
    def list(cls):
        return list(map(lambda c: c.value, cls))


class IntensityModes(Enum):
    CONTINUOUS = "continuous"
    SNAPSHOT = "snapshot"

    @classmethod
    def list(cls):
        return list(map(lambda c: c.value, cls))


class ElementTypes(Enum):
    COLUMN = "column"
    BEAM = "beam"
    SLAB = "slab"
    FOUNDATION = "foundation"

    @classmethod
    def list(cls):
        return list(map(lambda c: c.value, cls))


STRUCTURAL_COMPONENTS: tuple = ("columns", "beams", "slabs", "foundation")
NON_STRUCTURAL_COMPONENTS: tuple = ("facades", "interior_walls", "utilities")
COMPONENTS: tuple = STRUCTURAL_COMPONENTS + NON_STRUCTURAL_COMPONENTS


def enum_value(value: Enum | str) -> str:
    return value.value if isinstance(value, Enum) else value


def clamp(x, lo: float = 0.0, hi: float = 1.0):
    """np.clip that hands back a python float for scalars, arrays otherwise"""
    clipped = np.clip(x, lo, hi)
    if np.ndim(clipped) == 0:
        return float(clipped)
    return clipped


def format_time(seconds: float) -> str:
    """MM:SS, truncating fractions"""
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{mins:02d}:{secs:02d}"


class YamlMixin:
    """
    does not serialize private fields
    i.e. those that start with _
    such as '_snapshots' or '_state'
    enums are stored by value so documents stay plain yaml.
    """

    def read_only_dict_factory(self, data: list[tuple[str, Any]]):
        result = {}
        for k, v in data:
            if k.startswith("_"):
                continue
            elif isinstance(v, Enum):
                v = v.value
            elif isinstance(v, (np.ndarray)):
                v = v.tolist()
            elif isinstance(v, (np.integer)):
                v = int(v)
            elif isinstance(v, (np.floating,)):
                v = v.item()
            elif isinstance(v, (np.generic)):
                v = v.item()
            elif isinstance(v, tuple):
                v = list(v)
            result[k] = v
        return result

    @classmethod
    def from_dict(cls, data: dict):
        return cls(**data)

    @classmethod
    def from_file(cls, filepath):
        with open(filepath) as f:
            doc = yaml.safe_load(f)
        return cls.from_dict(doc)

    def to_file(self, filepath):
        data = self.to_dict
        with open(filepath, "w") as file:
            yaml.safe_dump(data, file, sort_keys=False)

    @property
    def to_json(self):
        return json.dumps(self.to_dict)

    @property
    def to_dict(self):
        return asdict(self, dict_factory=self.read_only_dict_factory)


class NamedYamlMixin(YamlMixin):
    @property
    def name_yml(self) -> str:
        return f"{self.name}.yml"

    def to_file(self, folder: Path) -> None:
        os.makedirs(folder, exist_ok=True)
        filepath = Path(folder) / self.name_yml
        return super().to_file(filepath)

    def delete(self, folder: Path) -> None:
        filepath = Path(folder) / self.name_yml
        try:
            Path.unlink(filepath)
        except (FileNotFoundError, OSError) as e:
            print(e)
