"""
Jurisdiction-tunable thresholds for the evaluator, permit deriver and
action checklist.

Nothing here is a module-level "current setbacks" constant: callers pass a
settings object into each evaluation so different jurisdictions can supply
their own values without code changes.
"""

import json
import logging
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Dict, Union

from siteplan.models import CandidateStructure

log = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# BOUNDARY SETBACKS
# ═══════════════════════════════════════════════════════════════════════════
@dataclass
class Setbacks:
    """Minimum distances (feet) from each property line."""

    front: float = 25.0
    """Distance from the street-side lot line."""

    side_primary: float = 10.0
    """Side setback for the primary dwelling."""

    side_accessory: float = 5.0
    """Side setback for every other structure type."""

    rear: float = 20.0
    """Distance from the back lot line."""

    proximity_band: float = 5.0
    """A structure this close to a setback line (without crossing) gets a warning."""

    def side_for(self, structure: CandidateStructure) -> float:
        return self.side_primary if structure.is_primary else self.side_accessory

    @classmethod
    def from_dict(cls, data: Dict) -> "Setbacks":
        return cls(**_known_keys(cls, data))


# ═══════════════════════════════════════════════════════════════════════════
# EVALUATOR / PERMIT SETTINGS
# ═══════════════════════════════════════════════════════════════════════════
@dataclass
class EvaluatorSettings:
    """
    Thresholds used by the constraint evaluator and permit deriver.

    IMPORTANT: every value is in feet, square feet or percent as named.
    """

    setbacks: Setbacks = field(default_factory=Setbacks)
    """Boundary setbacks applied to every candidate structure."""

    max_coverage_percent: float = 35.0
    """Maximum share of the lot covered by structure footprints."""

    coverage_warning_margin_percent: float = 5.0
    """Coverage within this many points of the maximum gets a warning."""

    min_structure_separation_ft: float = 6.0
    """Fire-code separation between structures."""

    well_septic_separation_ft: float = 100.0
    """New septic components must stay this far from a well."""

    neighbor_well_notice_ft: float = 100.0
    """A neighbouring well closer than this restricts septic placement."""

    default_wetland_buffer_ft: float = 50.0
    """Buffer applied to a mapped wetland recorded without one."""

    moderate_slope_percent: float = 15.0
    """Slope above this gets an informational grading note."""

    steep_slope_percent: float = 30.0
    """Slope above this gets a geotechnical warning."""

    building_permit_min_sqft: float = 200.0
    """Footprints above this need a building permit."""

    grading_required_slope_percent: float = 25.0
    """Above this slope a grading permit is mandatory rather than possible."""

    default_sewer_distance_ft: float = 15.0
    default_water_distance_ft: float = 20.0

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "EvaluatorSettings":
        data = dict(_section(data, cls.__name__))
        setbacks = Setbacks.from_dict(data.pop("setbacks", {}))
        return cls(setbacks=setbacks, **_known_keys(cls, data))


# ═══════════════════════════════════════════════════════════════════════════
# ACTION CHECKLIST SETTINGS
# ═══════════════════════════════════════════════════════════════════════════
@dataclass
class ChecklistSettings:
    """Numeric preconditions for the lot-size based checklist entries."""

    adu_min_lot_sqft: float = 7500.0
    """Smallest lot on which an ADU is considered."""

    dadu_min_lot_sqft: float = 10000.0
    """Smallest lot on which a detached ADU is considered."""

    default_min_lot_sqft: float = 7200.0
    """Minimum lot size when no lot_size_min rule is supplied."""

    dadu_min_separation_ft: float = 6.0

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "ChecklistSettings":
        return cls(**_known_keys(cls, data))


def _section(data, where: str) -> Dict:
    if not isinstance(data, dict):
        raise ValueError(f"{where}: expected an object, got {type(data).__name__}")
    return data


def _known_keys(cls, data: Dict) -> Dict:
    """Reject keys the dataclass does not define; every remaining value is a number."""
    _section(data, cls.__name__)
    names = {f.name for f in fields(cls)}
    unknown = set(data) - names
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    values = {}
    for key, value in data.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{cls.__name__}.{key}: expected a number, got {value!r}")
        values[key] = float(value)
    return values


# ═══════════════════════════════════════════════════════════════════════════
# FILE HELPERS
# ═══════════════════════════════════════════════════════════════════════════
def load_settings(path: Union[str, Path]):
    """
    Load settings from a JSON file.

    The file holds an "evaluator" and/or a "checklist" section; missing
    sections fall back to defaults.

    Returns:
        (EvaluatorSettings, ChecklistSettings)
    """
    path = Path(path)
    with open(path, "r") as f:
        data = json.load(f)
    _section(data, str(path))

    evaluator = EvaluatorSettings.from_dict(data.get("evaluator", {}))
    checklist = ChecklistSettings.from_dict(data.get("checklist", {}))
    log.info(f"Loaded settings from {path} (front setback {evaluator.setbacks.front}', "
             f"max coverage {evaluator.max_coverage_percent}%)")
    return evaluator, checklist


def save_settings(path: Union[str, Path], evaluator: EvaluatorSettings,
                  checklist: ChecklistSettings) -> None:
    path = Path(path)
    with open(path, "w") as f:
        json.dump({"evaluator": evaluator.to_dict(), "checklist": checklist.to_dict()}, f, indent=2)
    log.info(f"Saved settings to {path}")
