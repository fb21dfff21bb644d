"""
Normalized property facts consumed by the action checklist.

These arrive already resolved by external collaborators: zoning rules
tagged pass/warn/fail by a rule-lookup service, soil/septic ratings, utility
availability and environmental flags. Any field may be missing; the
checklist degrades instead of failing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union


class CheckStatus(Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RuleCheck:
    """One zoning rule evaluated against the parcel by the rule-lookup service."""
    id: str
    name: str
    rule_type: str            # e.g. "setback_front", "lot_coverage_max", "adu_allowed"
    status: CheckStatus
    required: Union[float, str, None] = None
    measured: Union[float, str, None] = None
    unit: str = ""
    citation: str = ""

    def describe(self) -> str:
        """Verbatim statement of the check, used as blocking/condition text."""
        parts = [self.name]
        if self.required is not None:
            parts.append(f"required {self.required}{' ' + self.unit if self.unit else ''}")
        if self.measured is not None:
            parts.append(f"measured {self.measured}{' ' + self.unit if self.unit else ''}")
        return parts[0] if len(parts) == 1 else f"{parts[0]}: {', '.join(parts[1:])}"


@dataclass(frozen=True)
class SewerService:
    available: bool
    required: bool = False    # connection is mandatory in this service area
    provider_name: Optional[str] = None
    distance_to_main_ft: Optional[float] = None
    hookup_cost: Optional[float] = None


@dataclass(frozen=True)
class SepticAssessment:
    status: CheckStatus
    feasibility: str = ""
    soil_name: str = ""
    system_type: str = ""
    cost_min: Optional[float] = None
    cost_max: Optional[float] = None
    summary: str = ""
    issues: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "issues", tuple(self.issues))


@dataclass(frozen=True)
class UtilityFacts:
    sewer: Optional[SewerService] = None
    septic: Optional[SepticAssessment] = None


class FlagType(Enum):
    FLOOD = "flood"
    WETLAND = "wetland"
    SLOPE = "slope"
    BUFFER = "buffer"
    HAZARD = "hazard"


@dataclass(frozen=True)
class EnvironmentalFlag:
    id: str
    type: FlagType
    label: str
    status: CheckStatus
    description: str


@dataclass(frozen=True)
class ParcelMetrics:
    area_sqft: Optional[float] = None
    lot_width: Optional[float] = None
    lot_depth: Optional[float] = None


@dataclass(frozen=True)
class PropertyFacts:
    """Everything the checklist needs about one property."""
    zoning_district: str = ""
    zoning_category: Optional[str] = None   # e.g. "residential_single", "residential_multi"
    jurisdiction_name: str = ""
    parcel: ParcelMetrics = field(default_factory=ParcelMetrics)
    rule_checks: Tuple[RuleCheck, ...] = ()
    utilities: UtilityFacts = field(default_factory=UtilityFacts)
    environmental_flags: Tuple[EnvironmentalFlag, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "rule_checks", tuple(self.rule_checks))
        object.__setattr__(self, "environmental_flags", tuple(self.environmental_flags))

    def checks_where(self, *fragments: str) -> List[RuleCheck]:
        """Rule checks whose rule_type contains any of the fragments."""
        return [c for c in self.rule_checks if any(f in c.rule_type for f in fragments)]

    def check_of(self, *rule_types: str) -> Optional[RuleCheck]:
        """First rule check with exactly one of the given types."""
        for check in self.rule_checks:
            if check.rule_type in rule_types:
                return check
        return None

    def flag_of(self, flag_type: FlagType) -> Optional[EnvironmentalFlag]:
        for flag in self.environmental_flags:
            if flag.type == flag_type:
                return flag
        return None

    @property
    def district_label(self) -> str:
        return self.zoning_district or "this zoning district"
