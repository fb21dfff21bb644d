"""
Site Data Loader - normalize a site document into engine inputs.

A site document is JSON with four sections:

    {
      "lot":        {"width": 100, "depth": 100, "area_sqft": 10000},
      "site":       {"features": [...], "easements": [...], "sewer_available": false, ...},
      "candidates": [{"id": "adu-1", "type": "adu", "x": 5, "y": 20, ...}],
      "facts":      {"zoning_district": "R-6", "rule_checks": [...], ...}
    }

Only "lot" is required. Easements without a matching feature are projected
onto the lot from their edge (interior easements need an "extent").
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

from loaders.flood_zones import flood_flag_from_code
from siteplan.facts import (
    CheckStatus,
    EnvironmentalFlag,
    FlagType,
    ParcelMetrics,
    PropertyFacts,
    RuleCheck,
    SepticAssessment,
    SewerService,
    UtilityFacts,
)
from siteplan.geometry import Rect
from siteplan.models import (
    CandidateStructure,
    Easement,
    EasementEdge,
    EasementType,
    FeatureKind,
    Point,
    SepticSuitability,
    SiteFeature,
    SiteModel,
    StructureType,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SiteBundle:
    """Everything one engine run needs."""
    lot_width: float
    lot_depth: float
    site: SiteModel
    candidates: List[CandidateStructure] = field(default_factory=list)
    facts: PropertyFacts = field(default_factory=PropertyFacts)

    @property
    def lot_area(self) -> float:
        return self.lot_width * self.lot_depth


def _enum(enum_cls: Type[Enum], value: Any, where: str) -> Enum:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"{where}: unknown value '{value}' (expected one of: {allowed})") from None


def _require(data: Dict, key: str, where: str) -> Any:
    if key not in data:
        raise ValueError(f"{where}: missing required field '{key}'")
    return data[key]


def _mapping(value: Any, where: str) -> Dict:
    if not isinstance(value, dict):
        raise ValueError(f"{where}: expected an object, got {type(value).__name__}")
    return value


def _items(data: Dict, key: str, where: str) -> List:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValueError(f"{where}.{key}: expected a list, got {type(value).__name__}")
    return value


def _number(value: Any, where: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{where}: expected a number, got {value!r}") from None


def _optional_number(value: Any, where: str) -> Optional[float]:
    return None if value is None else _number(value, where)


def _optional_int(value: Any, where: str) -> Optional[int]:
    if value is None:
        return None
    number = _number(value, where)
    if not number.is_integer():
        raise ValueError(f"{where}: expected a whole number, got {value!r}")
    return int(number)


def _scalar(value: Any, where: str) -> Union[float, str, None]:
    """Rule values are numbers or short text such as "Permitted"."""
    if value is None or (isinstance(value, (str, int, float)) and not isinstance(value, bool)):
        return value
    raise ValueError(f"{where}: expected a number or text, got {value!r}")


def _field(data: Dict, key: str, where: str) -> float:
    return _number(_require(data, key, where), f"{where}.{key}")


def _rect(data: Dict, where: str) -> Rect:
    data = _mapping(data, where)
    return Rect(
        x=_field(data, "x", where),
        y=_field(data, "y", where),
        width=_field(data, "width", where),
        height=_field(data, "height", where),
    )


def _default_label(structure_type: StructureType) -> str:
    if structure_type in (StructureType.ADU, StructureType.DADU):
        return structure_type.value.upper()
    if structure_type == StructureType.PRIMARY_DWELLING:
        return "House"
    return structure_type.value.title()


class SiteDataLoader:
    """Builds typed engine inputs from plain dictionaries."""

    def load(self, path: Union[str, Path]) -> SiteBundle:
        path = Path(path)
        with open(path, "r") as f:
            data = json.load(f)
        bundle = self.from_dict(data)
        log.info(f"Loaded site {path.name}: {bundle.lot_width:g}' x {bundle.lot_depth:g}' lot, "
                 f"{len(bundle.site.features)} features, {len(bundle.candidates)} candidates")
        return bundle

    def from_dict(self, data: Dict) -> SiteBundle:
        data = _mapping(data, "document")
        lot = _mapping(_require(data, "lot", "document"), "lot")
        lot_width = _field(lot, "width", "lot")
        lot_depth = _field(lot, "depth", "lot")
        if lot_width <= 0 or lot_depth <= 0:
            raise ValueError(f"lot: dimensions must be positive, got {lot_width:g}x{lot_depth:g}")

        site = self.parse_site(_mapping(data.get("site", {}), "site"), lot_width, lot_depth)
        candidates = [self.parse_candidate(c, i) for i, c in enumerate(_items(data, "candidates", "document"))]

        facts = self.parse_facts(_mapping(data.get("facts", {}), "facts"), lot, site)
        return SiteBundle(lot_width, lot_depth, site, candidates, facts)

    # ─────────────────────────────────────────────────────────────────────
    # Site model
    # ─────────────────────────────────────────────────────────────────────
    def parse_feature(self, data: Dict, index: int) -> SiteFeature:
        where = f"site.features[{index}]"
        rect = _rect(data, where)
        location = data.get("location")
        if location is not None:
            location = _mapping(location, f"{where}.location")
            location = Point(_field(location, "x", f"{where}.location"),
                             _field(location, "y", f"{where}.location"))
        return SiteFeature(
            id=str(_require(data, "id", where)),
            kind=_enum(FeatureKind, _require(data, "kind", where), f"{where}.kind"),
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            required_buffer=_number(data.get("required_buffer", 0.0), f"{where}.required_buffer"),
            editable=bool(data.get("editable", False)),
            label=str(data.get("label", "")),
            structure_type=data.get("structure_type"),
            location=location,
        )

    def parse_easement(self, data: Dict, index: int) -> Easement:
        where = f"site.easements[{index}]"
        data = _mapping(data, where)
        return Easement(
            id=str(_require(data, "id", where)),
            type=_enum(EasementType, _require(data, "type", where), f"{where}.type"),
            holder=data.get("holder", ""),
            width=_field(data, "width", where),
            edge=_enum(EasementEdge, _require(data, "edge", where), f"{where}.edge"),
            restrictions=tuple(_items(data, "restrictions", where)),
            recorded_document=data.get("recorded_document"),
            extent_depth=_optional_number(data.get("extent_depth"), f"{where}.extent_depth"),
        )

    def parse_site(self, data: Dict, lot_width: float, lot_depth: float) -> SiteModel:
        features = [self.parse_feature(f, i) for i, f in enumerate(_items(data, "features", "site"))]
        feature_ids = {f.id for f in features}

        easements = []
        for i, raw in enumerate(_items(data, "easements", "site")):
            easement = self.parse_easement(raw, i)
            easements.append(easement)
            if easement.id not in feature_ids:
                extent = _rect(raw["extent"], f"site.easements[{i}].extent") if "extent" in raw else None
                features.append(easement.project(lot_width, lot_depth, extent))
                feature_ids.add(easement.id)

        return SiteModel(
            features=features,
            easements=easements,
            sewer_available=bool(data.get("sewer_available", False)),
            sewer_distance_ft=_optional_number(data.get("sewer_distance_ft"), "site.sewer_distance_ft"),
            water_available=bool(data.get("water_available", True)),
            water_distance_ft=_optional_number(data.get("water_distance_ft"), "site.water_distance_ft"),
            gas_available=bool(data.get("gas_available", False)),
            electric_available=bool(data.get("electric_available", True)),
            neighbor_well_distance_ft=_optional_number(data.get("neighbor_well_distance_ft"),
                                                       "site.neighbor_well_distance_ft"),
            wetlands_mapped=bool(data.get("wetlands_mapped", False)),
            flood_zone=str(data["flood_zone"]) if data.get("flood_zone") is not None else None,
            slope_percent=_number(data.get("slope_percent", 0.0), "site.slope_percent"),
            soil_type=data.get("soil_type", ""),
            septic_suitability=_enum(SepticSuitability, data.get("septic_suitability", "not_rated"),
                                     "site.septic_suitability"),
        )

    def parse_candidate(self, data: Dict, index: int) -> CandidateStructure:
        where = f"candidates[{index}]"
        data = _mapping(data, where)
        structure_type = _enum(StructureType, _require(data, "type", where), f"{where}.type")
        return CandidateStructure(
            id=str(_require(data, "id", where)),
            type=structure_type,
            label=str(data.get("label") or _default_label(structure_type)),
            x=_field(data, "x", where),
            y=_field(data, "y", where),
            width=_field(data, "width", where),
            depth=_field(data, "depth", where),
            bedrooms=_optional_int(data.get("bedrooms"), f"{where}.bedrooms"),
            stories=_optional_int(data.get("stories"), f"{where}.stories"),
            rotation=_number(data.get("rotation", 0.0), f"{where}.rotation"),
        )

    # ─────────────────────────────────────────────────────────────────────
    # Property facts
    # ─────────────────────────────────────────────────────────────────────
    def parse_facts(self, data: Dict, lot: Dict, site: Optional[SiteModel] = None) -> PropertyFacts:
        parcel = _mapping(data.get("parcel", {}), "facts.parcel")
        width = _optional_number(parcel.get("lot_width", lot.get("width")), "facts.parcel.lot_width")
        depth = _optional_number(parcel.get("lot_depth", lot.get("depth")), "facts.parcel.lot_depth")
        area = _optional_number(parcel.get("area_sqft", lot.get("area_sqft")), "facts.parcel.area_sqft")
        if area is None and width and depth:
            area = width * depth

        checks = []
        for i, raw in enumerate(_items(data, "rule_checks", "facts")):
            where = f"facts.rule_checks[{i}]"
            raw = _mapping(raw, where)
            checks.append(RuleCheck(
                id=str(raw.get("id", f"rule-{i}")),
                name=_require(raw, "name", where),
                rule_type=_require(raw, "rule_type", where),
                status=_enum(CheckStatus, _require(raw, "status", where), f"{where}.status"),
                required=_scalar(raw.get("required"), f"{where}.required"),
                measured=_scalar(raw.get("measured"), f"{where}.measured"),
                unit=raw.get("unit", ""),
                citation=raw.get("citation", ""),
            ))

        flags = []
        for i, raw in enumerate(_items(data, "environmental_flags", "facts")):
            where = f"facts.environmental_flags[{i}]"
            raw = _mapping(raw, where)
            flags.append(EnvironmentalFlag(
                id=str(raw.get("id", f"flag-{i}")),
                type=_enum(FlagType, _require(raw, "type", where), f"{where}.type"),
                label=raw.get("label", ""),
                status=_enum(CheckStatus, _require(raw, "status", where), f"{where}.status"),
                description=raw.get("description", ""),
            ))

        # A flood zone on the site record stands in for a missing flood flag.
        if site is not None and site.flood_zone and not any(f.type == FlagType.FLOOD for f in flags):
            flags.append(flood_flag_from_code(site.flood_zone))

        return PropertyFacts(
            zoning_district=data.get("zoning_district", ""),
            zoning_category=data.get("zoning_category"),
            jurisdiction_name=data.get("jurisdiction_name", ""),
            parcel=ParcelMetrics(area_sqft=area, lot_width=width, lot_depth=depth),
            rule_checks=checks,
            utilities=self._parse_utilities(_mapping(data.get("utilities", {}), "facts.utilities")),
            environmental_flags=flags,
        )

    def _parse_utilities(self, data: Dict) -> UtilityFacts:
        sewer = data.get("sewer")
        septic = data.get("septic")
        if sewer is not None:
            where = "facts.utilities.sewer"
            sewer = _mapping(sewer, where)
            sewer = SewerService(
                available=bool(_require(sewer, "available", where)),
                required=bool(sewer.get("required", False)),
                provider_name=sewer.get("provider_name"),
                distance_to_main_ft=_optional_number(sewer.get("distance_to_main_ft"),
                                                     f"{where}.distance_to_main_ft"),
                hookup_cost=_optional_number(sewer.get("hookup_cost"), f"{where}.hookup_cost"),
            )
        if septic is not None:
            where = "facts.utilities.septic"
            septic = _mapping(septic, where)
            septic = SepticAssessment(
                status=_enum(CheckStatus, _require(septic, "status", where), f"{where}.status"),
                feasibility=septic.get("feasibility", ""),
                soil_name=septic.get("soil_name", ""),
                system_type=septic.get("system_type", ""),
                cost_min=_optional_number(septic.get("cost_min"), f"{where}.cost_min"),
                cost_max=_optional_number(septic.get("cost_max"), f"{where}.cost_max"),
                summary=septic.get("summary", ""),
                issues=tuple(_items(septic, "issues", where)),
            )
        return UtilityFacts(sewer=sewer, septic=septic)


# Singleton
_loader: Optional[SiteDataLoader] = None


def get_site_loader() -> SiteDataLoader:
    """Get singleton site data loader."""
    global _loader
    if _loader is None:
        _loader = SiteDataLoader()
    return _loader
