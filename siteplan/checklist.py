"""
Action Classification Resolver - "what can I do on this property?"

Deterministic mapping from normalized property facts to a fixed catalog of
property actions, each marked ALLOWED, CONDITIONAL, RESTRICTED or UNKNOWN
with the evidence behind it. No free-text reasoning feeds a decision:
every status comes from a rule-check status, a numeric lot-size
precondition, or the absence of data.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from siteplan.facts import CheckStatus, FlagType, PropertyFacts, RuleCheck
from siteplan.settings import ChecklistSettings

log = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# OUTPUT TYPES
# ═══════════════════════════════════════════════════════════════════════════
class ActionStatus(Enum):
    ALLOWED = "ALLOWED"
    CONDITIONAL = "CONDITIONAL"
    RESTRICTED = "RESTRICTED"
    UNKNOWN = "UNKNOWN"


class Confidence(Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ActionCategory(Enum):
    RESIDENTIAL = "residential"
    ACCESSORY = "accessory"
    LOT = "lot"
    UTILITIES = "utilities"
    ENVIRONMENTAL = "environmental"
    PERMITS = "permits"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    ActionCategory.RESIDENTIAL: "Residential Use",
    ActionCategory.ACCESSORY: "Accessory Structures",
    ActionCategory.LOT: "Lot Modifications",
    ActionCategory.UTILITIES: "Utilities & Wastewater",
    ActionCategory.ENVIRONMENTAL: "Environmental & Hazards",
    ActionCategory.PERMITS: "Permits & Verification",
}


@dataclass(frozen=True)
class Citation:
    label: str
    source: str


@dataclass(frozen=True)
class ActionItem:
    """
    One checklist answer.

    The evidence a status needs is checked at construction, so a catalog
    entry that forgets it fails immediately (in tests), not in the UI:
    RESTRICTED needs blocking_factors, UNKNOWN needs data_gaps, and
    CONDITIONAL needs conditions or next_steps.
    """
    id: str
    category: ActionCategory
    action_name: str
    status: ActionStatus
    confidence: Confidence
    summary: str
    conditions: Tuple[str, ...] = ()
    blocking_factors: Tuple[str, ...] = ()
    next_steps: Tuple[str, ...] = ()
    citations: Tuple[Citation, ...] = ()
    data_gaps: Tuple[str, ...] = ()

    def __post_init__(self):
        for name in ("conditions", "blocking_factors", "next_steps", "citations", "data_gaps"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

        if self.status == ActionStatus.RESTRICTED and not self.blocking_factors:
            raise ValueError(f"{self.id}: RESTRICTED requires at least one blocking factor")
        if self.status == ActionStatus.UNKNOWN and not self.data_gaps:
            raise ValueError(f"{self.id}: UNKNOWN requires at least one data gap")
        if self.status == ActionStatus.CONDITIONAL and not (self.conditions or self.next_steps):
            raise ValueError(f"{self.id}: CONDITIONAL requires conditions or next steps")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "action_name": self.action_name,
            "status": self.status.value,
            "confidence": self.confidence.value,
            "summary": self.summary,
            "conditions": list(self.conditions),
            "blocking_factors": list(self.blocking_factors),
            "next_steps": list(self.next_steps),
            "citations": [{"label": c.label, "source": c.source} for c in self.citations],
            "data_gaps": list(self.data_gaps),
        }


# ═══════════════════════════════════════════════════════════════════════════
# CATALOG
# ═══════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class CatalogEntry:
    id: str
    category: ActionCategory
    action_name: str


CATALOG: Tuple[CatalogEntry, ...] = (
    CatalogEntry("build-home", ActionCategory.RESIDENTIAL, "Build a Single-Family Home"),
    CatalogEntry("multi-family", ActionCategory.RESIDENTIAL, "Build Multi-Family Housing"),
    CatalogEntry("adu", ActionCategory.ACCESSORY, "Add an ADU"),
    CatalogEntry("dadu", ActionCategory.ACCESSORY, "Add a Detached ADU (DADU)"),
    CatalogEntry("garage", ActionCategory.ACCESSORY, "Build a Detached Garage"),
    CatalogEntry("pool", ActionCategory.ACCESSORY, "Install a Swimming Pool"),
    CatalogEntry("subdivide", ActionCategory.LOT, "Subdivide the Lot"),
    CatalogEntry("lot-line-adjustment", ActionCategory.LOT, "Lot Line Adjustment"),
    CatalogEntry("sewer-connect", ActionCategory.UTILITIES, "Connect to Public Sewer"),
    CatalogEntry("septic-install", ActionCategory.UTILITIES, "Install Septic System"),
    CatalogEntry("flood-zone", ActionCategory.ENVIRONMENTAL, "Build in Flood Zone"),
    CatalogEntry("wetlands", ActionCategory.ENVIRONMENTAL, "Wetland Constraints"),
    CatalogEntry("building-permit", ActionCategory.PERMITS, "Obtain Building Permit"),
    CatalogEntry("env-review", ActionCategory.PERMITS, "Environmental Review"),
)


PLANNING_CONTACT = "Contact the local planning department to confirm"


# ═══════════════════════════════════════════════════════════════════════════
# RULE-SET DECISION
# ═══════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class RuleSetOutcome:
    """How a group of governing rule checks resolves."""
    status: ActionStatus
    failing: Tuple[RuleCheck, ...]
    warning: Tuple[RuleCheck, ...]
    unresolved: Tuple[RuleCheck, ...]


def resolve_rule_set(checks: Sequence[RuleCheck]) -> Optional[RuleSetOutcome]:
    """
    Combine governing checks: any fail restricts, an unresolved check makes
    the answer unknown, any warning makes it conditional, otherwise allowed.

    Returns None when there are no governing checks at all.
    """
    if not checks:
        return None
    failing = tuple(c for c in checks if c.status == CheckStatus.FAIL)
    warning = tuple(c for c in checks if c.status == CheckStatus.WARN)
    unresolved = tuple(c for c in checks if c.status == CheckStatus.UNKNOWN)

    if failing:
        status = ActionStatus.RESTRICTED
    elif unresolved:
        status = ActionStatus.UNKNOWN
    elif warning:
        status = ActionStatus.CONDITIONAL
    else:
        status = ActionStatus.ALLOWED
    return RuleSetOutcome(status, failing, warning, unresolved)


def _citations(checks: Sequence[RuleCheck], limit: int = 3) -> List[Citation]:
    return [Citation(c.name, c.citation) for c in checks if c.citation][:limit]


def _area_text(sqft: float) -> str:
    return f"{sqft:,.0f} sqft"


def _as_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# ═══════════════════════════════════════════════════════════════════════════
# RESOLVER
# ═══════════════════════════════════════════════════════════════════════════
class ActionChecklistResolver:
    """
    Produces one ActionItem per catalog entry, in catalog order.

    Cross-entry rules are applied before the entry's own evaluation:
    septic is restricted wherever sewer connection is mandatory, and
    multi-family is restricted in any single-family zoning category.
    """

    def __init__(self, settings: Optional[ChecklistSettings] = None):
        self.settings = settings or ChecklistSettings()
        self._builders = {
            "build-home": self._build_home,
            "multi-family": self._multi_family,
            "adu": self._adu,
            "dadu": self._dadu,
            "garage": self._garage,
            "pool": self._pool,
            "subdivide": self._subdivide,
            "lot-line-adjustment": self._lot_line_adjustment,
            "sewer-connect": self._sewer,
            "septic-install": self._septic,
            "flood-zone": self._flood_zone,
            "wetlands": self._wetlands,
            "building-permit": self._building_permit,
            "env-review": self._environmental_review,
        }

    def classify(self, facts: PropertyFacts) -> List[ActionItem]:
        items = [self._builders[entry.id](entry, facts) for entry in CATALOG]

        gaps = sum(1 for item in items if item.status == ActionStatus.UNKNOWN)
        if gaps:
            log.info(f"Checklist for {facts.district_label}: {gaps} of {len(items)} actions unknown")
        log.debug("Checklist statuses: " + ", ".join(f"{i.id}={i.status.value}" for i in items))
        return items

    # ─────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────
    @staticmethod
    def _item(entry: CatalogEntry, status: ActionStatus, confidence: Confidence, summary: str,
              action_name: Optional[str] = None, **evidence) -> ActionItem:
        return ActionItem(
            id=entry.id,
            category=entry.category,
            action_name=action_name or entry.action_name,
            status=status,
            confidence=confidence,
            summary=summary,
            **evidence,
        )

    def _unknown(self, entry: CatalogEntry, summary: str, gaps: Sequence[str],
                 next_steps: Sequence[str] = ()) -> ActionItem:
        return self._item(entry, ActionStatus.UNKNOWN, Confidence.LOW, summary,
                          data_gaps=gaps, next_steps=next_steps or (f"{PLANNING_CONTACT} requirements",))

    def _from_rule_set(self, entry: CatalogEntry, outcome: RuleSetOutcome, checks: Sequence[RuleCheck],
                       subject: str, next_steps: Sequence[str]) -> ActionItem:
        citations = _citations(checks)

        if outcome.status == ActionStatus.RESTRICTED:
            count = len(outcome.failing)
            return self._item(
                entry, ActionStatus.RESTRICTED, Confidence.HIGH,
                f"{subject} is blocked by {count} failing requirement{'s' if count > 1 else ''}.",
                blocking_factors=[c.describe() for c in outcome.failing],
                next_steps=("Review the failing requirements with the local planning department",
                            "Consider a variance application if the requirement cannot be met"),
                citations=citations,
            )

        if outcome.status == ActionStatus.UNKNOWN:
            return self._item(
                entry, ActionStatus.UNKNOWN, Confidence.LOW,
                f"{subject} could not be fully evaluated.",
                data_gaps=[f"{c.name}: status could not be determined" for c in outcome.unresolved],
                next_steps=(f"{PLANNING_CONTACT} the unresolved requirements",),
                citations=citations,
            )

        if outcome.status == ActionStatus.CONDITIONAL:
            count = len(outcome.warning)
            return self._item(
                entry, ActionStatus.CONDITIONAL, Confidence.MEDIUM,
                f"{subject} appears permitted, but {count} item{'s' if count > 1 else ''} need verification.",
                conditions=[f"{c.describe()} (needs verification)" for c in outcome.warning],
                next_steps=next_steps,
                citations=citations,
            )

        return self._item(
            entry, ActionStatus.ALLOWED, Confidence.HIGH,
            f"{subject} meets every supplied requirement.",
            next_steps=next_steps,
            citations=citations,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Residential use
    # ─────────────────────────────────────────────────────────────────────
    def _build_home(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        checks = f.checks_where("setback", "height", "coverage", "far")
        outcome = resolve_rule_set(checks)
        if outcome is None:
            return self._unknown(
                entry,
                "Dimensional standards for a single-family home could not be determined.",
                [f"Setback, height and coverage rules not available for {f.district_label}"],
            )
        subject = f"A single-family home in {f.district_label}"
        return self._from_rule_set(entry, outcome, checks, subject, (
            "Review setback requirements with the local planning department",
            "Consult an architect on structure placement",
        ))

    def _multi_family(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        category = (f.zoning_category or "").lower()

        if "single" in category:
            return self._item(
                entry, ActionStatus.RESTRICTED, Confidence.HIGH,
                f"Multi-family housing is not permitted in the {f.district_label} single-family zone.",
                blocking_factors=[f"Zoning district {f.district_label} restricts use to single-family residential"],
                next_steps=("Apply for a zone change through local planning",
                            "Check whether a planned unit development (PUD) overlay is available"),
                citations=[Citation("Zoning District Use Table", f"{f.district_label} Permitted Uses")],
            )

        if not category:
            return self._unknown(entry, "Multi-family use could not be determined without a zoning category.",
                                 ["Zoning category not available for this parcel"])

        if category in ("residential_multi", "mixed_use"):
            checks = f.checks_where("density", "dwelling_units")
            outcome = resolve_rule_set(checks)
            next_steps = ("Confirm density and unit limits with local planning",
                          "Verify utility capacity for multiple units")
            if outcome is None:
                return self._item(
                    entry, ActionStatus.CONDITIONAL, Confidence.MEDIUM,
                    f"The {f.district_label} zoning category permits multi-family use; "
                    f"density limits were not supplied.",
                    conditions=["Density and dwelling-unit limits must be confirmed"],
                    next_steps=next_steps,
                )
            return self._from_rule_set(entry, outcome, checks, "Multi-family housing", next_steps)

        return self._unknown(entry, "Multi-family use permissions could not be determined from available data.",
                             [f"Permitted use table not available for {f.district_label}"])

    # ─────────────────────────────────────────────────────────────────────
    # Accessory structures
    # ─────────────────────────────────────────────────────────────────────
    def _adu(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        lot = f.parcel.area_sqft
        min_lot = self.settings.adu_min_lot_sqft
        if lot is None:
            return self._unknown(entry, "ADU eligibility depends on lot size, which is not available.",
                                 ["Parcel area not available"])

        if lot < min_lot:
            return self._item(
                entry, ActionStatus.RESTRICTED, Confidence.HIGH,
                f"ADUs require a minimum lot size of {_area_text(min_lot)}. This lot is {_area_text(lot)}.",
                blocking_factors=[f"Lot size {_area_text(lot)} is below the {_area_text(min_lot)} ADU minimum"],
                next_steps=("Verify minimum lot size requirements with local planning",
                            "Consider an attached ADU if allowed"),
            )

        adu_rule = f.check_of("adu_allowed", "adu_size_max")
        if adu_rule is None or adu_rule.status == CheckStatus.UNKNOWN:
            return self._unknown(entry, "ADU regulations could not be determined from available data.",
                                 ["ADU regulations not structured for this jurisdiction"],
                                 ["Contact local planning for ADU requirements"])

        citations = [Citation("ADU Regulations", adu_rule.citation)] if adu_rule.citation else []
        if adu_rule.status == CheckStatus.FAIL:
            return self._item(
                entry, ActionStatus.RESTRICTED, Confidence.HIGH,
                f"ADU rules in {f.district_label} are not met.",
                blocking_factors=[adu_rule.describe()],
                next_steps=("Review ADU rules with local planning",),
                citations=citations,
            )

        coverage = f.check_of("lot_coverage_max")
        conditions = []
        if adu_rule.status == CheckStatus.WARN:
            conditions.append(f"{adu_rule.describe()} (needs verification)")
        if coverage is not None and coverage.status != CheckStatus.PASS:
            conditions.append("Lot coverage may be tight; verify total coverage with the ADU footprint added")

        if conditions:
            return self._item(
                entry, ActionStatus.CONDITIONAL, Confidence.MEDIUM,
                f"ADUs are permitted in {f.district_label} on lots of {_area_text(min_lot)}+, "
                f"subject to {len(conditions)} condition{'s' if len(conditions) > 1 else ''}.",
                conditions=conditions,
                next_steps=("Calculate total lot coverage with the proposed ADU",
                            "Verify utility connections for the ADU"),
                citations=citations,
            )

        return self._item(
            entry, ActionStatus.ALLOWED, Confidence.HIGH,
            f"ADUs are permitted in {f.district_label} on lots of {_area_text(min_lot)}+. "
            f"This lot is {_area_text(lot)}.",
            next_steps=("Obtain an ADU building permit", "Verify utility capacity"),
            citations=citations,
        )

    def _dadu(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        lot = f.parcel.area_sqft
        min_lot = self.settings.dadu_min_lot_sqft
        if lot is None:
            return self._unknown(entry, "Detached ADU eligibility depends on lot size, which is not available.",
                                 ["Parcel area not available"])

        if lot >= min_lot:
            return self._item(
                entry, ActionStatus.CONDITIONAL, Confidence.MEDIUM,
                f"Lot size ({_area_text(lot)}) may support a detached ADU, subject to setback, "
                f"coverage and separation requirements.",
                conditions=(
                    "Must meet all accessory structure setbacks",
                    f"Must maintain at least {self.settings.dadu_min_separation_ft:g}' structure separation",
                    "Total lot coverage must remain within limits",
                ),
                next_steps=(
                    "Verify DADU-specific regulations with the planning department",
                    "Confirm utility connections are available",
                    "Check fire access requirements",
                ),
            )

        return self._item(
            entry, ActionStatus.RESTRICTED, Confidence.MEDIUM,
            f"Lot size ({_area_text(lot)}) is below the {_area_text(min_lot)} needed for a detached ADU.",
            blocking_factors=[f"Lot size {_area_text(lot)} is below the {_area_text(min_lot)} DADU minimum"],
            next_steps=("Check minimum lot requirements for DADUs with local planning",),
        )

    def _garage(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        coverage = f.check_of("lot_coverage_max")
        if coverage is None:
            return self._unknown(entry, "Detached garage feasibility depends on the lot coverage limit.",
                                 ["Lot coverage limit not available"])

        next_steps = ("Obtain a building permit",
                      "Verify accessory structure setback requirements (typically 5')")
        return self._from_rule_set(entry, resolve_rule_set([coverage]), [coverage],
                                   f"A detached garage in {f.district_label}", next_steps)

    def _pool(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        return self._item(
            entry, ActionStatus.CONDITIONAL, Confidence.MEDIUM,
            "Pools are typically permitted as accessory uses with specific setback and fencing requirements.",
            conditions=(
                "Pool must meet accessory structure setback requirements",
                "Perimeter fencing (typically 4'+) is required",
                "Electrical permits required for pool equipment",
            ),
            next_steps=(
                "Verify pool setback requirements",
                "Obtain a pool/mechanical permit",
                "Confirm fencing requirements with the building department",
            ),
        )

    # ─────────────────────────────────────────────────────────────────────
    # Lot modifications
    # ─────────────────────────────────────────────────────────────────────
    def _subdivide(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        lot = f.parcel.area_sqft
        if lot is None:
            return self._unknown(entry, "Subdivision potential depends on lot size, which is not available.",
                                 ["Parcel area not available"])

        min_rule = f.check_of("lot_size_min")
        min_lot = _as_float(min_rule.required) if min_rule else None
        if min_lot is None:
            min_lot = self.settings.default_min_lot_sqft
        citations = [Citation("Minimum Lot Size", min_rule.citation)] if min_rule and min_rule.citation else []

        if lot >= min_lot * 2:
            return self._item(
                entry, ActionStatus.CONDITIONAL, Confidence.MEDIUM,
                f"Lot area ({_area_text(lot)}) is large enough to potentially create two conforming lots "
                f"(min {_area_text(min_lot)} each).",
                conditions=(
                    "Both resulting lots must meet minimum size requirements",
                    "Both lots must have street frontage or access",
                    "Utilities and roads must serve both lots",
                    "Plat approval required from the local jurisdiction",
                ),
                next_steps=(
                    "Consult local planning on subdivision requirements",
                    "Hire a licensed surveyor for a preliminary plat",
                    "Submit a subdivision application",
                ),
                citations=citations,
            )

        return self._item(
            entry, ActionStatus.RESTRICTED, Confidence.HIGH,
            f"Lot area ({_area_text(lot)}) is below the {_area_text(min_lot * 2)} needed for two conforming lots.",
            blocking_factors=["Insufficient lot area for subdivision"],
            citations=citations,
        )

    def _lot_line_adjustment(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        return self._item(
            entry, ActionStatus.CONDITIONAL, Confidence.MEDIUM,
            "Lot line adjustments between adjacent parcels are generally permitted if both resulting "
            "lots meet all dimensional standards.",
            conditions=(
                "Both resulting parcels must meet minimum lot size",
                "Both parcels must meet setback requirements",
                "No new non-conformities created",
            ),
            next_steps=(
                "Hire a surveyor to prepare a boundary adjustment survey",
                "Submit an application with both property owners' consent",
            ),
        )

    # ─────────────────────────────────────────────────────────────────────
    # Utilities and wastewater
    # ─────────────────────────────────────────────────────────────────────
    def _sewer(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        sewer = f.utilities.sewer
        if sewer is None:
            return self._unknown(entry, "Public sewer availability could not be determined.",
                                 ["Sewer service area data not available"],
                                 ["Verify sewer availability with the local utility district"])

        if not sewer.available:
            return self._item(
                entry, ActionStatus.RESTRICTED, Confidence.MEDIUM,
                "Property is not within a public sewer service area. An on-site wastewater system is required.",
                blocking_factors=["Not within sewer service boundary"],
                next_steps=("Verify sewer availability with the local utility district",
                            "Evaluate on-site septic system options"),
            )

        provider = f" via {sewer.provider_name}" if sewer.provider_name else ""
        mandatory = " Connection is mandatory in this service area." if sewer.required else ""
        cost = f" Estimated hookup cost: ${sewer.hookup_cost:,.0f}." if sewer.hookup_cost else ""
        lateral = (f"Run the lateral to the main (est. {sewer.distance_to_main_ft:g}')"
                   if sewer.distance_to_main_ft else "Determine the distance to the sewer main")
        return self._item(
            entry, ActionStatus.ALLOWED, Confidence.HIGH,
            f"Public sewer service is available{provider}.{mandatory}{cost}",
            next_steps=("Contact the sewer provider for connection requirements",
                        "Obtain a sewer connection permit", lateral),
        )

    def _septic(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        sewer = f.utilities.sewer
        if sewer is not None and sewer.available and sewer.required:
            return self._item(
                entry, ActionStatus.RESTRICTED, Confidence.HIGH,
                "Property is within a sewer service area where connection is required. "
                "On-site septic is not permitted.",
                blocking_factors=["Sewer connection required in this service area"],
            )

        septic = f.utilities.septic
        if septic is None or septic.status == CheckStatus.UNKNOWN:
            return self._unknown(entry, "Septic feasibility could not be determined from available data.",
                                 ["Soil data or septic regulations not available for this jurisdiction"],
                                 ["Contact the county health department for septic requirements",
                                  "Schedule a site evaluation"])

        if septic.status == CheckStatus.PASS:
            cost = ""
            if septic.cost_min is not None and septic.cost_max is not None:
                cost = f" Estimated cost: ${septic.cost_min:,.0f}-${septic.cost_max:,.0f}."
            system = f" Likely system type: {septic.system_type}." if septic.system_type else ""
            return self._item(
                entry, ActionStatus.ALLOWED, Confidence.HIGH,
                f"Soil conditions appear suitable for an on-site septic system.{system}{cost}",
                next_steps=("Schedule a perc test with a licensed septic designer",
                            "Obtain a septic system permit from the health department",
                            "Complete the site evaluation and system design"),
            )

        if septic.status == CheckStatus.WARN:
            soil = f" Soil type: {septic.soil_name}." if septic.soil_name else ""
            return self._item(
                entry, ActionStatus.CONDITIONAL, Confidence.LOW,
                f"Septic feasibility is {septic.feasibility or 'limited'}.{soil}",
                conditions=septic.issues or (septic.summary or "Soil limitations identified",),
                next_steps=("Schedule a site evaluation with a licensed septic designer",
                            "Conduct a perc test to verify the soil percolation rate",
                            "Consider alternative system types if conventional is not feasible"),
            )

        return self._item(
            entry, ActionStatus.RESTRICTED, Confidence.LOW,
            f"Septic system not feasible: {septic.summary or 'soils rated unsuitable'}",
            blocking_factors=[septic.summary or "Soils rated unsuitable for on-site septic"],
            next_steps=("Contact the county health department about alternative systems",),
        )

    # ─────────────────────────────────────────────────────────────────────
    # Environmental
    # ─────────────────────────────────────────────────────────────────────
    def _flood_zone(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        flag = f.flag_of(FlagType.FLOOD)
        if flag is None or flag.status == CheckStatus.UNKNOWN:
            return self._unknown(entry, "Flood zone status could not be determined.",
                                 ["FEMA flood zone determination not available"],
                                 ["Verify flood zone status with the FEMA flood map service"])

        if flag.status == CheckStatus.PASS:
            return self._item(entry, ActionStatus.ALLOWED, Confidence.HIGH,
                              flag.description or "Property is not within a designated FEMA flood zone.",
                              action_name="Flood Zone Status")

        if flag.status == CheckStatus.FAIL:
            return self._item(
                entry, ActionStatus.CONDITIONAL, Confidence.HIGH, flag.description,
                conditions=(
                    "Flood insurance required (NFIP)",
                    "Structures must be elevated above base flood elevation (BFE)",
                    "Floodplain development permit required",
                    "No fill or obstruction of the floodway",
                ),
                next_steps=(
                    "Obtain a flood zone determination from FEMA",
                    "Get the base flood elevation for the site",
                    "Apply for a floodplain development permit",
                ),
            )

        return self._item(
            entry, ActionStatus.CONDITIONAL, Confidence.MEDIUM, flag.description,
            action_name="Flood Zone Status",
            conditions=("Flood zone proximity may require additional review",),
            next_steps=("Verify flood zone status with the FEMA flood map service", "Consider flood insurance"),
        )

    def _wetlands(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        flag = f.flag_of(FlagType.WETLAND)
        if flag is None or flag.status == CheckStatus.UNKNOWN:
            return self._unknown(entry, "Wetland presence could not be determined.",
                                 ["Wetland inventory data not available for this area"],
                                 ["Contact local planning for critical area maps"])

        if flag.status == CheckStatus.PASS:
            return self._item(entry, ActionStatus.ALLOWED, Confidence.MEDIUM,
                              flag.description or "No mapped wetlands identified on or near the parcel.")

        return self._item(
            entry, ActionStatus.CONDITIONAL, Confidence.MEDIUM, flag.description,
            conditions=(
                "Buffer zones (typically 50-200') may restrict buildable area",
                "Wetland delineation may be required",
                "Army Corps of Engineers permit may be needed for any fill",
            ),
            next_steps=(
                "Hire a wetland biologist for delineation",
                "Contact local planning for buffer requirements",
            ),
        )

    # ─────────────────────────────────────────────────────────────────────
    # Permits
    # ─────────────────────────────────────────────────────────────────────
    def _building_permit(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        department = f"{f.jurisdiction_name} building department" if f.jurisdiction_name \
            else "the local building department"
        return self._item(
            entry, ActionStatus.CONDITIONAL, Confidence.HIGH,
            "A building permit is required for all new construction, additions and significant modifications.",
            conditions=(
                "Plans must comply with local building codes",
                "Zoning compliance review required",
                "May require engineering for foundation or structure",
            ),
            next_steps=(
                f"Contact {department}",
                "Prepare construction plans meeting code requirements",
                "Submit the permit application with required fees",
            ),
        )

    def _environmental_review(self, entry: CatalogEntry, f: PropertyFacts) -> ActionItem:
        flags = f.environmental_flags
        if not flags:
            return self._unknown(entry, "Environmental review needs could not be determined.",
                                 ["No environmental screening data available"])

        issues = [fl for fl in flags if fl.status in (CheckStatus.WARN, CheckStatus.FAIL)]
        if issues:
            labels = ", ".join(fl.label for fl in issues)
            return self._item(
                entry, ActionStatus.CONDITIONAL, Confidence.MEDIUM,
                f"{len(issues)} environmental factor{'s' if len(issues) > 1 else ''} may trigger "
                f"additional review: {labels}.",
                action_name="Environmental Review Required",
                conditions=[f"{fl.label}: {fl.description}" for fl in issues],
                next_steps=(
                    "Contact local planning for environmental review requirements",
                    "Determine whether state environmental policy review is needed",
                    "Engage an environmental consultant if critical areas are present",
                ),
            )

        unresolved = [fl for fl in flags if fl.status == CheckStatus.UNKNOWN]
        if unresolved:
            return self._unknown(entry, "Some environmental screens returned no result.",
                                 [f"{fl.label}: status could not be determined" for fl in unresolved])

        return self._item(
            entry, ActionStatus.ALLOWED, Confidence.MEDIUM,
            "No environmental constraints identified that would trigger additional review.",
            next_steps=(f"{PLANNING_CONTACT} no additional environmental review is needed",),
        )


# ═══════════════════════════════════════════════════════════════════════════
# MODULE-LEVEL HELPERS
# ═══════════════════════════════════════════════════════════════════════════
def classify(facts: PropertyFacts, settings: Optional[ChecklistSettings] = None) -> List[ActionItem]:
    return ActionChecklistResolver(settings).classify(facts)


def group_by_category(items: Sequence[ActionItem]) -> Dict[ActionCategory, List[ActionItem]]:
    """Group items by category; every category is present, in display order."""
    groups: Dict[ActionCategory, List[ActionItem]] = {category: [] for category in ActionCategory}
    for item in items:
        groups[item.category].append(item)
    return groups
