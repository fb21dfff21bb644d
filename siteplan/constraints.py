"""
Constraint Evaluator - real-time placement feedback for candidate structures.

Takes one candidate, every candidate placed so far, the existing site
conditions and the lot size, and returns ordered comments:

    1. boundary setbacks (and recorded easements)
    2. septic / well buffers
    3. wetland buffers
    4. flood zone
    5. slope
    6. structure-to-structure separation
    7. utility connection notices
    8. lot coverage (lot-level)
    9. permit-trigger notices
   10. all-clear

Every check runs; nothing short-circuits. Callers merge the lists for all
candidates and drop repeated ids (see evaluate_all).
"""

import logging
from typing import Iterable, List, Optional, Sequence

from siteplan.geometry import point_gap, rect_gap, rects_overlap
from siteplan.models import (
    CandidateStructure,
    Comment,
    CommentCategory,
    FeatureKind,
    SEPTIC_KINDS,
    Severity,
    SiteFeature,
    SiteModel,
    StructureType,
    make_comment_id,
    rule_trigger,
)
from siteplan.settings import EvaluatorSettings

log = logging.getLogger(__name__)

SETBACK_CITATION = "Zoning Code: Yard Setbacks"
SEPTIC_CITATION = "On-Site Sewage Rules: Horizontal Separation"
BUILDING_CODE_CITATION = "Building Code: Structure Separation"
FIRE_CODE_CITATION = "Fire Code §503.1"


class ConstraintEvaluator:
    """
    Pure evaluator: holds only configuration, never per-call state.

    The same evaluator may be shared across threads; each call works on
    the snapshot it is given.
    """

    def __init__(self, settings: Optional[EvaluatorSettings] = None):
        self.settings = settings or EvaluatorSettings()

    def evaluate(
        self,
        candidate: CandidateStructure,
        all_candidates: Sequence[CandidateStructure],
        site: SiteModel,
        lot_width: float,
        lot_depth: float,
    ) -> List[Comment]:
        """
        Evaluate a single candidate.

        Returns:
            Comments in check order. Lot-level comments (coverage) carry no
            structure_id and repeat identically for every candidate.
        """
        comments: List[Comment] = []

        self._check_setbacks(candidate, lot_width, lot_depth, comments)
        self._check_easements(candidate, site, comments)
        self._check_septic_and_wells(candidate, site, comments)
        self._check_wetlands(candidate, site, comments)
        self._check_flood_zone(candidate, site, comments)
        self._check_slope(candidate, site, comments)
        self._check_separation(candidate, all_candidates, site, comments)
        self._check_utilities(candidate, site, comments)
        self._check_coverage(candidate, all_candidates, site, lot_width, lot_depth, comments)
        self._check_permit_triggers(candidate, site, comments)

        if not any(c.severity.is_problem for c in comments):
            comments.append(Comment(
                id=make_comment_id(CommentCategory.SETBACK, candidate.id, "all-clear"),
                category=CommentCategory.SETBACK,
                severity=Severity.SUCCESS,
                title="Placement Compliant",
                message=f"{candidate.label} placement meets setback and separation requirements.",
                structure_id=candidate.id,
            ))

        log.debug(f"Evaluated {candidate.id}: {len(comments)} comments "
                  f"({sum(c.severity == Severity.CRITICAL for c in comments)} critical)")
        return comments

    # ─────────────────────────────────────────────────────────────────────
    # 1. Boundary setbacks and easements
    # ─────────────────────────────────────────────────────────────────────
    def _check_setbacks(self, s: CandidateStructure, lot_width: float, lot_depth: float,
                        out: List[Comment]) -> None:
        setbacks = self.settings.setbacks
        side = setbacks.side_for(s)
        band = setbacks.proximity_band
        rect = s.rect

        # (edge, required, how far inside the lot the structure sits from that line)
        edges = (
            ("front", setbacks.front, rect.y, "Move the structure back from the street."),
            ("left", side, rect.x, "Move the structure away from the left property line."),
            ("right", side, lot_width - rect.right, "Reduce width or move the structure left."),
            ("rear", setbacks.rear, lot_depth - rect.bottom, "Move the structure forward or reduce depth."),
        )

        for edge, required, distance, action in edges:
            comment_id = make_comment_id(CommentCategory.SETBACK, s.id, edge)
            if distance < required:
                intrusion = required - distance
                out.append(Comment(
                    id=comment_id,
                    category=CommentCategory.SETBACK,
                    severity=Severity.CRITICAL,
                    title=f"{edge.title()} Setback Violation",
                    message=f"{s.label} is {intrusion:.0f}' into the {required:g}' {edge} setback.",
                    citation=SETBACK_CITATION,
                    suggested_action=f"{action} At least {intrusion:.0f}' is needed.",
                    structure_id=s.id,
                ))
            elif distance < required + band:
                out.append(Comment(
                    id=comment_id,
                    category=CommentCategory.SETBACK,
                    severity=Severity.WARNING,
                    title=f"Close to {edge.title()} Setback",
                    message=(f"{s.label} is only {distance - required:.0f}' from the {edge} setback line. "
                             f"Consider additional buffer."),
                    citation=SETBACK_CITATION,
                    structure_id=s.id,
                ))

    def _check_easements(self, s: CandidateStructure, site: SiteModel, out: List[Comment]) -> None:
        for feature in site.features_of(FeatureKind.EASEMENT):
            if not rects_overlap(s.rect, feature.rect):
                continue
            easement = site.easement_for(feature)
            blocking = easement is None or easement.type.blocks_structures
            holder = f" held by {easement.holder}" if easement and easement.holder else ""
            restrictions = "; ".join(easement.restrictions) if easement and easement.restrictions else ""
            out.append(Comment(
                id=make_comment_id(CommentCategory.EASEMENT, s.id, feature.id),
                category=CommentCategory.EASEMENT,
                severity=Severity.CRITICAL if blocking else Severity.WARNING,
                title=f"Encroaches on {feature.label}",
                message=(f"{s.label} sits inside the {feature.label}{holder}."
                         + (f" Restrictions: {restrictions}." if restrictions else "")),
                citation=easement.recorded_document if easement else None,
                suggested_action=("Move the structure outside the easement." if blocking
                                  else "Confirm the use is compatible with the easement holder's rights."),
                structure_id=s.id,
            ))

    # ─────────────────────────────────────────────────────────────────────
    # 2. Septic and well buffers
    # ─────────────────────────────────────────────────────────────────────
    def _check_septic_and_wells(self, s: CandidateStructure, site: SiteModel,
                                out: List[Comment]) -> None:
        rect = s.rect

        for feature in site.features_of(*SEPTIC_KINDS, FeatureKind.WELL):
            if feature.kind == FeatureKind.WELL:
                self._check_well(s, feature, out)
                continue

            gap = rect_gap(rect, feature.rect)
            if gap >= feature.required_buffer:
                continue

            is_drainfield = feature.kind == FeatureKind.DRAINFIELD
            out.append(Comment(
                id=make_comment_id(CommentCategory.SEPTIC, s.id, feature.id),
                category=CommentCategory.SEPTIC,
                severity=Severity.CRITICAL if is_drainfield else Severity.WARNING,
                title=f"Too Close to {feature.label}",
                message=(f"{s.label} is only {gap:.0f}' from the {feature.label.lower()}. "
                         f"Minimum {feature.required_buffer:g}' required"
                         + (" to protect the system." if is_drainfield else " for maintenance access.")),
                citation=SEPTIC_CITATION,
                suggested_action=("Building over or near a drainfield damages the system; heavy equipment can crush pipes."
                                  if is_drainfield else
                                  "Maintain separation to allow future pumping and maintenance access."),
                structure_id=s.id,
            ))

        if s.bears_bedrooms and site.has_drainfield:
            out.append(Comment(
                id=make_comment_id(CommentCategory.SEPTIC, s.id, rule_trigger("capacity")),
                category=CommentCategory.SEPTIC,
                severity=Severity.WARNING,
                title="Septic Capacity Review Required",
                message=(f"{s.label} adds bedrooms and wastewater flow. "
                         f"Existing septic system capacity must be verified."),
                citation="On-Site Sewage Rules: Design Flow",
                suggested_action="Have a septic designer confirm the existing system can handle the added bedrooms.",
                structure_id=s.id,
            ))

        if (site.neighbor_well_distance_ft is not None
                and site.neighbor_well_distance_ft < self.settings.neighbor_well_notice_ft):
            out.append(Comment(
                id=make_comment_id(CommentCategory.WELL, s.id, rule_trigger("neighbor-well")),
                category=CommentCategory.WELL,
                severity=Severity.INFO,
                title="Neighboring Well Nearby",
                message=(f"A well about {site.neighbor_well_distance_ft:.0f}' away on neighboring property "
                         f"restricts where septic components can go."),
                citation=SEPTIC_CITATION,
                structure_id=s.id,
            ))

    def _check_well(self, s: CandidateStructure, well: SiteFeature, out: List[Comment]) -> None:
        gap = point_gap(s.rect, well.location.x, well.location.y)
        comment_id = make_comment_id(CommentCategory.WELL, s.id, well.id)

        if gap < well.required_buffer:
            out.append(Comment(
                id=comment_id,
                category=CommentCategory.WELL,
                severity=Severity.CRITICAL,
                title="Well Setback Violation",
                message=(f"{s.label} is only {gap:.0f}' from the {well.label.lower()}. "
                         f"Minimum {well.required_buffer:g}' required to prevent contamination."),
                citation="Health Code: Well Protection",
                suggested_action="Move the structure away from the well.",
                structure_id=s.id,
            ))
        elif s.is_dwelling and gap < self.settings.well_septic_separation_ft:
            out.append(Comment(
                id=comment_id,
                category=CommentCategory.WELL,
                severity=Severity.WARNING,
                title="Well Protection Zone",
                message=(f"New septic components must be {self.settings.well_septic_separation_ft:g}'+ "
                         f"from the well. This placement may limit septic options."),
                citation=SEPTIC_CITATION,
                structure_id=s.id,
            ))

    # ─────────────────────────────────────────────────────────────────────
    # 3-5. Environmental
    # ─────────────────────────────────────────────────────────────────────
    def _check_wetlands(self, s: CandidateStructure, site: SiteModel, out: List[Comment]) -> None:
        for feature in site.features_of(FeatureKind.WETLAND):
            buffer = feature.required_buffer or self.settings.default_wetland_buffer_ft
            if rect_gap(s.rect, feature.rect) < buffer:
                out.append(Comment(
                    id=make_comment_id(CommentCategory.ENVIRONMENTAL, s.id, feature.id),
                    category=CommentCategory.ENVIRONMENTAL,
                    severity=Severity.CRITICAL,
                    title="Wetland Buffer Violation",
                    message=f"{s.label} is within the {buffer:g}' wetland buffer. No construction allowed.",
                    citation="Critical Areas Ordinance",
                    suggested_action="Move the structure outside the buffer. Wetland delineation may be required.",
                    structure_id=s.id,
                ))

    def _check_flood_zone(self, s: CandidateStructure, site: SiteModel, out: List[Comment]) -> None:
        if not site.flood_zone:
            return
        out.append(Comment(
            id=make_comment_id(CommentCategory.ENVIRONMENTAL, s.id, rule_trigger("flood-zone")),
            category=CommentCategory.ENVIRONMENTAL,
            severity=Severity.WARNING,
            title="Flood Zone Property",
            message=f"Property is in FEMA Zone {site.flood_zone}. Special requirements apply.",
            citation="FEMA Flood Insurance Rate Map",
            suggested_action="Elevation certificate required. Build above Base Flood Elevation.",
            structure_id=s.id,
        ))

    def _check_slope(self, s: CandidateStructure, site: SiteModel, out: List[Comment]) -> None:
        slope = site.slope_percent
        if slope <= self.settings.moderate_slope_percent:
            return
        steep = slope > self.settings.steep_slope_percent
        out.append(Comment(
            id=make_comment_id(CommentCategory.ENVIRONMENTAL, s.id, rule_trigger("slope")),
            category=CommentCategory.ENVIRONMENTAL,
            severity=Severity.WARNING if steep else Severity.INFO,
            title="Steep Slope Concerns" if steep else "Moderate Slope",
            message=(f"Site has {slope:g}% slopes. "
                     + ("Geotechnical study may be required." if steep
                        else "Consider grading in foundation design.")),
            structure_id=s.id,
        ))

    # ─────────────────────────────────────────────────────────────────────
    # 6. Structure separation
    # ─────────────────────────────────────────────────────────────────────
    def _check_separation(self, s: CandidateStructure, all_candidates: Sequence[CandidateStructure],
                          site: SiteModel, out: List[Comment]) -> None:
        default_sep = self.settings.min_structure_separation_ft

        for other in all_candidates:
            if other.id == s.id:
                continue
            self._separation_comment(s, other.id, other.label, other.rect, default_sep, out)

        for feature in site.existing_structures:
            min_sep = feature.required_buffer if feature.required_buffer > 0 else default_sep
            self._separation_comment(s, feature.id, f"existing {feature.label.lower()}",
                                     feature.rect, min_sep, out)

    def _separation_comment(self, s: CandidateStructure, other_id: str, other_label: str,
                            other_rect, min_sep: float, out: List[Comment]) -> None:
        comment_id = make_comment_id(CommentCategory.STRUCTURE, s.id, other_id)
        if rects_overlap(s.rect, other_rect):
            out.append(Comment(
                id=comment_id,
                category=CommentCategory.STRUCTURE,
                severity=Severity.CRITICAL,
                title="Structure Overlap",
                message=f"{s.label} overlaps with {other_label}. Structures must be separated.",
                citation=BUILDING_CODE_CITATION,
                suggested_action=f"Maintain at least {min_sep:g}' between structures.",
                structure_id=s.id,
            ))
            return

        gap = rect_gap(s.rect, other_rect)
        if gap < min_sep:
            out.append(Comment(
                id=comment_id,
                category=CommentCategory.STRUCTURE,
                severity=Severity.WARNING,
                title="Insufficient Separation",
                message=f"Only {gap:.0f}' between {s.label} and {other_label}. {min_sep:g}' required.",
                citation=FIRE_CODE_CITATION,
                structure_id=s.id,
            ))

    # ─────────────────────────────────────────────────────────────────────
    # 7. Utility notices
    # ─────────────────────────────────────────────────────────────────────
    def _check_utilities(self, s: CandidateStructure, site: SiteModel, out: List[Comment]) -> None:
        if not s.is_dwelling:
            return

        if site.sewer_available:
            distance = site.sewer_distance_ft or self.settings.default_sewer_distance_ft
            out.append(Comment(
                id=make_comment_id(CommentCategory.UTILITY, s.id, "sewer"),
                category=CommentCategory.UTILITY,
                severity=Severity.INFO,
                title="Sewer Connection Available",
                message=f"Municipal sewer is {distance:g}' from the property line. New dwelling must connect.",
                citation="Municipal Code: Side Sewers",
                suggested_action="Include the sewer lateral in building plans. Side sewer permit required.",
                structure_id=s.id,
            ))

        if site.on_site_well:
            water_message = "Property uses a private well. Water quality and flow test recommended."
        elif site.water_available:
            distance = site.water_distance_ft or self.settings.default_water_distance_ft
            water_message = f"Municipal water available {distance:g}' from the property."
        else:
            water_message = "No water source on record. A new well or service extension is needed."
        out.append(Comment(
            id=make_comment_id(CommentCategory.UTILITY, s.id, "water"),
            category=CommentCategory.UTILITY,
            severity=Severity.INFO,
            title="Water Service",
            message=water_message,
            structure_id=s.id,
        ))

        out.append(Comment(
            id=make_comment_id(CommentCategory.UTILITY, s.id, "gas"),
            category=CommentCategory.UTILITY,
            severity=Severity.INFO,
            title="Natural Gas Available" if site.gas_available else "No Natural Gas",
            message=("Natural gas service is available at the street." if site.gas_available
                     else "Natural gas not available. Plan for electric or propane heating and cooking."),
            structure_id=s.id,
        ))

    # ─────────────────────────────────────────────────────────────────────
    # 8. Lot coverage
    # ─────────────────────────────────────────────────────────────────────
    def _check_coverage(self, s: CandidateStructure, all_candidates: Sequence[CandidateStructure],
                        site: SiteModel, lot_width: float, lot_depth: float,
                        out: List[Comment]) -> None:
        lot_area = lot_width * lot_depth
        if lot_area <= 0:
            return

        percent = coverage_percent(s, all_candidates, site, lot_area)
        max_pct = self.settings.max_coverage_percent
        comment_id = make_comment_id(CommentCategory.COVERAGE, None, "max-coverage")

        if percent > max_pct:
            excess_sqft = (percent - max_pct) / 100 * lot_area
            out.append(Comment(
                id=comment_id,
                category=CommentCategory.COVERAGE,
                severity=Severity.CRITICAL,
                title="Lot Coverage Exceeded",
                message=f"Total lot coverage is {percent:.1f}%. Maximum {max_pct:g}% allowed.",
                citation="Zoning Code: Lot Coverage",
                suggested_action=f"Reduce structure footprints by {excess_sqft:.0f} sqft.",
            ))
        elif percent > max_pct - self.settings.coverage_warning_margin_percent:
            out.append(Comment(
                id=comment_id,
                category=CommentCategory.COVERAGE,
                severity=Severity.WARNING,
                title="Approaching Coverage Limit",
                message=f"Current coverage {percent:.1f}% is close to the {max_pct:g}% maximum.",
                citation="Zoning Code: Lot Coverage",
            ))

    # ─────────────────────────────────────────────────────────────────────
    # 9. Permit triggers
    # ─────────────────────────────────────────────────────────────────────
    def _check_permit_triggers(self, s: CandidateStructure, site: SiteModel,
                               out: List[Comment]) -> None:
        if s.type in (StructureType.ADU, StructureType.DADU):
            out.append(Comment(
                id=make_comment_id(CommentCategory.PERMIT, s.id, "adu"),
                category=CommentCategory.PERMIT,
                severity=Severity.INFO,
                title="ADU Permits Required",
                message="ADU requires a building permit and possibly electrical, plumbing and mechanical permits.",
                suggested_action="Pre-application meeting with the planning department recommended.",
                structure_id=s.id,
            ))
            if not site.sewer_available:
                out.append(Comment(
                    id=make_comment_id(CommentCategory.PERMIT, s.id, "septic"),
                    category=CommentCategory.PERMIT,
                    severity=Severity.INFO,
                    title="Septic Permit Required",
                    message="On-site sewage permit required from the health department for the ADU.",
                    suggested_action="Schedule a site evaluation with a licensed septic designer.",
                    structure_id=s.id,
                ))

        if s.type == StructureType.POOL:
            out.append(Comment(
                id=make_comment_id(CommentCategory.PERMIT, s.id, "pool"),
                category=CommentCategory.PERMIT,
                severity=Severity.INFO,
                title="Pool Permits",
                message="Swimming pool requires a building permit, an electrical permit and a barrier inspection.",
                citation="Building Code §3109",
                structure_id=s.id,
            ))


def coverage_percent(candidate: CandidateStructure, all_candidates: Sequence[CandidateStructure],
                     site: SiteModel, lot_area: float) -> float:
    """Candidate plus existing structure footprints as a percent of the lot."""
    placed = list(all_candidates)
    if candidate.id not in {c.id for c in placed}:
        placed.append(candidate)
    total = sum(c.footprint for c in placed) + sum(f.area for f in site.existing_structures)
    return total / lot_area * 100


# ═══════════════════════════════════════════════════════════════════════════
# MODULE-LEVEL HELPERS
# ═══════════════════════════════════════════════════════════════════════════
def dedupe_comments(comments: Iterable[Comment]) -> List[Comment]:
    """Drop repeated ids, keeping the first occurrence and the original order."""
    seen = set()
    unique = []
    for comment in comments:
        if comment.id in seen:
            continue
        seen.add(comment.id)
        unique.append(comment)
    return unique


def evaluate(
    candidate: CandidateStructure,
    all_candidates: Sequence[CandidateStructure],
    site: SiteModel,
    lot_width: float,
    lot_depth: float,
    settings: Optional[EvaluatorSettings] = None,
) -> List[Comment]:
    """Evaluate one candidate with the given (or default) settings."""
    return ConstraintEvaluator(settings).evaluate(candidate, all_candidates, site, lot_width, lot_depth)


def evaluate_all(
    candidates: Sequence[CandidateStructure],
    site: SiteModel,
    lot_width: float,
    lot_depth: float,
    settings: Optional[EvaluatorSettings] = None,
) -> List[Comment]:
    """One recomputation pass over every candidate, merged and de-duplicated."""
    evaluator = ConstraintEvaluator(settings)
    merged: List[Comment] = []
    for candidate in candidates:
        merged.extend(evaluator.evaluate(candidate, candidates, site, lot_width, lot_depth))
    unique = dedupe_comments(merged)
    log.debug(f"Evaluation pass: {len(candidates)} candidates, {len(unique)} unique comments")
    return unique
