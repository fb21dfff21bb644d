"""
Permit Deriver - which permits a set of placed structures triggers.

A fixed, ordered table of independent rules. Each rule looks at the
structures and the site and either yields one PermitRequirement or nothing;
rules never remove what another rule produced.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from siteplan.models import (
    CandidateStructure,
    PermitRequirement,
    SiteModel,
    StructureType,
)
from siteplan.settings import EvaluatorSettings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PermitContext:
    """Facts every permit rule reads, computed once per derivation."""
    structures: Sequence[CandidateStructure]
    site: SiteModel
    settings: EvaluatorSettings

    @property
    def has_new_dwelling(self) -> bool:
        return any(s.is_dwelling for s in self.structures)

    @property
    def has_pool(self) -> bool:
        return any(s.type == StructureType.POOL for s in self.structures)

    @property
    def has_shop(self) -> bool:
        return any(s.type == StructureType.SHOP for s in self.structures)

    @property
    def steep(self) -> bool:
        return self.site.slope_percent > self.settings.moderate_slope_percent


PermitRule = Callable[[PermitContext], Optional[PermitRequirement]]


# ═══════════════════════════════════════════════════════════════════════════
# RULE TABLE
# ═══════════════════════════════════════════════════════════════════════════
def _building(ctx: PermitContext) -> Optional[PermitRequirement]:
    threshold = ctx.settings.building_permit_min_sqft
    if not any(s.footprint > threshold for s in ctx.structures):
        return None
    return PermitRequirement(
        permit_type="Building Permit",
        authority="Building Department",
        estimated_fee_range="$1,500 - $5,000",
        timeline_estimate="4-8 weeks review",
        required=True,
        triggered_by=f"Structures over {threshold:g} sqft",
    )


def _onsite_sewage(ctx: PermitContext) -> Optional[PermitRequirement]:
    if ctx.site.sewer_available or not ctx.has_new_dwelling:
        return None
    return PermitRequirement(
        permit_type="On-Site Sewage System",
        authority="Health Department",
        estimated_fee_range="$800 - $1,500",
        timeline_estimate="2-4 weeks after site evaluation",
        required=True,
        triggered_by="New dwelling without sewer",
    )


def _sewer_connection(ctx: PermitContext) -> Optional[PermitRequirement]:
    if not (ctx.site.sewer_available and ctx.has_new_dwelling):
        return None
    return PermitRequirement(
        permit_type="Sewer Connection",
        authority="Public Works / Utility",
        estimated_fee_range="$500 - $2,000",
        timeline_estimate="1-2 weeks",
        required=True,
        triggered_by="New dwelling in sewer service area",
    )


def _electrical(ctx: PermitContext) -> Optional[PermitRequirement]:
    if not (ctx.has_new_dwelling or ctx.has_pool or ctx.has_shop):
        return None
    return PermitRequirement(
        permit_type="Electrical Permit",
        authority="Building Department",
        estimated_fee_range="$200 - $500",
        timeline_estimate="Concurrent with building",
        required=True,
        triggered_by="New electrical service",
    )


def _plumbing(ctx: PermitContext) -> Optional[PermitRequirement]:
    if not ctx.has_new_dwelling:
        return None
    return PermitRequirement(
        permit_type="Plumbing Permit",
        authority="Building Department",
        estimated_fee_range="$200 - $400",
        timeline_estimate="Concurrent with building",
        required=True,
        triggered_by="New plumbing fixtures",
    )


def _mechanical(ctx: PermitContext) -> Optional[PermitRequirement]:
    if not ctx.has_new_dwelling:
        return None
    return PermitRequirement(
        permit_type="Mechanical Permit",
        authority="Building Department",
        estimated_fee_range="$150 - $300",
        timeline_estimate="Concurrent with building",
        required=True,
        triggered_by="HVAC installation",
    )


def _grading(ctx: PermitContext) -> Optional[PermitRequirement]:
    if not (ctx.steep or ctx.has_pool):
        return None
    return PermitRequirement(
        permit_type="Grading Permit",
        authority="Building / Public Works",
        estimated_fee_range="$300 - $800",
        timeline_estimate="2-4 weeks",
        required=ctx.site.slope_percent > ctx.settings.grading_required_slope_percent,
        triggered_by="Steep slopes" if ctx.steep else "Pool excavation",
    )


def _critical_areas(ctx: PermitContext) -> Optional[PermitRequirement]:
    if not (ctx.site.wetlands_present or ctx.site.flood_zone):
        return None
    return PermitRequirement(
        permit_type="Critical Areas Review",
        authority="Planning Department",
        estimated_fee_range="$500 - $2,000",
        timeline_estimate="4-8 weeks",
        required=True,
        triggered_by="Wetlands on property" if ctx.site.wetlands_present else "Flood zone location",
    )


PERMIT_RULES: List[PermitRule] = [
    _building,
    _onsite_sewage,
    _sewer_connection,
    _electrical,
    _plumbing,
    _mechanical,
    _grading,
    _critical_areas,
]


# ═══════════════════════════════════════════════════════════════════════════
# DERIVER
# ═══════════════════════════════════════════════════════════════════════════
class PermitDeriver:
    """Runs the permit table. Stateless: deriving twice gives the same list."""

    def __init__(self, settings: Optional[EvaluatorSettings] = None,
                 rules: Optional[Sequence[PermitRule]] = None):
        self.settings = settings or EvaluatorSettings()
        self.rules = tuple(rules) if rules is not None else tuple(PERMIT_RULES)

    def derive(self, structures: Sequence[CandidateStructure], site: SiteModel) -> List[PermitRequirement]:
        ctx = PermitContext(structures=tuple(structures), site=site, settings=self.settings)
        permits = []
        for rule in self.rules:
            permit = rule(ctx)
            if permit is not None:
                permits.append(permit)
        log.debug(f"Derived {len(permits)} permits for {len(ctx.structures)} structures")
        return permits


def derive_permits(structures: Sequence[CandidateStructure], site: SiteModel,
                   settings: Optional[EvaluatorSettings] = None) -> List[PermitRequirement]:
    return PermitDeriver(settings).derive(structures, site)
