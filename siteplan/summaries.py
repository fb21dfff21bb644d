"""
Short human-readable digests of a site's utilities and septic outlook.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from siteplan.models import SepticSuitability, SiteModel
from siteplan.settings import EvaluatorSettings


def utility_summary(site: SiteModel, settings: Optional[EvaluatorSettings] = None) -> List[str]:
    """One line per utility, prefixed with a status mark."""
    settings = settings or EvaluatorSettings()
    lines = []

    if site.sewer_available:
        distance = site.sewer_distance_ft or settings.default_sewer_distance_ft
        lines.append(f"✓ Sewer: Available ({distance:g}' to main)")
    else:
        lines.append("⚠ Sewer: Not available (septic required)")

    if site.on_site_well:
        lines.append("✓ Water: Private well on-site")
    elif site.water_available:
        distance = site.water_distance_ft or settings.default_water_distance_ft
        lines.append(f"✓ Water: Municipal ({distance:g}' to main)")
    else:
        lines.append("⚠ Water: No source on record")

    if site.gas_available:
        lines.append("✓ Gas: Natural gas available")
    else:
        lines.append("— Gas: Not available (electric/propane)")

    if site.electric_available:
        lines.append("✓ Electric: Available")

    return lines


class SepticOutlook(Enum):
    OK = "ok"
    REVIEW = "review"
    CHALLENGING = "challenging"


@dataclass(frozen=True)
class SepticSummary:
    status: SepticOutlook
    messages: Tuple[str, ...]


def septic_summary(site: SiteModel, settings: Optional[EvaluatorSettings] = None) -> SepticSummary:
    """
    Overall septic outlook for the lot.

    Sewer service makes septic moot. Otherwise soil suitability sets the
    baseline and a close neighbouring well can only make it worse.
    """
    settings = settings or EvaluatorSettings()
    if site.sewer_available:
        return SepticSummary(SepticOutlook.OK, ("Sewer connection required. No septic needed.",))

    messages = []
    status = SepticOutlook.OK

    if site.has_drainfield:
        messages.append("Existing septic system on property")
        messages.append("System capacity must be verified for additional dwellings")

    soil = site.soil_type or "Unknown soil"
    if site.septic_suitability == SepticSuitability.WELL_SUITED:
        messages.append(f"Soil: {soil}, well suited for conventional septic")
    elif site.septic_suitability == SepticSuitability.SOMEWHAT_LIMITED:
        messages.append(f"Soil: {soil}, some limitations; an enhanced system may be needed")
        status = SepticOutlook.REVIEW
    elif site.septic_suitability == SepticSuitability.VERY_LIMITED:
        messages.append(f"Soil: {soil}, significant limitations; an alternative system is likely required")
        status = SepticOutlook.CHALLENGING

    if site.on_site_well:
        messages.append(f"On-site well requires {settings.well_septic_separation_ft:g}' "
                        f"separation from a new drainfield")

    if site.neighbor_well_distance_ft is not None:
        messages.append(f"Neighboring well ~{site.neighbor_well_distance_ft:.0f}' away affects septic placement")
        if site.neighbor_well_distance_ft < settings.neighbor_well_notice_ft:
            status = SepticOutlook.CHALLENGING

    return SepticSummary(status, tuple(messages))
