"""
Flood Zones - FEMA flood hazard designations.

Turns a FEMA zone code (as reported by the National Flood Hazard Layer)
into a description, a risk level and the environmental flag the action
checklist reads.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from siteplan.facts import CheckStatus, EnvironmentalFlag, FlagType

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FloodZoneInfo:
    """FEMA flood zone designation for a parcel."""
    flood_zone: str            # Zone designation: A, AE, AH, AO, VE, X, D
    zone_description: str      # Human-readable description
    flood_risk_level: str      # "high", "moderate", "low", "undetermined"

    @property
    def is_special_hazard_area(self) -> bool:
        return self.flood_risk_level == "high"

    def to_dict(self) -> Dict:
        return {
            "flood_zone": self.flood_zone,
            "zone_description": self.zone_description,
            "flood_risk_level": self.flood_risk_level,
        }


# FEMA Zone descriptions and risk levels
ZONE_INFO = {
    "A": ("High-risk area, no BFE determined", "high"),
    "AE": ("High-risk area with BFE", "high"),
    "AH": ("High-risk shallow flooding area", "high"),
    "AO": ("High-risk sheet flow area", "high"),
    "AR": ("Area with temporary increased flood risk", "high"),
    "A99": ("High-risk area protected by levee under construction", "high"),
    "V": ("Coastal high-risk area, no BFE", "high"),
    "VE": ("Coastal high-risk area with BFE", "high"),
    "X": ("Moderate to low risk area", "low"),
    "B": ("Moderate flood risk (older designation)", "moderate"),
    "C": ("Minimal flood risk (older designation)", "low"),
    "D": ("Undetermined risk - possible flooding", "undetermined"),
}

RISK_STATUS = {
    "high": CheckStatus.FAIL,
    "moderate": CheckStatus.WARN,
    "undetermined": CheckStatus.WARN,
    "low": CheckStatus.PASS,
}


def describe_zone(code: Optional[str]) -> FloodZoneInfo:
    """
    Look up a zone code. A missing code means the parcel is outside any
    mapped hazard area and is reported as Zone X.
    """
    zone = (code or "X").strip().upper()
    if zone not in ZONE_INFO:
        log.warning(f"Unrecognized FEMA flood zone '{zone}', treating as undetermined")
        return FloodZoneInfo(zone, "Unknown zone", "undetermined")
    description, risk = ZONE_INFO[zone]
    return FloodZoneInfo(zone, description, risk)


def flood_flag_from_code(code: Optional[str]) -> EnvironmentalFlag:
    """Environmental flag for the checklist: high risk fails, low risk passes."""
    info = describe_zone(code)
    status = RISK_STATUS[info.flood_risk_level]

    if status == CheckStatus.FAIL:
        description = (f"Property is in FEMA Zone {info.flood_zone} ({info.zone_description.lower()}). "
                       f"Special flood hazard area requirements apply.")
    elif status == CheckStatus.PASS:
        description = f"Property is in FEMA Zone {info.flood_zone}, outside the special flood hazard area."
    else:
        description = f"Property is in FEMA Zone {info.flood_zone}: {info.zone_description.lower()}."

    log.debug(f"Flood zone {info.flood_zone}: {info.flood_risk_level} risk -> {status.value}")
    return EnvironmentalFlag(
        id=f"flood-{info.flood_zone.lower()}",
        type=FlagType.FLOOD,
        label=f"FEMA Flood Zone {info.flood_zone}",
        status=status,
        description=description,
    )
