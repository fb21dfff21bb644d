"""
Mock Site Generator - plausible existing conditions for development.

Produces a SiteModel from a string seed (parcel id, address, ...). The same
seed always produces the same lot; different seeds spread across vacant,
suburban and rural layouts. The engine does not depend on this module:
any valid SiteModel is accepted.
"""

import hashlib
import logging
import random
from typing import List, Optional

from siteplan.models import (
    Easement,
    EasementEdge,
    EasementType,
    FeatureKind,
    SepticSuitability,
    SiteFeature,
    SiteModel,
)

log = logging.getLogger(__name__)

SOIL_TYPES = ("Sandy loam", "Clay loam", "Silty clay")
UTILITY_HOLDERS = ("Regional Power & Light", "Local Utility District")


class MockSiteGenerator:
    """Seeded site generator. Each numbered draw is stable on its own."""

    def __init__(self, seed_source: str):
        self.seed_source = seed_source
        digest = hashlib.sha256(seed_source.encode("utf-8")).hexdigest()
        self.base_seed = int(digest[:12], 16)

    def _draw(self, index: int) -> float:
        return random.Random(self.base_seed * 1000 + index).random()

    def _int(self, index: int, low: int, span: float) -> int:
        return low + int(self._draw(index) * span)

    def generate(self, lot_width: float, lot_depth: float, lot_area: Optional[float] = None) -> SiteModel:
        if lot_width <= 0 or lot_depth <= 0:
            raise ValueError(f"Lot dimensions must be positive, got {lot_width}x{lot_depth}")

        r = self._draw
        area = lot_area if lot_area is not None else lot_width * lot_depth
        tag = self.base_seed

        vacant = r(0) > 0.7 or area < 5000
        rural = r(1) > 0.5
        has_house = not vacant and r(2) > 0.2
        has_septic = rural or r(3) > 0.4
        has_well = rural and r(4) > 0.5
        has_garage = has_house and r(5) > 0.3
        has_shed = has_house and r(6) > 0.6

        front = self._int(8, 20, 15)
        side = self._int(9, 5, 10)
        rear = self._int(10, 15, 15)

        house_w = self._int(11, 25, 35)
        house_d = self._int(12, 20, 30)
        house_x = side + int(r(13) * lot_width * 0.4)
        house_y = front + int(r(14) * lot_depth * 0.2)

        features: List[SiteFeature] = []

        if has_house:
            features.append(SiteFeature(
                id=f"house-{tag}", kind=FeatureKind.STRUCTURE, structure_type="house",
                label="Existing House", x=house_x, y=house_y,
                width=house_w, height=house_d, required_buffer=10,
            ))

            if has_garage:
                garage_w = self._int(40, 18, 12)
                garage_d = self._int(41, 18, 10)
                if r(42) > 0.5:
                    garage_x = max(side, house_x - garage_w - 3 - int(r(43) * 8))
                else:
                    garage_x = house_x + house_w + 3 + int(r(44) * 8)
                features.append(SiteFeature(
                    id=f"garage-{tag}", kind=FeatureKind.STRUCTURE, structure_type="garage",
                    label="Garage",
                    x=max(side, min(lot_width - side - garage_w, garage_x)),
                    y=house_y + int(r(45) * 15),
                    width=garage_w, height=garage_d, required_buffer=6,
                ))

            if has_shed:
                shed_x = side + int(r(47) * max(lot_width - 2 * side - 15, 0))
                if r(46) > 0.3:
                    shed_y = lot_depth - rear - 20 - int(r(48) * 30)
                else:
                    shed_y = house_y + house_d + 20 + int(r(49) * 20)
                features.append(SiteFeature(
                    id=f"shed-{tag}", kind=FeatureKind.STRUCTURE, structure_type="shed",
                    label="Shed", x=shed_x, y=max(0, min(shed_y, lot_depth - rear - 15)),
                    width=self._int(50, 8, 8), height=self._int(51, 8, 8), required_buffer=3,
                ))

        if has_septic and has_house:
            features.extend(self._septic_system(lot_width, lot_depth, side, rear, house_x, house_y, house_w, house_d))

        if has_well:
            well_x = side + int(r(29) * 20) if r(28) > 0.5 else lot_width - side - 10 - int(r(30) * 20)
            features.append(SiteFeature(
                id=f"well-{tag}", kind=FeatureKind.WELL, label="Well",
                x=well_x, y=front + int(r(31) * lot_depth * 0.3),
                width=4, height=4, required_buffer=10,
            ))

        if has_house or r(90) > 0.3:
            driveway_w = self._int(92, 10, 8)
            surface = ("paved", "gravel", "concrete", "dirt")[int(r(91) * 4)]
            if has_garage:
                driveway_x = max(side, min(house_x + house_w / 2 - driveway_w / 2, lot_width - side - driveway_w))
            else:
                driveway_x = side + int(r(93) * lot_width * 0.3)
            features.append(SiteFeature(
                id=f"driveway-{tag}", kind=FeatureKind.DRIVEWAY, label=f"Driveway ({surface})",
                x=driveway_x, y=0, width=driveway_w,
                height=min(front + (10 if has_garage else house_y), lot_depth),
            ))

        easements = self._easements(tag, lot_depth)
        for easement in easements:
            features.append(easement.project(lot_width, lot_depth))

        has_wetland = r(70) > 0.85
        if has_wetland:
            features.append(SiteFeature(
                id=f"wetland-{tag}", kind=FeatureKind.WETLAND, label="Wetland",
                x=max(side, lot_width - 20 - int(r(71) * 30)),
                y=max(front, lot_depth - 30 - int(r(72) * 40)),
                width=self._int(73, 25, 20), height=self._int(74, 35, 25), required_buffer=50,
            ))

        site = SiteModel(
            features=features,
            easements=easements,
            sewer_available=not has_septic,
            sewer_distance_ft=None if has_septic else 15,
            water_available=True,
            water_distance_ft=20,
            gas_available=r(75) > 0.3,
            electric_available=True,
            neighbor_well_distance_ft=float(50 + int(r(82) * 100)) if r(81) > 0.6 else None,
            wetlands_mapped=has_wetland,
            flood_zone="AE" if r(83) > 0.9 else None,
            slope_percent=float(int(r(84) * 15)),
            soil_type=SOIL_TYPES[0] if r(85) < 0.3 else SOIL_TYPES[1] if r(86) < 0.7 else SOIL_TYPES[2],
            septic_suitability=(SepticSuitability.WELL_SUITED if r(87) < 0.3
                                else SepticSuitability.SOMEWHAT_LIMITED if r(88) < 0.7
                                else SepticSuitability.VERY_LIMITED),
        )
        log.info(f"Generated mock site for '{self.seed_source}': {len(site.features)} features, "
                 f"{len(site.easements)} easements, sewer={'yes' if site.sewer_available else 'no'}")
        return site

    def _septic_system(self, lot_width, lot_depth, side, rear, house_x, house_y, house_w, house_d) -> List[SiteFeature]:
        r = self._draw
        tag = self.base_seed

        if r(60) > 0.5:
            tank_x = house_x + house_w + 8 + int(r(61) * 20)
        else:
            tank_x = house_x - 15 - int(r(62) * 10)
        tank_y = house_y + int(r(63) * house_d) + 10

        drainfield_x = int(r(20) * lot_width * 0.3) + side + 20
        drainfield_y = int(lot_depth * 0.4) + int(r(21) * lot_depth * 0.2)
        reserve_x = side + int(r(24) * lot_width * 0.2)
        reserve_y = int(lot_depth * 0.5) + int(r(25) * lot_depth * 0.25)

        return [
            SiteFeature(
                id=f"septic-{tag}", kind=FeatureKind.SEPTIC_TANK, label="Septic Tank",
                x=max(side, min(tank_x, lot_width - side - 12)),
                y=max(0, min(tank_y, lot_depth - rear - 60)),
                width=self._int(64, 5, 5), height=self._int(65, 3, 3), required_buffer=10,
            ),
            SiteFeature(
                id=f"drainfield-{tag}", kind=FeatureKind.DRAINFIELD, label="Drainfield",
                x=max(0, min(drainfield_x, lot_width - side - 35)),
                y=max(0, min(drainfield_y, lot_depth - rear - 50)),
                width=self._int(22, 25, 15), height=self._int(23, 35, 20), required_buffer=20,
            ),
            SiteFeature(
                id=f"reserve-{tag}", kind=FeatureKind.RESERVE_AREA, label="Reserve Area",
                x=reserve_x, y=max(0, min(reserve_y, lot_depth - rear - 40)),
                width=self._int(26, 25, 15), height=self._int(27, 25, 15), required_buffer=10,
            ),
        ]

    def _easements(self, tag: int, lot_depth: float) -> List[Easement]:
        r = self._draw
        easements = []

        if r(94) > 0.3:
            edge = EasementEdge.FRONT if r(96) > 0.5 else EasementEdge.LEFT if r(97) > 0.5 else EasementEdge.RIGHT
            easements.append(Easement(
                id=f"utility-easement-{tag}",
                type=EasementType.UTILITY,
                holder=UTILITY_HOLDERS[0] if r(98) > 0.5 else UTILITY_HOLDERS[1],
                width=self._int(95, 5, 10),
                edge=edge,
                restrictions=("No permanent structures allowed",
                              "Maintain clear access for utility maintenance",
                              "No trees within easement area"),
                recorded_document=f"Recording #{2020 + int(r(99) * 5)}{10000 + int(r(100) * 90000)}",
            ))

        if r(101) > 0.8:
            easements.append(Easement(
                id=f"access-easement-{tag}",
                type=EasementType.ACCESS,
                holder="Neighboring Property Owner",
                width=self._int(102, 15, 10),
                edge=EasementEdge.LEFT if r(103) > 0.5 else EasementEdge.RIGHT,
                restrictions=("Shared driveway access", "Maintenance costs shared equally", "No blocking of access"),
                recorded_document=f"Recording #{2015 + int(r(104) * 10)}{10000 + int(r(105) * 90000)}",
                extent_depth=int(lot_depth * 0.4),
            ))

        if r(106) > 0.9:
            easements.append(Easement(
                id=f"drainage-easement-{tag}",
                type=EasementType.DRAINAGE,
                holder="County Stormwater District",
                width=self._int(107, 10, 15),
                edge=EasementEdge.REAR,
                restrictions=("No fill or grading allowed", "Natural drainage must be maintained",
                              "No structures or impervious surfaces"),
            ))

        return easements


def get_mock_generator(seed_source: str) -> MockSiteGenerator:
    """Factory function to get a mock site generator."""
    return MockSiteGenerator(seed_source)
