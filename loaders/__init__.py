"""
Data loaders for the lot constraint engine.

Includes:
- Site documents (JSON) -> SiteModel, candidates and property facts
- Mock site generation (seeded, for development)
- Flood zones (FEMA designations)
"""

from loaders.site_data import SiteDataLoader, SiteBundle, get_site_loader
from loaders.mock_site import MockSiteGenerator, get_mock_generator
from loaders.flood_zones import FloodZoneInfo, ZONE_INFO, describe_zone, flood_flag_from_code

__all__ = [
    "SiteDataLoader",
    "SiteBundle",
    "get_site_loader",
    "MockSiteGenerator",
    "get_mock_generator",
    "FloodZoneInfo",
    "ZONE_INFO",
    "describe_zone",
    "flood_flag_from_code",
]
