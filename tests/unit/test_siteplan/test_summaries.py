from siteplan.models import FeatureKind, SepticSuitability, SiteFeature, SiteModel
from siteplan.summaries import SepticOutlook, septic_summary, utility_summary


def test_utility_summary_sewer_site():
    lines = utility_summary(SiteModel(sewer_available=True, sewer_distance_ft=40, gas_available=True))
    assert lines == [
        "✓ Sewer: Available (40' to main)",
        "✓ Water: Municipal (20' to main)",
        "✓ Gas: Natural gas available",
        "✓ Electric: Available",
    ]


def test_utility_summary_rural_site():
    site = SiteModel(features=[SiteFeature("well", FeatureKind.WELL, 10, 10, 4, 4)], electric_available=False)
    lines = utility_summary(site)
    assert lines[0].startswith("⚠ Sewer")
    assert lines[1] == "✓ Water: Private well on-site"
    assert lines[2].startswith("— Gas")
    assert len(lines) == 3


def test_sewer_makes_septic_moot():
    summary = septic_summary(SiteModel(sewer_available=True, septic_suitability=SepticSuitability.VERY_LIMITED))
    assert summary.status == SepticOutlook.OK
    assert len(summary.messages) == 1


def test_limited_soils_need_review():
    summary = septic_summary(SiteModel(soil_type="Clay loam", septic_suitability=SepticSuitability.SOMEWHAT_LIMITED))
    assert summary.status == SepticOutlook.REVIEW
    assert any("Clay loam" in m for m in summary.messages)


def test_close_neighbor_well_is_challenging():
    summary = septic_summary(SiteModel(septic_suitability=SepticSuitability.WELL_SUITED,
                                       neighbor_well_distance_ft=60))
    assert summary.status == SepticOutlook.CHALLENGING


def test_existing_system_is_mentioned():
    site = SiteModel(features=[SiteFeature("df", FeatureKind.DRAINFIELD, 40, 60, 30, 40, required_buffer=20)])
    summary = septic_summary(site)
    assert summary.status == SepticOutlook.OK
    assert "Existing septic system on property" in summary.messages
