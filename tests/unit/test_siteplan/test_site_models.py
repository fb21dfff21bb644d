"""Tests for the site feature model and engine output types."""

import pytest
from siteplan.geometry import Rect
from siteplan.models import (
    CandidateStructure,
    Comment,
    CommentCategory,
    Easement,
    EasementEdge,
    EasementType,
    FeatureKind,
    Point,
    PermitRequirement,
    Severity,
    SiteFeature,
    SiteModel,
    StructureType,
    make_comment_id,
)


class TestSiteFeature:
    """Tests for existing-condition features."""

    def test_negative_buffer_rejected(self):
        with pytest.raises(ValueError):
            SiteFeature("f1", FeatureKind.STRUCTURE, 0, 0, 10, 10, required_buffer=-1)

    def test_negative_dimensions_rejected(self):
        with pytest.raises(ValueError):
            SiteFeature("f1", FeatureKind.DRIVEWAY, 0, 0, -5, 10)

    def test_rule_prefixed_id_rejected(self):
        with pytest.raises(ValueError, match="reserved"):
            SiteFeature("rule:capacity", FeatureKind.DRAINFIELD, 0, 0, 10, 10)

    def test_label_defaults_from_kind(self):
        feature = SiteFeature("t1", FeatureKind.SEPTIC_TANK, 0, 0, 8, 4)
        assert feature.label == "Septic Tank"

    def test_well_location_defaults_to_center(self):
        well = SiteFeature("w1", FeatureKind.WELL, 50, 50, 4, 4, required_buffer=10)
        assert well.location == Point(52, 52)

    def test_explicit_well_location_kept(self):
        well = SiteFeature("w1", FeatureKind.WELL, 50, 50, 4, 4, location=Point(51, 53))
        assert well.location == Point(51, 53)

    def test_non_well_has_no_location(self):
        assert SiteFeature("s1", FeatureKind.STRUCTURE, 0, 0, 4, 4).location is None


class TestEasement:
    """Tests for recorded easements and their projection onto the lot."""

    def test_width_must_be_positive(self):
        with pytest.raises(ValueError):
            Easement("e1", EasementType.UTILITY, "PUD", 0, EasementEdge.FRONT)

    def test_front_projection(self):
        easement = Easement("e1", EasementType.UTILITY, "PUD", 10, EasementEdge.FRONT)
        feature = easement.project(100, 150)
        assert feature.id == "e1"
        assert feature.kind == FeatureKind.EASEMENT
        assert feature.rect == Rect(0, 0, 100, 10)

    def test_rear_projection(self):
        feature = Easement("e1", EasementType.DRAINAGE, "County", 15, EasementEdge.REAR).project(100, 150)
        assert feature.rect == Rect(0, 135, 100, 15)

    def test_side_projection_with_partial_depth(self):
        easement = Easement("e1", EasementType.ACCESS, "Neighbor", 20, EasementEdge.RIGHT, extent_depth=60)
        assert easement.project(100, 150).rect == Rect(80, 0, 20, 60)

    def test_interior_needs_extent(self):
        easement = Easement("e1", EasementType.CONSERVATION, "Land Trust", 30, EasementEdge.INTERIOR)
        with pytest.raises(ValueError):
            easement.project(100, 150)
        assert easement.project(100, 150, Rect(20, 40, 30, 30)).rect == Rect(20, 40, 30, 30)

    def test_blocking_types(self):
        assert EasementType.UTILITY.blocks_structures
        assert EasementType.DRAINAGE.blocks_structures
        assert not EasementType.ACCESS.blocks_structures
        assert not EasementType.SCENIC.blocks_structures


class TestSiteModel:
    """Tests for the site snapshot."""

    def test_duplicate_feature_ids_rejected(self):
        a = SiteFeature("dup", FeatureKind.STRUCTURE, 0, 0, 10, 10)
        b = SiteFeature("dup", FeatureKind.DRIVEWAY, 20, 20, 10, 10)
        with pytest.raises(ValueError):
            SiteModel(features=[a, b])

    def test_easement_needs_projection(self):
        easement = Easement("e1", EasementType.UTILITY, "PUD", 10, EasementEdge.FRONT)
        with pytest.raises(ValueError):
            SiteModel(easements=[easement])

        site = SiteModel(features=[easement.project(100, 100)], easements=[easement])
        assert site.easement_for(site.feature_by_id("e1")) is easement

    def test_collections_become_tuples(self):
        site = SiteModel(features=[SiteFeature("s1", FeatureKind.STRUCTURE, 0, 0, 10, 10)])
        assert isinstance(site.features, tuple)

    def test_derived_properties(self):
        site = SiteModel(features=[
            SiteFeature("house", FeatureKind.STRUCTURE, 30, 30, 40, 30, structure_type="house"),
            SiteFeature("df", FeatureKind.DRAINFIELD, 20, 70, 30, 20, required_buffer=20),
            SiteFeature("well", FeatureKind.WELL, 80, 10, 4, 4, required_buffer=10),
        ])
        assert [f.id for f in site.existing_structures] == ["house"]
        assert site.has_drainfield
        assert site.on_site_well
        assert not site.wetlands_present

    def test_mapped_wetlands_without_geometry(self):
        assert SiteModel(wetlands_mapped=True).wetlands_present


class TestCandidateStructure:
    """Tests for candidate structures."""

    def test_zero_size_rejected(self):
        with pytest.raises(ValueError):
            CandidateStructure("c1", StructureType.SHED, "Shed", 0, 0, 0, 10)

    def test_dwelling_classification(self):
        adu = CandidateStructure("c1", StructureType.ADU, "ADU", 0, 0, 20, 20)
        garage = CandidateStructure("c2", StructureType.GARAGE, "Garage", 0, 0, 20, 20)
        house = CandidateStructure("c3", StructureType.PRIMARY_DWELLING, "House", 0, 0, 40, 30)
        assert adu.is_dwelling and not adu.is_primary
        assert not garage.is_dwelling
        assert house.is_primary
        assert house.footprint == 1200

    def test_bears_bedrooms(self):
        assert CandidateStructure("c1", StructureType.ADU, "ADU", 0, 0, 20, 20, bedrooms=1).bears_bedrooms
        assert not CandidateStructure("c3", StructureType.ADU, "ADU", 0, 0, 20, 20, bedrooms=0).bears_bedrooms

    def test_dwelling_without_bedroom_count_bears_bedrooms(self):
        assert CandidateStructure("c2", StructureType.ADU, "ADU", 0, 0, 20, 20).bears_bedrooms
        assert not CandidateStructure("c4", StructureType.GARAGE, "Garage", 0, 0, 20, 20).bears_bedrooms


class TestOutputTypes:
    """Tests for comments and permits."""

    def test_severity_rank_order(self):
        ranks = [s.rank for s in (Severity.SUCCESS, Severity.INFO, Severity.WARNING, Severity.CRITICAL)]
        assert ranks == sorted(ranks)
        assert Severity.CRITICAL.is_problem and Severity.WARNING.is_problem
        assert not Severity.INFO.is_problem

    def test_comment_id_is_stable(self):
        assert make_comment_id(CommentCategory.SETBACK, "adu-1", "front") == "setback:adu-1:front"
        assert make_comment_id(CommentCategory.COVERAGE, None, "max-coverage") == "coverage:lot:max-coverage"

    def test_comment_to_dict(self):
        comment = Comment("setback:a:front", CommentCategory.SETBACK, Severity.CRITICAL, "T", "M", structure_id="a")
        d = comment.to_dict()
        assert d["category"] == "setback"
        assert d["severity"] == "critical"
        assert d["structure_id"] == "a"

    def test_permit_to_dict(self):
        permit = PermitRequirement("Building Permit", "Building Department", "$1", "1 week", True, "x")
        assert permit.to_dict()["required"] is True
