"""Tests for the action classification resolver."""

import pytest
from siteplan.checklist import (
    CATALOG,
    ActionCategory,
    ActionChecklistResolver,
    ActionItem,
    ActionStatus,
    Confidence,
    classify,
    group_by_category,
    resolve_rule_set,
)
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
from siteplan.settings import ChecklistSettings


def rule(rule_type, status, required=None, measured=None, name=None, unit="ft"):
    return RuleCheck(
        id=rule_type,
        name=name or rule_type.replace("_", " ").title(),
        rule_type=rule_type,
        status=status,
        required=required,
        measured=measured,
        unit=unit,
        citation=f"Code {rule_type}",
    )


def items_by_id(facts, settings=None):
    return {item.id: item for item in classify(facts, settings)}


PASSING_DIMENSIONAL = (
    rule("setback_front", CheckStatus.PASS, 20, 30),
    rule("height_max", CheckStatus.PASS, 35, 28),
    rule("lot_coverage_max", CheckStatus.PASS, 35, 20, unit="%"),
)


@pytest.fixture
def full_facts():
    """A well-documented single-family parcel."""
    return PropertyFacts(
        zoning_district="R-6",
        zoning_category="residential_single",
        jurisdiction_name="Kitsap County",
        parcel=ParcelMetrics(area_sqft=12000, lot_width=80, lot_depth=150),
        rule_checks=PASSING_DIMENSIONAL + (rule("adu_allowed", CheckStatus.PASS),),
        utilities=UtilityFacts(
            sewer=SewerService(available=False),
            septic=SepticAssessment(status=CheckStatus.PASS, feasibility="feasible", system_type="Conventional gravity",
                                    cost_min=15000, cost_max=25000),
        ),
        environmental_flags=(
            EnvironmentalFlag("flood", FlagType.FLOOD, "FEMA Flood Zone X", CheckStatus.PASS, "Outside flood zone"),
            EnvironmentalFlag("wetland", FlagType.WETLAND, "Wetlands", CheckStatus.PASS, "No mapped wetlands"),
        ),
    )


class TestActionItem:
    """Status and evidence must agree."""

    def test_restricted_needs_blocking_factor(self):
        with pytest.raises(ValueError):
            ActionItem("x", ActionCategory.LOT, "X", ActionStatus.RESTRICTED, Confidence.HIGH, "s")

    def test_unknown_needs_data_gap(self):
        with pytest.raises(ValueError):
            ActionItem("x", ActionCategory.LOT, "X", ActionStatus.UNKNOWN, Confidence.LOW, "s",
                       next_steps=["call"])

    def test_conditional_needs_conditions_or_next_steps(self):
        with pytest.raises(ValueError):
            ActionItem("x", ActionCategory.LOT, "X", ActionStatus.CONDITIONAL, Confidence.LOW, "s")
        item = ActionItem("x", ActionCategory.LOT, "X", ActionStatus.CONDITIONAL, Confidence.LOW, "s",
                          next_steps=["call"])
        assert item.next_steps == ("call",)

    def test_to_dict(self):
        item = ActionItem("x", ActionCategory.LOT, "X", ActionStatus.RESTRICTED, Confidence.HIGH, "s",
                          blocking_factors=["too small"])
        d = item.to_dict()
        assert d["status"] == "RESTRICTED"
        assert d["category"] == "lot"
        assert d["blocking_factors"] == ["too small"]


class TestCatalog:
    """The catalog is fixed and always fully answered."""

    def test_empty_facts_answer_every_entry(self):
        items = classify(PropertyFacts())
        assert [i.id for i in items] == [entry.id for entry in CATALOG]
        assert len(items) == 14

    def test_empty_facts_degrade_to_unknown(self):
        items = items_by_id(PropertyFacts())
        unknown = {i for i, item in items.items() if item.status == ActionStatus.UNKNOWN}
        assert unknown == {"build-home", "multi-family", "adu", "dadu", "garage", "subdivide",
                           "sewer-connect", "septic-install", "flood-zone", "wetlands", "env-review"}
        for item in items.values():
            if item.status == ActionStatus.UNKNOWN:
                assert item.data_gaps
                assert item.confidence == Confidence.LOW

    def test_fixed_guidance_entries(self):
        items = items_by_id(PropertyFacts())
        assert items["pool"].status == ActionStatus.CONDITIONAL
        assert items["lot-line-adjustment"].status == ActionStatus.CONDITIONAL
        assert items["building-permit"].status == ActionStatus.CONDITIONAL
        assert items["building-permit"].confidence == Confidence.HIGH

    def test_classification_is_deterministic(self, full_facts):
        assert classify(full_facts) == classify(full_facts)

    def test_group_by_category(self, full_facts):
        groups = group_by_category(classify(full_facts))
        assert list(groups) == list(ActionCategory)
        assert [i.id for i in groups[ActionCategory.ACCESSORY]] == ["adu", "dadu", "garage", "pool"]
        assert ActionCategory.UTILITIES.label == "Utilities & Wastewater"


class TestResidential:
    """Single-family and multi-family."""

    def test_all_dimensional_rules_pass(self, full_facts):
        item = items_by_id(full_facts)["build-home"]
        assert item.status == ActionStatus.ALLOWED
        assert item.confidence == Confidence.HIGH
        assert item.citations

    def test_failing_setback_is_quoted_verbatim(self):
        facts = PropertyFacts(rule_checks=(
            rule("setback_front", CheckStatus.FAIL, 25, 18, name="Front Setback"),
            rule("height_max", CheckStatus.PASS, 35, 28),
        ))
        item = items_by_id(facts)["build-home"]
        assert item.status == ActionStatus.RESTRICTED
        assert item.blocking_factors == ("Front Setback: required 25 ft, measured 18 ft",)

    def test_warning_rule_is_conditional(self):
        facts = PropertyFacts(rule_checks=(rule("far_max", CheckStatus.WARN, 0.5, 0.48, unit=""),))
        item = items_by_id(facts)["build-home"]
        assert item.status == ActionStatus.CONDITIONAL
        assert item.confidence == Confidence.MEDIUM
        assert item.conditions

    def test_unresolved_rule_is_unknown(self):
        facts = PropertyFacts(rule_checks=(rule("setback_rear", CheckStatus.UNKNOWN),))
        assert items_by_id(facts)["build-home"].status == ActionStatus.UNKNOWN

    def test_non_dimensional_rules_do_not_count(self):
        facts = PropertyFacts(rule_checks=(rule("adu_allowed", CheckStatus.FAIL),))
        assert items_by_id(facts)["build-home"].status == ActionStatus.UNKNOWN

    @pytest.mark.parametrize("category", ["residential_single", "Residential_Single_Family", "single_family"])
    def test_single_family_zone_always_restricts_multi_family(self, full_facts, category):
        facts = PropertyFacts(
            zoning_category=category,
            parcel=ParcelMetrics(area_sqft=1_000_000),
            rule_checks=(rule("density_max", CheckStatus.PASS, 40, 2),),
        )
        item = items_by_id(facts)["multi-family"]
        assert item.status == ActionStatus.RESTRICTED
        assert item.confidence == Confidence.HIGH
        assert items_by_id(full_facts)["multi-family"].status == ActionStatus.RESTRICTED

    def test_multi_family_zone_without_density_rules(self):
        item = items_by_id(PropertyFacts(zoning_category="residential_multi"))["multi-family"]
        assert item.status == ActionStatus.CONDITIONAL

    def test_multi_family_zone_with_failing_density(self):
        facts = PropertyFacts(zoning_category="mixed_use",
                              rule_checks=(rule("density_max", CheckStatus.FAIL, 12, 20, unit="du/ac"),))
        assert items_by_id(facts)["multi-family"].status == ActionStatus.RESTRICTED

    def test_other_zone_category_is_unknown(self):
        assert items_by_id(PropertyFacts(zoning_category="commercial"))["multi-family"].status == ActionStatus.UNKNOWN


class TestAccessory:
    """ADU, DADU, garage."""

    def _facts(self, area, *checks):
        return PropertyFacts(zoning_district="R-6", parcel=ParcelMetrics(area_sqft=area), rule_checks=checks)

    def test_small_lot_restricts_adu(self):
        item = items_by_id(self._facts(6000, rule("adu_allowed", CheckStatus.PASS)))["adu"]
        assert item.status == ActionStatus.RESTRICTED
        assert "6,000 sqft" in item.blocking_factors[0]

    def test_adu_allowed(self):
        facts = self._facts(9000, rule("adu_allowed", CheckStatus.PASS), rule("lot_coverage_max", CheckStatus.PASS))
        item = items_by_id(facts)["adu"]
        assert item.status == ActionStatus.ALLOWED
        assert item.confidence == Confidence.HIGH

    def test_adu_with_tight_coverage_is_conditional(self):
        facts = self._facts(9000, rule("adu_allowed", CheckStatus.PASS), rule("lot_coverage_max", CheckStatus.WARN))
        assert items_by_id(facts)["adu"].status == ActionStatus.CONDITIONAL

    def test_adu_without_rule_is_unknown(self):
        assert items_by_id(self._facts(9000))["adu"].status == ActionStatus.UNKNOWN

    def test_failing_adu_rule_restricts(self):
        facts = self._facts(9000, rule("adu_size_max", CheckStatus.FAIL, 1000, 1200, unit="sqft"))
        assert items_by_id(facts)["adu"].status == ActionStatus.RESTRICTED

    def test_adu_threshold_is_configurable(self):
        facts = self._facts(6000, rule("adu_allowed", CheckStatus.PASS))
        item = items_by_id(facts, ChecklistSettings(adu_min_lot_sqft=5000))["adu"]
        assert item.status == ActionStatus.ALLOWED

    @pytest.mark.parametrize("area,expected", [
        (12000, ActionStatus.CONDITIONAL),
        (10000, ActionStatus.CONDITIONAL),
        (8000, ActionStatus.RESTRICTED),
    ])
    def test_dadu_lot_size(self, area, expected):
        assert items_by_id(self._facts(area))["dadu"].status == expected

    @pytest.mark.parametrize("status,expected", [
        (CheckStatus.PASS, ActionStatus.ALLOWED),
        (CheckStatus.WARN, ActionStatus.CONDITIONAL),
        (CheckStatus.FAIL, ActionStatus.RESTRICTED),
        (CheckStatus.UNKNOWN, ActionStatus.UNKNOWN),
    ])
    def test_garage_follows_coverage(self, status, expected):
        facts = self._facts(9000, rule("lot_coverage_max", status, 35, 30, unit="%"))
        assert items_by_id(facts)["garage"].status == expected


class TestLot:
    """Subdivision."""

    @pytest.mark.parametrize("area,expected", [
        (15000, ActionStatus.CONDITIONAL),
        (14400, ActionStatus.CONDITIONAL),
        (10000, ActionStatus.RESTRICTED),
    ])
    def test_default_minimum_lot(self, area, expected):
        assert items_by_id(PropertyFacts(parcel=ParcelMetrics(area_sqft=area)))["subdivide"].status == expected

    def test_minimum_lot_rule_overrides_default(self):
        facts = PropertyFacts(parcel=ParcelMetrics(area_sqft=10000),
                              rule_checks=(rule("lot_size_min", CheckStatus.PASS, 5000, 10000, unit="sqft"),))
        assert items_by_id(facts)["subdivide"].status == ActionStatus.CONDITIONAL


class TestUtilities:
    """Sewer and septic."""

    def test_sewer_available(self):
        facts = PropertyFacts(utilities=UtilityFacts(sewer=SewerService(available=True, provider_name="City Sewer")))
        item = items_by_id(facts)["sewer-connect"]
        assert item.status == ActionStatus.ALLOWED
        assert "City Sewer" in item.summary

    def test_sewer_unavailable(self, full_facts):
        assert items_by_id(full_facts)["sewer-connect"].status == ActionStatus.RESTRICTED

    def test_mandatory_sewer_restricts_septic_regardless_of_soils(self):
        facts = PropertyFacts(utilities=UtilityFacts(
            sewer=SewerService(available=True, required=True),
            septic=SepticAssessment(status=CheckStatus.PASS),
        ))
        item = items_by_id(facts)["septic-install"]
        assert item.status == ActionStatus.RESTRICTED
        assert item.confidence == Confidence.HIGH

    def test_optional_sewer_leaves_septic_to_soils(self):
        facts = PropertyFacts(utilities=UtilityFacts(
            sewer=SewerService(available=True, required=False),
            septic=SepticAssessment(status=CheckStatus.PASS),
        ))
        assert items_by_id(facts)["septic-install"].status == ActionStatus.ALLOWED

    def test_suitable_soils(self, full_facts):
        item = items_by_id(full_facts)["septic-install"]
        assert item.status == ActionStatus.ALLOWED
        assert "$15,000-$25,000" in item.summary

    def test_limited_soils_are_conditional(self):
        facts = PropertyFacts(utilities=UtilityFacts(septic=SepticAssessment(
            status=CheckStatus.WARN, feasibility="challenging", issues=("Shallow water table",))))
        item = items_by_id(facts)["septic-install"]
        assert item.status == ActionStatus.CONDITIONAL
        assert item.conditions == ("Shallow water table",)

    def test_unsuitable_soils_restrict(self):
        facts = PropertyFacts(utilities=UtilityFacts(septic=SepticAssessment(
            status=CheckStatus.FAIL, summary="Bedrock at 12 inches")))
        item = items_by_id(facts)["septic-install"]
        assert item.status == ActionStatus.RESTRICTED
        assert item.blocking_factors == ("Bedrock at 12 inches",)


class TestEnvironmental:
    """Flood, wetlands and environmental review."""

    def _flags(self, *flags):
        return PropertyFacts(environmental_flags=flags)

    @pytest.mark.parametrize("status,expected,confidence", [
        (CheckStatus.PASS, ActionStatus.ALLOWED, Confidence.HIGH),
        (CheckStatus.FAIL, ActionStatus.CONDITIONAL, Confidence.HIGH),
        (CheckStatus.WARN, ActionStatus.CONDITIONAL, Confidence.MEDIUM),
        (CheckStatus.UNKNOWN, ActionStatus.UNKNOWN, Confidence.LOW),
    ])
    def test_flood_zone(self, status, expected, confidence):
        flag = EnvironmentalFlag("f", FlagType.FLOOD, "FEMA Flood Zone", status, "Zone AE")
        item = items_by_id(self._flags(flag))["flood-zone"]
        assert item.status == expected
        assert item.confidence == confidence

    def test_wetlands_present(self):
        flag = EnvironmentalFlag("w", FlagType.WETLAND, "Wetlands", CheckStatus.WARN, "Mapped wetland nearby")
        assert items_by_id(self._flags(flag))["wetlands"].status == ActionStatus.CONDITIONAL

    def test_review_needed_when_any_flag_raised(self, full_facts):
        assert items_by_id(full_facts)["env-review"].status == ActionStatus.ALLOWED

        slope = EnvironmentalFlag("s", FlagType.SLOPE, "Steep Slopes", CheckStatus.WARN, "Slopes over 30%")
        item = items_by_id(self._flags(slope))["env-review"]
        assert item.status == ActionStatus.CONDITIONAL
        assert item.conditions == ("Steep Slopes: Slopes over 30%",)


def test_resolve_rule_set():
    assert resolve_rule_set([]) is None
    outcome = resolve_rule_set([rule("a", CheckStatus.PASS), rule("b", CheckStatus.WARN), rule("c", CheckStatus.FAIL)])
    assert outcome.status == ActionStatus.RESTRICTED
    assert [c.id for c in outcome.failing] == ["c"]


def test_resolver_with_settings_object():
    resolver = ActionChecklistResolver(ChecklistSettings(dadu_min_lot_sqft=5000))
    items = {i.id: i for i in resolver.classify(PropertyFacts(parcel=ParcelMetrics(area_sqft=6000)))}
    assert items["dadu"].status == ActionStatus.CONDITIONAL
