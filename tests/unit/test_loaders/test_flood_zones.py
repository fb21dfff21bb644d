import pytest
from loaders.flood_zones import ZONE_INFO, describe_zone, flood_flag_from_code
from siteplan.facts import CheckStatus, FlagType


def test_describe_known_zone():
    info = describe_zone("AE")
    assert info.flood_zone == "AE"
    assert info.flood_risk_level == "high"
    assert info.is_special_hazard_area


def test_missing_code_is_zone_x():
    info = describe_zone(None)
    assert info.flood_zone == "X"
    assert info.flood_risk_level == "low"


def test_code_is_normalized():
    assert describe_zone(" ve ").flood_zone == "VE"


def test_unknown_code_is_undetermined():
    info = describe_zone("ZZ")
    assert info.flood_risk_level == "undetermined"
    assert info.to_dict()["flood_zone"] == "ZZ"


@pytest.mark.parametrize("code,status", [
    ("AE", CheckStatus.FAIL),
    ("VE", CheckStatus.FAIL),
    ("B", CheckStatus.WARN),
    ("D", CheckStatus.WARN),
    ("X", CheckStatus.PASS),
    (None, CheckStatus.PASS),
])
def test_flag_status_follows_risk(code, status):
    flag = flood_flag_from_code(code)
    assert flag.type == FlagType.FLOOD
    assert flag.status == status


def test_every_zone_maps_to_a_status():
    for code in ZONE_INFO:
        assert flood_flag_from_code(code).description
