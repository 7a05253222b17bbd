import pytest
from pydantic import ValidationError

from binokel.melds import MeldType
from binokel.rules_schema import DEFAULT_RULES, RuleSet, load_rules


def test_default_rules():
    assert DEFAULT_RULES.min_bid == 150
    assert DEFAULT_RULES.bid_increment == 10
    assert DEFAULT_RULES.target_score == 1000
    assert DEFAULT_RULES.hand_size(3) == 12
    assert DEFAULT_RULES.meld_base_points()[MeldType.DOPPEL_BINOKEL] == 300
    assert DEFAULT_RULES.meld_trump_bonus() == {MeldType.PAAR: 20, MeldType.FAMILIE: 50}
    assert DEFAULT_RULES.scoring.going_out_bonus == 40


def test_load_rules_overrides_and_defaults():
    assert load_rules(None) is DEFAULT_RULES
    rules = load_rules({"target_score": 500, "scoring": {"going_out_bonus": 30}})
    assert rules.target_score == 500
    assert rules.scoring.going_out_bonus == 30
    assert rules.scoring.failed_bid_multiplier == 2


def test_json_style_keys_are_coerced():
    rules = load_rules({"hand_sizes": {"2": 18}})
    assert rules.hand_sizes == {2: 18}


def test_meld_names_are_normalized():
    points = {meld_type.value.upper(): 10 for meld_type in MeldType}
    rules = RuleSet(meld_points=points)
    assert rules.meld_base_points()[MeldType.PAAR] == 10


@pytest.mark.parametrize(
    "payload",
    [
        {"hand_sizes": {2: 17}},
        {"hand_sizes": {5: 8}},
        {"hand_sizes": {}},
        {"dabb_size": 5},
        {"meld_points": {"paar": 20}},
        {"trump_bonus": {"schnapsen": 10}},
        {"min_bid": 0},
        {"scoring": {"trick_rounding": "up"}},
    ],
)
def test_invalid_rules_are_rejected(payload):
    with pytest.raises(ValidationError):
        RuleSet(**payload)
