import pytest

from binokel.cards import RANK_ORDER, SUIT_ORDER, Card, Rank, Suit
from binokel.melds import (
    MELD_BASE_POINTS,
    InvalidMeld,
    Meld,
    MeldType,
    calculate_meld_points,
    detect_melds,
    validate_melds,
)


def C(suit, rank, copy=0):
    return Card(suit, rank, copy)


def family(suit, copy=0):
    return [C(suit, rank, copy) for rank in RANK_ORDER]


def types(melds):
    return [meld.type for meld in melds]


def test_paar_with_and_without_trump():
    hand = [C(Suit.HERZ, Rank.KOENIG), C(Suit.HERZ, Rank.OBER), C(Suit.KREUZ, Rank.ASS)]

    assert detect_melds(hand, Suit.KREUZ) == [
        Meld(MeldType.PAAR, ("herz-koenig-0", "herz-ober-0"), 20, Suit.HERZ)
    ]
    assert detect_melds(hand, Suit.HERZ)[0].points == 40


def test_familie_absorbs_its_paar():
    melds = detect_melds(family(Suit.HERZ), Suit.HERZ)
    assert types(melds) == [MeldType.FAMILIE]
    assert melds[0].points == 150
    assert detect_melds(family(Suit.HERZ), Suit.KREUZ)[0].points == 100


def test_spare_koenig_and_ober_form_a_paar_next_to_a_familie():
    hand = family(Suit.HERZ) + [C(Suit.HERZ, Rank.KOENIG, 1), C(Suit.HERZ, Rank.OBER, 1)]
    melds = detect_melds(hand, Suit.KREUZ)

    assert types(melds) == [MeldType.FAMILIE, MeldType.PAAR]
    assert melds[1].cards == ("herz-koenig-1", "herz-ober-1")


def test_double_familie():
    melds = detect_melds(family(Suit.BOLLEN, 0) + family(Suit.BOLLEN, 1), Suit.BOLLEN)
    assert types(melds) == [MeldType.FAMILIE, MeldType.FAMILIE]
    assert calculate_meld_points(melds) == 300


def test_binokel_and_doppel_binokel():
    single = [C(Suit.SCHIPPE, Rank.OBER), C(Suit.BOLLEN, Rank.BUABE)]
    assert detect_melds(single, Suit.HERZ) == [
        Meld(MeldType.BINOKEL, ("schippe-ober-0", "bollen-buabe-0"), 40)
    ]

    double = single + [C(Suit.SCHIPPE, Rank.OBER, 1), C(Suit.BOLLEN, Rank.BUABE, 1)]
    melds = detect_melds(double, Suit.HERZ)
    assert types(melds) == [MeldType.DOPPEL_BINOKEL]
    assert melds[0].points == 300


def test_vier_and_acht():
    vier = [C(suit, Rank.ASS) for suit in SUIT_ORDER]
    assert types(detect_melds(vier, Suit.HERZ)) == [MeldType.VIER_ASS]

    acht = vier + [C(suit, Rank.ASS, 1) for suit in SUIT_ORDER]
    melds = detect_melds(acht, Suit.HERZ)
    assert types(melds) == [MeldType.ACHT_ASS]
    assert melds[0].points == 1000


def test_incomplete_sets_and_tens_do_not_meld():
    three_aces = [C(suit, Rank.ASS) for suit in SUIT_ORDER[:3]]
    tens = [C(suit, Rank.ZEHN) for suit in SUIT_ORDER]
    assert detect_melds(three_aces, Suit.HERZ) == []
    assert detect_melds(tens, Suit.HERZ) == []


def test_card_may_count_in_melds_of_different_families():
    hand = [C(Suit.SCHIPPE, Rank.OBER), C(Suit.SCHIPPE, Rank.KOENIG), C(Suit.BOLLEN, Rank.BUABE)]
    melds = detect_melds(hand, None)

    assert types(melds) == [MeldType.BINOKEL, MeldType.PAAR]
    assert calculate_meld_points(melds) == 60
    validate_melds(hand, None, melds)


def test_custom_point_table():
    hand = [C(Suit.HERZ, Rank.KOENIG), C(Suit.HERZ, Rank.OBER)]
    points = {**MELD_BASE_POINTS, MeldType.PAAR: 30}
    assert detect_melds(hand, Suit.KREUZ, base_points=points)[0].points == 30


def test_validate_accepts_detected_melds():
    hand = family(Suit.KREUZ) + [C(suit, Rank.KOENIG) for suit in SUIT_ORDER[1:]] + [C(Suit.SCHIPPE, Rank.OBER)]
    melds = detect_melds(hand, Suit.KREUZ)

    assert set(types(melds)) == {MeldType.FAMILIE, MeldType.VIER_KOENIG, MeldType.PAAR}
    validate_melds(hand, Suit.KREUZ, melds)


def test_validate_rejects_card_not_in_hand():
    meld = Meld(MeldType.PAAR, ("herz-koenig-0", "herz-ober-0"), 20, Suit.HERZ)
    with pytest.raises(InvalidMeld):
        validate_melds([C(Suit.HERZ, Rank.KOENIG)], Suit.KREUZ, [meld])


def test_validate_rejects_wrong_points():
    hand = [C(Suit.HERZ, Rank.KOENIG), C(Suit.HERZ, Rank.OBER)]
    meld = Meld(MeldType.PAAR, ("herz-koenig-0", "herz-ober-0"), 40, Suit.HERZ)
    with pytest.raises(InvalidMeld):
        validate_melds(hand, Suit.KREUZ, [meld])


def test_validate_rejects_wrong_composition():
    hand = [C(Suit.HERZ, Rank.KOENIG), C(Suit.HERZ, Rank.BUABE)]
    meld = Meld(MeldType.PAAR, ("herz-koenig-0", "herz-buabe-0"), 20, Suit.HERZ)
    with pytest.raises(InvalidMeld):
        validate_melds(hand, Suit.KREUZ, [meld])


def test_validate_rejects_reuse_within_a_family():
    hand = [C(Suit.HERZ, Rank.KOENIG), C(Suit.HERZ, Rank.OBER, 0), C(Suit.HERZ, Rank.OBER, 1)]
    melds = [
        Meld(MeldType.PAAR, ("herz-koenig-0", "herz-ober-0"), 20, Suit.HERZ),
        Meld(MeldType.PAAR, ("herz-koenig-0", "herz-ober-1"), 20, Suit.HERZ),
    ]
    with pytest.raises(InvalidMeld):
        validate_melds(hand, Suit.KREUZ, melds)
