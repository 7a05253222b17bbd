from collections import Counter
from random import Random

import pytest

from binokel.cards import Card, Rank, Suit
from binokel.deck import DABB_SIZE, DECK_SIZE, HAND_SIZES, create_deck, deal_cards, shuffle_deck, sort_hand


def test_deck_has_two_copies_of_every_card():
    deck = create_deck()
    assert len(deck) == DECK_SIZE
    assert len({card.id for card in deck}) == DECK_SIZE
    counts = Counter((card.suit, card.rank) for card in deck)
    assert set(counts.values()) == {2}
    assert len(counts) == 20


def test_card_points_sum_to_240():
    assert sum(card.point_value() for card in create_deck()) == 240


@pytest.mark.parametrize("player_count", [2, 3, 4])
def test_deal_partitions_the_deck(player_count):
    deck = shuffle_deck(create_deck(), rng=Random(player_count))
    hands, dabb = deal_cards(deck, player_count)

    assert [len(hand) for hand in hands] == [HAND_SIZES[player_count]] * player_count
    assert len(dabb) == DABB_SIZE
    dealt = [card.id for hand in hands for card in hand] + [card.id for card in dabb]
    assert sorted(dealt) == sorted(card.id for card in create_deck())


def test_deal_rejects_bad_input():
    with pytest.raises(ValueError):
        deal_cards(create_deck(), 5)
    with pytest.raises(ValueError):
        deal_cards(create_deck()[:-1], 2)


def test_shuffle_is_a_permutation_and_leaves_input_alone():
    deck = create_deck()
    snapshot = list(deck)
    shuffled = shuffle_deck(deck, rng=Random(3))

    assert deck == snapshot
    assert shuffled != deck
    assert sorted(card.id for card in shuffled) == sorted(card.id for card in deck)


def test_shuffle_is_reproducible_with_a_seed():
    first = shuffle_deck(create_deck(), rng=Random(11))
    second = shuffle_deck(create_deck(), rng=Random(11))
    assert first == second


def test_sort_hand_orders_suit_then_strongest_rank():
    hand = [
        Card(Suit.HERZ, Rank.BUABE),
        Card(Suit.KREUZ, Rank.OBER),
        Card(Suit.HERZ, Rank.ASS, 1),
        Card(Suit.KREUZ, Rank.ZEHN),
        Card(Suit.HERZ, Rank.ASS, 0),
    ]
    ordered = sort_hand(hand)
    assert [card.id for card in ordered] == [
        "kreuz-10-0",
        "kreuz-ober-0",
        "herz-ass-0",
        "herz-ass-1",
        "herz-buabe-0",
    ]
    assert sort_hand(ordered) == ordered
