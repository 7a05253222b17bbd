"""Deck creation, shuffling and dealing for Binokel."""

from __future__ import annotations

from random import Random
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from .cards import COPIES, DISPLAY_RANK_ORDER, RANK_ORDER, SUIT_ORDER, Card, Suit

DECK_SIZE = 40

# Cards per player keyed by player count.
HAND_SIZES: dict[int, int] = {2: 18, 3: 12, 4: 9}
DABB_SIZE = 4

SUPPORTED_PLAYER_COUNTS = tuple(sorted(HAND_SIZES))

_SUIT_SORT = {suit: index for index, suit in enumerate(SUIT_ORDER)}
_DISPLAY_SORT = {rank: index for index, rank in enumerate(DISPLAY_RANK_ORDER)}


def create_deck() -> List[Card]:
    """Return the ordered 40-card deck, two copies of every suit and rank."""
    return [Card(suit, rank, copy) for suit in Suit for rank in RANK_ORDER for copy in COPIES]


def shuffle_deck(deck: Sequence[Card], *, rng: Optional[Random] = None) -> List[Card]:
    """Return a Fisher-Yates permutation of ``deck`` without touching the input."""
    if rng is None:
        rng = Random()
    cards = list(deck)
    for i in range(len(cards) - 1, 0, -1):
        j = rng.randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]
    return cards


def deal_cards(
    deck: Sequence[Card],
    player_count: int,
    *,
    hand_sizes: Mapping[int, int] = HAND_SIZES,
) -> Tuple[List[List[Card]], List[Card]]:
    """Split an already shuffled deck into hands and the dabb, left to right."""
    if player_count not in hand_sizes:
        raise ValueError(f"Unsupported player count: {player_count}")
    cards = list(deck)
    if len(cards) != DECK_SIZE:
        raise ValueError(f"Deck must contain exactly {DECK_SIZE} cards.")

    hand_size = hand_sizes[player_count]
    hands = [cards[i * hand_size : (i + 1) * hand_size] for i in range(player_count)]
    dabb = cards[player_count * hand_size :]
    return hands, dabb


def sort_hand(cards: Iterable[Card]) -> List[Card]:
    """Display order: suit, then strongest rank first, then copy."""
    return sorted(cards, key=lambda c: (_SUIT_SORT[c.suit], _DISPLAY_SORT[c.rank], c.copy))
