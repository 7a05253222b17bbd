"""Legal move generation and trick points for Binokel."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .cards import Card, Suit, card_strength
from .trick import Trick


def _strongest_of_suit(trick: Trick, suit: Suit) -> Optional[Card]:
    candidates = [card for card in trick.cards() if card.suit is suit]
    if not candidates:
        return None
    return max(candidates, key=card_strength)


def _must_beat(cards: List[Card], best: Optional[Card]) -> List[Card]:
    if best is None:
        return cards
    higher = [card for card in cards if card_strength(card) > card_strength(best)]
    return higher if higher else cards


def get_valid_plays(hand: Sequence[Card], trick: Trick, trump: Optional[Suit]) -> List[Card]:
    """Return the cards that may legally be played, in hand order.

    Follow suit and beat the best card of the lead suit if possible; when void in the
    lead suit, trump and overtrump if possible; otherwise anything goes.
    """
    cards = list(hand)
    if trick.is_empty():
        return cards

    lead = trick.lead_suit
    assert lead is not None

    in_lead = [card for card in cards if card.suit is lead]
    if in_lead:
        return _must_beat(in_lead, _strongest_of_suit(trick, lead))

    if trump is not None:
        trumps = [card for card in cards if card.suit is trump]
        if trumps:
            return _must_beat(trumps, _strongest_of_suit(trick, trump))

    return cards


def is_valid_play(card: Card, hand: Sequence[Card], trick: Trick, trump: Optional[Suit]) -> bool:
    return card in get_valid_plays(hand, trick, trump)


def calculate_trick_points(cards: Iterable[Card]) -> int:
    return sum(card.point_value() for card in cards)
