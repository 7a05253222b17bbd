"""Meld detection and validation for Binokel.

Melds are grouped into families: suit sequences (Paar, Familie), the Binokel
combinations, and same-rank sets (Vier, Acht). Within one family a physical card
copy can only count once; a higher meld consumes its copies before a lower meld of
the same family may use what is left. Across families a card may count again.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .cards import RANK_ORDER, SUIT_ORDER, Card, CardId, Rank, Suit


class InvalidMeld(ValueError):
    """Raised when a declared meld does not match the hand."""


class MeldType(Enum):
    PAAR = "paar"
    FAMILIE = "familie"
    BINOKEL = "binokel"
    DOPPEL_BINOKEL = "doppel-binokel"
    VIER_ASS = "vier-ass"
    VIER_KOENIG = "vier-koenig"
    VIER_OBER = "vier-ober"
    VIER_BUABE = "vier-buabe"
    ACHT_ASS = "acht-ass"
    ACHT_KOENIG = "acht-koenig"
    ACHT_OBER = "acht-ober"
    ACHT_BUABE = "acht-buabe"

    def __str__(self) -> str:
        return self.value


MELD_BASE_POINTS: dict[MeldType, int] = {
    MeldType.PAAR: 20,
    MeldType.FAMILIE: 100,
    MeldType.BINOKEL: 40,
    MeldType.DOPPEL_BINOKEL: 300,
    MeldType.VIER_ASS: 100,
    MeldType.VIER_KOENIG: 80,
    MeldType.VIER_OBER: 60,
    MeldType.VIER_BUABE: 40,
    MeldType.ACHT_ASS: 1000,
    MeldType.ACHT_KOENIG: 600,
    MeldType.ACHT_OBER: 400,
    MeldType.ACHT_BUABE: 200,
}

# Added when the suit-specific meld is in trump.
MELD_TRUMP_BONUS: dict[MeldType, int] = {
    MeldType.PAAR: 20,
    MeldType.FAMILIE: 50,
}

VIER_MELDS: dict[Rank, MeldType] = {
    Rank.ASS: MeldType.VIER_ASS,
    Rank.KOENIG: MeldType.VIER_KOENIG,
    Rank.OBER: MeldType.VIER_OBER,
    Rank.BUABE: MeldType.VIER_BUABE,
}

ACHT_MELDS: dict[Rank, MeldType] = {
    Rank.ASS: MeldType.ACHT_ASS,
    Rank.KOENIG: MeldType.ACHT_KOENIG,
    Rank.OBER: MeldType.ACHT_OBER,
    Rank.BUABE: MeldType.ACHT_BUABE,
}

SUIT_MELDS = frozenset({MeldType.PAAR, MeldType.FAMILIE})
BINOKEL_MELDS = frozenset({MeldType.BINOKEL, MeldType.DOPPEL_BINOKEL})

BINOKEL_CARDS: Tuple[Tuple[Suit, Rank], ...] = ((Suit.SCHIPPE, Rank.OBER), (Suit.BOLLEN, Rank.BUABE))


@dataclass(frozen=True)
class Meld:
    type: MeldType
    cards: Tuple[CardId, ...]
    points: int
    suit: Optional[Suit] = None


def meld_family(meld_type: MeldType) -> str:
    if meld_type in SUIT_MELDS:
        return "suit"
    if meld_type in BINOKEL_MELDS:
        return "binokel"
    return "rank"


def meld_points(
    meld_type: MeldType,
    suit: Optional[Suit],
    trump: Optional[Suit],
    *,
    base_points: Mapping[MeldType, int] = MELD_BASE_POINTS,
    trump_bonus: Mapping[MeldType, int] = MELD_TRUMP_BONUS,
) -> int:
    points = base_points[meld_type]
    if suit is not None and trump is not None and suit is trump:
        points += trump_bonus.get(meld_type, 0)
    return points


def _index_hand(hand: Iterable[object]) -> Dict[Tuple[Suit, Rank], List[Card]]:
    held: Dict[Tuple[Suit, Rank], List[Card]] = defaultdict(list)
    for card in hand:
        if isinstance(card, Card):
            held[(card.suit, card.rank)].append(card)
    for cards in held.values():
        cards.sort(key=lambda c: c.copy)
    return held


def detect_melds(
    hand: Iterable[object],
    trump: Optional[Suit],
    *,
    base_points: Mapping[MeldType, int] = MELD_BASE_POINTS,
    trump_bonus: Mapping[MeldType, int] = MELD_TRUMP_BONUS,
) -> List[Meld]:
    """Return every meld in ``hand`` given the trump suit."""
    held = _index_hand(hand)
    melds: List[Meld] = []

    def add(meld_type: MeldType, cards: Sequence[Card], suit: Optional[Suit] = None) -> None:
        points = meld_points(meld_type, suit, trump, base_points=base_points, trump_bonus=trump_bonus)
        melds.append(Meld(meld_type, tuple(card.id for card in cards), points, suit))

    obers, buaben = (held[key] for key in BINOKEL_CARDS)
    if len(obers) >= 2 and len(buaben) >= 2:
        add(MeldType.DOPPEL_BINOKEL, [*obers[:2], *buaben[:2]])
    elif obers and buaben:
        add(MeldType.BINOKEL, [obers[0], buaben[0]])

    for rank, vier in VIER_MELDS.items():
        per_suit = [held[(suit, rank)] for suit in SUIT_ORDER]
        if all(len(cards) >= 2 for cards in per_suit):
            add(ACHT_MELDS[rank], [card for cards in per_suit for card in cards[:2]])
        elif all(per_suit):
            add(vier, [cards[0] for cards in per_suit])

    for suit in SUIT_ORDER:
        familien = min(len(held[(suit, rank)]) for rank in RANK_ORDER)
        for copy in range(familien):
            add(MeldType.FAMILIE, [held[(suit, rank)][copy] for rank in RANK_ORDER], suit)
        koenige = held[(suit, Rank.KOENIG)][familien:]
        obers_left = held[(suit, Rank.OBER)][familien:]
        for koenig, ober in zip(koenige, obers_left):
            add(MeldType.PAAR, [koenig, ober], suit)

    return melds


def calculate_meld_points(melds: Iterable[Meld]) -> int:
    return sum(meld.points for meld in melds)


def _expected_composition(meld: Meld) -> Counter:
    meld_type = meld.type
    if meld_type in SUIT_MELDS:
        if meld.suit is None:
            raise InvalidMeld(f"{meld_type} needs a suit.")
        ranks = (Rank.KOENIG, Rank.OBER) if meld_type is MeldType.PAAR else RANK_ORDER
        return Counter((meld.suit, rank) for rank in ranks)
    if meld_type in BINOKEL_MELDS:
        copies = 2 if meld_type is MeldType.DOPPEL_BINOKEL else 1
        return Counter({key: copies for key in BINOKEL_CARDS})
    for rank, vier in VIER_MELDS.items():
        if meld_type is vier:
            return Counter((suit, rank) for suit in SUIT_ORDER)
        if meld_type is ACHT_MELDS[rank]:
            return Counter({(suit, rank): 2 for suit in SUIT_ORDER})
    raise InvalidMeld(f"Unknown meld type {meld_type!r}.")


def validate_melds(
    hand: Iterable[object],
    trump: Optional[Suit],
    melds: Sequence[Meld],
    *,
    base_points: Mapping[MeldType, int] = MELD_BASE_POINTS,
    trump_bonus: Mapping[MeldType, int] = MELD_TRUMP_BONUS,
) -> None:
    """Check a declared meld list against the hand.

    Raises:
        InvalidMeld: a card is missing from the hand, the cards do not form the meld,
            the points are wrong, or one card copy is reused within a meld family.
    """
    by_id = {card.id: card for card in hand if isinstance(card, Card)}
    used: Dict[str, set] = defaultdict(set)

    for meld in melds:
        cards = []
        for card_id in meld.cards:
            if card_id not in by_id:
                raise InvalidMeld(f"Card {card_id} is not in hand.")
            cards.append(by_id[card_id])
        if len(set(meld.cards)) != len(meld.cards):
            raise InvalidMeld(f"{meld.type} lists a card twice.")
        if Counter((card.suit, card.rank) for card in cards) != _expected_composition(meld):
            raise InvalidMeld(f"Cards {list(meld.cards)} do not form {meld.type}.")
        expected = meld_points(meld.type, meld.suit, trump, base_points=base_points, trump_bonus=trump_bonus)
        if meld.points != expected:
            raise InvalidMeld(f"{meld.type} is worth {expected}, not {meld.points}.")
        family = used[meld_family(meld.type)]
        if family.intersection(meld.cards):
            raise InvalidMeld(f"{meld.type} reuses cards already counted in another meld.")
        family.update(meld.cards)
