"""Card-related data structures and helpers for Binokel."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Optional, Union


class Suit(Enum):
    KREUZ = "kreuz"
    SCHIPPE = "schippe"
    HERZ = "herz"
    BOLLEN = "bollen"

    def __str__(self) -> str:
        return self.value


class Rank(Enum):
    BUABE = "buabe"
    OBER = "ober"
    KOENIG = "koenig"
    ZEHN = "10"
    ASS = "ass"

    def __str__(self) -> str:
        return self.value


SUIT_ORDER: list[Suit] = [Suit.KREUZ, Suit.SCHIPPE, Suit.HERZ, Suit.BOLLEN]

CARD_POINTS: dict[Rank, int] = {
    Rank.BUABE: 2,
    Rank.OBER: 3,
    Rank.KOENIG: 4,
    Rank.ZEHN: 10,
    Rank.ASS: 11,
}

# Rank order from lowest to highest for trick resolution.
RANK_ORDER: list[Rank] = [
    Rank.BUABE,
    Rank.OBER,
    Rank.KOENIG,
    Rank.ZEHN,
    Rank.ASS,
]

RANK_STRENGTH: dict[Rank, int] = {rank: index for index, rank in enumerate(RANK_ORDER)}

# Display order within a suit; Buabe is listed last.
DISPLAY_RANK_ORDER: list[Rank] = [
    Rank.ASS,
    Rank.ZEHN,
    Rank.KOENIG,
    Rank.OBER,
    Rank.BUABE,
]

COPIES = (0, 1)

HIDDEN_CARD_ID = "hidden"

CardId = str


@dataclass(frozen=True)
class Card:
    """Immutable representation of one physical card of the two-copy deck."""

    suit: Suit
    rank: Rank
    copy: int = 0

    @property
    def id(self) -> CardId:
        return f"{self.suit.value}-{self.rank.value}-{self.copy}"

    def point_value(self) -> int:
        return CARD_POINTS[self.rank]


@dataclass(frozen=True)
class HiddenCard:
    """Placeholder for a card the viewer may not see.

    Carries no suit, rank or copy; every placeholder shares the same id.
    """

    @property
    def id(self) -> CardId:
        return HIDDEN_CARD_ID


AnyCard = Union[Card, HiddenCard]


def hide_cards(cards: Iterable[object]) -> tuple[HiddenCard, ...]:
    """Return one placeholder per input element."""
    return tuple(HiddenCard() for _ in cards)


def card_strength(card: Card) -> int:
    """Return an integer strength used for ordering cards within a suit."""
    return RANK_STRENGTH[card.rank]


def card_beats(candidate: Card, current: Card, lead_suit: Suit, trump: Optional[Suit]) -> bool:
    """Return True if candidate wins over the currently winning card."""
    candidate_trump = trump is not None and candidate.suit is trump
    current_trump = trump is not None and current.suit is trump

    if candidate_trump and not current_trump:
        return True
    if current_trump and not candidate_trump:
        return False

    if candidate.suit is current.suit:
        return card_strength(candidate) > card_strength(current)

    if candidate.suit is lead_suit and current.suit is not lead_suit:
        return True

    # Two different off-suit cards: the earlier one stands.
    return False


def parse_card_id(card_id: CardId) -> Card:
    suit_value, rank_value, copy = card_id.split("-")
    return Card(Suit(suit_value), Rank(rank_value), int(copy))


def serialize_card(card: AnyCard) -> dict:
    if isinstance(card, HiddenCard):
        return {"id": HIDDEN_CARD_ID, "hidden": True}
    return {"id": card.id, "suit": card.suit.value, "rank": card.rank.value, "copy": card.copy}


def deserialize_card(payload: Mapping) -> AnyCard:
    if payload.get("hidden"):
        return HiddenCard()
    return Card(Suit(payload["suit"]), Rank(payload["rank"]), int(payload.get("copy", 0)))


SUIT_NAMES: dict[Suit, str] = {
    Suit.KREUZ: "Kreuz",
    Suit.SCHIPPE: "Schippe",
    Suit.HERZ: "Herz",
    Suit.BOLLEN: "Bollen",
}

RANK_NAMES: dict[Rank, str] = {
    Rank.BUABE: "Buabe",
    Rank.OBER: "Ober",
    Rank.KOENIG: "König",
    Rank.ZEHN: "10",
    Rank.ASS: "Ass",
}


def card_label(card: AnyCard) -> str:
    if isinstance(card, HiddenCard):
        return "??"
    return f"{SUIT_NAMES[card.suit]} {RANK_NAMES[card.rank]}"
