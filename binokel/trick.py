"""Trick representation and resolution."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .cards import Card, Suit, card_beats


class TrickError(RuntimeError):
    """Raised when trick play breaks ordering constraints."""


@dataclass(frozen=True)
class PlayedCard:
    card: Card
    player_index: int


@dataclass(frozen=True)
class Trick:
    plays: Tuple[PlayedCard, ...] = ()
    lead_suit: Optional[Suit] = None
    winner_index: Optional[int] = None

    def is_empty(self) -> bool:
        return not self.plays

    def is_complete(self, player_count: int) -> bool:
        return len(self.plays) == player_count

    def cards(self) -> Tuple[Card, ...]:
        return tuple(play.card for play in self.plays)

    def add_play(self, player_index: int, card: Card) -> "Trick":
        if self.winner_index is not None:
            raise TrickError("Trick already resolved.")
        if any(play.player_index == player_index for play in self.plays):
            raise TrickError(f"Player {player_index} already played to this trick.")
        lead = self.lead_suit if self.plays else card.suit
        return replace(self, plays=self.plays + (PlayedCard(card, player_index),), lead_suit=lead)

    def resolve(self, trump: Optional[Suit]) -> "Trick":
        winner = self.plays[determine_trick_winner(self, trump)].player_index
        return replace(self, winner_index=winner)


@dataclass(frozen=True)
class CompletedTrick:
    plays: Tuple[PlayedCard, ...]
    winner_index: int
    points: int


def determine_trick_winner(trick: Trick, trump: Optional[Suit]) -> int:
    """Return the position within ``trick.plays`` of the winning card."""
    if not trick.plays:
        raise TrickError("Cannot determine winner on empty trick.")
    lead = trick.lead_suit
    assert lead is not None
    best = 0
    for index in range(1, len(trick.plays)):
        if card_beats(trick.plays[index].card, trick.plays[best].card, lead, trump):
            best = index
    return best
