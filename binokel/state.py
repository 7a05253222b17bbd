"""Derived game state for a Binokel session."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Mapping, Optional, Tuple

from .cards import AnyCard, Card, CardId, Suit
from .events import RoundScore
from .melds import Meld
from .players import Player, Side, all_sides, side_of
from .trick import CompletedTrick, Trick

DEFAULT_TARGET_SCORE = 1000


class GamePhase(str, Enum):
    WAITING = "waiting"
    DEALING = "dealing"
    BIDDING = "bidding"
    DABB = "dabb"
    TRUMP = "trump"
    MELDING = "melding"
    TRICKS = "tricks"
    SCORING = "scoring"
    FINISHED = "finished"
    TERMINATED = "terminated"

    def __str__(self) -> str:
        return self.value


ACTIVE_PHASES = frozenset(
    {
        GamePhase.DEALING,
        GamePhase.BIDDING,
        GamePhase.DABB,
        GamePhase.TRUMP,
        GamePhase.MELDING,
        GamePhase.TRICKS,
        GamePhase.SCORING,
    }
)


@dataclass(frozen=True)
class GameState:
    """Snapshot folded from the event log. Never mutated; the reducer builds new ones."""

    phase: GamePhase = GamePhase.WAITING
    player_count: int = 4
    players: Tuple[Player, ...] = ()
    hands: Mapping[int, Tuple[AnyCard, ...]] = field(default_factory=dict)
    dabb: Tuple[AnyCard, ...] = ()
    current_bid: int = 0
    bid_winner: Optional[int] = None
    current_bidder: Optional[int] = None
    first_bidder: Optional[int] = None
    passed_players: FrozenSet[int] = frozenset()
    trump: Optional[Suit] = None
    current_trick: Trick = field(default_factory=Trick)
    tricks_taken: Mapping[int, Tuple[Tuple[Card, ...], ...]] = field(default_factory=dict)
    current_player: Optional[int] = None
    round_scores: Mapping[Side, RoundScore] = field(default_factory=dict)
    total_scores: Mapping[Side, int] = field(default_factory=dict)
    declared_melds: Mapping[int, Tuple[Meld, ...]] = field(default_factory=dict)
    dealer: int = 0
    round: int = 0
    target_score: int = DEFAULT_TARGET_SCORE
    went_out: bool = False
    dabb_card_ids: Tuple[CardId, ...] = ()
    discarded: Tuple[AnyCard, ...] = ()
    last_completed_trick: Optional[CompletedTrick] = None
    winner: Optional[Side] = None
    terminated_by: Optional[int] = None

    def hand(self, player_index: int) -> Tuple[AnyCard, ...]:
        return self.hands.get(player_index, ())

    def side_of(self, player_index: int) -> Side:
        return side_of(self.player_count, self.players, player_index)

    def player(self, player_index: int) -> Optional[Player]:
        for player in self.players:
            if player.player_index == player_index:
                return player
        return None

    def expected_meld_declarers(self) -> list[int]:
        """Players who still have to declare melds this round."""
        return [
            index
            for index in range(self.player_count)
            if not (self.went_out and index == self.bid_winner)
        ]

    def all_hands_empty(self) -> bool:
        return bool(self.hands) and all(not cards for cards in self.hands.values())


def create_initial_state(player_count: int = 4, target_score: int = DEFAULT_TARGET_SCORE) -> GameState:
    return GameState(
        player_count=player_count,
        target_score=target_score,
        total_scores={side: 0 for side in all_sides(player_count)},
    )


def reset_for_new_round(state: GameState) -> GameState:
    """Clear per-round state, keep cumulative totals, rotate the dealer, bump the round."""
    return replace(
        state,
        phase=GamePhase.DEALING,
        hands={},
        dabb=(),
        current_bid=0,
        bid_winner=None,
        current_bidder=None,
        first_bidder=None,
        passed_players=frozenset(),
        trump=None,
        current_trick=Trick(),
        tricks_taken={},
        current_player=None,
        round_scores={},
        declared_melds={},
        dealer=(state.dealer + 1) % state.player_count,
        round=state.round + 1,
        went_out=False,
        dabb_card_ids=(),
        discarded=(),
        last_completed_trick=None,
    )


def players_to_act(state: GameState) -> list[int]:
    """Players the game is waiting on in the current phase."""
    if state.phase is GamePhase.BIDDING:
        return [] if state.current_bidder is None else [state.current_bidder]
    if state.phase in (GamePhase.DABB, GamePhase.TRUMP):
        return [] if state.bid_winner is None else [state.bid_winner]
    if state.phase is GamePhase.MELDING:
        return [index for index in state.expected_meld_declarers() if index not in state.declared_melds]
    if state.phase is GamePhase.TRICKS:
        return [] if state.current_player is None else [state.current_player]
    return []
