"""Game events: the closed set of facts a Binokel session can record.

Every event carries ``id``, ``session_id``, ``sequence`` and ``timestamp`` plus a
payload whose class is fixed by the event type. Generators stamp identity and time
but never check game rules.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union

from .cards import AnyCard, Card, CardId, HiddenCard, Suit
from .melds import Meld, calculate_meld_points
from .players import Side


class EventType(str, Enum):
    GAME_STARTED = "GAME_STARTED"
    PLAYER_JOINED = "PLAYER_JOINED"
    PLAYER_LEFT = "PLAYER_LEFT"
    PLAYER_RECONNECTED = "PLAYER_RECONNECTED"
    CARDS_DEALT = "CARDS_DEALT"
    BID_PLACED = "BID_PLACED"
    PLAYER_PASSED = "PLAYER_PASSED"
    BIDDING_WON = "BIDDING_WON"
    DABB_TAKEN = "DABB_TAKEN"
    CARDS_DISCARDED = "CARDS_DISCARDED"
    GOING_OUT = "GOING_OUT"
    TRUMP_DECLARED = "TRUMP_DECLARED"
    MELDS_DECLARED = "MELDS_DECLARED"
    MELDING_COMPLETE = "MELDING_COMPLETE"
    CARD_PLAYED = "CARD_PLAYED"
    TRICK_WON = "TRICK_WON"
    ROUND_SCORED = "ROUND_SCORED"
    GAME_FINISHED = "GAME_FINISHED"
    NEW_ROUND_STARTED = "NEW_ROUND_STARTED"
    GAME_TERMINATED = "GAME_TERMINATED"

    def __str__(self) -> str:
        return self.value


# Payloads -------------------------------------------------------------------


@dataclass(frozen=True)
class GameStarted:
    player_count: int
    target_score: int
    dealer: int


@dataclass(frozen=True)
class PlayerJoined:
    player_id: str
    player_index: int
    nickname: str
    team: Optional[int] = None


@dataclass(frozen=True)
class PlayerLeft:
    player_index: int


@dataclass(frozen=True)
class PlayerReconnected:
    player_index: int


@dataclass(frozen=True)
class CardsDealt:
    hands: Mapping[int, Tuple[AnyCard, ...]]
    dabb: Tuple[AnyCard, ...]


@dataclass(frozen=True)
class BidPlaced:
    player_index: int
    amount: int


@dataclass(frozen=True)
class PlayerPassed:
    player_index: int


@dataclass(frozen=True)
class BiddingWon:
    player_index: int
    winning_bid: int


@dataclass(frozen=True)
class DabbTaken:
    player_index: int
    dabb_cards: Tuple[AnyCard, ...]


@dataclass(frozen=True)
class CardsDiscarded:
    player_index: int
    discarded_cards: Tuple[Union[CardId, HiddenCard], ...]


@dataclass(frozen=True)
class GoingOut:
    player_index: int
    suit: Suit


@dataclass(frozen=True)
class TrumpDeclared:
    player_index: int
    suit: Suit


@dataclass(frozen=True)
class MeldsDeclared:
    player_index: int
    melds: Tuple[Meld, ...]
    total_points: int


@dataclass(frozen=True)
class MeldingComplete:
    meld_scores: Mapping[int, int]


@dataclass(frozen=True)
class CardPlayed:
    player_index: int
    card: Card


@dataclass(frozen=True)
class TrickWon:
    winner_index: int
    cards: Tuple[Card, ...]
    points: int


@dataclass(frozen=True)
class RoundScore:
    melds: int
    tricks: int
    total: int
    bid_met: bool


@dataclass(frozen=True)
class RoundScored:
    scores: Mapping[Side, RoundScore]
    total_scores: Mapping[Side, int]


@dataclass(frozen=True)
class GameFinished:
    winner: Side
    final_scores: Mapping[Side, int]


@dataclass(frozen=True)
class NewRoundStarted:
    round: int
    dealer: int


@dataclass(frozen=True)
class GameTerminated:
    terminated_by: int
    reason: str = "player_exit"


EventPayload = Union[
    GameStarted,
    PlayerJoined,
    PlayerLeft,
    PlayerReconnected,
    CardsDealt,
    BidPlaced,
    PlayerPassed,
    BiddingWon,
    DabbTaken,
    CardsDiscarded,
    GoingOut,
    TrumpDeclared,
    MeldsDeclared,
    MeldingComplete,
    CardPlayed,
    TrickWon,
    RoundScored,
    GameFinished,
    NewRoundStarted,
    GameTerminated,
]

PAYLOAD_TYPES: Dict[EventType, type] = {
    EventType.GAME_STARTED: GameStarted,
    EventType.PLAYER_JOINED: PlayerJoined,
    EventType.PLAYER_LEFT: PlayerLeft,
    EventType.PLAYER_RECONNECTED: PlayerReconnected,
    EventType.CARDS_DEALT: CardsDealt,
    EventType.BID_PLACED: BidPlaced,
    EventType.PLAYER_PASSED: PlayerPassed,
    EventType.BIDDING_WON: BiddingWon,
    EventType.DABB_TAKEN: DabbTaken,
    EventType.CARDS_DISCARDED: CardsDiscarded,
    EventType.GOING_OUT: GoingOut,
    EventType.TRUMP_DECLARED: TrumpDeclared,
    EventType.MELDS_DECLARED: MeldsDeclared,
    EventType.MELDING_COMPLETE: MeldingComplete,
    EventType.CARD_PLAYED: CardPlayed,
    EventType.TRICK_WON: TrickWon,
    EventType.ROUND_SCORED: RoundScored,
    EventType.GAME_FINISHED: GameFinished,
    EventType.NEW_ROUND_STARTED: NewRoundStarted,
    EventType.GAME_TERMINATED: GameTerminated,
}


def ensure_exhaustive(table: Mapping[EventType, object], owner: str) -> None:
    """Fail at import time when a dispatch table misses an event type."""
    missing = [event_type.value for event_type in EventType if event_type not in table]
    if missing:
        raise RuntimeError(f"{owner} does not handle event types: {', '.join(missing)}")


ensure_exhaustive(PAYLOAD_TYPES, "PAYLOAD_TYPES")


@dataclass(frozen=True)
class GameEvent:
    id: str
    session_id: str
    sequence: int
    timestamp: int
    type: EventType
    payload: EventPayload

    def __post_init__(self) -> None:
        expected = PAYLOAD_TYPES[self.type]
        if not isinstance(self.payload, expected):
            raise TypeError(
                f"{self.type} expects a {expected.__name__} payload, got {type(self.payload).__name__}."
            )


@dataclass(frozen=True)
class EventContext:
    session_id: str
    sequence: int


def _now_ms() -> int:
    return int(time.time() * 1000)


def _stamp(ctx: EventContext, event_type: EventType, payload: EventPayload) -> GameEvent:
    return GameEvent(
        id=str(uuid.uuid4()),
        session_id=ctx.session_id,
        sequence=ctx.sequence,
        timestamp=_now_ms(),
        type=event_type,
        payload=payload,
    )


# Generators -----------------------------------------------------------------


def create_game_started_event(ctx: EventContext, player_count: int, target_score: int, dealer: int) -> GameEvent:
    return _stamp(ctx, EventType.GAME_STARTED, GameStarted(player_count, target_score, dealer))


def create_player_joined_event(
    ctx: EventContext,
    player_id: str,
    player_index: int,
    nickname: str,
    team: Optional[int] = None,
) -> GameEvent:
    return _stamp(ctx, EventType.PLAYER_JOINED, PlayerJoined(player_id, player_index, nickname, team))


def create_player_left_event(ctx: EventContext, player_index: int) -> GameEvent:
    return _stamp(ctx, EventType.PLAYER_LEFT, PlayerLeft(player_index))


def create_player_reconnected_event(ctx: EventContext, player_index: int) -> GameEvent:
    return _stamp(ctx, EventType.PLAYER_RECONNECTED, PlayerReconnected(player_index))


def create_cards_dealt_event(
    ctx: EventContext,
    hands: Mapping[int, Sequence[AnyCard]],
    dabb: Sequence[AnyCard],
) -> GameEvent:
    frozen_hands = {index: tuple(cards) for index, cards in hands.items()}
    return _stamp(ctx, EventType.CARDS_DEALT, CardsDealt(frozen_hands, tuple(dabb)))


def create_bid_placed_event(ctx: EventContext, player_index: int, amount: int) -> GameEvent:
    return _stamp(ctx, EventType.BID_PLACED, BidPlaced(player_index, amount))


def create_player_passed_event(ctx: EventContext, player_index: int) -> GameEvent:
    return _stamp(ctx, EventType.PLAYER_PASSED, PlayerPassed(player_index))


def create_bidding_won_event(ctx: EventContext, player_index: int, winning_bid: int) -> GameEvent:
    return _stamp(ctx, EventType.BIDDING_WON, BiddingWon(player_index, winning_bid))


def create_dabb_taken_event(ctx: EventContext, player_index: int, dabb_cards: Sequence[AnyCard]) -> GameEvent:
    return _stamp(ctx, EventType.DABB_TAKEN, DabbTaken(player_index, tuple(dabb_cards)))


def create_cards_discarded_event(
    ctx: EventContext,
    player_index: int,
    discarded_cards: Sequence[Union[CardId, HiddenCard]],
) -> GameEvent:
    return _stamp(ctx, EventType.CARDS_DISCARDED, CardsDiscarded(player_index, tuple(discarded_cards)))


def create_going_out_event(ctx: EventContext, player_index: int, suit: Suit) -> GameEvent:
    return _stamp(ctx, EventType.GOING_OUT, GoingOut(player_index, suit))


def create_trump_declared_event(ctx: EventContext, player_index: int, suit: Suit) -> GameEvent:
    return _stamp(ctx, EventType.TRUMP_DECLARED, TrumpDeclared(player_index, suit))


def create_melds_declared_event(
    ctx: EventContext,
    player_index: int,
    melds: Sequence[Meld],
    total_points: Optional[int] = None,
) -> GameEvent:
    if total_points is None:
        total_points = calculate_meld_points(melds)
    return _stamp(ctx, EventType.MELDS_DECLARED, MeldsDeclared(player_index, tuple(melds), total_points))


def create_melding_complete_event(ctx: EventContext, meld_scores: Mapping[int, int]) -> GameEvent:
    return _stamp(ctx, EventType.MELDING_COMPLETE, MeldingComplete(dict(meld_scores)))


def create_card_played_event(ctx: EventContext, player_index: int, card: Card) -> GameEvent:
    return _stamp(ctx, EventType.CARD_PLAYED, CardPlayed(player_index, card))


def create_trick_won_event(ctx: EventContext, winner_index: int, cards: Sequence[Card], points: int) -> GameEvent:
    return _stamp(ctx, EventType.TRICK_WON, TrickWon(winner_index, tuple(cards), points))


def create_round_scored_event(
    ctx: EventContext,
    scores: Mapping[Side, RoundScore],
    total_scores: Mapping[Side, int],
) -> GameEvent:
    return _stamp(ctx, EventType.ROUND_SCORED, RoundScored(dict(scores), dict(total_scores)))


def create_game_finished_event(ctx: EventContext, winner: Side, final_scores: Mapping[Side, int]) -> GameEvent:
    return _stamp(ctx, EventType.GAME_FINISHED, GameFinished(winner, dict(final_scores)))


def create_new_round_started_event(ctx: EventContext, round: int, dealer: int) -> GameEvent:
    return _stamp(ctx, EventType.NEW_ROUND_STARTED, NewRoundStarted(round, dealer))


def create_game_terminated_event(ctx: EventContext, terminated_by: int, reason: str = "player_exit") -> GameEvent:
    return _stamp(ctx, EventType.GAME_TERMINATED, GameTerminated(terminated_by, reason))
