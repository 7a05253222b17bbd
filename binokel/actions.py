"""Player actions and the read-only context handed to AI players."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Tuple, Union

from .cards import CardId, Suit
from .melds import Meld
from .rules_schema import DEFAULT_RULES, RuleSet
from .state import GameState


@dataclass(frozen=True)
class BidAction:
    amount: int


@dataclass(frozen=True)
class PassAction:
    pass


@dataclass(frozen=True)
class TakeDabbAction:
    pass


@dataclass(frozen=True)
class DiscardAction:
    card_ids: Tuple[CardId, ...]


@dataclass(frozen=True)
class GoOutAction:
    suit: Suit


@dataclass(frozen=True)
class DeclareTrumpAction:
    suit: Suit


@dataclass(frozen=True)
class DeclareMeldsAction:
    melds: Tuple[Meld, ...]


@dataclass(frozen=True)
class PlayCardAction:
    card_id: CardId


AIAction = Union[
    BidAction,
    PassAction,
    TakeDabbAction,
    DiscardAction,
    GoOutAction,
    DeclareTrumpAction,
    DeclareMeldsAction,
    PlayCardAction,
]


@dataclass(frozen=True)
class AIDecisionContext:
    """What an AI player sees: its own filtered view of the game."""

    game_state: GameState
    player_index: int
    session_id: str
    rules: RuleSet = field(default_factory=lambda: DEFAULT_RULES)


class AIPlayer(Protocol):
    """Anything that can turn a decision context into one action."""

    name: str

    def decide(self, context: AIDecisionContext) -> AIAction:
        ...
