"""Convenience service layer for transports and AI drivers."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from . import actions as act
from .actions import AIAction, AIDecisionContext, AIPlayer
from .cards import Card, CardId, card_label
from .deck import sort_hand
from .errors import ErrorCode, GameError
from .events import GameEvent
from .game import GameSession
from .registry import AIRegistry
from .rules_schema import DEFAULT_RULES, RuleSet
from .state import GamePhase, GameState

logger = logging.getLogger(__name__)


@dataclass
class PlayerView:
    session_id: str
    player_index: int
    phase: str
    state: GameState
    hand: list[Card]
    hand_labels: list[str]
    valid_plays: list[CardId]
    players_to_act: list[int]
    events: list[GameEvent]


_DISPATCH: Dict[type, Callable[[GameSession, int, AIAction], None]] = {
    act.BidAction: lambda s, p, a: s.place_bid(p, a.amount),
    act.PassAction: lambda s, p, a: s.pass_bid(p),
    act.TakeDabbAction: lambda s, p, a: s.take_dabb(p),
    act.DiscardAction: lambda s, p, a: s.discard(p, a.card_ids),
    act.GoOutAction: lambda s, p, a: s.go_out(p, a.suit),
    act.DeclareTrumpAction: lambda s, p, a: s.declare_trump(p, a.suit),
    act.DeclareMeldsAction: lambda s, p, a: s.declare_melds(p, a.melds),
    act.PlayCardAction: lambda s, p, a: s.play_card(p, a.card_id),
}


class GameService:
    """Facade over independent game sessions."""

    def __init__(self, *, registry: Optional[AIRegistry] = None, rules: RuleSet = DEFAULT_RULES) -> None:
        self.registry = registry if registry is not None else AIRegistry()
        self.rules = rules
        self.sessions: Dict[str, GameSession] = {}

    # Session lifecycle -------------------------------------------------

    def create_session(
        self,
        player_count: int,
        *,
        session_id: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> GameSession:
        session = GameSession(player_count, session_id=session_id, rules=self.rules, seed=seed)
        self.sessions[session.session_id] = session
        self.registry.create(session.session_id)
        logger.info("session %s: created for %d players", session.session_id, player_count)
        return session

    def get_session(self, session_id: str) -> GameSession:
        session = self.sessions.get(session_id)
        if session is None:
            raise GameError(ErrorCode.SESSION_NOT_FOUND, session=session_id)
        return session

    def close_session(self, session_id: str) -> None:
        self.sessions.pop(session_id, None)
        self.registry.cleanup(session_id)

    def add_ai_player(self, session_id: str, player: AIPlayer, nickname: Optional[str] = None) -> int:
        session = self.get_session(session_id)
        index = session.join(nickname or player.name, player_id=f"ai-{len(session.state.players)}")
        self.registry.register(session_id, index, player)
        return index

    # Actions -----------------------------------------------------------

    def perform_action(self, session_id: str, player_index: int, action: AIAction) -> None:
        session = self.get_session(session_id)
        handler = _DISPATCH.get(type(action))
        if handler is None:
            raise GameError(ErrorCode.UNKNOWN_ACTION, action=type(action).__name__)
        handler(session, player_index, action)

    def run_ai_turns(
        self,
        session_id: str,
        *,
        max_actions: Optional[int] = None,
        deadline: Optional[float] = None,
    ) -> int:
        """Let AI seats act until a human is to move or the game stops.

        ``deadline`` is a ``time.monotonic()`` value. Returns the number of actions taken.
        """
        session = self.get_session(session_id)
        taken = 0
        while True:
            seat = next((index for index in session.players_to_act() if self.registry.is_ai(session_id, index)), None)
            if seat is None:
                return taken
            if max_actions is not None and taken >= max_actions:
                raise RuntimeError(
                    f"Action limit exceeded ({max_actions}). Phase: {session.state.phase}, Round: {session.state.round}"
                )
            if deadline is not None and time.monotonic() > deadline:
                raise TimeoutError(f"Timeout exceeded. Phase: {session.state.phase}, Round: {session.state.round}")
            player = self.registry.get(session_id, seat)
            assert player is not None
            context = AIDecisionContext(session.state_for(seat), seat, session_id, session.rules)
            action = player.decide(context)
            try:
                self.perform_action(session_id, seat, action)
            except GameError as exc:
                logger.warning("session %s: %s (seat %d) chose a rejected action %r: %s", session_id, player.name, seat, action, exc)
                raise
            taken += 1

    # Views -------------------------------------------------------------

    def view_for(self, session_id: str, player_index: int) -> PlayerView:
        session = self.get_session(session_id)
        state = session.state_for(player_index)
        hand = sort_hand(card for card in state.hand(player_index) if isinstance(card, Card))
        return PlayerView(
            session_id=session_id,
            player_index=player_index,
            phase=state.phase.value,
            state=state,
            hand=hand,
            hand_labels=[card_label(card) for card in hand],
            valid_plays=[card.id for card in session.valid_plays(player_index)],
            players_to_act=session.players_to_act(),
            events=session.events_for(player_index),
        )

    def is_over(self, session_id: str) -> bool:
        return self.get_session(session_id).state.phase in (GamePhase.FINISHED, GamePhase.TERMINATED)
