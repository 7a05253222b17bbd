"""High-level game orchestration for Binokel.

``GameSession`` owns one session's append-only event log. Every action is checked
against the authoritative state first; a rejected action raises ``GameError`` and
never reaches the log.
"""

from __future__ import annotations

import logging
import uuid
from random import Random
from typing import Callable, Dict, List, Optional, Sequence

from . import events as ev
from .bidding import can_pass, get_bidding_winner, get_min_bid, is_bidding_complete, is_valid_bid
from .cards import Card, CardId, Suit
from .deck import create_deck, deal_cards, shuffle_deck
from .errors import ErrorCode, GameError
from .mechanics import calculate_trick_points, get_valid_plays
from .melds import InvalidMeld, Meld, calculate_meld_points, detect_melds, validate_melds
from .players import TEAMS, default_team, uses_teams
from .reducer import apply_event
from .rules_schema import DEFAULT_RULES, RuleSet
from .scoring import RoundResult, score_going_out, score_round
from .state import ACTIVE_PHASES, GamePhase, GameState, create_initial_state, players_to_act
from .views import filter_event_for_player, filter_events_for_player

logger = logging.getLogger(__name__)


class GameSession:
    """Validate actions and record them as events for a single game."""

    def __init__(
        self,
        player_count: int,
        *,
        session_id: Optional[str] = None,
        rules: RuleSet = DEFAULT_RULES,
        rng: Optional[Random] = None,
        seed: Optional[int] = None,
    ) -> None:
        if player_count not in rules.hand_sizes:
            raise ValueError(f"Unsupported player count: {player_count}")
        self.session_id = session_id or str(uuid.uuid4())
        self.player_count = player_count
        self.rules = rules
        self.rng = rng or Random(seed)
        self._events: List[ev.GameEvent] = []
        self._state = create_initial_state(player_count, rules.target_score)
        self._views: Dict[int, GameState] = {
            index: create_initial_state(player_count, rules.target_score) for index in range(player_count)
        }

    # Reads --------------------------------------------------------------

    @property
    def events(self) -> tuple:
        return tuple(self._events)

    @property
    def state(self) -> GameState:
        """Authoritative state; never hand this to a client."""
        return self._state

    def events_for(self, viewer: int) -> List[ev.GameEvent]:
        self._check_player(viewer)
        return filter_events_for_player(self._events, viewer)

    def state_for(self, viewer: int) -> GameState:
        """State folded from the viewer's filtered events."""
        self._check_player(viewer)
        return self._views[viewer]

    def players_to_act(self) -> List[int]:
        return players_to_act(self._state)

    def valid_plays(self, player_index: int) -> List[Card]:
        state = self._state
        if state.phase is not GamePhase.TRICKS or state.current_player != player_index:
            return []
        return get_valid_plays(self._real_hand(player_index), state.current_trick, state.trump)

    # Lobby --------------------------------------------------------------

    def join(self, nickname: str, *, player_id: Optional[str] = None, team: Optional[int] = None) -> int:
        if self._state.phase is not GamePhase.WAITING:
            raise GameError(ErrorCode.GAME_ALREADY_STARTED)
        taken = {player.player_index for player in self._state.players}
        free = [index for index in range(self.player_count) if index not in taken]
        if not free:
            raise GameError(ErrorCode.SESSION_FULL)
        if team is not None and (not uses_teams(self.player_count) or team not in TEAMS):
            raise GameError(ErrorCode.INVALID_TEAM, team=team, player_count=self.player_count)
        index = free[0]
        if team is None and uses_teams(self.player_count):
            team = default_team(index)
        self._emit(ev.create_player_joined_event, player_id or f"player-{index}", index, nickname, team)
        return index

    def leave(self, player_index: int) -> None:
        self._check_player(player_index)
        self._emit(ev.create_player_left_event, player_index)

    def reconnect(self, player_index: int) -> None:
        self._check_player(player_index)
        self._emit(ev.create_player_reconnected_event, player_index)

    def start(self, *, dealer: int = 0, deck: Optional[Sequence[Card]] = None) -> None:
        """Start the game; ``deck`` fixes the first deal instead of shuffling."""
        if self._state.phase is not GamePhase.WAITING:
            raise GameError(ErrorCode.GAME_ALREADY_STARTED)
        if len(self._state.players) < self.player_count:
            raise GameError(ErrorCode.NOT_ENOUGH_PLAYERS, need=self.player_count, have=len(self._state.players))
        self._emit(ev.create_game_started_event, self.player_count, self.rules.target_score, dealer)
        self._deal(deck)

    # Bidding ------------------------------------------------------------

    def place_bid(self, player_index: int, amount: int) -> None:
        state = self._require_phase(GamePhase.BIDDING, ErrorCode.NOT_IN_BIDDING_PHASE)
        if state.current_bidder != player_index:
            raise GameError(ErrorCode.NOT_YOUR_TURN_TO_BID)
        if not is_valid_bid(amount, state.current_bid, min_bid=self.rules.min_bid, increment=self.rules.bid_increment):
            minimum = get_min_bid(state.current_bid, min_bid=self.rules.min_bid, increment=self.rules.bid_increment)
            raise GameError(ErrorCode.INVALID_BID_AMOUNT, amount=amount, minimum=minimum)
        self._emit(ev.create_bid_placed_event, player_index, amount)

    def pass_bid(self, player_index: int) -> None:
        state = self._require_phase(GamePhase.BIDDING, ErrorCode.NOT_IN_BIDDING_PHASE)
        if state.current_bidder != player_index:
            raise GameError(ErrorCode.NOT_YOUR_TURN_TO_BID)
        if not can_pass(state.current_bid):
            raise GameError(ErrorCode.FIRST_BIDDER_MUST_BID)
        self._emit(ev.create_player_passed_event, player_index)

        state = self._state
        if not is_bidding_complete(self.player_count, state.passed_players):
            return
        winner = get_bidding_winner(self.player_count, state.passed_players)
        if winner is None:
            logger.info("session %s: everyone passed, re-dealing", self.session_id)
            self._deal()
            return
        self._emit(ev.create_bidding_won_event, winner, state.current_bid or self.rules.min_bid)

    # Dabb ---------------------------------------------------------------

    def take_dabb(self, player_index: int) -> None:
        state = self._require_bid_winner(player_index, ErrorCode.ONLY_BID_WINNER_CAN_TAKE_DABB)
        if not state.dabb:
            raise GameError(ErrorCode.DABB_ALREADY_TAKEN)
        self._emit(ev.create_dabb_taken_event, player_index, state.dabb)

    def discard(self, player_index: int, card_ids: Sequence[CardId]) -> None:
        state = self._require_bid_winner(player_index, ErrorCode.ONLY_BID_WINNER_CAN_DISCARD)
        if state.dabb:
            raise GameError(ErrorCode.MUST_TAKE_DABB_FIRST)
        card_ids = list(card_ids)
        if len(card_ids) != self.rules.dabb_size or len(set(card_ids)) != len(card_ids):
            raise GameError(ErrorCode.MUST_DISCARD_EXACT_COUNT, expected=self.rules.dabb_size)
        held = {card.id for card in self._real_hand(player_index)}
        missing = [card_id for card_id in card_ids if card_id not in held]
        if missing:
            raise GameError(ErrorCode.CARD_NOT_IN_HAND, cards=missing)
        self._emit(ev.create_cards_discarded_event, player_index, card_ids)

    def go_out(self, player_index: int, suit: Suit) -> None:
        state = self._require_bid_winner(player_index, ErrorCode.ONLY_BID_WINNER_CAN_GO_OUT)
        if state.dabb:
            raise GameError(ErrorCode.MUST_TAKE_DABB_BEFORE_GOING_OUT)
        self._emit(ev.create_going_out_event, player_index, suit)

    # Trump & melds ------------------------------------------------------

    def declare_trump(self, player_index: int, suit: Suit) -> None:
        state = self._require_phase(GamePhase.TRUMP, ErrorCode.NOT_IN_TRUMP_PHASE)
        if state.bid_winner != player_index:
            raise GameError(ErrorCode.ONLY_BID_WINNER_CAN_DECLARE_TRUMP)
        self._emit(ev.create_trump_declared_event, player_index, suit)

    def declare_melds(self, player_index: int, melds: Optional[Sequence[Meld]] = None) -> None:
        """Declare melds; ``None`` declares everything detected in the hand."""
        state = self._require_phase(GamePhase.MELDING, ErrorCode.NOT_IN_MELDING_PHASE)
        self._check_player(player_index)
        if state.went_out and player_index == state.bid_winner:
            raise GameError(ErrorCode.CANNOT_MELD_WHEN_GOING_OUT)
        if player_index in state.declared_melds:
            raise GameError(ErrorCode.ALREADY_DECLARED_MELDS)

        hand = self._real_hand(player_index)
        base_points = self.rules.meld_base_points()
        trump_bonus = self.rules.meld_trump_bonus()
        if melds is None:
            melds = detect_melds(hand, state.trump, base_points=base_points, trump_bonus=trump_bonus)
        else:
            try:
                validate_melds(hand, state.trump, melds, base_points=base_points, trump_bonus=trump_bonus)
            except InvalidMeld as exc:
                raise GameError(ErrorCode.INVALID_MELD, str(exc)) from exc
        self._emit(ev.create_melds_declared_event, player_index, list(melds), calculate_meld_points(melds))

        state = self._state
        if players_to_act(state):
            return
        meld_scores = {
            index: calculate_meld_points(state.declared_melds.get(index, ()))
            for index in range(self.player_count)
        }
        self._emit(ev.create_melding_complete_event, meld_scores)
        if state.went_out:
            self._complete_round(score_going_out(self._state, rules=self.rules))

    # Tricks -------------------------------------------------------------

    def play_card(self, player_index: int, card_id: CardId) -> None:
        state = self._require_phase(GamePhase.TRICKS, ErrorCode.NOT_IN_TRICKS_PHASE)
        if state.current_player != player_index:
            raise GameError(ErrorCode.NOT_YOUR_TURN)
        hand = self._real_hand(player_index)
        card = next((candidate for candidate in hand if candidate.id == card_id), None)
        if card is None:
            raise GameError(ErrorCode.CARD_NOT_IN_HAND, cards=[card_id])
        if card not in get_valid_plays(hand, state.current_trick, state.trump):
            raise GameError(ErrorCode.INVALID_PLAY, card=card_id)
        self._emit(ev.create_card_played_event, player_index, card)

        trick = self._state.current_trick
        if not trick.is_complete(self.player_count):
            return
        winner = trick.resolve(self._state.trump).winner_index
        cards = trick.cards()
        self._emit(ev.create_trick_won_event, winner, cards, calculate_trick_points(cards))
        if self._state.all_hands_empty():
            self._complete_round(score_round(self._state, rules=self.rules))

    # Termination --------------------------------------------------------

    def terminate(self, player_index: int, reason: str = "player_exit") -> None:
        self._check_player(player_index)
        if self._state.phase not in ACTIVE_PHASES:
            raise GameError(ErrorCode.CANNOT_TERMINATE_IN_CURRENT_PHASE, phase=self._state.phase.value)
        self._emit(ev.create_game_terminated_event, player_index, reason)
        logger.info("session %s: terminated by player %d (%s)", self.session_id, player_index, reason)

    # Internals ----------------------------------------------------------

    def _emit(self, make: Callable[..., ev.GameEvent], *args) -> ev.GameEvent:
        ctx = ev.EventContext(self.session_id, len(self._events) + 1)
        event = make(ctx, *args)
        self._events.append(event)
        self._state = apply_event(self._state, event)
        for viewer, view in self._views.items():
            self._views[viewer] = apply_event(view, filter_event_for_player(event, viewer))
        logger.debug("session %s: #%d %s", self.session_id, event.sequence, event.type.value)
        return event

    def _deal(self, deck: Optional[Sequence[Card]] = None) -> None:
        if deck is None:
            deck = shuffle_deck(create_deck(), rng=self.rng)
        hands, dabb = deal_cards(deck, self.player_count, hand_sizes=self.rules.hand_sizes)
        self._emit(ev.create_cards_dealt_event, dict(enumerate(hands)), dabb)

    def _complete_round(self, result: RoundResult) -> None:
        self._emit(ev.create_round_scored_event, result.scores, result.total_scores)
        logger.info(
            "session %s: round %d scored %s",
            self.session_id,
            self._state.round,
            {str(side): total for side, total in result.total_scores.items()},
        )
        if result.winner is not None:
            self._emit(ev.create_game_finished_event, result.winner, result.total_scores)
            logger.info("session %s: game won by %s", self.session_id, result.winner)
            return
        state = self._state
        self._emit(ev.create_new_round_started_event, state.round + 1, (state.dealer + 1) % self.player_count)
        self._deal()

    def _real_hand(self, player_index: int) -> List[Card]:
        return [card for card in self._state.hand(player_index) if isinstance(card, Card)]

    def _check_player(self, player_index: int) -> None:
        if not 0 <= player_index < self.player_count:
            raise GameError(ErrorCode.INVALID_PLAYER, player=player_index)

    def _require_phase(self, phase: GamePhase, code: ErrorCode) -> GameState:
        if self._state.phase is not phase:
            raise GameError(code, phase=self._state.phase.value)
        return self._state

    def _require_bid_winner(self, player_index: int, code: ErrorCode) -> GameState:
        state = self._require_phase(GamePhase.DABB, ErrorCode.NOT_IN_DABB_PHASE)
        if state.bid_winner != player_index:
            raise GameError(code)
        return state
