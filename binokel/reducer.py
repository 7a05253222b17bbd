"""Event-sourcing core: fold game events into a ``GameState``."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from . import events as ev
from .bidding import get_first_bidder, get_next_bidder, is_bidding_complete
from .cards import AnyCard, Card, HiddenCard
from .players import Player, replace_player
from .state import GamePhase, GameState, create_initial_state, reset_for_new_round
from .trick import CompletedTrick, Trick


def _remove_cards(hand: Sequence[AnyCard], card_ids: Iterable[str]) -> Tuple[Tuple[AnyCard, ...], List[AnyCard]]:
    """Remove cards by id; unknown ids consume a hidden placeholder when the hand has one."""
    remaining = list(hand)
    removed: List[AnyCard] = []
    for card_id in card_ids:
        match = next((i for i, card in enumerate(remaining) if isinstance(card, Card) and card.id == card_id), None)
        if match is None:
            match = next((i for i, card in enumerate(remaining) if isinstance(card, HiddenCard)), None)
        if match is not None:
            removed.append(remaining.pop(match))
    return tuple(remaining), removed


def _with_hand(state: GameState, player_index: int, cards: Tuple[AnyCard, ...]) -> dict:
    hands = dict(state.hands)
    hands[player_index] = cards
    return hands


def _discard_ref(card: object) -> str:
    return card.id if isinstance(card, HiddenCard) else str(card)


# Handlers -------------------------------------------------------------------


def _game_started(state: GameState, payload: ev.GameStarted) -> GameState:
    fresh = create_initial_state(payload.player_count, payload.target_score)
    return replace(
        fresh,
        players=state.players,
        phase=GamePhase.DEALING,
        dealer=payload.dealer,
        round=1,
    )


def _player_joined(state: GameState, payload: ev.PlayerJoined) -> GameState:
    player = Player(
        player_index=payload.player_index,
        nickname=payload.nickname,
        player_id=payload.player_id,
        team=payload.team,
    )
    return replace(state, players=replace_player(state.players, player))


def _set_connected(state: GameState, player_index: int, connected: bool) -> GameState:
    player = state.player(player_index)
    if player is None:
        return state
    return replace(state, players=replace_player(state.players, replace(player, connected=connected)))


def _player_left(state: GameState, payload: ev.PlayerLeft) -> GameState:
    return _set_connected(state, payload.player_index, False)


def _player_reconnected(state: GameState, payload: ev.PlayerReconnected) -> GameState:
    return _set_connected(state, payload.player_index, True)


def _cards_dealt(state: GameState, payload: ev.CardsDealt) -> GameState:
    first = get_first_bidder(state.dealer, state.player_count)
    return replace(
        state,
        phase=GamePhase.BIDDING,
        hands={index: tuple(cards) for index, cards in payload.hands.items()},
        dabb=tuple(payload.dabb),
        current_bid=0,
        passed_players=frozenset(),
        current_bidder=first,
        first_bidder=first,
        dabb_card_ids=(),
    )


def _bid_placed(state: GameState, payload: ev.BidPlaced) -> GameState:
    return replace(
        state,
        current_bid=payload.amount,
        current_bidder=get_next_bidder(payload.player_index, state.player_count, state.passed_players),
    )


def _player_passed(state: GameState, payload: ev.PlayerPassed) -> GameState:
    passed = state.passed_players | {payload.player_index}
    if is_bidding_complete(state.player_count, passed):
        next_bidder = None
    else:
        next_bidder = get_next_bidder(payload.player_index, state.player_count, passed)
    return replace(state, passed_players=passed, current_bidder=next_bidder)


def _bidding_won(state: GameState, payload: ev.BiddingWon) -> GameState:
    return replace(
        state,
        phase=GamePhase.DABB,
        bid_winner=payload.player_index,
        current_bid=payload.winning_bid,
        current_bidder=None,
    )


def _dabb_taken(state: GameState, payload: ev.DabbTaken) -> GameState:
    hand = state.hand(payload.player_index) + tuple(payload.dabb_cards)
    return replace(
        state,
        hands=_with_hand(state, payload.player_index, hand),
        dabb=(),
        dabb_card_ids=tuple(card.id for card in payload.dabb_cards if isinstance(card, Card)),
    )


def _cards_discarded(state: GameState, payload: ev.CardsDiscarded) -> GameState:
    refs = [_discard_ref(card) for card in payload.discarded_cards]
    hand, removed = _remove_cards(state.hand(payload.player_index), refs)
    return replace(
        state,
        phase=GamePhase.TRUMP,
        hands=_with_hand(state, payload.player_index, hand),
        discarded=state.discarded + tuple(removed),
    )


def _going_out(state: GameState, payload: ev.GoingOut) -> GameState:
    return replace(state, phase=GamePhase.MELDING, trump=payload.suit, went_out=True, declared_melds={})


def _trump_declared(state: GameState, payload: ev.TrumpDeclared) -> GameState:
    return replace(state, phase=GamePhase.MELDING, trump=payload.suit, declared_melds={})


def _melds_declared(state: GameState, payload: ev.MeldsDeclared) -> GameState:
    declared = dict(state.declared_melds)
    declared[payload.player_index] = tuple(payload.melds)
    return replace(state, declared_melds=declared)


def _melding_complete(state: GameState, payload: ev.MeldingComplete) -> GameState:
    if state.went_out:
        return replace(state, phase=GamePhase.SCORING, current_player=None)
    return replace(
        state,
        phase=GamePhase.TRICKS,
        tricks_taken={index: () for index in range(state.player_count)},
        current_trick=Trick(),
        current_player=state.bid_winner,
    )


def _card_played(state: GameState, payload: ev.CardPlayed) -> GameState:
    hand, _ = _remove_cards(state.hand(payload.player_index), [payload.card.id])
    return replace(
        state,
        hands=_with_hand(state, payload.player_index, hand),
        current_trick=state.current_trick.add_play(payload.player_index, payload.card),
        current_player=(payload.player_index + 1) % state.player_count,
    )


def _trick_won(state: GameState, payload: ev.TrickWon) -> GameState:
    tricks = dict(state.tricks_taken)
    tricks[payload.winner_index] = tricks.get(payload.winner_index, ()) + (tuple(payload.cards),)
    completed = CompletedTrick(
        plays=state.current_trick.plays,
        winner_index=payload.winner_index,
        points=payload.points,
    )
    next_state = replace(
        state,
        tricks_taken=tricks,
        current_trick=Trick(),
        last_completed_trick=completed,
        current_player=payload.winner_index,
    )
    if next_state.all_hands_empty():
        next_state = replace(next_state, current_player=None)
    return next_state


def _round_scored(state: GameState, payload: ev.RoundScored) -> GameState:
    return replace(
        state,
        phase=GamePhase.SCORING,
        round_scores=dict(payload.scores),
        total_scores=dict(payload.total_scores),
    )


def _game_finished(state: GameState, payload: ev.GameFinished) -> GameState:
    return replace(
        state,
        phase=GamePhase.FINISHED,
        winner=payload.winner,
        total_scores=dict(payload.final_scores),
        current_player=None,
        current_bidder=None,
    )


def _new_round_started(state: GameState, payload: ev.NewRoundStarted) -> GameState:
    return replace(reset_for_new_round(state), round=payload.round, dealer=payload.dealer)


def _game_terminated(state: GameState, payload: ev.GameTerminated) -> GameState:
    return replace(
        state,
        phase=GamePhase.TERMINATED,
        terminated_by=payload.terminated_by,
        current_player=None,
        current_bidder=None,
    )


_HANDLERS: Dict[ev.EventType, Callable[[GameState, object], GameState]] = {
    ev.EventType.GAME_STARTED: _game_started,
    ev.EventType.PLAYER_JOINED: _player_joined,
    ev.EventType.PLAYER_LEFT: _player_left,
    ev.EventType.PLAYER_RECONNECTED: _player_reconnected,
    ev.EventType.CARDS_DEALT: _cards_dealt,
    ev.EventType.BID_PLACED: _bid_placed,
    ev.EventType.PLAYER_PASSED: _player_passed,
    ev.EventType.BIDDING_WON: _bidding_won,
    ev.EventType.DABB_TAKEN: _dabb_taken,
    ev.EventType.CARDS_DISCARDED: _cards_discarded,
    ev.EventType.GOING_OUT: _going_out,
    ev.EventType.TRUMP_DECLARED: _trump_declared,
    ev.EventType.MELDS_DECLARED: _melds_declared,
    ev.EventType.MELDING_COMPLETE: _melding_complete,
    ev.EventType.CARD_PLAYED: _card_played,
    ev.EventType.TRICK_WON: _trick_won,
    ev.EventType.ROUND_SCORED: _round_scored,
    ev.EventType.GAME_FINISHED: _game_finished,
    ev.EventType.NEW_ROUND_STARTED: _new_round_started,
    ev.EventType.GAME_TERMINATED: _game_terminated,
}

ev.ensure_exhaustive(_HANDLERS, "reducer")


def apply_event(state: GameState, event: ev.GameEvent) -> GameState:
    """Return the state after ``event``; the input state is left untouched."""
    if state.phase is GamePhase.TERMINATED:
        return state
    return _HANDLERS[event.type](state, event.payload)


def apply_events(events: Iterable[ev.GameEvent], initial_state: Optional[GameState] = None) -> GameState:
    state = initial_state if initial_state is not None else create_initial_state()
    for event in events:
        state = apply_event(state, event)
    return state
