"""Per-viewer redaction of the event log.

Hidden information lives in three event types: the deal, the dabb pick-up and the
discard. Everything else is public and passes through unchanged.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, Iterable, List

from .cards import hide_cards
from .events import CardsDealt, CardsDiscarded, DabbTaken, EventType, GameEvent
from .reducer import apply_events
from .state import GameState, create_initial_state


def _redact_deal(payload: CardsDealt, viewer: int) -> CardsDealt:
    hands = {
        index: tuple(cards) if index == viewer else hide_cards(cards)
        for index, cards in payload.hands.items()
    }
    return replace(payload, hands=hands, dabb=hide_cards(payload.dabb))


def _redact_dabb(payload: DabbTaken, viewer: int) -> DabbTaken:
    if payload.player_index == viewer:
        return payload
    return replace(payload, dabb_cards=hide_cards(payload.dabb_cards))


def _redact_discard(payload: CardsDiscarded, viewer: int) -> CardsDiscarded:
    if payload.player_index == viewer:
        return payload
    return replace(payload, discarded_cards=hide_cards(payload.discarded_cards))


_REDACTORS: Dict[EventType, Callable] = {
    EventType.CARDS_DEALT: _redact_deal,
    EventType.DABB_TAKEN: _redact_dabb,
    EventType.CARDS_DISCARDED: _redact_discard,
}


def filter_event_for_player(event: GameEvent, viewer: int) -> GameEvent:
    redact = _REDACTORS.get(event.type)
    if redact is None:
        return event
    return replace(event, payload=redact(event.payload, viewer))


def filter_events_for_player(events: Iterable[GameEvent], viewer: int) -> List[GameEvent]:
    return [filter_event_for_player(event, viewer) for event in events]


def state_for_player(events: Iterable[GameEvent], viewer: int, player_count: int = 4) -> GameState:
    """Fold only what ``viewer`` is allowed to see."""
    return apply_events(filter_events_for_player(events, viewer), create_initial_state(player_count))
