"""Human-readable export of a session's event log."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from . import events as ev
from .cards import SUIT_NAMES, card_label
from .melds import Meld
from .players import side_key

DIVIDER = "=" * 60

_MELD_NAMES = {
    "paar": "Paar",
    "familie": "Familie",
    "binokel": "Binokel",
    "doppel-binokel": "Doppel-Binokel",
    "vier-ass": "Vier Ass",
    "vier-koenig": "Vier König",
    "vier-ober": "Vier Ober",
    "vier-buabe": "Vier Buabe",
    "acht-ass": "Acht Ass",
    "acht-koenig": "Acht König",
    "acht-ober": "Acht Ober",
    "acht-buabe": "Acht Buabe",
}

_SECTIONS = {
    ev.EventType.CARDS_DEALT: "DEALING",
    ev.EventType.BID_PLACED: "BIDDING",
    ev.EventType.PLAYER_PASSED: "BIDDING",
    ev.EventType.BIDDING_WON: "BIDDING",
    ev.EventType.DABB_TAKEN: "DABB",
    ev.EventType.CARDS_DISCARDED: "DABB",
    ev.EventType.GOING_OUT: "DABB",
    ev.EventType.TRUMP_DECLARED: "TRUMP & MELDS",
    ev.EventType.MELDS_DECLARED: "TRUMP & MELDS",
    ev.EventType.MELDING_COMPLETE: "TRUMP & MELDS",
    ev.EventType.CARD_PLAYED: "TRICKS",
    ev.EventType.TRICK_WON: "TRICKS",
    ev.EventType.ROUND_SCORED: "SCORING",
    ev.EventType.GAME_FINISHED: "GAME END",
    ev.EventType.GAME_TERMINATED: "GAME END",
    ev.EventType.PLAYER_JOINED: "PLAYERS",
    ev.EventType.PLAYER_LEFT: "PLAYERS",
    ev.EventType.PLAYER_RECONNECTED: "PLAYERS",
}


def format_cards(cards: Iterable) -> str:
    return ", ".join(card_label(card) for card in cards)


def format_meld(meld: Meld) -> str:
    name = _MELD_NAMES.get(meld.type.value, meld.type.value)
    suit_part = f" in {SUIT_NAMES[meld.suit]}" if meld.suit is not None else ""
    return f"{name}{suit_part} ({meld.points} pts)"


class _Formatter:
    def __init__(self, nicknames: Mapping[int, str]) -> None:
        self.nicknames = nicknames

    def player(self, index: int) -> str:
        return f"{self.nicknames.get(index, f'Player {index}')} [{index}]"

    def lines(self, event: ev.GameEvent) -> List[str]:
        return _DETAILS[event.type](self, event.payload)


_Details = Callable[[_Formatter, object], List[str]]

_DETAILS: Dict[ev.EventType, _Details] = {
    ev.EventType.GAME_STARTED: lambda f, p: [f"{p.player_count} players, target score: {p.target_score}"],
    ev.EventType.PLAYER_JOINED: lambda f, p: [
        f"{p.nickname} joined as Player {p.player_index}" + (f" (Team {p.team})" if p.team is not None else "")
    ],
    ev.EventType.PLAYER_LEFT: lambda f, p: [f"{f.player(p.player_index)} left"],
    ev.EventType.PLAYER_RECONNECTED: lambda f, p: [f"{f.player(p.player_index)} reconnected"],
    ev.EventType.CARDS_DEALT: lambda f, p: [
        *(f"Player {index}: {format_cards(cards)}" for index, cards in sorted(p.hands.items())),
        f"Dabb: {format_cards(p.dabb)}",
    ],
    ev.EventType.BID_PLACED: lambda f, p: [f"{f.player(p.player_index)} bid {p.amount}"],
    ev.EventType.PLAYER_PASSED: lambda f, p: [f"{f.player(p.player_index)} passed"],
    ev.EventType.BIDDING_WON: lambda f, p: [f"{f.player(p.player_index)} won bidding with {p.winning_bid}"],
    ev.EventType.DABB_TAKEN: lambda f, p: [f"{f.player(p.player_index)} took dabb: {format_cards(p.dabb_cards)}"],
    ev.EventType.CARDS_DISCARDED: lambda f, p: [
        f"{f.player(p.player_index)} discarded: " + ", ".join(getattr(c, "id", c) for c in p.discarded_cards)
    ],
    ev.EventType.GOING_OUT: lambda f, p: [f"{f.player(p.player_index)} went out in {SUIT_NAMES[p.suit]}"],
    ev.EventType.TRUMP_DECLARED: lambda f, p: [f"{f.player(p.player_index)} declared {SUIT_NAMES[p.suit]} as trump"],
    ev.EventType.MELDS_DECLARED: lambda f, p: [
        f"{f.player(p.player_index)} declared melds ({p.total_points} points):",
        *(f"  {format_meld(meld)}" for meld in p.melds),
    ],
    ev.EventType.MELDING_COMPLETE: lambda f, p: [
        "All players have declared melds",
        *(f"  Player {index}: {score} points" for index, score in sorted(p.meld_scores.items())),
    ],
    ev.EventType.CARD_PLAYED: lambda f, p: [f"{f.player(p.player_index)} played {card_label(p.card)}"],
    ev.EventType.TRICK_WON: lambda f, p: [f"{f.player(p.winner_index)} won trick ({p.points} pts)"],
    ev.EventType.ROUND_SCORED: lambda f, p: [
        "Round scores:",
        *(
            f"  {side_key(side)}: melds={score.melds}, tricks={score.tricks}, total={score.total}"
            + ("" if score.bid_met else " (bid not met)")
            for side, score in p.scores.items()
        ),
    ],
    ev.EventType.GAME_FINISHED: lambda f, p: [
        f"Winner: {side_key(p.winner)}",
        "Final scores:",
        *(f"  {side_key(side)}: {score}" for side, score in p.final_scores.items()),
    ],
    ev.EventType.NEW_ROUND_STARTED: lambda f, p: [],
    ev.EventType.GAME_TERMINATED: lambda f, p: [f"Terminated by {f.player(p.terminated_by)} ({p.reason})"],
}

ev.ensure_exhaustive(_DETAILS, "export formatter")


def _format_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).strftime("%H:%M:%S.%f")[:-3]


def format_event(event: ev.GameEvent, nicknames: Optional[Mapping[int, str]] = None) -> str:
    formatter = _Formatter(nicknames or {})
    header = f"[{event.sequence:03d}] {_format_time(event.timestamp)} | {event.type.value}"
    return "\n".join([header, *(f"      {line}" for line in formatter.lines(event))])


def format_event_log(
    events: Sequence[ev.GameEvent],
    *,
    session_id: Optional[str] = None,
    terminated: bool = False,
) -> str:
    """Render the log grouped by round, with phase section headers."""
    nicknames = {
        event.payload.player_index: event.payload.nickname
        for event in events
        if event.type is ev.EventType.PLAYER_JOINED
    }
    lines = [DIVIDER, "BINOKEL GAME EVENT LOG", DIVIDER]
    if terminated:
        lines.extend(["SESSION TERMINATED AFTER EXPORT", ""])
    if session_id:
        lines.append(f"Session: {session_id}")
    lines.append(f"Total Events: {len(events)}")
    if nicknames:
        lines.extend(["", "PLAYERS:"])
        lines.extend(f"  [{index}] {name}" for index, name in sorted(nicknames.items()))

    section = ""
    for event in events:
        if event.type in (ev.EventType.GAME_STARTED, ev.EventType.NEW_ROUND_STARTED):
            payload = event.payload
            round_number = payload.round if event.type is ev.EventType.NEW_ROUND_STARTED else 1
            dealer = payload.dealer
            lines.extend(["", DIVIDER, f"ROUND {round_number} - Dealer: {nicknames.get(dealer, f'Player {dealer}')} [{dealer}]", DIVIDER])
            section = ""
        current = _SECTIONS.get(event.type)
        if current and current != section:
            section = current
            lines.extend(["", f"--- {section} ---"])
        lines.append(format_event(event, nicknames))

    lines.extend(["", DIVIDER, "END OF LOG", DIVIDER])
    return "\n".join(lines)
