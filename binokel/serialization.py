"""Event (de)serialization to JSON-compatible dicts.

The envelope keeps the ``{id, sessionId, sequence, timestamp, type, payload}`` shape
so any transport can store or forward events verbatim.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping

from . import events as ev
from .cards import HIDDEN_CARD_ID, HiddenCard, Suit, deserialize_card, serialize_card
from .melds import Meld, MeldType
from .players import Side, parse_side, side_key


def _encode_cards(cards: Iterable) -> List[dict]:
    return [serialize_card(card) for card in cards]


def _decode_cards(items: Iterable[Mapping]) -> tuple:
    return tuple(deserialize_card(item) for item in items)


def _encode_meld(meld: Meld) -> dict:
    return {
        "type": meld.type.value,
        "cards": list(meld.cards),
        "points": meld.points,
        "suit": meld.suit.value if meld.suit is not None else None,
    }


def _decode_meld(payload: Mapping) -> Meld:
    suit = payload.get("suit")
    return Meld(
        type=MeldType(payload["type"]),
        cards=tuple(payload["cards"]),
        points=int(payload["points"]),
        suit=Suit(suit) if suit else None,
    )


def _encode_sides(values: Mapping[Side, Any], encode: Callable[[Any], Any] = lambda v: v) -> dict:
    return {side_key(side): encode(value) for side, value in values.items()}


def _decode_sides(values: Mapping[str, Any], decode: Callable[[Any], Any] = int) -> Dict[Side, Any]:
    return {parse_side(key): decode(value) for key, value in values.items()}


def _encode_round_score(score: ev.RoundScore) -> dict:
    return {"melds": score.melds, "tricks": score.tricks, "total": score.total, "bidMet": score.bid_met}


def _decode_round_score(payload: Mapping) -> ev.RoundScore:
    return ev.RoundScore(
        melds=int(payload["melds"]),
        tricks=int(payload["tricks"]),
        total=int(payload["total"]),
        bid_met=bool(payload["bidMet"]),
    )


def _encode_discard(card: object) -> Any:
    return serialize_card(card) if isinstance(card, HiddenCard) else card


def _decode_discard(item: Any) -> Any:
    if isinstance(item, Mapping) or item == HIDDEN_CARD_ID:
        return HiddenCard()
    return str(item)


_ENCODERS: Dict[ev.EventType, Callable[[Any], dict]] = {
    ev.EventType.GAME_STARTED: lambda p: {
        "playerCount": p.player_count,
        "targetScore": p.target_score,
        "dealer": p.dealer,
    },
    ev.EventType.PLAYER_JOINED: lambda p: {
        "playerId": p.player_id,
        "playerIndex": p.player_index,
        "nickname": p.nickname,
        "team": p.team,
    },
    ev.EventType.PLAYER_LEFT: lambda p: {"playerIndex": p.player_index},
    ev.EventType.PLAYER_RECONNECTED: lambda p: {"playerIndex": p.player_index},
    ev.EventType.CARDS_DEALT: lambda p: {
        "hands": {str(index): _encode_cards(cards) for index, cards in p.hands.items()},
        "dabb": _encode_cards(p.dabb),
    },
    ev.EventType.BID_PLACED: lambda p: {"playerIndex": p.player_index, "amount": p.amount},
    ev.EventType.PLAYER_PASSED: lambda p: {"playerIndex": p.player_index},
    ev.EventType.BIDDING_WON: lambda p: {"playerIndex": p.player_index, "winningBid": p.winning_bid},
    ev.EventType.DABB_TAKEN: lambda p: {"playerIndex": p.player_index, "dabbCards": _encode_cards(p.dabb_cards)},
    ev.EventType.CARDS_DISCARDED: lambda p: {
        "playerIndex": p.player_index,
        "discardedCards": [_encode_discard(card) for card in p.discarded_cards],
    },
    ev.EventType.GOING_OUT: lambda p: {"playerIndex": p.player_index, "suit": p.suit.value},
    ev.EventType.TRUMP_DECLARED: lambda p: {"playerIndex": p.player_index, "suit": p.suit.value},
    ev.EventType.MELDS_DECLARED: lambda p: {
        "playerIndex": p.player_index,
        "melds": [_encode_meld(meld) for meld in p.melds],
        "totalPoints": p.total_points,
    },
    ev.EventType.MELDING_COMPLETE: lambda p: {
        "meldScores": {str(index): score for index, score in p.meld_scores.items()},
    },
    ev.EventType.CARD_PLAYED: lambda p: {"playerIndex": p.player_index, "card": serialize_card(p.card)},
    ev.EventType.TRICK_WON: lambda p: {
        "winnerIndex": p.winner_index,
        "cards": _encode_cards(p.cards),
        "points": p.points,
    },
    ev.EventType.ROUND_SCORED: lambda p: {
        "scores": _encode_sides(p.scores, _encode_round_score),
        "totalScores": _encode_sides(p.total_scores),
    },
    ev.EventType.GAME_FINISHED: lambda p: {
        "winner": side_key(p.winner),
        "finalScores": _encode_sides(p.final_scores),
    },
    ev.EventType.NEW_ROUND_STARTED: lambda p: {"round": p.round, "dealer": p.dealer},
    ev.EventType.GAME_TERMINATED: lambda p: {"terminatedBy": p.terminated_by, "reason": p.reason},
}

_DECODERS: Dict[ev.EventType, Callable[[Mapping], Any]] = {
    ev.EventType.GAME_STARTED: lambda d: ev.GameStarted(
        int(d["playerCount"]), int(d["targetScore"]), int(d["dealer"])
    ),
    ev.EventType.PLAYER_JOINED: lambda d: ev.PlayerJoined(
        str(d["playerId"]), int(d["playerIndex"]), str(d["nickname"]), d.get("team")
    ),
    ev.EventType.PLAYER_LEFT: lambda d: ev.PlayerLeft(int(d["playerIndex"])),
    ev.EventType.PLAYER_RECONNECTED: lambda d: ev.PlayerReconnected(int(d["playerIndex"])),
    ev.EventType.CARDS_DEALT: lambda d: ev.CardsDealt(
        {int(index): _decode_cards(cards) for index, cards in d["hands"].items()},
        _decode_cards(d["dabb"]),
    ),
    ev.EventType.BID_PLACED: lambda d: ev.BidPlaced(int(d["playerIndex"]), int(d["amount"])),
    ev.EventType.PLAYER_PASSED: lambda d: ev.PlayerPassed(int(d["playerIndex"])),
    ev.EventType.BIDDING_WON: lambda d: ev.BiddingWon(int(d["playerIndex"]), int(d["winningBid"])),
    ev.EventType.DABB_TAKEN: lambda d: ev.DabbTaken(int(d["playerIndex"]), _decode_cards(d["dabbCards"])),
    ev.EventType.CARDS_DISCARDED: lambda d: ev.CardsDiscarded(
        int(d["playerIndex"]), tuple(_decode_discard(item) for item in d["discardedCards"])
    ),
    ev.EventType.GOING_OUT: lambda d: ev.GoingOut(int(d["playerIndex"]), Suit(d["suit"])),
    ev.EventType.TRUMP_DECLARED: lambda d: ev.TrumpDeclared(int(d["playerIndex"]), Suit(d["suit"])),
    ev.EventType.MELDS_DECLARED: lambda d: ev.MeldsDeclared(
        int(d["playerIndex"]), tuple(_decode_meld(meld) for meld in d["melds"]), int(d["totalPoints"])
    ),
    ev.EventType.MELDING_COMPLETE: lambda d: ev.MeldingComplete(
        {int(index): int(score) for index, score in d["meldScores"].items()}
    ),
    ev.EventType.CARD_PLAYED: lambda d: ev.CardPlayed(int(d["playerIndex"]), deserialize_card(d["card"])),
    ev.EventType.TRICK_WON: lambda d: ev.TrickWon(
        int(d["winnerIndex"]), _decode_cards(d["cards"]), int(d["points"])
    ),
    ev.EventType.ROUND_SCORED: lambda d: ev.RoundScored(
        _decode_sides(d["scores"], _decode_round_score), _decode_sides(d["totalScores"])
    ),
    ev.EventType.GAME_FINISHED: lambda d: ev.GameFinished(parse_side(d["winner"]), _decode_sides(d["finalScores"])),
    ev.EventType.NEW_ROUND_STARTED: lambda d: ev.NewRoundStarted(int(d["round"]), int(d["dealer"])),
    ev.EventType.GAME_TERMINATED: lambda d: ev.GameTerminated(int(d["terminatedBy"]), str(d.get("reason", "player_exit"))),
}

ev.ensure_exhaustive(_ENCODERS, "serialization encoders")
ev.ensure_exhaustive(_DECODERS, "serialization decoders")


def event_to_dict(event: ev.GameEvent) -> dict:
    return {
        "id": event.id,
        "sessionId": event.session_id,
        "sequence": event.sequence,
        "timestamp": event.timestamp,
        "type": event.type.value,
        "payload": _ENCODERS[event.type](event.payload),
    }


def event_from_dict(payload: Mapping[str, Any]) -> ev.GameEvent:
    event_type = ev.EventType(payload["type"])
    return ev.GameEvent(
        id=str(payload["id"]),
        session_id=str(payload["sessionId"]),
        sequence=int(payload["sequence"]),
        timestamp=int(payload["timestamp"]),
        type=event_type,
        payload=_DECODERS[event_type](payload["payload"]),
    )


def events_to_dicts(events: Iterable[ev.GameEvent]) -> List[dict]:
    return [event_to_dict(event) for event in events]


def events_from_dicts(items: Iterable[Mapping[str, Any]]) -> List[ev.GameEvent]:
    return [event_from_dict(item) for item in items]
