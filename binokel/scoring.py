"""Round scoring for Binokel."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from .cards import Card
from .events import RoundScore
from .mechanics import calculate_trick_points
from .melds import calculate_meld_points
from .players import PlayerSide, Side, all_sides, members_of
from .rules_schema import DEFAULT_RULES, RuleSet
from .state import GameState


class ScoringError(ValueError):
    """Raised when a round cannot be scored from the given state."""


@dataclass(frozen=True)
class RoundResult:
    scores: Dict[Side, RoundScore]
    total_scores: Dict[Side, int]
    winner: Optional[Side]


def round_trick_points(points: int) -> int:
    """Round to the nearest ten, fives round up."""
    return (points + 5) // 10 * 10


def settle_bid(total: int, bid: int, *, multiplier: int = 2) -> Tuple[int, bool]:
    """Return (score, bid_met) for the bid-winning side.

    A side that misses its bid scores ``-multiplier * bid`` whatever it made.
    """
    if total >= bid:
        return total, True
    return -multiplier * bid, False


def player_trick_points(state: GameState, player_index: int, *, rules: RuleSet = DEFAULT_RULES) -> int:
    cards = [card for trick in state.tricks_taken.get(player_index, ()) for card in trick]
    if player_index == state.bid_winner and rules.scoring.dabb_counts_for_bid_winner:
        cards.extend(card for card in state.discarded if isinstance(card, Card))
    points = calculate_trick_points(cards)
    if rules.scoring.trick_rounding == "nearest_ten":
        points = round_trick_points(points)
    return points


def player_meld_points(state: GameState, player_index: int) -> int:
    return calculate_meld_points(state.declared_melds.get(player_index, ()))


def _require_bid_winner(state: GameState) -> int:
    if state.bid_winner is None:
        raise ScoringError("Round has no bid winner.")
    return state.bid_winner


def _seat(side: Side) -> int:
    return side.index if isinstance(side, PlayerSide) else side.team


def find_winner(total_scores: Mapping[Side, int], target_score: int) -> Optional[Side]:
    """Highest total at or above the target; ties go to the earliest seat."""
    best: Optional[Side] = None
    for side in sorted(total_scores, key=_seat):
        score = total_scores[side]
        if score < target_score:
            continue
        if best is None or score > total_scores[best]:
            best = side
    return best


def _accumulate(state: GameState, scores: Dict[Side, RoundScore]) -> RoundResult:
    totals = {side: state.total_scores.get(side, 0) + scores[side].total for side in scores}
    return RoundResult(scores=scores, total_scores=totals, winner=find_winner(totals, state.target_score))


def score_round(state: GameState, *, rules: RuleSet = DEFAULT_RULES) -> RoundResult:
    """Score a round whose tricks have all been played."""
    bid_winner = _require_bid_winner(state)
    bid_side = state.side_of(bid_winner)
    scores: Dict[Side, RoundScore] = {}
    for side in all_sides(state.player_count):
        members = members_of(side, state.player_count, state.players)
        melds = sum(player_meld_points(state, index) for index in members)
        tricks = sum(player_trick_points(state, index, rules=rules) for index in members)
        total, bid_met = melds + tricks, True
        if side == bid_side:
            total, bid_met = settle_bid(total, state.current_bid, multiplier=rules.scoring.failed_bid_multiplier)
        scores[side] = RoundScore(melds=melds, tricks=tricks, total=total, bid_met=bid_met)
    return _accumulate(state, scores)


def score_going_out(state: GameState, *, rules: RuleSet = DEFAULT_RULES) -> RoundResult:
    """The bid winner's side loses the bid; every other side gets melds plus the bonus."""
    bid_winner = _require_bid_winner(state)
    bid_side = state.side_of(bid_winner)
    scores: Dict[Side, RoundScore] = {}
    for side in all_sides(state.player_count):
        if side == bid_side:
            scores[side] = RoundScore(melds=0, tricks=0, total=-state.current_bid, bid_met=False)
            continue
        members = members_of(side, state.player_count, state.players)
        melds = sum(player_meld_points(state, index) for index in members)
        bonus = rules.scoring.going_out_bonus
        scores[side] = RoundScore(melds=melds, tricks=bonus, total=melds + bonus, bid_met=True)
    return _accumulate(state, scores)
