"""Baseline greedy bot: meld-driven bidding and cheap trick play."""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, Tuple

from binokel.actions import (
    AIAction,
    AIDecisionContext,
    BidAction,
    DeclareTrumpAction,
    DiscardAction,
    GoOutAction,
    PassAction,
    PlayCardAction,
    TakeDabbAction,
)
from binokel.bidding import can_pass
from binokel.cards import CARD_POINTS, SUIT_ORDER, Card, Rank, Suit, card_beats, card_strength
from binokel.melds import calculate_meld_points, detect_melds
from binokel.trick import Trick, determine_trick_winner

from .base import BotStrategy, discard_count, minimum_bid, own_hand, valid_plays

# Rough trick points a hand brings on top of its melds.
TRICK_ESTIMATE = 50
GOING_OUT_MARGIN = 100


def best_trump(hand: Sequence[Card], rng: Optional[random.Random] = None) -> Tuple[Suit, int]:
    """Suit with the most meld points; ties broken by ``rng`` or suit order."""
    scored = [(suit, calculate_meld_points(detect_melds(hand, suit))) for suit in SUIT_ORDER]
    top = max(points for _, points in scored)
    candidates = [suit for suit, points in scored if points == top]
    suit = rng.choice(candidates) if rng is not None else candidates[0]
    return suit, top


def _cheapness(card: Card) -> Tuple[int, int]:
    return CARD_POINTS[card.rank], card_strength(card)


class GreedyBot(BotStrategy):
    name = "Greedy"

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)
        self._planned_trump: Optional[Suit] = None

    def offer_bid(self, context: AIDecisionContext) -> AIAction:
        current = context.game_state.current_bid
        minimum = minimum_bid(context)
        if not can_pass(current):
            return BidAction(minimum)

        _, meld_points = best_trump(own_hand(context))
        diff = meld_points + TRICK_ESTIMATE - minimum
        if diff >= 70:
            return BidAction(minimum)
        if diff <= -60:
            return PassAction()
        # Pass more often the further the bid runs past the estimate.
        pass_probability = min(0.9, ((70 - diff) / 130) ** 2 * 0.9)
        if self._rng.random() < pass_probability:
            return PassAction()
        return BidAction(minimum)

    def handle_dabb(self, context: AIDecisionContext) -> AIAction:
        state = context.game_state
        if state.dabb:
            return TakeDabbAction()
        hand = own_hand(context)
        trump, meld_points = best_trump(hand, self._rng)
        self._planned_trump = trump
        if meld_points + TRICK_ESTIMATE + GOING_OUT_MARGIN < state.current_bid:
            return GoOutAction(trump)
        return DiscardAction(tuple(card.id for card in self._discards(hand, trump, discard_count(context))))

    def _discards(self, hand: Sequence[Card], trump: Suit, count: int) -> List[Card]:
        meld_ids = {card_id for meld in detect_melds(hand, trump) for card_id in meld.cards}
        ranked = sorted(
            hand,
            key=lambda card: (card.id in meld_ids, card.suit is trump, CARD_POINTS[card.rank]),
        )
        return ranked[:count]

    def choose_trump(self, context: AIDecisionContext) -> AIAction:
        suit = self._planned_trump
        self._planned_trump = None
        if suit is None:
            suit, _ = best_trump(own_hand(context), self._rng)
        return DeclareTrumpAction(suit)

    def play_card(self, context: AIDecisionContext) -> AIAction:
        legal = valid_plays(context)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        if len(legal) == 1:
            return PlayCardAction(legal[0].id)
        state = context.game_state
        if state.current_trick.is_empty():
            return PlayCardAction(self._lead(legal, own_hand(context), state.trump).id)
        return PlayCardAction(self._follow(legal, state.current_trick, state.trump).id)

    def _lead(self, legal: Sequence[Card], hand: Sequence[Card], trump: Optional[Suit]) -> Card:
        lonely_aces = [
            card
            for card in legal
            if card.rank is Rank.ASS and all(other.rank is Rank.ASS for other in hand if other.suit is card.suit)
        ]
        if lonely_aces:
            return next((card for card in lonely_aces if card.suit is trump), lonely_aces[0])

        trumps = [card for card in hand if card.suit is trump]
        if len(trumps) > 3:
            candidates = [card for card in legal if card.suit is trump]
        else:
            candidates = [card for card in legal if card.suit is not trump]
        if not candidates:
            candidates = list(legal)
        return max(candidates, key=_cheapness)

    def _follow(self, legal: Sequence[Card], trick: Trick, trump: Optional[Suit]) -> Card:
        winning = trick.plays[determine_trick_winner(trick, trump)].card
        lead = trick.lead_suit
        assert lead is not None
        winners = [card for card in legal if card_beats(card, winning, lead, trump)]
        if winners:
            return min(winners, key=_cheapness)
        return min(legal, key=_cheapness)
