"""Random baseline bot."""

from __future__ import annotations

import random
from typing import Optional, Sequence

from binokel.actions import AIAction, AIDecisionContext, BidAction, DeclareTrumpAction, PassAction, PlayCardAction
from binokel.bidding import can_pass
from binokel.cards import Card, Suit

from .base import BotStrategy, discard_count, minimum_bid, own_hand, valid_plays


class RandomBot(BotStrategy):
    name = "Random"

    def __init__(self, seed: Optional[int] = None, *, bid_probability: float = 0.4) -> None:
        self._rng = random.Random(seed)
        self.bid_probability = bid_probability

    def offer_bid(self, context: AIDecisionContext) -> AIAction:
        current = context.game_state.current_bid
        if can_pass(current) and self._rng.random() >= self.bid_probability:
            return PassAction()
        return BidAction(minimum_bid(context))

    def return_cards(self, context: AIDecisionContext) -> Sequence[Card]:
        return self._rng.sample(own_hand(context), discard_count(context))

    def choose_trump(self, context: AIDecisionContext) -> AIAction:
        return DeclareTrumpAction(self._rng.choice(list(Suit)))

    def play_card(self, context: AIDecisionContext) -> AIAction:
        legal = valid_plays(context)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        return PlayCardAction(self._rng.choice(legal).id)
