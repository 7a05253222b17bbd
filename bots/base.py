"""Common bot strategy interfaces."""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence

from binokel.actions import (
    AIAction,
    AIDecisionContext,
    BidAction,
    DeclareMeldsAction,
    DeclareTrumpAction,
    DiscardAction,
    PassAction,
    PlayCardAction,
    TakeDabbAction,
)
from binokel.bidding import can_pass, get_min_bid
from binokel.cards import Card, Suit
from binokel.mechanics import get_valid_plays
from binokel.melds import detect_melds
from binokel.state import GamePhase


def own_hand(context: AIDecisionContext) -> List[Card]:
    return [card for card in context.game_state.hand(context.player_index) if isinstance(card, Card)]


def discard_count(context: AIDecisionContext) -> int:
    state = context.game_state
    return max(0, len(own_hand(context)) - context.rules.hand_size(state.player_count))


def minimum_bid(context: AIDecisionContext) -> int:
    rules = context.rules
    return get_min_bid(context.game_state.current_bid, min_bid=rules.min_bid, increment=rules.bid_increment)


def valid_plays(context: AIDecisionContext) -> List[Card]:
    state = context.game_state
    return get_valid_plays(own_hand(context), state.current_trick, state.trump)


class BotStrategy:
    """Base class for bot policies; override the per-phase hooks."""

    name: str = "BaseBot"

    def decide(self, context: AIDecisionContext) -> AIAction:
        hooks: Dict[GamePhase, Callable[[AIDecisionContext], AIAction]] = {
            GamePhase.BIDDING: self.offer_bid,
            GamePhase.DABB: self.handle_dabb,
            GamePhase.TRUMP: self.choose_trump,
            GamePhase.MELDING: self.declare_melds,
            GamePhase.TRICKS: self.play_card,
        }
        phase = context.game_state.phase
        hook = hooks.get(phase)
        if hook is None:
            raise RuntimeError(f"Bot cannot act in phase {phase} (player {context.player_index}).")
        return hook(context)

    def offer_bid(self, context: AIDecisionContext) -> AIAction:
        current = context.game_state.current_bid
        if can_pass(current):
            return PassAction()
        return BidAction(minimum_bid(context))

    def handle_dabb(self, context: AIDecisionContext) -> AIAction:
        if context.game_state.dabb:
            return TakeDabbAction()
        return DiscardAction(tuple(card.id for card in self.return_cards(context)))

    def return_cards(self, context: AIDecisionContext) -> Sequence[Card]:
        """Return the cards to lay away after taking the dabb."""
        hand = own_hand(context)
        count = discard_count(context)
        return hand[len(hand) - count:]

    def choose_trump(self, context: AIDecisionContext) -> AIAction:
        hand = own_hand(context)
        suit = hand[0].suit if hand else Suit.HERZ
        return DeclareTrumpAction(suit)

    def declare_melds(self, context: AIDecisionContext) -> AIAction:
        return DeclareMeldsAction(tuple(detect_melds(own_hand(context), context.game_state.trump)))

    def play_card(self, context: AIDecisionContext) -> AIAction:
        legal = valid_plays(context)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        return PlayCardAction(legal[0].id)
