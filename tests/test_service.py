import pytest

from binokel.actions import AIDecisionContext, BidAction, DiscardAction, PassAction, TakeDabbAction
from binokel.cards import Card
from binokel.deck import create_deck
from binokel.errors import ErrorCode, GameError
from binokel.registry import AIRegistry
from binokel.service import GameService
from binokel.state import GamePhase
from bots import GreedyBot, RandomBot


class ScriptedBot:
    name = "Scripted"

    def __init__(self, action):
        self.action = action
        self.contexts = []

    def decide(self, context: AIDecisionContext):
        self.contexts.append(context)
        return self.action


def test_registry_tracks_seats_per_session():
    registry = AIRegistry()
    registry.create("a")
    bot = RandomBot(seed=1)
    registry.register("a", 2, bot)
    registry.register("b", 0, GreedyBot(seed=1))

    assert "a" in registry and "b" in registry
    assert len(registry) == 2
    assert registry.get("a", 2) is bot
    assert registry.is_ai("a", 2)
    assert not registry.is_ai("a", 0)
    assert registry.seats("a") == [2]

    assert registry.unregister("a", 2) is bot
    assert registry.unregister("a", 2) is None
    assert registry.cleanup("b") == 1
    assert "b" not in registry
    assert registry.cleanup("missing") == 0


def test_unknown_session():
    service = GameService()
    with pytest.raises(GameError) as info:
        service.get_session("nope")
    assert info.value.code is ErrorCode.SESSION_NOT_FOUND


def test_perform_action_dispatches_to_the_session():
    service = GameService()
    session = service.create_session(2, session_id="svc")
    session.join("Anna")
    session.join("Bert")
    session.start(deck=create_deck())

    service.perform_action("svc", 1, BidAction(150))
    service.perform_action("svc", 0, PassAction())
    service.perform_action("svc", 1, TakeDabbAction())
    service.perform_action("svc", 1, DiscardAction(("bollen-buabe-0", "bollen-buabe-1", "bollen-ober-0", "bollen-ober-1")))
    assert session.state.phase is GamePhase.TRUMP

    with pytest.raises(GameError) as info:
        service.perform_action("svc", 1, object())
    assert info.value.code is ErrorCode.UNKNOWN_ACTION


def test_ai_turns_stop_at_a_human_seat():
    service = GameService()
    session = service.create_session(2, session_id="mixed", seed=3)
    bot = ScriptedBot(PassAction())
    assert service.add_ai_player("mixed", bot) == 0
    session.join("Human")
    session.start()

    # Seat 1 opens the bidding, so the bot has nothing to do yet.
    assert service.run_ai_turns("mixed") == 0

    service.perform_action("mixed", 1, BidAction(150))
    assert service.run_ai_turns("mixed") == 1
    assert session.state.phase is GamePhase.DABB
    assert session.players_to_act() == [1]

    context = bot.contexts[0]
    assert context.player_index == 0
    assert context.session_id == "mixed"
    assert not any(isinstance(card, Card) for card in context.game_state.hand(1))


def test_rejected_ai_action_propagates():
    service = GameService()
    session = service.create_session(2, session_id="bad")
    service.add_ai_player("bad", ScriptedBot(BidAction(151)))
    service.add_ai_player("bad", ScriptedBot(BidAction(151)))
    session.start()

    with pytest.raises(GameError) as info:
        service.run_ai_turns("bad")
    assert info.value.code is ErrorCode.INVALID_BID_AMOUNT


def test_action_limit():
    service = GameService()
    session = service.create_session(2, session_id="capped", seed=1)
    service.add_ai_player("capped", RandomBot(seed=1))
    service.add_ai_player("capped", RandomBot(seed=2))
    session.start()

    with pytest.raises(RuntimeError, match="Action limit exceeded"):
        service.run_ai_turns("capped", max_actions=3)


def test_view_for_player():
    service = GameService()
    session = service.create_session(2, session_id="view")
    session.join("Anna")
    session.join("Bert")
    session.start(deck=create_deck())

    view = service.view_for("view", 0)
    assert view.phase == "bidding"
    assert len(view.hand) == 18
    assert view.hand_labels[0] == "Kreuz Ass"
    assert view.valid_plays == []
    assert view.players_to_act == [1]
    assert not any(isinstance(card, Card) for card in view.state.hand(1))


def test_close_session_forgets_ai_players():
    service = GameService()
    session = service.create_session(2, session_id="closing")
    service.add_ai_player("closing", RandomBot(seed=1))
    assert service.registry.seats("closing") == [0]

    service.close_session("closing")
    assert "closing" not in service.registry
    assert "closing" not in service.sessions
    assert session.state.phase is GamePhase.WAITING
