import pytest

from binokel import events as ev
from binokel.cards import Card, Rank, Suit
from binokel.deck import create_deck, deal_cards
from binokel.players import PlayerSide
from binokel.reducer import apply_event, apply_events
from binokel.state import GamePhase, create_initial_state, players_to_act

DISCARDS = ["bollen-buabe-0", "bollen-buabe-1", "bollen-ober-0", "bollen-ober-1"]


class Recorder:
    def __init__(self, session_id="session-1"):
        self.session_id = session_id
        self.events = []

    def add(self, make, *args):
        event = make(ev.EventContext(self.session_id, len(self.events) + 1), *args)
        self.events.append(event)
        return event


def lobby(rec):
    rec.add(ev.create_player_joined_event, "a", 0, "Anna")
    rec.add(ev.create_player_joined_event, "b", 1, "Bert")
    rec.add(ev.create_game_started_event, 2, 1000, 0)
    hands, dabb = deal_cards(create_deck(), 2)
    rec.add(ev.create_cards_dealt_event, dict(enumerate(hands)), dabb)
    return dabb


def through_dabb(rec):
    dabb = lobby(rec)
    rec.add(ev.create_bid_placed_event, 1, 150)
    rec.add(ev.create_player_passed_event, 0)
    rec.add(ev.create_bidding_won_event, 1, 150)
    rec.add(ev.create_dabb_taken_event, 1, dabb)


def scripted_round():
    rec = Recorder()
    through_dabb(rec)
    rec.add(ev.create_cards_discarded_event, 1, DISCARDS)
    rec.add(ev.create_trump_declared_event, 1, Suit.HERZ)
    rec.add(ev.create_melds_declared_event, 0, [])
    rec.add(ev.create_melds_declared_event, 1, [])
    rec.add(ev.create_melding_complete_event, {0: 0, 1: 0})
    lead = Card(Suit.SCHIPPE, Rank.ASS)
    follow = Card(Suit.SCHIPPE, Rank.ZEHN)
    rec.add(ev.create_card_played_event, 1, lead)
    rec.add(ev.create_card_played_event, 0, follow)
    rec.add(ev.create_trick_won_event, 1, [lead, follow], 21)
    return rec.events


def state_after(events, count):
    return apply_events(events[:count])


def test_deal_starts_bidding_after_the_dealer():
    events = scripted_round()
    state = state_after(events, 4)

    assert state.phase is GamePhase.BIDDING
    assert state.player_count == 2
    assert state.current_bidder == 1
    assert state.first_bidder == 1
    assert sum(len(cards) for cards in state.hands.values()) + len(state.dabb) == 40


def test_bidding_sequence():
    events = scripted_round()

    after_bid = state_after(events, 5)
    assert after_bid.current_bid == 150
    assert after_bid.current_bidder == 0

    after_pass = state_after(events, 6)
    assert after_pass.passed_players == frozenset({0})
    assert after_pass.current_bidder is None

    won = state_after(events, 7)
    assert won.phase is GamePhase.DABB
    assert won.bid_winner == 1
    assert players_to_act(won) == [1]


def test_dabb_and_discard_move_cards():
    events = scripted_round()

    taken = state_after(events, 8)
    assert len(taken.hand(1)) == 22
    assert taken.dabb == ()
    assert taken.dabb_card_ids == ("bollen-10-0", "bollen-10-1", "bollen-ass-0", "bollen-ass-1")

    discarded = state_after(events, 9)
    assert discarded.phase is GamePhase.TRUMP
    assert len(discarded.hand(1)) == 18
    assert [card.id for card in discarded.discarded] == DISCARDS
    assert all(card.id not in DISCARDS for card in discarded.hand(1))


def test_trump_and_melding():
    events = scripted_round()

    melding = state_after(events, 10)
    assert melding.phase is GamePhase.MELDING
    assert melding.trump is Suit.HERZ
    assert players_to_act(melding) == [0, 1]

    tricks = state_after(events, 13)
    assert tricks.phase is GamePhase.TRICKS
    assert tricks.current_player == 1
    assert tricks.tricks_taken == {0: (), 1: ()}


def test_card_play_and_trick_resolution():
    events = scripted_round()

    mid_trick = state_after(events, 14)
    assert mid_trick.current_trick.lead_suit is Suit.SCHIPPE
    assert mid_trick.current_player == 0
    assert len(mid_trick.hand(1)) == 17

    done = apply_events(events)
    assert done.current_trick.is_empty()
    assert done.current_player == 1
    assert len(done.tricks_taken[1]) == 1
    assert done.last_completed_trick.winner_index == 1
    assert done.last_completed_trick.points == 21


def test_fold_is_deterministic():
    events = scripted_round()
    assert apply_events(events) == apply_events(events)


def test_fold_can_resume_from_any_prefix():
    events = scripted_round()
    full = apply_events(events)
    for split in range(len(events) + 1):
        assert apply_events(events[split:], apply_events(events[:split])) == full


def test_apply_event_leaves_input_state_alone():
    events = scripted_round()
    before = state_after(events, 7)
    hands = dict(before.hands)

    after = apply_event(before, events[7])

    assert before.hands == hands
    assert before.dabb != ()
    assert after is not before


def test_going_out_skips_tricks():
    rec = Recorder()
    through_dabb(rec)
    rec.add(ev.create_going_out_event, 1, Suit.HERZ)

    state = apply_events(rec.events)
    assert state.phase is GamePhase.MELDING
    assert state.went_out
    assert players_to_act(state) == [0]

    rec.add(ev.create_melds_declared_event, 0, [])
    rec.add(ev.create_melding_complete_event, {0: 0, 1: 0})
    assert apply_events(rec.events).phase is GamePhase.SCORING


def test_new_round_keeps_totals_and_clears_the_round():
    events = scripted_round()
    rec = Recorder()
    rec.events = list(events)
    totals = {PlayerSide(0): 30, PlayerSide(1): -300}
    rec.add(ev.create_round_scored_event, {}, totals)
    rec.add(ev.create_new_round_started_event, 2, 1)

    state = apply_events(rec.events)
    assert state.phase is GamePhase.DEALING
    assert state.round == 2
    assert state.dealer == 1
    assert state.hands == {}
    assert state.bid_winner is None
    assert state.trump is None
    assert state.total_scores == totals


def test_termination_is_absorbing():
    rec = Recorder()
    lobby(rec)
    rec.add(ev.create_game_terminated_event, 0)
    terminated = apply_events(rec.events)
    assert terminated.phase is GamePhase.TERMINATED
    assert terminated.terminated_by == 0

    rec.add(ev.create_bid_placed_event, 1, 150)
    assert apply_events(rec.events) == terminated


def test_game_finished_records_winner():
    rec = Recorder()
    lobby(rec)
    final = {PlayerSide(0): 1010, PlayerSide(1): 400}
    rec.add(ev.create_game_finished_event, PlayerSide(0), final)

    state = apply_events(rec.events)
    assert state.phase is GamePhase.FINISHED
    assert state.winner == PlayerSide(0)
    assert state.total_scores == final


def test_player_connection_events():
    rec = Recorder()
    lobby(rec)
    rec.add(ev.create_player_left_event, 1)
    assert not apply_events(rec.events).player(1).connected
    rec.add(ev.create_player_reconnected_event, 1)
    assert apply_events(rec.events).player(1).connected


def test_initial_state_scores_every_side():
    assert create_initial_state(3).total_scores == {PlayerSide(0): 0, PlayerSide(1): 0, PlayerSide(2): 0}


def test_payload_must_match_event_type():
    with pytest.raises(TypeError):
        ev.GameEvent(
            id="x",
            session_id="s",
            sequence=1,
            timestamp=0,
            type=ev.EventType.BID_PLACED,
            payload=ev.PlayerPassed(0),
        )
