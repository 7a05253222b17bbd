from binokel.cards import Card, HiddenCard
from binokel.deck import create_deck
from binokel.events import EventType
from binokel.game import GameSession
from binokel.views import filter_event_for_player, filter_events_for_player, state_for_player

DISCARDS = ["bollen-buabe-0", "bollen-buabe-1", "bollen-ober-0", "bollen-ober-1"]


def session_through_discard():
    session = GameSession(2, session_id="view-test")
    session.join("Anna")
    session.join("Bert")
    session.start(deck=create_deck())
    session.place_bid(1, 150)
    session.pass_bid(0)
    session.take_dabb(1)
    session.discard(1, DISCARDS)
    return session


def event_of(session, event_type):
    return next(event for event in session.events if event.type is event_type)


def all_hidden(cards):
    return all(isinstance(card, HiddenCard) for card in cards)


def test_deal_hides_other_hands_and_the_dabb():
    session = session_through_discard()
    dealt = event_of(session, EventType.CARDS_DEALT)

    filtered = filter_event_for_player(dealt, 0)
    assert filtered.payload.hands[0] == dealt.payload.hands[0]
    assert len(filtered.payload.hands[1]) == 18
    assert all_hidden(filtered.payload.hands[1])
    assert len(filtered.payload.dabb) == 4
    assert all_hidden(filtered.payload.dabb)
    assert all(not hasattr(card, "suit") for card in filtered.payload.hands[1])

    assert all_hidden(filter_event_for_player(dealt, 1).payload.dabb)


def test_filtering_keeps_the_envelope_and_the_source_event():
    session = session_through_discard()
    dealt = event_of(session, EventType.CARDS_DEALT)

    filtered = filter_event_for_player(dealt, 0)
    assert (filtered.id, filtered.sequence, filtered.timestamp) == (dealt.id, dealt.sequence, dealt.timestamp)
    assert all(isinstance(card, Card) for card in dealt.payload.dabb)
    assert all(isinstance(card, Card) for card in dealt.payload.hands[1])


def test_dabb_and_discard_visible_only_to_the_bid_winner():
    session = session_through_discard()
    taken = event_of(session, EventType.DABB_TAKEN)
    discarded = event_of(session, EventType.CARDS_DISCARDED)

    assert filter_event_for_player(taken, 1).payload == taken.payload
    assert all_hidden(filter_event_for_player(taken, 0).payload.dabb_cards)

    assert list(filter_event_for_player(discarded, 1).payload.discarded_cards) == DISCARDS
    hidden = filter_event_for_player(discarded, 0).payload.discarded_cards
    assert len(hidden) == 4
    assert all_hidden(hidden)


def test_public_events_pass_through():
    session = session_through_discard()
    bid = event_of(session, EventType.BID_PLACED)
    assert filter_event_for_player(bid, 0) is bid
    assert len(filter_events_for_player(session.events, 0)) == len(session.events)


def test_viewer_state_keeps_hand_sizes_without_card_identities():
    session = session_through_discard()
    state = state_for_player(session.events, 0, player_count=2)

    assert len(state.hand(0)) == 18
    assert all(isinstance(card, Card) for card in state.hand(0))
    assert len(state.hand(1)) == 18
    assert all_hidden(state.hand(1))
    assert state.dabb == ()
    assert all_hidden(state.discarded)
    assert state.dabb_card_ids == ()


def test_bid_winner_view_shows_own_cards():
    session = session_through_discard()
    state = state_for_player(session.events, 1, player_count=2)

    assert all(isinstance(card, Card) for card in state.hand(1))
    assert [card.id for card in state.discarded] == DISCARDS
    assert all_hidden(state.hand(0))


def test_incremental_views_match_a_full_fold():
    session = session_through_discard()
    for viewer in (0, 1):
        assert session.state_for(viewer) == state_for_player(session.events, viewer, player_count=2)
