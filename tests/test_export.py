from binokel.cards import Card, HiddenCard, Rank, Suit
from binokel.deck import create_deck
from binokel.events import EventContext, create_bid_placed_event
from binokel.export import format_cards, format_event, format_event_log, format_meld
from binokel.game import GameSession
from binokel.melds import Meld, MeldType


def going_out_session():
    session = GameSession(2, session_id="export-test", seed=2)
    session.join("Anna")
    session.join("Bert")
    session.start(deck=create_deck())
    session.place_bid(1, 150)
    session.pass_bid(0)
    session.take_dabb(1)
    session.go_out(1, Suit.HERZ)
    session.declare_melds(0)
    return session


def test_format_helpers():
    assert format_cards([Card(Suit.HERZ, Rank.KOENIG), HiddenCard()]) == "Herz König, ??"
    meld = Meld(MeldType.FAMILIE, (), 150, Suit.HERZ)
    assert format_meld(meld) == "Familie in Herz (150 pts)"


def test_format_event_uses_nicknames():
    event = create_bid_placed_event(EventContext("s", 4), 1, 160)
    text = format_event(event, {1: "Bert"})
    assert text.startswith("[004] ")
    assert "BID_PLACED" in text
    assert "Bert [1] bid 160" in text


def test_event_log_sections():
    session = going_out_session()
    log = format_event_log(list(session.events), session_id=session.session_id)

    assert log.startswith("=" * 60 + "\nBINOKEL GAME EVENT LOG")
    assert "Session: export-test" in log
    assert "ROUND 1 - Dealer: Anna [0]" in log
    assert "ROUND 2 - Dealer: Bert [1]" in log
    for section in ("--- DEALING ---", "--- BIDDING ---", "--- DABB ---", "--- TRUMP & MELDS ---", "--- SCORING ---"):
        assert section in log
    assert "Bert [1] won bidding with 150" in log
    assert "Bert [1] went out in Herz" in log
    assert log.rstrip().endswith("END OF LOG\n" + "=" * 60)


def test_player_log_keeps_hidden_cards_hidden():
    session = going_out_session()
    log = format_event_log(session.events_for(0), terminated=True)
    assert "SESSION TERMINATED AFTER EXPORT" in log
    assert "Dabb: ??, ??, ??, ??" in log
