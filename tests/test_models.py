from datetime import datetime

import pytest

from lobby.models import SessionData, SessionState
from utils.errors import SessionFullError, SessionAlreadyStartedError


def _session(**kwargs):
    return SessionData(session_id='ABC123', visibility='public', created_at=datetime.now(), **kwargs)


def test_seats_are_assigned_in_join_order_and_first_player_hosts():
    session = _session()
    first = session.add_player('a', 'goblin')
    second = session.add_player('b', 'rat')

    assert (first.seat, second.seat) == (1, 2)
    assert first.is_host and not second.is_host
    assert session.host_id == 'a'
    assert session.scores == {'a': 0, 'b': 0}


def test_seat_cap_is_enforced():
    session = _session()
    for connection_id in ('a', 'b', 'c', 'd'):
        session.add_player(connection_id, 'goblin')
    with pytest.raises(SessionFullError):
        session.add_player('e', 'goblin')
    assert session.player_count == 4


def test_join_after_lobby_is_rejected():
    session = _session()
    session.add_player('a', 'goblin')
    session.state = SessionState.PLAYING
    with pytest.raises(SessionAlreadyStartedError):
        session.add_player('b', 'goblin')


def test_empty_character_falls_back_to_default():
    session = _session()
    assert session.add_player('a', '').character == 'goblin'


def test_readiness_vote_needs_two_connected_players():
    session = _session()
    a = session.add_player('a', 'goblin')
    a.is_ready = True
    assert not session.all_connected_ready()

    b = session.add_player('b', 'goblin')
    assert not session.all_connected_ready()
    b.is_ready = True
    assert session.all_connected_ready()


def test_disconnected_players_do_not_block_the_vote():
    session = _session()
    for connection_id in ('a', 'b', 'c'):
        session.add_player(connection_id, 'goblin')
    session.get_player('a').is_ready = True
    session.get_player('b').is_ready = True
    session.get_player('c').is_connected = False
    assert session.all_connected_ready()


def test_promote_next_host_picks_lowest_connected_seat():
    session = _session()
    for connection_id in ('a', 'b', 'c'):
        session.add_player(connection_id, 'goblin')
    session.get_player('a').is_connected = False
    session.get_player('b').is_connected = False

    new_host = session.promote_next_host()

    assert new_host.connection_id == 'c'
    assert [p.connection_id for p in session.players if p.is_host] == ['c']


def test_roster_entry_shape():
    session = _session()
    session.add_player('a', 'rat')
    assert session.roster() == [{
        'id': 'a',
        'position': 1,
        'character': 'rat',
        'isHost': True,
        'isConnected': True,
        'score': 0
    }]
