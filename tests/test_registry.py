from datetime import datetime, timedelta

import pytest

from lobby.models import SessionState


def test_create_returns_shareable_code(registry):
    session_id = registry.create('private')
    assert len(session_id) == 6
    assert session_id == session_id.upper()
    assert session_id.isalnum()
    assert registry.get_private(session_id) is not None
    assert session_id not in registry.public_sessions


def test_lookup_is_case_insensitive(registry):
    session_id = registry.create('public')
    assert registry.get(session_id.lower()) is registry.get(session_id)


def test_unknown_visibility_is_rejected(registry):
    with pytest.raises(ValueError):
        registry.create('secret')


def test_delete_removes_from_its_pool(registry):
    public_id = registry.create('public')
    private_id = registry.create('private')
    assert registry.delete(private_id) is True
    assert registry.get(private_id) is None
    assert registry.get(public_id) is not None
    assert registry.delete(private_id) is False


def test_sweep_removes_empty_and_expired_sessions(registry):
    now = datetime.now()
    empty_id = registry.create('public', now=now)
    old_id = registry.create('private', now=now - timedelta(minutes=31))
    registry.get(old_id).add_player('old', 'goblin')
    fresh_id = registry.create('public', now=now - timedelta(minutes=29))
    registry.get(fresh_id).add_player('fresh', 'goblin')

    removed = registry.sweep(now)

    assert set(removed) == {empty_id, old_id}
    assert registry.get(fresh_id) is not None
    assert len(registry) == 1


def test_find_open_public_is_first_fit_in_creation_order(registry):
    first = registry.create('public')
    second = registry.create('public')
    for connection_id in ('a', 'b', 'c', 'd'):
        registry.get(first).add_player(connection_id, 'goblin')
    registry.get(second).add_player('e', 'goblin')
    third = registry.create('public')
    registry.get(third).add_player('f', 'goblin')

    assert registry.find_open_public().session_id == second

    registry.get(second).state = SessionState.PLAYING
    assert registry.find_open_public().session_id == third


def test_private_sessions_are_never_matched(registry):
    private_id = registry.create('private')
    registry.get(private_id).add_player('a', 'goblin')
    assert registry.find_open_public() is None


def test_status_counts(registry):
    registry.create('public')
    registry.create('private')
    registry.create('private')
    assert registry.get_status() == {
        'public_sessions': 1,
        'private_sessions': 2,
        'total_sessions': 3
    }
    assert len(registry.list_sessions()) == 3
