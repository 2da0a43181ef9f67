import pytest


def _received(client, name):
    return [message['args'][0] for message in client.get_received() if message['name'] == name]


@pytest.fixture()
def connect(flask_app, socketio):
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app)
        assert test_client.is_connected()
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        if test_client.is_connected():
            test_client.disconnect()


def test_quick_play_puts_two_clients_together(connect):
    alice, bob = connect(), connect()

    alice.emit('quickPlay', {'character': 'goblin'})
    created = alice.get_received()
    game_id = next(m['args'][0]['gameId'] for m in created if m['name'] == 'gameCreated')

    bob.emit('quickPlay', {'character': 'rat'})
    joined = _received(bob, 'gameJoined')

    assert joined[0]['gameId'] == game_id
    assert joined[0]['isHost'] is False
    assert [p['character'] for p in joined[0]['players']] == ['goblin', 'rat']
    assert _received(alice, 'playerJoined')[0]['character'] == 'rat'


def test_unknown_invite_code_reports_error(connect):
    client = connect()
    client.emit('joinPrivateGame', {'gameId': 'nope42'})
    errors = _received(client, 'gameError')
    assert errors == [{'version': 1, 'message': 'Game not found'}]


def test_malformed_payload_reports_error(connect):
    client = connect()
    client.emit('quickPlay', {'character': 'goblin'})
    client.get_received()

    client.emit('playerReady', {'ready': 'maybe'})

    assert _received(client, 'gameError')[0]['message'] == 'ready must be true or false'


def test_private_game_plays_through(connect, tasks):
    host, guest = connect(), connect()

    host.emit('createPrivateGame', {'character': 'goblin'})
    code = _received(host, 'privateGameCreated')[0]['gameId']
    guest.emit('joinPrivateGame', {'gameId': code.lower(), 'character': 'rat'})
    assert _received(guest, 'gameJoined')[0]['gameId'] == code

    host.emit('playerReady', {'gameId': code, 'ready': True})
    guest.emit('playerReady', {'gameId': code, 'ready': True})
    assert _received(guest, 'startGameCountDown')[0]['gameId'] == code

    host.emit('startGameForReal', {'gameId': code})
    tasks.run_all()
    start = _received(guest, 'gameStart')
    assert len(start) == 1
    assert start[0]['round'] == 1
    host.get_received()

    guest.emit('playerAction', {'gameId': code, 'action': 'collect', 'points': 3})
    relayed = _received(host, 'playerAction')
    assert relayed[0]['points'] == 3

    for _ in range(3):
        host.emit('roundComplete', {'gameId': code})
    over = _received(guest, 'gameOver')
    assert over[0]['scores'][over[0]['winnerId']] == 3


def test_host_only_signals_are_dropped_silently(connect, tasks):
    host, guest = connect(), connect()
    host.emit('createPrivateGame')
    code = _received(host, 'privateGameCreated')[0]['gameId']
    guest.emit('joinPrivateGame', {'gameId': code})
    host.emit('playerReady', {'ready': True})
    guest.emit('playerReady', {'ready': True})
    tasks.run_all()
    guest.get_received()

    guest.emit('roundComplete', {'gameId': code})

    assert _received(guest, 'gameError') == []


def test_stale_game_id_is_ignored(connect):
    client = connect()
    client.emit('quickPlay')
    client.get_received()

    client.emit('playerReady', {'gameId': 'ZZZZZZ', 'ready': True})

    assert _received(client, 'gameError') == []
    assert _received(client, 'readyStatesUpdated') == []


def test_second_quick_play_while_seated_is_rejected(connect):
    client = connect()
    client.emit('quickPlay')
    client.get_received()
    client.emit('quickPlay')
    assert _received(client, 'gameError')[0]['message'] == 'Already in a game'


def test_host_disconnect_promotes_the_next_player(connect, flask_app):
    host, guest = connect(), connect()
    host.emit('quickPlay')
    guest.emit('quickPlay')
    guest.get_received()

    host.disconnect()

    received = {m['name'] for m in guest.get_received()}
    assert {'playerDisconnected', 'promoteToHost', 'playersUpdated'} <= received


def test_last_disconnect_evicts_the_session(connect, flask_app):
    registry = flask_app.extensions['trash_rush']['registry']
    directory = flask_app.extensions['trash_rush']['directory']
    client = connect()
    client.emit('quickPlay')
    assert len(registry) == 1

    client.disconnect()

    assert len(registry) == 0
    assert len(directory) == 0
