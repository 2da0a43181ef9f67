import pytest

from game import messages
from game.messages import parse_inbound, outbound
from utils.errors import SchemaError


def test_outbound_payloads_carry_the_schema_version():
    payload = outbound(messages.PROMOTE_TO_HOST, gameId='ABC123')
    assert payload == {'version': messages.SCHEMA_VERSION, 'gameId': 'ABC123'}


def test_unknown_outbound_event_is_rejected():
    with pytest.raises(ValueError):
        outbound('somethingElse')


def test_join_events_default_the_character():
    assert parse_inbound('quickPlay', None).character == 'goblin'
    assert parse_inbound('createPrivateGame', {}).character == 'goblin'
    assert parse_inbound('quickPlay', {'character': ' rat '}).character == 'rat'


def test_join_private_normalises_the_code():
    event = parse_inbound('joinPrivateGame', {'gameId': ' abc123 '})
    assert event.game_id == 'ABC123'


def test_join_private_needs_a_code():
    with pytest.raises(SchemaError):
        parse_inbound('joinPrivateGame', {})


def test_ready_must_be_boolean():
    assert parse_inbound('playerReady', {'ready': True}).ready is True
    with pytest.raises(SchemaError):
        parse_inbound('playerReady', {'ready': 'yes'})
    with pytest.raises(SchemaError):
        parse_inbound('playerReady', {})


def test_player_action_fields():
    event = parse_inbound('playerAction', {'gameId': 'abc123', 'action': 'collect', 'points': 4})
    assert (event.game_id, event.action, event.points, event.powerup) == ('ABC123', 'collect', 4, None)
    assert parse_inbound('playerAction', {'action': 'move'}).points == 0


@pytest.mark.parametrize('data', [
    {'action': ''},
    {'action': 'collect', 'points': -1},
    {'action': 'collect', 'points': 1.5},
    {'action': 'collect', 'points': True},
    {'action': 'collect', 'powerup': 3},
])
def test_bad_player_actions(data):
    with pytest.raises(SchemaError):
        parse_inbound('playerAction', data)


def test_overlong_character_is_rejected():
    with pytest.raises(SchemaError):
        parse_inbound('quickPlay', {'character': 'x' * 100})


def test_non_object_payloads_and_unknown_events():
    with pytest.raises(SchemaError):
        parse_inbound('quickPlay', ['goblin'])
    with pytest.raises(SchemaError) as excinfo:
        parse_inbound('teleport', {})
    assert excinfo.value.event == 'teleport'
