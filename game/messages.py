"""
Message schema for Trash Rush.

A closed, versioned set of inbound and outbound events. Inbound payloads
are parsed into frozen dataclasses; anything that does not fit raises
SchemaError instead of leaking half-shaped dicts into the game logic.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union
from utils.constants import DEFAULT_CHARACTER, GAME_CONFIG
from utils.errors import SchemaError
from utils.helpers import normalize_session_code

SCHEMA_VERSION = 1


@dataclass(frozen=True)
class QuickPlay:
    character: str


@dataclass(frozen=True)
class CreatePrivateGame:
    character: str


@dataclass(frozen=True)
class JoinPrivateGame:
    game_id: str
    character: str


@dataclass(frozen=True)
class PlayerReady:
    game_id: Optional[str]
    character: Optional[str]
    ready: bool


@dataclass(frozen=True)
class StartGameForReal:
    game_id: Optional[str]


@dataclass(frozen=True)
class PlayerAction:
    game_id: Optional[str]
    action: str
    points: int
    powerup: Optional[str] = None


@dataclass(frozen=True)
class RoundComplete:
    game_id: Optional[str]


InboundEvent = Union[QuickPlay, CreatePrivateGame, JoinPrivateGame, PlayerReady,
                     StartGameForReal, PlayerAction, RoundComplete]

# Outbound event names
GAME_CREATED = 'gameCreated'
PRIVATE_GAME_CREATED = 'privateGameCreated'
GAME_JOINED = 'gameJoined'
PLAYER_JOINED = 'playerJoined'
PLAYERS_UPDATED = 'playersUpdated'
READY_STATES_UPDATED = 'readyStatesUpdated'
START_GAME_COUNTDOWN = 'startGameCountDown'
CANCEL_GAME_COUNTDOWN = 'cancelGameCountDown'
GAME_START = 'gameStart'
START_NEXT_ROUND = 'startNextRound'
PLAYER_ACTION = 'playerAction'
PLAYER_DISCONNECTED = 'playerDisconnected'
PROMOTE_TO_HOST = 'promoteToHost'
GAME_OVER = 'gameOver'
GAME_ERROR = 'gameError'

OUTBOUND_EVENTS = frozenset({
    GAME_CREATED, PRIVATE_GAME_CREATED, GAME_JOINED, PLAYER_JOINED, PLAYERS_UPDATED,
    READY_STATES_UPDATED, START_GAME_COUNTDOWN, CANCEL_GAME_COUNTDOWN, GAME_START,
    START_NEXT_ROUND, PLAYER_ACTION, PLAYER_DISCONNECTED, PROMOTE_TO_HOST, GAME_OVER,
    GAME_ERROR
})


def outbound(event: str, **fields: Any) -> Dict[str, Any]:
    """Build an outbound payload, stamped with the schema version."""
    if event not in OUTBOUND_EVENTS:
        raise ValueError(f"Unknown outbound event: {event}")
    payload = {'version': SCHEMA_VERSION}
    payload.update(fields)
    return payload


# -- inbound field readers --

def _character(event: str, data: Dict[str, Any], required: bool = False) -> Optional[str]:
    value = data.get('character')
    if value is None:
        return DEFAULT_CHARACTER if required else None
    if not isinstance(value, str) or not value.strip():
        raise SchemaError("character must be a non-empty string", event=event)
    if len(value) > GAME_CONFIG['MAX_CHARACTER_LENGTH']:
        raise SchemaError("character name is too long", event=event)
    return value.strip()


def _game_id(event: str, data: Dict[str, Any], required: bool = False) -> Optional[str]:
    value = data.get('gameId')
    if value is None:
        if required:
            raise SchemaError("gameId is required", event=event)
        return None
    if not isinstance(value, str) or not value.strip():
        raise SchemaError("gameId must be a non-empty string", event=event)
    return normalize_session_code(value)


def _parse_quick_play(data):
    return QuickPlay(character=_character('quickPlay', data, required=True))


def _parse_create_private(data):
    return CreatePrivateGame(character=_character('createPrivateGame', data, required=True))


def _parse_join_private(data):
    return JoinPrivateGame(
        game_id=_game_id('joinPrivateGame', data, required=True),
        character=_character('joinPrivateGame', data, required=True)
    )


def _parse_player_ready(data):
    ready = data.get('ready')
    if not isinstance(ready, bool):
        raise SchemaError("ready must be true or false", event='playerReady')
    return PlayerReady(
        game_id=_game_id('playerReady', data),
        character=_character('playerReady', data),
        ready=ready
    )


def _parse_start_for_real(data):
    return StartGameForReal(game_id=_game_id('startGameForReal', data))


def _parse_player_action(data):
    action = data.get('action')
    if not isinstance(action, str) or not action:
        raise SchemaError("action must be a non-empty string", event='playerAction')

    points = data.get('points', 0)
    # bool is an int subclass; reject it explicitly
    if isinstance(points, bool) or not isinstance(points, int):
        raise SchemaError("points must be an integer", event='playerAction')
    if points < 0:
        raise SchemaError("points cannot be negative", event='playerAction')

    powerup = data.get('powerup')
    if powerup is not None and not isinstance(powerup, str):
        raise SchemaError("powerup must be a string", event='playerAction')

    return PlayerAction(
        game_id=_game_id('playerAction', data),
        action=action,
        points=points,
        powerup=powerup
    )


def _parse_round_complete(data):
    return RoundComplete(game_id=_game_id('roundComplete', data))


INBOUND_PARSERS: Dict[str, Callable[[Dict[str, Any]], InboundEvent]] = {
    'quickPlay': _parse_quick_play,
    'createPrivateGame': _parse_create_private,
    'joinPrivateGame': _parse_join_private,
    'playerReady': _parse_player_ready,
    'startGameForReal': _parse_start_for_real,
    'playerAction': _parse_player_action,
    'roundComplete': _parse_round_complete,
}


def parse_inbound(event: str, data: Any) -> InboundEvent:
    """
    Parse an inbound event payload.

    Args:
        event: Socket.IO event name
        data: Raw payload; None is treated as an empty payload

    Returns:
        The typed inbound event

    Raises:
        SchemaError: Unknown event, non-object payload or bad field
    """
    parser = INBOUND_PARSERS.get(event)
    if parser is None:
        raise SchemaError(f"Unknown event: {event}", event=event)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SchemaError("Payload must be an object", event=event)
    return parser(data)
