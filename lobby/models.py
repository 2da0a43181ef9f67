"""
Data models for session management.

These are pure data structures: a session and the players seated in it.
They know nothing about sockets; players are identified by an opaque
connection id handed out by the transport layer.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from datetime import datetime
from enum import Enum
from utils.constants import GAME_CONFIG, DEFAULT_CHARACTER, VISIBILITY
from utils.errors import SessionFullError, SessionAlreadyStartedError


class SessionState(Enum):
    """Session lifecycle states."""
    LOBBY = "lobby"
    STARTING = "starting"
    PLAYING = "playing"
    ROUND_TRANSITION = "round-transition"
    GAME_OVER = "game-over"
    EVICTED = "evicted"


@dataclass
class PlayerData:
    """Represents a player seated in a session."""
    connection_id: str
    seat: int
    character: str = DEFAULT_CHARACTER
    score: int = 0
    is_ready: bool = False
    is_connected: bool = True
    is_host: bool = False
    joined_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Roster entry for outbound events."""
        return {
            'id': self.connection_id,
            'position': self.seat,
            'character': self.character,
            'isHost': self.is_host,
            'isConnected': self.is_connected,
            'score': self.score
        }


@dataclass
class SessionData:
    """Represents one game room and its current state."""
    session_id: str
    visibility: str
    created_at: datetime
    max_players: int = GAME_CONFIG['MAX_PLAYERS']
    min_players: int = GAME_CONFIG['MIN_PLAYERS']
    max_rounds: int = GAME_CONFIG['MAX_ROUNDS']
    state: SessionState = SessionState.LOBBY
    players: List[PlayerData] = field(default_factory=list)
    round: int = 1
    target_type: Optional[str] = None
    game_started: bool = False
    winner_id: Optional[str] = None

    @property
    def is_public(self) -> bool:
        return self.visibility == VISIBILITY['PUBLIC']

    @property
    def player_count(self) -> int:
        """Seats taken, connected or not."""
        return len(self.players)

    @property
    def is_full(self) -> bool:
        return self.player_count >= self.max_players

    @property
    def is_open(self) -> bool:
        """Whether a new player may take a seat."""
        return self.state is SessionState.LOBBY and not self.is_full

    @property
    def is_game_over(self) -> bool:
        return self.round > self.max_rounds

    @property
    def host(self) -> Optional[PlayerData]:
        for player in self.players:
            if player.is_host:
                return player
        return None

    @property
    def host_id(self) -> Optional[str]:
        host = self.host
        return host.connection_id if host else None

    @property
    def scores(self) -> Dict[str, int]:
        """Score table keyed by player id, in seat order."""
        return {p.connection_id: p.score for p in self.players}

    @property
    def ready_states(self) -> Dict[str, bool]:
        return {p.connection_id: p.is_ready for p in self.players}

    def get_player(self, connection_id: str) -> Optional[PlayerData]:
        """Find player by connection id."""
        for player in self.players:
            if player.connection_id == connection_id:
                return player
        return None

    def get_connected_players(self) -> List[PlayerData]:
        """Connected players in seat order."""
        return [p for p in self.players if p.is_connected]

    def connected_count(self) -> int:
        return len(self.get_connected_players())

    def all_connected_ready(self) -> bool:
        """Readiness vote: at least min_players connected and every one of them ready."""
        connected = self.get_connected_players()
        return len(connected) >= self.min_players and all(p.is_ready for p in connected)

    def add_player(self, connection_id: str, character: str) -> PlayerData:
        """
        Seat a new player.

        The first player to sit down becomes host. Seats are handed out in
        join order and never reused.

        Raises:
            SessionAlreadyStartedError: If the session has left the lobby
            SessionFullError: If every seat is taken
        """
        if self.state is not SessionState.LOBBY:
            raise SessionAlreadyStartedError(session_id=self.session_id)
        if self.is_full:
            raise SessionFullError(session_id=self.session_id)
        if self.get_player(connection_id):
            raise ValueError(f"Connection {connection_id} already seated in {self.session_id}")

        player = PlayerData(
            connection_id=connection_id,
            seat=self.player_count + 1,
            character=character or DEFAULT_CHARACTER,
            is_host=self.host is None,
            joined_at=datetime.now()
        )
        self.players.append(player)
        return player

    def promote_next_host(self) -> Optional[PlayerData]:
        """
        Hand the host flag to the lowest-seat connected player.

        Returns:
            The new host, or None if nobody is connected
        """
        current = self.host
        if current:
            current.is_host = False

        for player in self.players:
            if player.is_connected:
                player.is_host = True
                return player
        return None

    def roster(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.players]

    def to_dict(self) -> Dict[str, Any]:
        """Summary for operator listings."""
        return {
            'gameId': self.session_id,
            'visibility': self.visibility,
            'state': self.state.value,
            'players': self.player_count,
            'connected': self.connected_count(),
            'round': self.round,
            'maxRounds': self.max_rounds,
            'createdAt': self.created_at.isoformat()
        }
