"""
Outbound fan-out for Trash Rush.

The lifecycle talks to players through a Broadcaster so that the session
model never touches a socket. The Socket.IO implementation addresses each
connection by its sid.
"""

import logging
from typing import Any, Dict, Optional
from lobby.models import SessionData

logger = logging.getLogger(__name__)


class Broadcaster:
    """Delivers outbound events to connections."""

    def send(self, connection_id: str, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError

    def to_session(self, session: SessionData, event: str, payload: Dict[str, Any],
                   skip: Optional[str] = None) -> None:
        """Send to every connected player of a session, optionally all but one."""
        for player in session.get_connected_players():
            if player.connection_id != skip:
                self.send(player.connection_id, event, payload)


class SocketIOBroadcaster(Broadcaster):
    """Broadcaster backed by a Flask-SocketIO server."""

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def send(self, connection_id: str, event: str, payload: Dict[str, Any]) -> None:
        # socketio.emit works outside a request context, so timers can use it too
        self.socketio.emit(event, payload, to=connection_id, namespace=self.namespace)
