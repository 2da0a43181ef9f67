"""
Connection Directory for Trash Rush.

Maps a transport connection id to the session it currently belongs to and
the character it picked. Contains no session logic - the entry for a
connection is only erased after the lifecycle has handled its disconnect.
"""

import logging
from typing import Dict, Optional, Any
from dataclasses import dataclass
from datetime import datetime
from utils.constants import DEFAULT_CHARACTER

logger = logging.getLogger(__name__)


@dataclass
class ConnectionEntry:
    """What the server knows about one live connection."""
    connection_id: str
    session_id: Optional[str]
    character: str
    connection_time: datetime
    last_activity: datetime


class ConnectionDirectory:
    """
    Tracks live connections and their current session membership.

    An entry is created on connect, looked up on every inbound event and
    deleted on disconnect.
    """

    def __init__(self):
        self.connections: Dict[str, ConnectionEntry] = {}  # connection_id -> ConnectionEntry
        logger.debug("Connection directory initialized")

    def register_connection(self, connection_id: str) -> ConnectionEntry:
        """
        Register a new connection, or return the existing entry.

        Args:
            connection_id: Unique connection id from the transport

        Returns:
            The connection's entry
        """
        entry = self.connections.get(connection_id)
        if entry:
            return entry

        now = datetime.now()
        entry = ConnectionEntry(
            connection_id=connection_id,
            session_id=None,
            character=DEFAULT_CHARACTER,
            connection_time=now,
            last_activity=now
        )
        self.connections[connection_id] = entry
        logger.info(f"Registered connection: {connection_id}")
        return entry

    def unregister_connection(self, connection_id: str) -> Optional[ConnectionEntry]:
        """
        Forget a connection.

        Args:
            connection_id: Connection id to remove

        Returns:
            The removed entry, or None if it was unknown
        """
        entry = self.connections.pop(connection_id, None)
        if entry:
            logger.info(f"Unregistered connection: {connection_id}")
        return entry

    def update_activity(self, connection_id: str) -> bool:
        entry = self.connections.get(connection_id)
        if not entry:
            return False
        entry.last_activity = datetime.now()
        return True

    def associate_with_session(self, connection_id: str, session_id: str,
                               character: Optional[str] = None) -> ConnectionEntry:
        """
        Record that a connection now plays in a session.

        Registers the connection first if the transport never announced it.
        """
        entry = self.register_connection(connection_id)
        entry.session_id = session_id
        if character:
            entry.character = character
        entry.last_activity = datetime.now()
        logger.debug(f"Associated {connection_id} with session {session_id}")
        return entry

    def disassociate_from_session(self, connection_id: str) -> Optional[str]:
        """
        Clear a connection's session membership.

        Returns:
            Previous session id, or None if not associated
        """
        entry = self.connections.get(connection_id)
        if not entry:
            return None
        previous = entry.session_id
        entry.session_id = None
        return previous

    def clear_session(self, session_id: str) -> int:
        """
        Detach every connection still pointing at a session that is gone.

        Returns:
            Number of connections detached
        """
        cleared = 0
        for entry in self.connections.values():
            if entry.session_id == session_id:
                entry.session_id = None
                cleared += 1
        if cleared:
            logger.debug(f"Detached {cleared} connections from session {session_id}")
        return cleared

    def set_character(self, connection_id: str, character: str) -> bool:
        entry = self.connections.get(connection_id)
        if not entry:
            return False
        entry.character = character
        return True

    def get_session_id(self, connection_id: str) -> Optional[str]:
        """Session the connection currently belongs to, if any."""
        entry = self.connections.get(connection_id)
        return entry.session_id if entry else None

    def get_character(self, connection_id: str) -> str:
        entry = self.connections.get(connection_id)
        return entry.character if entry else DEFAULT_CHARACTER

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self.connections

    def __len__(self) -> int:
        return len(self.connections)

    def get_connection_stats(self) -> Dict[str, Any]:
        """
        Get connection statistics.

        Returns:
            Dictionary with connection statistics
        """
        session_counts: Dict[str, int] = {}
        for entry in self.connections.values():
            if entry.session_id:
                session_counts[entry.session_id] = session_counts.get(entry.session_id, 0) + 1

        return {
            'total_connections': len(self.connections),
            'connections_in_sessions': sum(session_counts.values()),
            'idle_connections': len(self.connections) - sum(session_counts.values()),
            'sessions_with_connections': len(session_counts)
        }
