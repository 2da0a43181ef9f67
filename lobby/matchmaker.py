"""
Matchmaking for Trash Rush.

Handles quick play ("first open public game, else a new one") and
invite-code games. Seats the player, records the membership in the
connection directory and hands over to the lifecycle for announcements
and auto-start.
"""

import logging
from typing import Optional
from .registry import SessionRegistry
from .connection_manager import ConnectionDirectory
from .models import SessionState
from utils.constants import VISIBILITY, DEFAULT_CHARACTER
from utils.errors import (
    SessionNotFoundError, SessionFullError, SessionAlreadyStartedError, AlreadyInSessionError
)

logger = logging.getLogger(__name__)


class Matchmaker:
    """Places connections into sessions."""

    def __init__(self, registry: SessionRegistry, directory: ConnectionDirectory, lifecycle):
        """
        Initialize the matchmaker.

        Args:
            registry: Session store
            directory: Connection directory
            lifecycle: SessionLifecycle that announces joins and owns the event lock
        """
        self.registry = registry
        self.directory = directory
        self.lifecycle = lifecycle
        logger.debug("Matchmaker initialized")

    def quick_join(self, connection_id: str, character: str = DEFAULT_CHARACTER) -> str:
        """
        Join the first open public game, or create one if none is open.

        Args:
            connection_id: Joining connection
            character: Chosen character

        Returns:
            Id of the joined session
        """
        with self.lifecycle.lock:
            self._prepare(connection_id)

            session = self.registry.find_open_public()
            created = session is None
            session_id = self.registry.create(VISIBILITY['PUBLIC']) if created else session.session_id

            self._seat(connection_id, session_id, character, created)
            logger.info(f"Quick play placed {connection_id} in session {session_id}")
            return session_id

    def create_private(self, connection_id: str, character: str = DEFAULT_CHARACTER) -> str:
        """
        Create a new invite-code session and seat its creator.

        Returns:
            The session id, shareable as the invite code
        """
        with self.lifecycle.lock:
            self._prepare(connection_id)
            session_id = self.registry.create(VISIBILITY['PRIVATE'])
            self._seat(connection_id, session_id, character, created=True)
            logger.info(f"Private session {session_id} created by {connection_id}")
            return session_id

    def join_private(self, connection_id: str, session_id: str,
                     character: str = DEFAULT_CHARACTER) -> str:
        """
        Join an invite-code session.

        Raises:
            SessionNotFoundError: Code is not in the private pool
            SessionAlreadyStartedError: Session has left the lobby
            SessionFullError: Every seat is taken

        Returns:
            Id of the joined session
        """
        with self.lifecycle.lock:
            self._prepare(connection_id)

            session = self.registry.get_private(session_id)
            if session is None:
                raise SessionNotFoundError(session_id=session_id)
            if session.state is not SessionState.LOBBY:
                raise SessionAlreadyStartedError(session_id=session.session_id)
            if session.is_full:
                raise SessionFullError(session_id=session.session_id)

            self._seat(connection_id, session.session_id, character, created=False)
            logger.info(f"Player {connection_id} joined private session {session.session_id}")
            return session.session_id

    def _prepare(self, connection_id: str) -> None:
        """Eager sweep, then make sure the connection is free to join."""
        self.lifecycle.sweep()

        current = self.registry.get(self.directory.get_session_id(connection_id))
        if current is None:
            return
        player = current.get_player(connection_id)
        if player is None or not player.is_connected:
            return
        if current.state is not SessionState.GAME_OVER:
            raise AlreadyInSessionError(session_id=current.session_id)

        # Leave the finished game before taking a seat elsewhere
        self.lifecycle.handle_disconnect(connection_id, current.session_id)
        self.directory.disassociate_from_session(connection_id)

    def _seat(self, connection_id: str, session_id: str, character: Optional[str], created: bool) -> None:
        session = self.registry.get(session_id)
        player = session.add_player(connection_id, character or DEFAULT_CHARACTER)
        self.directory.associate_with_session(connection_id, session_id, player.character)

        if created:
            self.lifecycle.announce_created(session_id, connection_id)
        self.lifecycle.player_joined(session_id, connection_id)
