"""
Session registry for Trash Rush.

Owns every live session, split into the public matchmaking pool and the
private invite-code pool. Nothing else keeps a reference to a session:
callers look sessions up by id on every operation.
"""

import logging
import random
from typing import Dict, Iterator, List, Optional
from datetime import datetime, timedelta
from .models import SessionData
from utils.constants import GAME_CONFIG, VISIBILITY
from utils.helpers import generate_session_code, normalize_session_code

logger = logging.getLogger(__name__)


class SessionRegistry:
    """In-memory store of live sessions."""

    def __init__(self,
                 max_age_minutes: int = GAME_CONFIG['SESSION_MAX_AGE_MINUTES'],
                 max_players: int = GAME_CONFIG['MAX_PLAYERS'],
                 min_players: int = GAME_CONFIG['MIN_PLAYERS'],
                 max_rounds: int = GAME_CONFIG['MAX_ROUNDS'],
                 rng: Optional[random.Random] = None):
        """
        Initialize the registry.

        Args:
            max_age_minutes: Age after which a session is swept regardless of state
            max_players: Seat cap for new sessions
            min_players: Players needed for a readiness start
            max_rounds: Rounds per game
            rng: Optional random source for session codes
        """
        self.public_sessions: Dict[str, SessionData] = {}
        self.private_sessions: Dict[str, SessionData] = {}
        self.max_age = timedelta(minutes=max_age_minutes)
        self.max_players = max_players
        self.min_players = min_players
        self.max_rounds = max_rounds
        self._rng = rng
        logger.debug("Session registry initialized")

    def _pool(self, visibility: str) -> Dict[str, SessionData]:
        if visibility == VISIBILITY['PUBLIC']:
            return self.public_sessions
        if visibility == VISIBILITY['PRIVATE']:
            return self.private_sessions
        raise ValueError(f"Unknown session visibility: {visibility}")

    def _new_code(self) -> str:
        while True:
            code = generate_session_code(rng=self._rng)
            if code not in self.public_sessions and code not in self.private_sessions:
                return code

    def create(self, visibility: str, now: Optional[datetime] = None) -> str:
        """
        Create an empty session.

        Args:
            visibility: 'public' or 'private'
            now: Creation time, defaults to the current time

        Returns:
            The new session id
        """
        pool = self._pool(visibility)
        session_id = self._new_code()
        pool[session_id] = SessionData(
            session_id=session_id,
            visibility=visibility,
            created_at=now or datetime.now(),
            max_players=self.max_players,
            min_players=self.min_players,
            max_rounds=self.max_rounds
        )
        logger.info(f"Created {visibility} session {session_id}")
        return session_id

    def get(self, session_id: Optional[str]) -> Optional[SessionData]:
        """Look a session up in either pool."""
        if not session_id:
            return None
        session_id = normalize_session_code(session_id)
        return self.public_sessions.get(session_id) or self.private_sessions.get(session_id)

    def get_private(self, session_id: str) -> Optional[SessionData]:
        """Look a session up in the private pool only."""
        return self.private_sessions.get(normalize_session_code(session_id))

    def delete(self, session_id: str) -> bool:
        """
        Remove a session from whichever pool holds it.

        Returns:
            True if a session was removed
        """
        session_id = normalize_session_code(session_id)
        for pool in (self.public_sessions, self.private_sessions):
            if pool.pop(session_id, None) is not None:
                logger.info(f"Deleted session {session_id}")
                return True
        return False

    def iter_public(self) -> Iterator[SessionData]:
        """Public sessions in creation order."""
        return iter(list(self.public_sessions.values()))

    def find_open_public(self) -> Optional[SessionData]:
        """First public session, in registry order, that still accepts players."""
        for session in self.iter_public():
            if session.is_open:
                return session
        return None

    def is_expired(self, session: SessionData, now: datetime) -> bool:
        return now - session.created_at > self.max_age

    def sweep(self, now: Optional[datetime] = None) -> List[str]:
        """
        Remove every session that is too old or has no players.

        Args:
            now: Reference time, defaults to the current time

        Returns:
            Ids of the removed sessions
        """
        now = now or datetime.now()
        removed = []

        for pool in (self.public_sessions, self.private_sessions):
            for session_id, session in list(pool.items()):
                if self.is_expired(session, now) or session.player_count == 0:
                    del pool[session_id]
                    removed.append(session_id)

        if removed:
            logger.info(f"Swept {len(removed)} sessions: {', '.join(removed)}")

        return removed

    def __len__(self) -> int:
        return len(self.public_sessions) + len(self.private_sessions)

    def __contains__(self, session_id: str) -> bool:
        return self.get(session_id) is not None

    def get_status(self) -> Dict[str, int]:
        """Counts per pool."""
        return {
            'public_sessions': len(self.public_sessions),
            'private_sessions': len(self.private_sessions),
            'total_sessions': len(self)
        }

    def list_sessions(self) -> List[Dict]:
        """Summaries of every live session, public first."""
        return [s.to_dict() for s in list(self.public_sessions.values()) + list(self.private_sessions.values())]
