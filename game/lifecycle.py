"""
Session Lifecycle - the state machine behind every game room.

Drives a session from lobby through countdown, timed rounds and game over
to eviction, and handles disconnects and host migration along the way.

Every entry point looks the session up by id under one lock and runs to
completion before the next event is handled. Timer callbacks go through
the same entry points, so a timer that fires after the state has moved on
is a no-op.
"""

import logging
import random
from datetime import datetime
from typing import Optional, List

from lobby.models import SessionData, SessionState, PlayerData
from lobby.registry import SessionRegistry
from lobby.connection_manager import ConnectionDirectory
from utils.constants import GAME_CONFIG, SCORING_ACTIONS, TIMERS
from utils.errors import StaleReferenceError, UnauthorizedError
from utils.helpers import pick_target_type, choose_winner
from . import messages
from .broadcaster import Broadcaster
from .timers import TimerScheduler

logger = logging.getLogger(__name__)


class SessionLifecycle:
    """Owns every state transition of every session."""

    def __init__(self,
                 registry: SessionRegistry,
                 directory: ConnectionDirectory,
                 broadcaster: Broadcaster,
                 scheduler: TimerScheduler,
                 countdown_seconds: float = GAME_CONFIG['COUNTDOWN_SECONDS'],
                 grace_seconds: float = GAME_CONFIG['GAME_OVER_GRACE_SECONDS'],
                 rng: Optional[random.Random] = None):
        """
        Initialize the lifecycle.

        Args:
            registry: Session store
            directory: Connection directory, cleared for evicted sessions
            broadcaster: Outbound event sink
            scheduler: Deferred callbacks for countdown and eviction
            countdown_seconds: Pre-game countdown length
            grace_seconds: Delay between game over and eviction
            rng: Optional random source for target types and tie-breaks
        """
        self.registry = registry
        self.directory = directory
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.countdown_seconds = countdown_seconds
        self.grace_seconds = grace_seconds
        self.rng = rng or random.Random()
        # Serialises event handling and timer callbacks; re-entrant so internal transitions can nest
        self.lock = scheduler.lock

    # -- lookups --

    def _require_session(self, session_id: Optional[str]) -> SessionData:
        session = self.registry.get(session_id)
        if session is None:
            raise StaleReferenceError(session_id=session_id)
        return session

    def _require_player(self, session: SessionData, connection_id: str) -> PlayerData:
        player = session.get_player(connection_id)
        if player is None or not player.is_connected:
            raise StaleReferenceError("Not a player in this game", session_id=session.session_id)
        return player

    def _require_host(self, session: SessionData, connection_id: str) -> PlayerData:
        player = self._require_player(session, connection_id)
        if not player.is_host:
            raise UnauthorizedError(session_id=session.session_id)
        return player

    # -- joining --

    def announce_created(self, session_id: str, connection_id: str) -> None:
        """Tell the creator their session exists; the session id doubles as the client seed."""
        with self.lock:
            session = self._require_session(session_id)
            event = messages.GAME_CREATED if session.is_public else messages.PRIVATE_GAME_CREATED
            self.broadcaster.send(connection_id, event, messages.outbound(
                event,
                gameId=session.session_id,
                isHost=True,
                seed=session.session_id
            ))

    def player_joined(self, session_id: str, connection_id: str) -> None:
        """
        Announce a freshly seated player and auto-start a full session.

        Called by the matchmaker right after the seat was taken.
        """
        with self.lock:
            session = self._require_session(session_id)
            player = self._require_player(session, connection_id)

            self.broadcaster.send(connection_id, messages.GAME_JOINED, messages.outbound(
                messages.GAME_JOINED,
                gameId=session.session_id,
                isHost=player.is_host,
                seed=session.session_id,
                position=player.seat,
                currentRound=session.round,
                maxRounds=session.max_rounds,
                players=session.roster()
            ))
            self.broadcaster.to_session(session, messages.PLAYER_JOINED, messages.outbound(
                messages.PLAYER_JOINED,
                playerId=player.connection_id,
                position=player.seat,
                character=player.character
            ), skip=connection_id)
            self._broadcast_players(session)
            self._broadcast_ready_states(session)

            logger.info(f"Player {connection_id} took seat {player.seat} in session {session.session_id}")

            if session.is_full:
                logger.info(f"Session {session.session_id} is full, starting without a ready vote")
                self._begin_countdown(session)

    # -- readiness and start --

    def set_ready(self, connection_id: str, session_id: str, ready: bool,
                  character: Optional[str] = None) -> bool:
        """
        Record a readiness vote.

        Returns:
            True if the vote was applied
        """
        with self.lock:
            session = self._require_session(session_id)
            player = self._require_player(session, connection_id)

            if session.state not in (SessionState.LOBBY, SessionState.STARTING):
                logger.debug(f"Ignoring readiness from {connection_id}: session {session.session_id} is {session.state.value}")
                return False

            if character and character != player.character:
                player.character = character
                self.directory.set_character(connection_id, character)
                self._broadcast_players(session)

            # An explicit "not ready" during the countdown cancels it, even from a
            # player who never readied because the session filled up
            withdraws = session.state is SessionState.STARTING and not ready
            if player.is_ready == ready and not withdraws:
                logger.debug(f"Readiness of {connection_id} unchanged ({ready})")
                return False

            if player.is_ready != ready:
                player.is_ready = ready
                self._broadcast_ready_states(session)

            if session.state is SessionState.LOBBY and session.all_connected_ready():
                self._begin_countdown(session)
            elif withdraws:
                self._cancel_countdown(session, f"{connection_id} is no longer ready")

            return True

    def _begin_countdown(self, session: SessionData) -> None:
        if session.state is not SessionState.LOBBY:
            return
        session.state = SessionState.STARTING
        self.broadcaster.to_session(session, messages.START_GAME_COUNTDOWN, messages.outbound(
            messages.START_GAME_COUNTDOWN,
            gameId=session.session_id,
            seconds=self.countdown_seconds
        ))
        session_id = session.session_id
        self.scheduler.schedule(session_id, TIMERS['COUNTDOWN'], self.countdown_seconds,
                                lambda: self._countdown_elapsed(session_id))
        logger.info(f"Countdown started for session {session_id}")

    def _cancel_countdown(self, session: SessionData, reason: str) -> None:
        if session.state is not SessionState.STARTING:
            return
        self.scheduler.cancel(session.session_id, TIMERS['COUNTDOWN'])
        session.state = SessionState.LOBBY
        self.broadcaster.to_session(session, messages.CANCEL_GAME_COUNTDOWN, messages.outbound(
            messages.CANCEL_GAME_COUNTDOWN,
            gameId=session.session_id
        ))
        logger.info(f"Countdown cancelled for session {session.session_id}: {reason}")

    def _countdown_elapsed(self, session_id: str) -> None:
        with self.lock:
            session = self.registry.get(session_id)
            if session is None or session.state is not SessionState.STARTING:
                logger.debug(f"Countdown for session {session_id} fired after the state moved on")
                return
            self._start_game(session)

    def start_for_real(self, connection_id: str, session_id: str) -> bool:
        """
        Host confirmation that the countdown is over.

        A second start of an already started session is a no-op.

        Returns:
            True if this call started the game
        """
        with self.lock:
            session = self._require_session(session_id)
            self._require_host(session, connection_id)
            if session.state is not SessionState.STARTING:
                logger.debug(f"Start request for session {session.session_id} in state {session.state.value} ignored")
                return False
            return self._start_game(session)

    def _start_game(self, session: SessionData) -> bool:
        """The single path from starting to playing."""
        if session.game_started or session.state is not SessionState.STARTING:
            return False

        self.scheduler.cancel(session.session_id, TIMERS['COUNTDOWN'])
        session.game_started = True
        session.round = 1
        session.target_type = pick_target_type(self.rng)
        session.state = SessionState.PLAYING

        self.broadcaster.to_session(session, messages.GAME_START, messages.outbound(
            messages.GAME_START,
            gameId=session.session_id,
            round=session.round,
            maxRounds=session.max_rounds,
            trashType=session.target_type,
            players=session.roster()
        ))
        logger.info(f"Started session {session.session_id} with target {session.target_type}")
        return True

    # -- playing --

    def player_action(self, connection_id: str, session_id: str, action: str,
                      points: int = 0, powerup: Optional[str] = None) -> bool:
        """
        Apply and relay an in-round action.

        Scoring actions add the client-reported points as-is; the server does
        not check them against the game rules.

        Returns:
            True if the action was accepted
        """
        with self.lock:
            session = self._require_session(session_id)
            player = self._require_player(session, connection_id)

            if session.state is not SessionState.PLAYING:
                logger.debug(f"Action from {connection_id} outside play in session {session.session_id}")
                return False

            if action in SCORING_ACTIONS:
                player.score += points

            self.broadcaster.to_session(session, messages.PLAYER_ACTION, messages.outbound(
                messages.PLAYER_ACTION,
                playerId=connection_id,
                action=action,
                points=points,
                powerup=powerup
            ), skip=connection_id)
            return True

    def round_complete(self, connection_id: str, session_id: str) -> bool:
        """
        Host signal that the current round is over.

        Returns:
            True if the round advanced
        """
        with self.lock:
            session = self._require_session(session_id)
            self._require_host(session, connection_id)

            if session.state is not SessionState.PLAYING:
                logger.debug(f"Round complete for session {session.session_id} in state {session.state.value} ignored")
                return False

            session.state = SessionState.ROUND_TRANSITION
            session.round += 1

            if session.is_game_over:
                self._finish_game(session)
            else:
                session.target_type = pick_target_type(self.rng)
                session.state = SessionState.PLAYING
                self.broadcaster.to_session(session, messages.START_NEXT_ROUND, messages.outbound(
                    messages.START_NEXT_ROUND,
                    gameId=session.session_id,
                    round=session.round,
                    maxRounds=session.max_rounds,
                    trashType=session.target_type,
                    scores=session.scores
                ))
                logger.info(f"Session {session.session_id} advanced to round {session.round}")
            return True

    def _finish_game(self, session: SessionData) -> None:
        session.state = SessionState.GAME_OVER
        session.winner_id = choose_winner(session.scores, self.rng)

        self.broadcaster.to_session(session, messages.GAME_OVER, messages.outbound(
            messages.GAME_OVER,
            gameId=session.session_id,
            scores=session.scores,
            winnerId=session.winner_id,
            players=session.roster()
        ))
        session_id = session.session_id
        self.scheduler.schedule(session_id, TIMERS['EVICTION'], self.grace_seconds,
                                lambda: self._grace_elapsed(session_id))
        logger.info(f"Game over in session {session_id}, winner {session.winner_id}")

    def _grace_elapsed(self, session_id: str) -> None:
        with self.lock:
            session = self.registry.get(session_id)
            if session is None or session.state is not SessionState.GAME_OVER:
                logger.debug(f"Eviction timer for session {session_id} fired after the state moved on")
                return
            self._evict(session, "game over grace delay elapsed")

    # -- disconnects and eviction --

    def handle_disconnect(self, connection_id: str, session_id: Optional[str]) -> bool:
        """
        Mark a player disconnected, migrate host and evict an abandoned session.

        The player keeps their seat and score. Also the leave path for a
        player who moves on from a finished game to a new one.

        Returns:
            True if the session was evicted
        """
        with self.lock:
            session = self.registry.get(session_id)
            if session is None:
                return False
            player = session.get_player(connection_id)
            if player is None or not player.is_connected:
                return False

            player.is_connected = False
            was_host = player.is_host
            logger.info(f"Player {connection_id} disconnected from session {session.session_id}")

            if session.connected_count() == 0:
                player.is_host = False
                self._evict(session, "last player disconnected")
                return True

            self.broadcaster.to_session(session, messages.PLAYER_DISCONNECTED, messages.outbound(
                messages.PLAYER_DISCONNECTED,
                playerId=connection_id,
                position=player.seat
            ))

            if was_host:
                new_host = session.promote_next_host()
                self.broadcaster.send(new_host.connection_id, messages.PROMOTE_TO_HOST, messages.outbound(
                    messages.PROMOTE_TO_HOST,
                    gameId=session.session_id
                ))
                logger.info(f"Promoted {new_host.connection_id} to host of session {session.session_id}")

            self._broadcast_players(session)

            if session.state is SessionState.LOBBY and session.all_connected_ready():
                self._begin_countdown(session)
            elif session.state is SessionState.STARTING and session.connected_count() < session.min_players:
                self._cancel_countdown(session, "not enough connected players")

            return False

    def _evict(self, session: SessionData, reason: str) -> None:
        self.registry.delete(session.session_id)
        self.scheduler.cancel_all(session.session_id)
        self.directory.clear_session(session.session_id)
        session.state = SessionState.EVICTED
        logger.info(f"Evicted session {session.session_id}: {reason}")

    def sweep(self, now: Optional[datetime] = None) -> List[str]:
        """Sweep old and empty sessions and drop their timers."""
        with self.lock:
            removed = self.registry.sweep(now)
            for session_id in removed:
                self.scheduler.cancel_all(session_id)
                self.directory.clear_session(session_id)
            return removed

    def run_sweeper(self, sleep, interval: float = GAME_CONFIG['SWEEP_INTERVAL_SECONDS']) -> None:
        """Background loop for the periodic sweep."""
        while True:
            sleep(interval)
            try:
                self.sweep()
            except Exception as e:
                logger.error(f"Error during session sweep: {e}")

    # -- broadcasts --

    def _broadcast_players(self, session: SessionData) -> None:
        self.broadcaster.to_session(session, messages.PLAYERS_UPDATED, messages.outbound(
            messages.PLAYERS_UPDATED,
            players=session.roster()
        ))

    def _broadcast_ready_states(self, session: SessionData) -> None:
        self.broadcaster.to_session(session, messages.READY_STATES_UPDATED, messages.outbound(
            messages.READY_STATES_UPDATED,
            readyStates=session.ready_states
        ))

