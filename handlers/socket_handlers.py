"""
Socket.IO Event Handlers for Trash Rush.

Pure routing layer: parses each inbound event against the message schema,
resolves the caller's session through the connection directory and
delegates to the matchmaker or the session lifecycle. Errors are reported
to the calling connection as gameError.
"""

import logging
from typing import Callable, Optional
from flask import request
from flask_socketio import emit
from game import messages
from game.messages import parse_inbound
from utils.errors import SessionError, SchemaError, StaleReferenceError

logger = logging.getLogger(__name__)


def register_socket_handlers(socketio, directory, matchmaker, lifecycle, activity_monitor,
                             namespace: str = '/'):
    """
    Register all Socket.IO event handlers.

    Args:
        socketio: SocketIO instance
        directory: ConnectionDirectory instance
        matchmaker: Matchmaker instance
        lifecycle: SessionLifecycle instance
        activity_monitor: ActivityMonitor refreshed on every event
        namespace: Socket.IO namespace to bind to
    """

    def _report(message: str) -> None:
        emit(messages.GAME_ERROR, messages.outbound(messages.GAME_ERROR, message=message))

    def _resolve_session(game_id: Optional[str]) -> str:
        """The caller's current session; a mismatching gameId is a stale reference."""
        session_id = directory.get_session_id(request.sid)
        if session_id is None or (game_id and game_id != session_id):
            raise StaleReferenceError(session_id=game_id)
        return session_id

    def _handle(event_name: str, data, action: Callable) -> None:
        sid = request.sid
        activity_monitor.touch()
        directory.update_activity(sid)
        try:
            action(parse_inbound(event_name, data))
        except SchemaError as e:
            logger.warning(f"Schema violation in {event_name} from {sid}: {e.message}")
            _report(e.message)
        except SessionError as e:
            if e.quiet:
                logger.debug(f"Ignored {event_name} from {sid}: {e.message}")
                return
            logger.info(f"Rejected {event_name} from {sid}: {e.message}")
            _report(e.message)
        except Exception as e:
            logger.error(f"Error handling {event_name} from {sid}: {e}")
            _report(f"Failed to handle {event_name}")

    @socketio.on('connect', namespace=namespace)
    def handle_connect(auth=None):
        """Handle client connection."""
        activity_monitor.touch()
        directory.register_connection(request.sid)
        logger.info(f"Player connected: {request.sid}")

    @socketio.on('disconnect', namespace=namespace)
    def handle_disconnect(reason=None):
        """Let the lifecycle act on the player first, then forget the connection."""
        sid = request.sid
        logger.info(f"Player disconnected: {sid}")
        try:
            lifecycle.handle_disconnect(sid, directory.get_session_id(sid))
        except Exception as e:
            logger.error(f"Error handling disconnect of {sid}: {e}")
        finally:
            directory.unregister_connection(sid)

    @socketio.on('quickPlay', namespace=namespace)
    def handle_quick_play(data=None):
        """Handle matchmaking join."""
        _handle('quickPlay', data,
                lambda event: matchmaker.quick_join(request.sid, event.character))

    @socketio.on('createPrivateGame', namespace=namespace)
    def handle_create_private_game(data=None):
        """Handle invite-code game creation."""
        _handle('createPrivateGame', data,
                lambda event: matchmaker.create_private(request.sid, event.character))

    @socketio.on('joinPrivateGame', namespace=namespace)
    def handle_join_private_game(data=None):
        """Handle joining by invite code."""
        _handle('joinPrivateGame', data,
                lambda event: matchmaker.join_private(request.sid, event.game_id, event.character))

    @socketio.on('playerReady', namespace=namespace)
    def handle_player_ready(data=None):
        """Handle a readiness vote."""
        _handle('playerReady', data,
                lambda event: lifecycle.set_ready(request.sid, _resolve_session(event.game_id),
                                                  event.ready, event.character))

    @socketio.on('startGameForReal', namespace=namespace)
    def handle_start_game_for_real(data=None):
        """Handle the host's start confirmation."""
        _handle('startGameForReal', data,
                lambda event: lifecycle.start_for_real(request.sid, _resolve_session(event.game_id)))

    @socketio.on('playerAction', namespace=namespace)
    def handle_player_action(data=None):
        """Handle an in-round action."""
        _handle('playerAction', data,
                lambda event: lifecycle.player_action(request.sid, _resolve_session(event.game_id),
                                                      event.action, event.points, event.powerup))

    @socketio.on('roundComplete', namespace=namespace)
    def handle_round_complete(data=None):
        """Handle the host's round advance request."""
        _handle('roundComplete', data,
                lambda event: lifecycle.round_complete(request.sid, _resolve_session(event.game_id)))

    logger.info("Socket.IO handlers registered successfully")
