"""
Error types for Trash Rush.

Every error here is recoverable: the transport layer reports it to the
originating connection as a ``gameError`` event (or drops it silently for
the quiet kinds) and carries on. None of them is fatal to the process.
"""

from typing import Optional


class SessionError(Exception):
    """Base exception for session and matchmaking errors."""

    default_message = "Request could not be completed"
    # Quiet errors are logged and dropped instead of reported to the client
    quiet = False

    def __init__(self, message: Optional[str] = None, session_id: Optional[str] = None):
        self.message = message or self.default_message
        self.session_id = session_id
        super().__init__(self.message)


class SessionNotFoundError(SessionError):
    """Raised when a session id is not in the registry."""
    default_message = "Game not found"


class SessionFullError(SessionError):
    """Raised when a join would exceed the seat cap."""
    default_message = "Game is full"


class SessionAlreadyStartedError(SessionError):
    """Raised when a join is attempted after the lobby stage."""
    default_message = "Game already started"


class AlreadyInSessionError(SessionError):
    """Raised when a connection that is still playing asks to join another game."""
    default_message = "Already in a game"


class UnauthorizedError(SessionError):
    """Raised when a non-host issues a host-only signal."""
    default_message = "Only the host can do that"
    quiet = True


class StaleReferenceError(SessionError):
    """Raised when an event refers to a session that no longer exists."""
    default_message = "Game no longer exists"
    quiet = True


class SchemaError(SessionError):
    """Raised when an inbound payload does not match the message schema."""
    default_message = "Malformed request"

    def __init__(self, message: Optional[str] = None, event: Optional[str] = None):
        self.event = event
        super().__init__(message)
