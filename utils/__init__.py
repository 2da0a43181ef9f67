"""
Utilities module for Trash Rush.

This module contains constants, helper functions, error types and the
keep-alive helpers used throughout the application.
"""

from .constants import TRASH_TYPES, DEFAULT_CHARACTER, VISIBILITY, GAME_CONFIG
from .errors import (
    SessionError, SessionNotFoundError, SessionFullError, SessionAlreadyStartedError,
    UnauthorizedError, StaleReferenceError, AlreadyInSessionError, SchemaError
)
from .helpers import generate_session_code, pick_target_type, choose_winner

__all__ = [
    'TRASH_TYPES',
    'DEFAULT_CHARACTER',
    'VISIBILITY',
    'GAME_CONFIG',
    'SessionError',
    'SessionNotFoundError',
    'SessionFullError',
    'SessionAlreadyStartedError',
    'UnauthorizedError',
    'StaleReferenceError',
    'AlreadyInSessionError',
    'SchemaError',
    'generate_session_code',
    'pick_target_type',
    'choose_winner'
]
