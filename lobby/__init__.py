"""
Lobby Module for Trash Rush.

Contains the session data model, the session registry, matchmaking and
connection tracking.
"""

from .models import SessionData, PlayerData, SessionState
from .registry import SessionRegistry
from .matchmaker import Matchmaker
from .connection_manager import ConnectionDirectory, ConnectionEntry

__all__ = [
    # Data models
    'SessionData',
    'PlayerData',
    'SessionState',
    'ConnectionEntry',

    # Managers
    'SessionRegistry',
    'Matchmaker',
    'ConnectionDirectory'
]
