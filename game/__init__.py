"""
Game Module for Trash Rush.

Contains the session lifecycle state machine, the message schema, timers
and outbound fan-out.
"""

from .lifecycle import SessionLifecycle
from .timers import TimerScheduler
from .broadcaster import Broadcaster, SocketIOBroadcaster

__all__ = [
    'SessionLifecycle',
    'TimerScheduler',
    'Broadcaster',
    'SocketIOBroadcaster'
]
