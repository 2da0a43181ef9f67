"""
Game constants for Trash Rush.

This module contains all constant values used throughout the server,
including target types, session states, outbound event names and
default configuration values.
"""

# Round target types ("which trash to grab this round")
TRASH_TYPES = ['golden', 'handbag', 'trashcan']

# Character used when a client never picked one
DEFAULT_CHARACTER = 'goblin'

# Session visibility
VISIBILITY = {
    'PUBLIC': 'public',    # Matchmaking pool
    'PRIVATE': 'private'   # Invite code only
}

# Player actions that add points to the caller's score
SCORING_ACTIONS = {'collect', 'score'}

# Invite code alphabet and length
SESSION_CODE_LENGTH = 6

# Game configuration
GAME_CONFIG = {
    'MAX_PLAYERS': 4,
    'MIN_PLAYERS': 2,
    'MAX_ROUNDS': 3,
    'COUNTDOWN_SECONDS': 3,
    'GAME_OVER_GRACE_SECONDS': 30,
    'SESSION_MAX_AGE_MINUTES': 30,
    'SWEEP_INTERVAL_SECONDS': 300,
    'MAX_CHARACTER_LENGTH': 32
}

# Keep-alive configuration
KEEPALIVE_CONFIG = {
    'ACTIVITY_TIMEOUT_SECONDS': 300,
    'INTERVAL_SECONDS': 60,
    'REQUEST_TIMEOUT_SECONDS': 10
}

# Timer names, keyed per session
TIMERS = {
    'COUNTDOWN': 'countdown',
    'EVICTION': 'eviction'
}
