"""
Transport layer for Trash Rush.

Socket.IO game events and the HTTP health/wake routes. Nothing here owns
session state; every handler delegates to the lobby and game modules.
"""

from .socket_handlers import register_socket_handlers
from .api_handlers import register_api_handlers

__all__ = ['register_socket_handlers', 'register_api_handlers']
