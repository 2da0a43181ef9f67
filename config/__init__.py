"""
Configuration module for the Trash Rush server.
"""

from .settings import Settings

__all__ = ['Settings']
