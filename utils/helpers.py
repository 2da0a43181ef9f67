"""
Helper utilities for Trash Rush.

This module contains utility functions used throughout the application
for code generation, round parameters and final ranking.
"""

import random
import string
from typing import Dict, Optional
from .constants import TRASH_TYPES, SESSION_CODE_LENGTH


def generate_session_code(length: int = SESSION_CODE_LENGTH,
                          rng: Optional[random.Random] = None) -> str:
    """Generate a random, human-enterable session code."""
    rng = rng or random
    characters = string.ascii_uppercase + string.digits
    return ''.join(rng.choices(characters, k=length))


def pick_target_type(rng: Optional[random.Random] = None) -> str:
    """Pick the shared target type for a round."""
    rng = rng or random
    return rng.choice(TRASH_TYPES)


def choose_winner(scores: Dict[str, int], rng: Optional[random.Random] = None) -> Optional[str]:
    """
    Pick the winner of a finished game.

    The player with the strictly highest score wins. Exact ties at the
    maximum are broken by an unweighted random pick among the tied leaders.

    Args:
        scores: Mapping of player id to final score, in roster order
        rng: Optional random source

    Returns:
        Winning player id, or None when there are no scores
    """
    if not scores:
        return None

    rng = rng or random
    max_score = max(scores.values())
    leaders = [player_id for player_id, score in scores.items() if score == max_score]

    if len(leaders) == 1:
        return leaders[0]

    return rng.choice(leaders)


def normalize_session_code(code: str) -> str:
    """Invite codes are case-insensitive; store and compare them upper-cased."""
    return code.strip().upper()

