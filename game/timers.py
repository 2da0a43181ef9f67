"""
Deferred, cancellable callbacks keyed by session.

Each session has at most one pending timer per name (countdown, eviction).
Scheduling again or cancelling bumps a token; a timer whose token is no
longer current does nothing when it wakes up. The token check and the
callback run under the scheduler's lock, which the session lifecycle
shares, so a timer cannot pass its check and then act on a state that an
event handler changed in between.
"""

import itertools
import logging
import threading
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class TimerScheduler:
    """
    Runs callbacks after a delay on background tasks.

    Args:
        start_background_task: e.g. ``socketio.start_background_task``
        sleep: e.g. ``socketio.sleep``; must cooperate with the async mode
        lock: Re-entrant lock guarding timer bookkeeping and callbacks
    """

    def __init__(self, start_background_task: Callable, sleep: Callable[[float], None],
                 lock: Optional[threading.RLock] = None):
        self._start_background_task = start_background_task
        self._sleep = sleep
        self.lock = lock or threading.RLock()
        self._tokens: Dict[Tuple[str, str], int] = {}
        self._counter = itertools.count(1)

    def schedule(self, session_id: str, name: str, delay: float, callback: Callable[[], None]) -> int:
        """
        Schedule ``callback`` to run after ``delay`` seconds.

        Replaces any pending timer with the same session and name.

        Returns:
            Token identifying this timer
        """
        key = (session_id, name)
        with self.lock:
            token = next(self._counter)
            self._tokens[key] = token
        logger.debug(f"Scheduled {name} for session {session_id} in {delay}s")
        self._start_background_task(self._run, key, token, delay, callback)
        return token

    def _run(self, key: Tuple[str, str], token: int, delay: float, callback: Callable[[], None]) -> None:
        self._sleep(delay)
        with self.lock:
            if self._tokens.get(key) != token:
                logger.debug(f"Stale {key[1]} timer for session {key[0]} ignored")
                return
            del self._tokens[key]
            try:
                callback()
            except Exception as e:
                logger.error(f"Error running {key[1]} timer for session {key[0]}: {e}")

    def cancel(self, session_id: str, name: str) -> bool:
        """Cancel a pending timer. Returns True if one was pending."""
        with self.lock:
            return self._tokens.pop((session_id, name), None) is not None

    def cancel_all(self, session_id: str) -> int:
        """Cancel every pending timer of a session."""
        with self.lock:
            keys = [key for key in self._tokens if key[0] == session_id]
            for key in keys:
                del self._tokens[key]
            return len(keys)

    def is_pending(self, session_id: str, name: str) -> bool:
        with self.lock:
            return (session_id, name) in self._tokens
