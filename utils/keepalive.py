"""
Keep-alive support for Trash Rush.

The hosting platform suspends idle processes. The wake endpoint and every
inbound socket event refresh a freshness timestamp; a background loop pings
the configured URL once the process has been idle for too long.
"""

import logging
import time
import urllib.request
from typing import Callable, Optional
from .constants import KEEPALIVE_CONFIG

logger = logging.getLogger(__name__)


class ActivityMonitor:
    """Tracks when the server last saw any client activity."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self.last_activity = clock()

    def touch(self) -> float:
        """Record activity now and return the timestamp."""
        self.last_activity = self._clock()
        return self.last_activity

    def idle_seconds(self) -> float:
        return max(0.0, self._clock() - self.last_activity)

    def is_idle(self, timeout_seconds: float) -> bool:
        return self.idle_seconds() > timeout_seconds


class KeepAlivePinger:
    """
    Pings the server's own health URL while it is idle.

    Args:
        monitor: Activity monitor to consult
        url: URL to GET; pinging is disabled when empty
        activity_timeout: Idle seconds before a ping is sent
        opener: Callable compatible with ``urllib.request.urlopen``
    """

    def __init__(self, monitor: ActivityMonitor, url: Optional[str],
                 activity_timeout: float = KEEPALIVE_CONFIG['ACTIVITY_TIMEOUT_SECONDS'],
                 opener: Callable = urllib.request.urlopen):
        self.monitor = monitor
        self.url = url or None
        self.activity_timeout = activity_timeout
        self._opener = opener

    @property
    def enabled(self) -> bool:
        return self.url is not None

    def ping_if_idle(self) -> bool:
        """
        Ping once if the server has been idle past the timeout.

        Returns:
            True if a ping was sent and succeeded, False otherwise
        """
        if not self.enabled or not self.monitor.is_idle(self.activity_timeout):
            return False

        logger.info("Performing keep-alive ping")
        try:
            with self._opener(self.url, timeout=KEEPALIVE_CONFIG['REQUEST_TIMEOUT_SECONDS']):
                pass
            logger.info("Keep-alive successful")
            return True
        except OSError as e:
            logger.warning(f"Keep-alive failed: {e}")
            return False

    def run_forever(self, sleep: Callable[[float], None],
                    interval: float = KEEPALIVE_CONFIG['INTERVAL_SECONDS']) -> None:
        """Background loop; ``sleep`` is the Socket.IO sleep of the running server."""
        while True:
            sleep(interval)
            self.ping_if_idle()
