"""Supervisor that restarts stalled background workers."""

from __future__ import annotations

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)

API_TIMEOUT = 10.0
POST_TIMEOUT = 10.0
CHECK_INTERVAL = 1.0


class Watchdog:
    """Restarts the API fetcher periodically, the UI on a missed heartbeat,
    and the POST worker when it has been idle too long."""

    def __init__(
        self,
        restart_api: Callable[[], None],
        restart_ui: Callable[[], None],
        restart_post: Callable[[], None],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._restart_api = restart_api
        self._restart_ui = restart_ui
        self._restart_post = restart_post
        self._clock = clock
        self._last_api_restart = clock()
        self._ui_alive = False

    def heartbeat(self) -> None:
        """Record that the UI worker is alive."""
        self._ui_alive = True

    def check(self, last_post_update: float) -> float:
        """Run one supervision pass and return the POST worker's update time."""
        if self._clock() - self._last_api_restart > API_TIMEOUT:
            self._restart_api()
            self._last_api_restart = self._clock()

        if not self._ui_alive:
            logger.warning("Bark: Restarting UI")
            self._restart_ui()
        else:
            self._ui_alive = False

        if self._clock() - last_post_update > POST_TIMEOUT:
            self._restart_post()
            last_post_update = self._clock()
        return last_post_update