from __future__ import annotations

import logging
import threading
from typing import Optional

from .command import run_cmd

logger = logging.getLogger(__name__)

REFRESH_INTERVAL_S = 60.0


class SudoKeepAlive:
    """Keep sudo credentials fresh while a long run is in progress.

    Prompts once (`sudo -v`), then refreshes with `sudo -n true` from a daemon
    thread until stopped. The thread shares nothing with the main sequence.
    """

    def __init__(self, interval_s: float = REFRESH_INTERVAL_S) -> None:
        self.interval_s = interval_s
        self.stop_event = threading.Event()
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.thread is not None:
            return
        logger.info("Requesting sudo access...")
        run_cmd(["sudo", "-v"])
        self.stop_event.clear()
        self.thread = threading.Thread(target=self._refresh_loop, name="sudo-keepalive", daemon=True)
        self.thread.start()

    def stop(self) -> None:
        if self.thread is None:
            return
        self.stop_event.set()
        self.thread.join(timeout=5)
        self.thread = None

    def _refresh_loop(self) -> None:
        while not self.stop_event.wait(self.interval_s):
            r = run_cmd(["sudo", "-n", "true"], check=False)
            if not r.ok:
                logger.warning("sudo credential refresh failed (rc=%s)", r.returncode)

    def __enter__(self) -> "SudoKeepAlive":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
