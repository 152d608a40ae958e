"""Transient alerts with auto-expiry.

Every arm bumps a generation counter and schedules HIDE_ALERT after the
configured delay. A timer only clears the alert if no newer arm happened in
the meantime, so an old timer never hides a fresh alert.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from gui.actions import Action, ActionType
from gui.store import Store
from gui.utils.logging import log

DEFAULT_DELAY_SECONDS = 3.0


class AlertController:
    def __init__(self, store: Store, delay_seconds: float = DEFAULT_DELAY_SECONDS):
        self._store = store
        self.delay_seconds = delay_seconds
        self._generation = 0
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def generation(self) -> int:
        return self._generation

    def arm(self) -> int:
        """Schedule the current alert to clear. Needs a running event loop."""
        loop = asyncio.get_running_loop()
        self._generation += 1
        generation = self._generation
        self._handle = loop.call_later(self.delay_seconds, self._expire, generation)
        return generation

    def _expire(self, generation: int) -> None:
        if generation != self._generation:
            log("alert timer %d superseded by %d", logging.DEBUG, generation, self._generation)
            return
        self._handle = None
        if self._store.state.show_alert:
            self._store.dispatch(Action(ActionType.HIDE_ALERT))

    def close(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
