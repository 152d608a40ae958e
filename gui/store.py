"""The state store.

One explicit `Store` instance is built at process start and handed to every
consumer. State changes only through `dispatch`, which runs the reducer and
then notifies subscribers.
"""

from __future__ import annotations

import logging
from typing import Callable, List

from gui.actions import Action
from gui.reducer import reduce
from gui.state import AppState
from gui.utils.logging import log, logger

Listener = Callable[[AppState, Action], None]


class Store:
    """Holds the current `AppState` and fans out changes to listeners.

    A failing listener is logged and does not stop delivery to the others.
    """

    def __init__(self, state: AppState):
        self._state = state
        self._listeners: List[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> AppState:
        self._state = reduce(self._state, action)
        tag = getattr(action.type, "value", action.type)
        log("dispatch %s", logging.DEBUG, tag)
        for listener in list(self._listeners):
            try:
                listener(self._state, action)
            except Exception:
                logger.exception("Listener %r failed on %s", listener, tag)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
