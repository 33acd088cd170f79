"""Process-wide notification broadcast.

Observers subscribe by name and receive an optional payload whenever that
name is posted. Used to tell interested parts of the app that the user must
sign in again.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

USER_NEEDS_REAUTH = "user_needs_reauth"
NETWORK_UNAVAILABLE = "network_unavailable"

Observer = Callable[[str, Any], None]


class NotificationCenter:
    """Thread-safe name → observers registry."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._observers: dict[int, tuple[str, Observer]] = {}

    def add_observer(self, name: str, callback: Observer) -> int:
        """Register ``callback(name, payload)`` for ``name``; returns a removal token."""
        with self._lock:
            token = next(self._ids)
            self._observers[token] = (name, callback)
        return token

    def remove_observer(self, token: int) -> None:
        with self._lock:
            self._observers.pop(token, None)

    def post(self, name: str, payload: Any = None) -> int:
        """Deliver ``name`` to every matching observer. Returns how many were called."""
        with self._lock:
            targets = [cb for observed, cb in self._observers.values() if observed == name]

        for callback in targets:
            try:
                callback(name, payload)
            except Exception:
                logger.exception("Notification observer failed for %s", name)
        return len(targets)
