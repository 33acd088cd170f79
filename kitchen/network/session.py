"""Auth session and the key-value stores that persist it.

The session holds two opaque tokens (access and refresh). They are written
after a successful login/register and cleared on logout or when the server
answers 401.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

AUTH_TOKEN_KEY = "auth_token"
REFRESH_TOKEN_KEY = "refresh_token"


class KeyValueStore(Protocol):
    """Minimal string settings store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Non-persistent store, mostly for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileStore:
    """Key-value store persisted as a JSON object in a single file.

    Writes go to a temporary sibling and are moved into place with
    ``os.replace`` so a crash never leaves a truncated file behind.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._values = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Settings file %s is unreadable, starting empty", self._path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._values, sort_keys=True), encoding="utf-8")
        os.replace(tmp, self._path)

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value
            self._flush()

    def remove(self, key: str) -> None:
        with self._lock:
            if self._values.pop(key, None) is not None:
                self._flush()


class AuthSession:
    """Access/refresh token pair backed by an injected key-value store."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._lock = threading.Lock()

    @property
    def access_token(self) -> str | None:
        with self._lock:
            return self._store.get(AUTH_TOKEN_KEY)

    @property
    def refresh_token(self) -> str | None:
        with self._lock:
            return self._store.get(REFRESH_TOKEN_KEY)

    @property
    def is_logged_in(self) -> bool:
        return self.access_token is not None

    def save(self, access_token: str, refresh_token: str | None = None) -> None:
        """Store the access token, and the refresh token when one was issued."""
        with self._lock:
            self._store.set(AUTH_TOKEN_KEY, access_token)
            if refresh_token is not None:
                self._store.set(REFRESH_TOKEN_KEY, refresh_token)
        logger.info("Auth session saved")

    def clear(self) -> None:
        with self._lock:
            self._store.remove(AUTH_TOKEN_KEY)
            self._store.remove(REFRESH_TOKEN_KEY)
        logger.info("Auth session cleared")
