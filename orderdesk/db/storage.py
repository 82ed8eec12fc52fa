"""
orderdesk/db/storage.py

Purpose: Persisted session storage

- Key/value backends standing in for browser local storage
- In-memory backend (process lifetime) and JSON file backend (durable)
- PersistedSessionStore: token + cached user profile on top of a backend
- No TTL: expiry is enforced only by the API rejecting stale tokens
"""

import json
import os
import tempfile
from typing import Dict, Optional, Any

from orderdesk.core.logging import get_logger

logger = get_logger(__name__)


class SessionStorage:
    """
    Synchronous string key/value storage.
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def keys(self):
        raise NotImplementedError


class MemoryStorage(SessionStorage):
    """Storage that lives as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class JsonFileStorage(SessionStorage):
    """
    Storage persisted as a single JSON object on disk.

    The file is read once on construction and rewritten atomically on every
    write, so values survive a process restart until explicitly removed.
    """

    def __init__(self, path: str):
        self.path = path
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Session storage file unreadable, starting empty: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning("Session storage file is not a JSON object, starting empty")
            return {}

        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".session-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._flush()

    def keys(self):
        return list(self._data.keys())


class PersistedSessionStore:
    """
    Token and cached user profile, persisted under two canonical keys.

    Only the auth session manager writes through this store; the API gateway
    only reads the token.
    """

    def __init__(self, storage: SessionStorage, token_key: str = "token", user_key: str = "user"):
        self.storage = storage
        self.token_key = token_key
        self.user_key = user_key

    # Raw contract

    def get(self, key: str) -> Optional[str]:
        return self.storage.get(key)

    def set(self, key: str, value: str) -> None:
        self.storage.set(key, value)

    def remove(self, key: str) -> None:
        self.storage.remove(key)

    # Session helpers

    def read_token(self) -> Optional[str]:
        token = self.storage.get(self.token_key)
        return token or None

    def write_token(self, token: str) -> None:
        self.storage.set(self.token_key, token)

    def read_user(self) -> Optional[Dict[str, Any]]:
        """
        Returns the cached profile, or None if absent or unparsable.
        """
        raw = self.storage.get(self.user_key)
        if not raw or raw in ("undefined", "null"):
            return None
        try:
            user = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored user profile is not valid JSON")
            return None
        return user if isinstance(user, dict) else None

    def write_user(self, user: Dict[str, Any]) -> None:
        self.storage.set(self.user_key, json.dumps(user, default=str))

    def clear(self) -> None:
        self.storage.remove(self.token_key)
        self.storage.remove(self.user_key)
        logger.debug("Session storage cleared")

    def has_session(self) -> bool:
        return self.read_token() is not None and self.read_user() is not None


def create_storage(path: Optional[str] = None) -> SessionStorage:
    """JSON file storage when a path is configured, memory otherwise."""
    if path:
        return JsonFileStorage(path)
    return MemoryStorage()
