# app/db/local_store.py
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from app.backend.core.errors import NetworkOrStorageError

logger = logging.getLogger(__name__)


class LocalKeyValueStore:
    """
    Namespaced, JSON-serialized key-value store (localStorage-like).

    - path=None keeps everything in memory (tests, ephemeral clients)
    - otherwise the whole namespace map lives in one JSON file,
      rewritten atomically (temp file + os.replace) on every set/remove
    - keys are stored as "<namespace>:<key>" so several namespaces can share a file
    """

    def __init__(self, path: str | Path | None = None, namespace: str = "taskboard") -> None:
        self._path = Path(path) if path else None
        self._namespace = namespace
        self._lock = threading.Lock()
        self._memory: dict[str, Any] = {}
        if self._path is not None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("LocalKeyValueStore ready path=%s namespace=%s", self._path or ":memory:", namespace)

    def _full_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    # ---- low-level helpers ----

    def _read_all(self) -> dict[str, Any]:
        if self._path is None:
            return self._memory
        if not self._path.exists():
            return {}
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("local store read failed path=%s | %s", self._path, exc)
            raise NetworkOrStorageError("Local storage is unreadable") from exc
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("local store corrupt path=%s | %s", self._path, exc)
            raise NetworkOrStorageError("Local storage is corrupt") from exc
        if not isinstance(data, dict):
            raise NetworkOrStorageError("Local storage is corrupt")
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        if self._path is None:
            self._memory = data
            return
        try:
            fd, tmp = tempfile.mkstemp(dir=str(self._path.parent), prefix=".kv-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False)
            os.replace(tmp, self._path)
        except OSError as exc:
            logger.error("local store write failed path=%s | %s", self._path, exc)
            raise NetworkOrStorageError("Local storage is not writable") from exc

    # ---- public API ----

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._read_all().get(self._full_key(key), default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = dict(self._read_all())
            data[self._full_key(key)] = value
            self._write_all(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = dict(self._read_all())
            full_key = self._full_key(key)
            if full_key in data:
                del data[full_key]
                self._write_all(data)

    def keys(self) -> list[str]:
        prefix = f"{self._namespace}:"
        with self._lock:
            return [k[len(prefix):] for k in self._read_all() if k.startswith(prefix)]


class SessionPointerStore:
    """
    Persisted session pointer: {"token": ..., "user": {...}} under the
    "token" and "user" keys of a LocalKeyValueStore namespace.
    """

    TOKEN_KEY = "token"
    USER_KEY = "user"

    def __init__(self, store: LocalKeyValueStore) -> None:
        self._store = store

    def save(self, token: str, user: dict[str, Any]) -> None:
        self._store.set(self.TOKEN_KEY, token)
        self._store.set(self.USER_KEY, user)

    def load(self) -> tuple[str, dict[str, Any]] | None:
        token = self._store.get(self.TOKEN_KEY)
        user = self._store.get(self.USER_KEY)
        if not token or not isinstance(user, dict):
            return None
        return token, user

    def clear(self) -> None:
        self._store.remove(self.TOKEN_KEY)
        self._store.remove(self.USER_KEY)
