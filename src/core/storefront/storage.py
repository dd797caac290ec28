"""Durable client-side storage for the cart and the correlation id."""

import json
import logging
import os
import random
import string
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from time import time
from typing import Any

logger = logging.getLogger(__name__)

SESSION_ID_KEY = "flight_session_id"


class Storage(ABC):
    @abstractmethod
    def get(self, key: str) -> Any | None: ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None: ...

    @abstractmethod
    def remove(self, key: str) -> None: ...


class MemoryStorage(Storage):
    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> Any | None:
        raw = self._values.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        self._values[key] = json.dumps(value)

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileStorage(Storage):
    """One JSON file per key; writes go through a temp file and an atomic rename."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)
        self._directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def get(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("Ignoring unreadable storage file %s", path)
            return None

    def set(self, key: str, value: Any) -> None:
        fd, tmp = tempfile.mkstemp(dir=self._directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f)
            os.replace(tmp, self._path(key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def _new_session_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"session_{int(time() * 1000)}_{suffix}"


def get_or_create_session_id(storage: Storage) -> str:
    session_id = storage.get(SESSION_ID_KEY)
    if not session_id:
        session_id = _new_session_id()
        storage.set(SESSION_ID_KEY, session_id)
    return session_id


def clear_session_id(storage: Storage) -> None:
    storage.remove(SESSION_ID_KEY)
