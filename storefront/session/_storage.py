"""
Storage backends for the session store.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Storage Protocol — Users Implement This
# ═══════════════════════════════════════════════════════════════════════════════

class Storage(Protocol):
    """
    Durable string key/value storage.

    Implement this for custom backends (keyring, browser bridge, etc.)

    Example:
        class KeyringStorage:
            def __init__(self, service: str):
                self.service = service

            @property
            def name(self) -> str:
                return "keyring"

            def get(self, key: str) -> str | None:
                return keyring.get_password(self.service, key)

            def set(self, key: str, value: str) -> None:
                keyring.set_password(self.service, key, value)

            def remove(self, key: str) -> bool:
                ...
    """

    @property
    def name(self) -> str:
        """Backend name for debugging."""
        ...

    def get(self, key: str) -> str | None:
        """Get value. Returns None when absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Set value."""
        ...

    def remove(self, key: str) -> bool:
        """Remove key. Returns True if existed."""
        ...

    def remove_all(self, keys: Iterable[str]) -> int:
        """Remove keys in one write. Returns count removed."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Storage — Process Lifetime
# ═══════════════════════════════════════════════════════════════════════════════

class MemoryStorage:
    """
    In-memory storage. Survives nothing; meant for tests and embedding.

    Example:
        storage = MemoryStorage()
    """

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    @property
    def name(self) -> str:
        return "memory"

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> bool:
        return self._values.pop(key, None) is not None

    def remove_all(self, keys: Iterable[str]) -> int:
        return sum(self.remove(key) for key in keys)

    def keys(self) -> list[str]:
        return list(self._values)


# ═══════════════════════════════════════════════════════════════════════════════
# File Storage — Survives Restarts
# ═══════════════════════════════════════════════════════════════════════════════

class FileStorage:
    """
    JSON file storage. Every write replaces the file atomically.

    Example:
        storage = FileStorage(Path("~/.storefront/session.json").expanduser())
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._values: dict[str, str] = self._load()

    @property
    def name(self) -> str:
        return f"file:{self._path}"

    def _load(self) -> dict[str, str]:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except ValueError as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self._path, exc)
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(self._values, fh)
        os.replace(tmp, self._path)

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
        self._flush()

    def remove(self, key: str) -> bool:
        if key not in self._values:
            return False
        del self._values[key]
        self._flush()
        return True

    def remove_all(self, keys: Iterable[str]) -> int:
        present = [key for key in keys if key in self._values]
        for key in present:
            del self._values[key]
        if present:
            self._flush()
        return len(present)


__all__ = ("Storage", "MemoryStorage", "FileStorage")
