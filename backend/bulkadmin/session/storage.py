"""
Key-value stores backing the session.

FileStore survives process restarts (the dashboard's localStorage);
MemoryStore lives as long as the process (its sessionStorage). Both are
wrapped in NamespacedStorage so every key the session writes carries the
application prefix and can be purged in one pass.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Protocol

from ..logging import get_logger

logger = get_logger("storage")


class KeyValueStore(Protocol):
    def keys(self) -> list[str]: ...

    def get(self, key: str) -> Optional[str]: ...

    def write(self, updates: dict[str, str], removals: Iterable[str] = ()) -> None: ...

    def clear(self) -> None: ...


class MemoryStore:
    """In-process store, scoped to one running client."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def keys(self) -> list[str]:
        return list(self._data)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, updates: dict[str, str], removals: Iterable[str] = ()) -> None:
        for key in removals:
            self._data.pop(key, None)
        self._data.update(updates)

    def clear(self) -> None:
        self._data.clear()


class FileStore:
    """JSON file store. Each write batch replaces the file atomically."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable store {self.path}: {e}")
            return {}
        if not isinstance(raw, dict):
            logger.warning(f"Ignoring store {self.path}: expected a JSON object")
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def keys(self) -> list[str]:
        return list(self._data)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, updates: dict[str, str], removals: Iterable[str] = ()) -> None:
        for key in removals:
            self._data.pop(key, None)
        self._data.update(updates)
        self._flush()

    def clear(self) -> None:
        self._data.clear()
        self._flush()


class NamespacedStorage:
    """Prefix-scoped view over a KeyValueStore."""

    def __init__(self, store: KeyValueStore, prefix: str):
        self.store = store
        self.prefix = prefix

    def key(self, name: str) -> str:
        return f"{self.prefix}{name}"

    def get(self, name: str) -> Optional[str]:
        return self.store.get(self.key(name))

    def set(self, name: str, value: str) -> None:
        self.store.write({self.key(name): value})

    def update(self, values: dict[str, str]) -> None:
        """Write several keys as one batch."""
        self.store.write({self.key(name): value for name, value in values.items()})

    def remove(self, name: str) -> None:
        self.store.write({}, removals=[self.key(name)])

    def names(self) -> list[str]:
        """Unprefixed names of every key under this namespace."""
        return [k[len(self.prefix):] for k in self.store.keys() if k.startswith(self.prefix)]

    def purge(self) -> None:
        """Remove every key under the prefix and nothing else."""
        doomed = [k for k in self.store.keys() if k.startswith(self.prefix)]
        if doomed:
            self.store.write({}, removals=doomed)
            logger.debug(f"Purged {len(doomed)} key(s) under {self.prefix!r}")

    def clear(self) -> None:
        """Drop the whole underlying store, prefixed or not."""
        self.store.clear()
