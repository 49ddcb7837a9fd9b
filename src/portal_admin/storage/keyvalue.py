"""Key-value snapshot stores used as the drafts' crash-recovery net."""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


@runtime_checkable
class KeyValueStore(Protocol):
    """JSON-serializable values addressed by string keys."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...

    def clear(self) -> None: ...


class MemoryKeyValueStore:
    """Process-local store; values are copied through JSON like the file store."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._items.get(key)
        return default if raw is None else json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._items[key] = json.dumps(value, ensure_ascii=False)

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()


class FileKeyValueStore:
    """One ``<key>.json`` file per key under ``directory``."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid key: {key!r}")
        return self._directory / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.is_file():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt snapshot — key=%s path=%s", key, path)
            return default

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            "w", dir=path.parent, prefix=f".{key}.", suffix=".tmp", encoding="utf-8", delete=False
        ) as tmp:
            json.dump(value, tmp, ensure_ascii=False, indent=2)
        os.replace(tmp.name, path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def clear(self) -> None:
        if not self._directory.is_dir():
            return
        for path in self._directory.glob("*.json"):
            path.unlink(missing_ok=True)
