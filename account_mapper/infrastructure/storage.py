"""Key-value storage media the persistence gateway can write mappings to."""
from __future__ import annotations

from pathlib import Path
from typing import Protocol
from urllib.parse import quote, unquote


class StorageQuotaError(Exception):
    """Raised by a store when a write would exceed its capacity."""


class KeyValueStore(Protocol):
    """Contract for string key/value media (browser-style local storage)."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


def _size(value: str) -> int:
    return len(value.encode("utf-8"))


class InMemoryKeyValueStore:
    """Dict-backed store for tests and ephemeral sessions."""

    def __init__(self, max_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._max_bytes = max_bytes

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._max_bytes is not None:
            used = sum(_size(item) for name, item in self._data.items() if name != key)
            if used + _size(value) > self._max_bytes:
                raise StorageQuotaError(f"writing {key} exceeds {self._max_bytes} bytes")
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def reset(self) -> None:
        self._data.clear()


class FileKeyValueStore:
    """One UTF-8 file per key under ``root``; keys are percent-encoded into filenames."""

    SUFFIX = ".json"

    def __init__(self, root: Path, max_bytes: int | None = None) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)
        self._max_bytes = max_bytes

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, key: str) -> Path:
        return self._root / f"{quote(key, safe='')}{self.SUFFIX}"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        target = self._path(key)
        if self._max_bytes is not None:
            used = sum(path.stat().st_size for path in self._root.glob(f"*{self.SUFFIX}") if path != target)
            if used + _size(value) > self._max_bytes:
                raise StorageQuotaError(f"writing {key} exceeds {self._max_bytes} bytes")
        tmp = target.with_name(target.name + ".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(target)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        return sorted(unquote(path.name[: -len(self.SUFFIX)]) for path in self._root.glob(f"*{self.SUFFIX}"))
