"""Key-value storage used to persist the chat history.

This stands in for the browser's localStorage: string keys, string values,
one namespace per runtime data directory.

- InMemoryKeyValueStore: process-local dict, used by tests and when no
  data directory is configured.
- FileKeyValueStore: one file per key under `<data_dir>/storage/`, so the
  history survives restarts of the runtime.
"""

import os
import re
from pathlib import Path
from typing import Dict, Optional, Protocol


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemoryKeyValueStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


class FileKeyValueStore:
    """File-backed store.

    Parameters
    ----------
    storage_dir:
        Directory holding one `<key>.json` file per key. Created on demand.
    """

    def __init__(self, storage_dir: str) -> None:
        self._storage_dir = Path(storage_dir)

    @property
    def storage_dir(self) -> Path:
        return self._storage_dir

    def _path_for(self, key: str) -> Path:
        safe_key = re.sub(r"[^a-zA-Z0-9_.-]", "_", key) or "default"
        return self._storage_dir / f"{safe_key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.is_file():
            return None
        with path.open("r", encoding="utf-8") as f:
            return f.read()

    def set(self, key: str, value: str) -> None:
        self._storage_dir.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)
        tmp_path = path.with_suffix(path.suffix + ".tmp")

        # Write-then-rename so a crash never leaves a half-written history.
        with tmp_path.open("w", encoding="utf-8") as f:
            f.write(value)
        os.replace(tmp_path, path)

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        if path.exists():
            path.unlink()
