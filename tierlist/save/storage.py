"""
Durable key/value store backed by JSON files.

Each key is one document in the storage directory. Writes go to a
temporary file first and are moved into place with os.replace, so a
reader never sees a half-written document.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

from tierengine.core.errors import StorageError


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStore:
    """
    Directory of JSON documents.

    Usage:
        store = JsonFileStore("data/tierlists")
        store.write("tierLists", {})
        store.read("tierLists")  # {}
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

    def read(self, key: str) -> Any | None:
        """Return the stored document, or None if the key was never written."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupted document {path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}") from e

    def write(self, key: str, data: Any) -> None:
        """Replace the document stored under key."""
        path = self._path(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with open(tmp, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            if tmp.exists():
                tmp.unlink()
            raise StorageError(f"Cannot write {path}: {e}") from e

    def delete(self, key: str) -> None:
        """Remove a document; missing keys are ignored."""
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot delete {path}: {e}") from e
