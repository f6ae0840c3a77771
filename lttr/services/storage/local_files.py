"""
Local JSON File Storage Implementation

DESIGN DECISION: Each persistence key is its own file (<key>.json) inside
the configured data directory. Because keys never share a file:
1. A corrupt blob only ever affects its own collection
2. A failed write on one key cannot damage another

TRADEOFFS:
- No cross-key transaction (a crash mid-save can leave keys from two
  different saves; each key on its own is always complete)
- Not suitable for concurrent writers (we have exactly one)

Each write goes to a temporary file in the same directory which is then
moved over the target with os.replace, so a reader sees either the old
or the new document, never a partial one.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from lttr.config import get_settings
from lttr.services.storage.interface import (
    InvalidKeyError,
    KeyValueStorageInterface,
    StorageReadError,
    StorageWriteError,
)


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
_SUFFIX = ".json"


class JsonFileStorage(KeyValueStorageInterface):
    """
    Key-value storage backed by one JSON file per key.

    Files are UTF-8 text. The directory is created on first write.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        self._data_dir = Path(data_dir) if data_dir else get_settings().storage.data_dir

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise InvalidKeyError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}{_SUFFIX}"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {path}: {e}") from e

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{key}.",
                suffix=".tmp",
                dir=self._data_dir,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                # Never leave temp files behind
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageWriteError(f"Failed to write {path}: {e}") from e

    def remove(self, key: str) -> bool:
        path = self._path(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {path}: {e}") from e

    def keys(self) -> list[str]:
        if not self._data_dir.is_dir():
            return []
        return sorted(
            path.name[: -len(_SUFFIX)]
            for path in self._data_dir.iterdir()
            if path.is_file()
            and path.name.endswith(_SUFFIX)
            and _KEY_PATTERN.match(path.name[: -len(_SUFFIX)])
        )
