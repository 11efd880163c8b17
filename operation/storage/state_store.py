"""
Key/value persistence for the engine state.

The main state document lives under one key; rollover amounts are written
under their own "rollover-YYYY-MM" keys by a different code path, so the store
is a flat key/value space rather than a single blob.
"""

import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from operation.logging.logging_config import get_logger

logger = get_logger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_key(key: str) -> str:
    if not _KEY_PATTERN.match(key):
        raise ValueError(f"Invalid state key: {key!r}")
    return key


class StateStore(ABC):
    """Flat string key/value store"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Return the stored value or None when the key is absent.

        Raises OSError when the value exists but cannot be read.
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one"""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key (no-op when absent)"""

    @abstractmethod
    def keys(self) -> List[str]:
        """List stored keys"""


class InMemoryStateStore(StateStore):
    """Store kept in a dict; used for tests and when no state directory is configured"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(_check_key(key))

    def set(self, key: str, value: str) -> None:
        self._data[_check_key(key)] = value

    def delete(self, key: str) -> None:
        self._data.pop(_check_key(key), None)

    def keys(self) -> List[str]:
        return sorted(self._data)


class JsonFileStateStore(StateStore):
    """
    Store writing one file per key inside a directory.

    Writes go to a temporary file that is then renamed over the target, so a
    crash mid-write leaves the previous version in place.
    """

    SUFFIX = ".json"

    def __init__(self, directory: str):
        self.directory = Path(directory).expanduser()
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{_check_key(key)}{self.SUFFIX}"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise OSError(f"{path} is not valid UTF-8: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise
        logger.debug(f"Wrote {len(value)} bytes to {path}")

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()

    def keys(self) -> List[str]:
        return sorted(
            p.name[: -len(self.SUFFIX)]
            for p in self.directory.glob(f"*{self.SUFFIX}")
            if not p.name.startswith(".")
        )
