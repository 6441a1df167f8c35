#
# Copyright (c) 2025, 7th software Ltd.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations
import json
import os
from typing import Any


def default_data_dir() -> str:
    """
    Get the directory used to store the player's defaults.

    Returns:
        str: `$CRYSTABRICK_DATA` if set, otherwise `~/.crystabrick`.
    """

    path = os.environ.get("CRYSTABRICK_DATA")
    if path:
        return path
    return os.path.join(os.path.expanduser("~"), ".crystabrick")


class DefaultsStore():
    """
    A small per-user key/value database persisted as a single JSON document.

    Values must be JSON-serialisable. Every write is flushed to disk immediately. Reading is forgiving: a
    missing file is an empty store, and an unreadable or corrupt file is reported on the console and then
    also treated as empty.
    """

    filename = "defaults.json"

    def __init__(self, path: str) -> None:
        """
        Open (or lazily create) the store.

        Args:
            path: Directory holding the store file. It is created on the first write.
        """

        self.path = path
        self.file = os.path.join(path, DefaultsStore.filename)
        self._values = self._load()

    def _load(self) -> dict[str, Any]:
        try:
            with open(self.file, "r", encoding="utf-8") as f:
                values = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            print(f"Ignoring unreadable defaults in {self.file}: {e}")
            return {}

        if not isinstance(values, dict):
            print(f"Ignoring malformed defaults in {self.file}")
            return {}

        return values

    def _save(self) -> None:
        # Write to a temporary file first, so a failed write never leaves a half-written store behind
        temp = self.file + ".tmp"
        try:
            os.makedirs(self.path, exist_ok=True)
            with open(temp, "w", encoding="utf-8") as f:
                json.dump(self._values, f, indent=2)
            os.replace(temp, self.file)
        except OSError as e:
            print(f"Error saving defaults to {self.file}: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a value.

        Args:
            key: Name of the value.
            default: Returned when the key is absent.

        Returns:
            Any: The stored value, or `default`.
        """

        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Store a value and write the store to disk.

        Args:
            key: Name of the value.
            value: Any JSON-serialisable value.
        """

        self._values[key] = value
        self._save()

    def remove(self, key: str) -> None:
        """Delete a value (if present) and write the store to disk."""

        if key in self._values:
            del self._values[key]
            self._save()

    def __contains__(self, key: str) -> bool:
        return key in self._values


class HighScore():
    # Key of the high score in the defaults store
    key = "NeonBreakoutHighScore"

    def __init__(self, store: DefaultsStore) -> None:
        self.store = store

    def load(self) -> int:
        """
        Read the persisted high score.

        Returns:
            int: The saved score, or 0 if there isn't one or it isn't a valid non-negative integer.
        """

        value = self.store.get(HighScore.key)

        # Note: bool is a subclass of int, but True is not a score
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            if value is not None:
                print(f"Ignoring malformed high score {value!r}")
            return 0

        return value

    def save(self, score: int) -> None:
        self.store.set(HighScore.key, int(score))

    def clear(self) -> None:
        self.store.remove(HighScore.key)
