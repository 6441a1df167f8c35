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

"""
Player-created records: logged game sessions and custom brick designs.

Both collections are flat, order-preserving lists stored as a JSON blob under a fixed key of the defaults
store. There is no schema migration; a blob that can't be decoded is treated as an empty collection.
"""

from __future__ import annotations
import base64
import dataclasses
import uuid
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from crystabrick.storage import DefaultsStore


def _encode_bytes(data: bytes | None) -> str | None:
    return None if data is None else base64.b64encode(data).decode("ascii")


def _decode_bytes(text: str | None) -> bytes | None:
    return None if text is None else base64.b64decode(text, validate=True)


@dataclass
class GameSession:
    level_selected: str
    power_up_used: str
    total_bricks_broken: int
    combo_streaks: int
    lives_left: int
    time_taken: int
    theme_used: str
    status: str
    custom_paddle_image: bytes | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["id"] = str(self.id)
        data["custom_paddle_image"] = _encode_bytes(self.custom_paddle_image)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameSession:
        data = dict(data)
        data["id"] = uuid.UUID(data["id"])
        data["custom_paddle_image"] = _decode_bytes(data.get("custom_paddle_image"))
        return cls(**data)


@dataclass
class CreatorDesign:
    brick_color_scheme_name: str
    neon_trail_effect: str
    custom_power_up_name: str
    paddle_skin_color: str
    challenge_title: str
    brick_pattern_style: str
    challenge_difficulty: int
    status: str
    brick_image: bytes | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["id"] = str(self.id)
        data["brick_image"] = _encode_bytes(self.brick_image)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CreatorDesign:
        data = dict(data)
        data["id"] = uuid.UUID(data["id"])
        data["brick_image"] = _decode_bytes(data.get("brick_image"))
        return cls(**data)


T = TypeVar("T", GameSession, CreatorDesign)


class RecordStore(Generic[T]):
    """
    CRUD over an ordered collection of records, re-saved in full after every change.

    Subclasses set `key` (the defaults store key) and `record_type`.
    """

    key: str = ""
    record_type: type = object

    def __init__(self, store: DefaultsStore) -> None:
        self.store = store
        self.records: list[T] = self._load()

    def _load(self) -> list[T]:
        blob = self.store.get(self.key)
        if blob is None:
            return []

        try:
            return [self.record_type.from_dict(item) for item in blob]
        except (TypeError, KeyError, ValueError, AttributeError) as e:
            print(f"Ignoring malformed {self.key}: {e}")
            return []

    def _save(self) -> None:
        self.store.set(self.key, [record.to_dict() for record in self.records])

    def _index_of(self, id: uuid.UUID) -> int:
        for index, record in enumerate(self.records):
            if record.id == id:
                return index
        raise KeyError(id)

    def list(self) -> list[T]:
        """All records, in the order they were added."""

        return list(self.records)

    def get(self, id: uuid.UUID) -> T:
        """
        Look up a record.

        Raises:
            KeyError: If no record has this id.
        """

        return self.records[self._index_of(id)]

    def add(self, record: T) -> None:
        """
        Append a record.

        Raises:
            ValueError: If a record with the same id already exists.
        """

        if any(existing.id == record.id for existing in self.records):
            raise ValueError(f"Duplicate record id {record.id}")

        self.records.append(record)
        self._save()

    def update(self, record: T) -> None:
        """
        Replace the stored record that has the same id, keeping its position.

        Raises:
            KeyError: If no record has this id.
        """

        self.records[self._index_of(record.id)] = record
        self._save()

    def delete(self, id: uuid.UUID) -> T:
        """
        Remove a record by id.

        Returns:
            The removed record.

        Raises:
            KeyError: If no record has this id.
        """

        record = self.records.pop(self._index_of(id))
        self._save()
        return record

    def delete_at(self, index: int) -> T:
        """
        Remove a record by its position in the list.

        Raises:
            IndexError: If the index is out of range.
        """

        record = self.records.pop(index)
        self._save()
        return record

    def __len__(self) -> int:
        return len(self.records)


class GameSessions(RecordStore[GameSession]):
    key = "SavedGameSessions"
    record_type = GameSession


class CreatorDesigns(RecordStore[CreatorDesign]):
    key = "SavedCreatorDesigns"
    record_type = CreatorDesign
