# -*- coding: utf-8 -*-
"""
Document store interface and the in-memory implementation.

Records live in named collections keyed by string ids. The in-memory store
is what tests and the record service use; ``mcp_wrappers.record_store``
provides the same interface over HTTP.
"""
from __future__ import annotations

import copy
import typing as t
import uuid

from loguru import logger

from quest_planner.models import ScheduleEntry

TASKS = "tasks"
STUDENTS = "students"
SCHEDULE_CONFIG = "scheduleConfig"
SUBJECTS = "subjects"

Document = dict[str, t.Any]


class RecordStoreError(RuntimeError):
    """Raised when the document store cannot be read or written."""


@t.runtime_checkable
class RecordStore(t.Protocol):
    def read_all(self, collection: str) -> dict[str, Document]: ...

    def read_one(self, collection: str, key: str) -> t.Optional[Document]: ...

    def write_one(self, collection: str, key: str, document: Document) -> None: ...

    def add(self, collection: str, document: Document) -> str: ...

    def update(self, collection: str, key: str, changes: Document) -> None: ...

    def delete(self, collection: str, key: str) -> None: ...

    def query(self, collection: str, **equals: t.Any) -> dict[str, Document]: ...


class InMemoryRecordStore:
    """Dictionary-backed store; documents are copied on the way in and out."""

    def __init__(self, initial: t.Optional[dict[str, dict[str, Document]]] = None) -> None:
        self._collections: dict[str, dict[str, Document]] = copy.deepcopy(initial) if initial else {}

    def read_all(self, collection: str) -> dict[str, Document]:
        return copy.deepcopy(self._collections.get(collection, {}))

    def read_one(self, collection: str, key: str) -> t.Optional[Document]:
        document = self._collections.get(collection, {}).get(key)
        return copy.deepcopy(document) if document is not None else None

    def write_one(self, collection: str, key: str, document: Document) -> None:
        self._collections.setdefault(collection, {})[key] = copy.deepcopy(document)

    def add(self, collection: str, document: Document) -> str:
        key = uuid.uuid4().hex[:20]
        self.write_one(collection, key, document)
        return key

    def update(self, collection: str, key: str, changes: Document) -> None:
        documents = self._collections.get(collection, {})
        if key not in documents:
            raise RecordStoreError(f"No document '{key}' in collection '{collection}'")
        documents[key].update(copy.deepcopy(changes))

    def delete(self, collection: str, key: str) -> None:
        self._collections.get(collection, {}).pop(key, None)

    def query(self, collection: str, **equals: t.Any) -> dict[str, Document]:
        return {
            key: copy.deepcopy(document)
            for key, document in self._collections.get(collection, {}).items()
            if all(document.get(field) == value for field, value in equals.items())
        }


class ConfigStore:
    """Subject schedule configuration kept in the ``scheduleConfig`` collection."""

    def __init__(self, store: RecordStore, collection: str = SCHEDULE_CONFIG) -> None:
        self.store = store
        self.collection = collection

    def get_schedule(self, subject: str) -> t.Optional[ScheduleEntry]:
        document = self.store.read_one(self.collection, subject)
        if document is None:
            return None
        return ScheduleEntry.from_dict(subject, document)

    def set_schedule(self, entry: ScheduleEntry) -> None:
        self.store.write_one(self.collection, entry.subject, entry.to_dict())
        logger.debug(f"Stored schedule for {entry.subject}: {', '.join(entry.class_days) or 'no class days'}")

    def all_schedules(self) -> list[ScheduleEntry]:
        return [
            ScheduleEntry.from_dict(subject, document)
            for subject, document in self.store.read_all(self.collection).items()
        ]
