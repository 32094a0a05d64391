"""
Data models for quest board records.

This module contains the dataclasses stored in the task and student
collections, along with their conversion to and from stored documents.
"""
from __future__ import annotations

import typing as t
from dataclasses import asdict, dataclass, fields

TaskType = t.Literal["homework", "exam"]


@dataclass
class Task:
    """A homework or exam entry for a student."""
    subject: str
    description: str
    type: str = "homework"
    status: str = "open"
    date: str = ""  # "YYYY-MM-DD" the task was assigned, "" if unknown
    due_date: str = ""  # "YYYY-MM-DD", "" until resolved
    topic: str = ""
    student_id: int = 1
    completed: bool = False
    due_date_calculation_method: str = ""
    id: str = ""

    def to_document(self) -> dict[str, t.Any]:
        """Stored form of the task; the id is the document key, not a field."""
        document = asdict(self)
        document.pop("id")
        if not document["topic"]:
            document.pop("topic")
        if not document["due_date_calculation_method"]:
            document.pop("due_date_calculation_method")
        return document

    @classmethod
    def from_document(cls, key: str, document: t.Mapping[str, t.Any]) -> "Task":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in document.items() if k in known and k != "id"}
        # Older records stored the posting date as date_added
        if not values.get("date") and document.get("date_added"):
            values["date"] = document["date_added"]
        values.setdefault("subject", "Unknown")
        values.setdefault("description", "")
        return cls(id=key, **values)


@dataclass
class Student:
    """A student whose tasks are tracked."""
    id: int
    name: str
