"""
Shared Pydantic models for REST API serialization.

This module contains the request and response bodies of the record and
schedule services, mirroring the dataclasses used elsewhere so JSON
serialization stays consistent between services and clients.
"""
from __future__ import annotations

import typing as t
from pydantic import BaseModel, Field


CalculationMethod = t.Literal["schedule", "default", "error"]


# Record Service Models
class DocumentBody(BaseModel):
    """A stored document; fields are free-form."""
    data: dict[str, t.Any] = Field(default_factory=dict)


class AddDocumentResponse(BaseModel):
    """Key assigned to a newly added document."""
    key: str


class QueryRequest(BaseModel):
    """Equality filters, AND-ed together."""
    equals: dict[str, t.Any] = Field(default_factory=dict)


class CollectionResponse(BaseModel):
    """Documents of a collection keyed by document id."""
    documents: dict[str, dict[str, t.Any]] = Field(default_factory=dict)


# Schedule Service Models
class ScheduleEntryModel(BaseModel):
    """Weekly recurrence of one subject as stored in the config collection."""
    classDays: list[str] = Field(default_factory=list)  # ["Monday", "Friday"]
    defaultDueInterval: int = 7


class ResolveDueDateRequest(BaseModel):
    """Request model for resolving a due date."""
    subject: str
    creation_date: str  # "YYYY-MM-DD" or "DD.MM.YYYY"
    default_interval: int = Field(default=7, gt=0)
    horizon_days: int = Field(default=14, gt=0)


class ResolveDueDateResponse(BaseModel):
    """Resolved due date and how it was obtained."""
    subject: str
    dueDate: str  # "YYYY-MM-DD"
    calculationMethod: CalculationMethod
    nextClassInfo: str


class NextClassResponse(BaseModel):
    """When the subject's next class takes place, counting today."""
    subject: str
    found: bool
    daysUntil: t.Optional[int] = None
    weekday: t.Optional[str] = None
    label: str
