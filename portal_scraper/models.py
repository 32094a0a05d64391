"""
Data models for rows scraped from the school portal.

Values are kept exactly as shown on the page; normalization happens in
``ingestion.processor``.
"""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RawHomework:
    """A homework row: the posting date and the assignment text."""
    date_added: str = ""
    description: str = ""


@dataclass
class RawExam:
    """An exam row from the upcoming or past exams table."""
    due_date: str = ""
    topic: str = ""
    description: str = ""
    time: str = ""


@dataclass
class SubjectPageData:
    """Everything extracted from one subject's group page."""
    homework: list[RawHomework] = field(default_factory=list)
    future_exams: list[RawExam] = field(default_factory=list)
    past_exams: list[RawExam] = field(default_factory=list)


@dataclass
class SubjectExtraction:
    """Extraction result for one subject; ``error`` is set when the page failed."""
    subject: str
    data: SubjectPageData = field(default_factory=SubjectPageData)
    error: str = ""
