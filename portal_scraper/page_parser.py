# -*- coding: utf-8 -*-
"""Extraction of homework and exam tables from a subject group page."""
from __future__ import annotations

import typing as t

from bs4 import BeautifulSoup, Tag
from loguru import logger

from portal_scraper.config import SECTION_TYPES
from portal_scraper.models import RawExam, RawHomework, SubjectPageData


def _cell_text(cells: list[Tag], index: int) -> str:
    if index < 0 or index >= len(cells):
        return ""
    return cells[index].get_text(" ", strip=True)


def _column_index(headers: list[str], keyword: str) -> int:
    for idx, text in enumerate(headers):
        if keyword in text:
            return idx
    return -1


def _section_type(header_text: str) -> t.Optional[tuple[str, bool]]:
    for key, config in SECTION_TYPES.items():
        if key in header_text:
            return config
    return None


def _find_section_table(header: Tag) -> t.Optional[Tag]:
    """Return the first table after ``header`` and before the next section header."""
    for sibling in header.find_next_siblings():
        if sibling.name == "h3":
            return None
        if sibling.name == "table":
            return sibling
        nested = sibling.find("table")
        if nested is not None:
            return nested
    return None


def _header_texts(table: Tag) -> tuple[list[str], list[Tag]]:
    rows = table.find_all("tr")
    if not rows:
        return [], []
    headers = [cell.get_text(" ", strip=True).lower() for cell in rows[0].find_all("th")]
    return headers, rows[1:]


def _parse_exam_table(table: Tag) -> list[RawExam]:
    headers, rows = _header_texts(table)
    due_idx = _column_index(headers, "pvm")
    time_idx = _column_index(headers, "klo")
    topic_idx = _column_index(headers, "aihe")
    description_idx = _column_index(headers, "lisätiedot")

    exams: list[RawExam] = []
    for row in rows:
        cells = row.find_all("td")
        if len(cells) < 2:
            continue
        exams.append(
            RawExam(
                due_date=_cell_text(cells, due_idx),
                topic=_cell_text(cells, topic_idx),
                description=_cell_text(cells, description_idx),
                time=_cell_text(cells, time_idx),
            )
        )
    return exams


def _parse_homework_table(table: Tag) -> list[RawHomework]:
    headers, rows = _header_texts(table)
    date_idx = _column_index(headers, "pvm")
    description_idx = _column_index(headers, "kuvaus")
    if date_idx < 0 or description_idx < 0:
        # Unlabelled table: date first, text second
        date_idx, description_idx = 0, 1

    homework: list[RawHomework] = []
    for row in rows:
        cells = row.find_all("td")
        if len(cells) < 2:
            continue
        homework.append(
            RawHomework(
                date_added=_cell_text(cells, date_idx),
                description=_cell_text(cells, description_idx),
            )
        )
    return homework


def parse_subject_page(html: str) -> SubjectPageData:
    """Parse a subject group page into homework, upcoming exams and past exams.

    Sections are located by their ``h3`` header inside ``main#main-content``;
    each section's rows come from the first table that follows the header.
    Columns are mapped by header keywords so reordered tables still parse.

    :param html: Page source.
    :return: The extracted rows, empty when the page has no main content.
    """
    soup = BeautifulSoup(html, "html.parser")
    data = SubjectPageData()

    main = soup.select_one("main#main-content")
    if main is None:
        logger.warning("Could not find main content area")
        return data

    for header in main.find_all("h3"):
        header_text = header.get_text(" ", strip=True)
        config = _section_type(header_text)
        if config is None:
            logger.debug(f"Skipping unknown section: {header_text!r}")
            continue

        kind, is_past = config
        if kind == "ignore":
            continue

        table = _find_section_table(header)
        if table is None:
            logger.debug(f"Could not find table for section: {header_text!r}")
            continue

        if kind == "exam":
            exams = _parse_exam_table(table)
            if is_past:
                data.past_exams.extend(exams)
            else:
                data.future_exams.extend(exams)
        elif kind == "homework":
            data.homework.extend(_parse_homework_table(table))

    return data
