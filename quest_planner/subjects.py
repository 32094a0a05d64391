# -*- coding: utf-8 -*-
"""Subject name normalization from portal (Finnish) names to canonical English labels."""
from __future__ import annotations

from loguru import logger

# Order matters: when no exact match exists, the first key that matches wins.
SUBJECT_TRANSLATIONS: dict[str, str] = {
    "historia": "History",
    "matematiikka": "Math",
    "äidinkieli": "Finnish",
    "englanti": "English",
    "elämänkatsomustieto": "Ethics",
    "yhteiskuntaoppi": "Civics",
    "ympäristöoppi": "Eco",
    # Abbreviations and variants
    "suomi": "Finnish",
    "finska": "Finnish",
    "suomen kieli": "Finnish",
    "mat": "Math",
    "eng": "English",
    "et": "Ethics",
    "yht": "Civics",
    "ymp": "Eco",
    "hist": "History",
}

STANDARD_SUBJECTS: tuple[str, ...] = (
    "History", "Math", "Finnish", "English", "Ethics", "Civics", "Eco",
    "Crafts", "Art", "PE", "Music", "Digi",
)

UNKNOWN_SUBJECT = "Unknown"


def translate_subject_name(name: str) -> str:
    """Translate a subject name to its canonical English label.

    Matching runs exact (case-folded) first, then substring containment
    against each translation key in table order, then a case-insensitive
    match against the standard English names. Unmatched names are returned
    unchanged.

    Containment is checked both ways, so a short fragment such as ``"ti"``
    matches the first key that contains it (``"matematiikka"``).

    :param name: Subject name as written in the portal or by the user.
    :return: Canonical subject label.
    """
    if not name or not name.strip() or name.strip() == UNKNOWN_SUBJECT:
        return UNKNOWN_SUBJECT

    lowered = name.strip().lower()

    if lowered in SUBJECT_TRANSLATIONS:
        return SUBJECT_TRANSLATIONS[lowered]

    for key, english in SUBJECT_TRANSLATIONS.items():
        if key in lowered or lowered in key:
            return english

    for subject in STANDARD_SUBJECTS:
        if subject.lower() == lowered:
            return subject

    logger.info(f"Unknown subject: {name}")
    return name
