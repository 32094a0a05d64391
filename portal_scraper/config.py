"""Configuration for the school portal scraper."""
from __future__ import annotations

import os
from pathlib import Path

PORTAL_BASE_URL = os.getenv("PORTAL_BASE_URL", "https://opetustampere.inschool.fi/")
PORTAL_USERNAME = os.getenv("PORTAL_USERNAME", "")
PORTAL_PASSWORD = os.getenv("PORTAL_PASSWORD", "")
PORTAL_HEADLESS = os.getenv("PORTAL_HEADLESS", "true").lower() not in ("0", "false", "no")

DATA_DIR = Path(os.getenv("QUESTBOARD_DATA_DIR", Path(__file__).resolve().parent.parent / "data"))
COOKIES_FILE = DATA_DIR / "cookies.json"

# Seconds between page loads, to stay under the portal's rate limiting
REQUEST_DELAY = float(os.getenv("PORTAL_REQUEST_DELAY", "2.0"))
PAGE_LOAD_TIMEOUT = 30
LOGIN_TIMEOUT = 20

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Course group pages, one per subject
SUBJECT_PAGES: list[tuple[str, str]] = [
    ("History", "https://opetustampere.inschool.fi/!0466066/groups/137349"),
    ("Math", "https://opetustampere.inschool.fi/!0466066/groups/137353"),
    ("Finnish", "https://opetustampere.inschool.fi/!0466066/groups/137358"),
    ("English", "https://opetustampere.inschool.fi/!0466066/groups/137348"),
    ("Ethics", "https://opetustampere.inschool.fi/!0466066/groups/137338"),
    ("Civics", "https://opetustampere.inschool.fi/!0466066/groups/137356"),
    ("Eco", "https://opetustampere.inschool.fi/!0466066/groups/137357"),
]

# Section headers on a group page and what they contain: (kind, is_past)
SECTION_TYPES: dict[str, tuple[str, bool]] = {
    "Tulevat kokeet": ("exam", False),
    "Menneet kokeet": ("exam", True),
    "Kotitehtävät": ("homework", False),
    "Tuntipäiväkirja": ("ignore", False),
}
