from __future__ import annotations

import math
import numbers
import re
import unicodedata
from datetime import datetime, time, timedelta
from typing import Dict, Optional

import pandas as pd

from creche_survey.schemas.datasets import NO_ANSWER_VALUES
from creche_survey.schemas.survey import Cell

# Day zero of spreadsheet serial dates (accounts for the 1900 leap-year quirk)
SPREADSHEET_EPOCH = datetime(1899, 12, 30)

# Exact closed answers mapped to their canonical label
CANONICAL_EXACT: Dict[str, str] = {
    "oui": "Oui",
    "yes": "Oui",
    "x": "Oui",
    "✓": "Oui",
    "1": "Oui",
    "non": "Non",
    "no": "Non",
    "0": "Non",
}

# Substrings mapped to their canonical label, checked in order
CANONICAL_CONTAINS = [
    ("très satisfait", "Très satisfait"),
    ("plutôt satisfait", "Plutôt satisfait"),
    ("peu satisfait", "Peu satisfait"),
    ("pas satisfait", "Pas satisfait"),
    ("toujours", "Toujours"),
    ("souvent", "Souvent"),
    ("parfois", "Parfois"),
    ("jamais", "Jamais"),
]

_NON_KEY_CHARS = re.compile(r"[^a-z0-9]+")
_NON_LETTERS = re.compile(r"[^a-z\s]")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_SPACES = re.compile(r"\s+")
_YEAR_FIRST = re.compile(r"^\d{4}[-/.]")


def is_empty_cell(value: Cell) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if value is pd.NaT:
        return True
    return str(value).strip() == ""


def cell_to_str(value: Cell) -> str:
    """Render a cell as trimmed text; integral floats lose their ``.0``."""
    if is_empty_cell(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y")
    return str(value).strip()


def is_no_answer(text: str) -> bool:
    return text.strip().lower() in NO_ANSWER_VALUES


def fold_accents(text: str) -> str:
    """Lowercase and strip diacritics (é -> e, ç -> c, ñ -> n)."""
    decomposed = unicodedata.normalize("NFKD", str(text).lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_label(text: str) -> str:
    folded = _NON_LETTERS.sub(" ", fold_accents(text))
    return _SPACES.sub(" ", folded).strip()


def normalize_facility_name(name: str) -> str:
    folded = _NON_ALNUM.sub(" ", fold_accents(name))
    return _SPACES.sub(" ", folded).strip()


def normalize_header_key(header: Optional[str]) -> str:
    """Slug a header: lowercase, each non-alphanumeric run becomes one underscore.

    Accented letters are not folded, so ``"Âge"`` gives ``"ge"``.
    """
    if header is None or str(header).strip() == "":
        return "unknown"
    key = _NON_KEY_CHARS.sub("_", str(header).lower())
    return key.strip("_")


def normalize_closed_answer(answer: str) -> str:
    text = answer.strip()
    lower = text.lower()
    if lower in CANONICAL_EXACT:
        return CANONICAL_EXACT[lower]
    for needle, label in CANONICAL_CONTAINS:
        if needle in lower:
            return label
    return text[:1].upper() + text[1:].lower()


def _naive(stamp: pd.Timestamp) -> datetime:
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert(None)
    return stamp.to_pydatetime()


def parse_date(value: Cell) -> Optional[datetime]:
    """Decode a spreadsheet serial day number or a literal date string.

    Anything that cannot be decoded yields ``None``.
    """
    if is_empty_cell(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _naive(pd.Timestamp(value))
    if isinstance(value, time):
        # Time-only cells carry no day
        return None
    if isinstance(value, numbers.Real):
        try:
            return SPREADSHEET_EPOCH + timedelta(days=float(value))
        except OverflowError:
            return None
    text = str(value).strip()
    year_first = _YEAR_FIRST.match(text) is not None
    parsed = pd.to_datetime(text, errors="coerce", dayfirst=not year_first, yearfirst=year_first)
    if pd.isna(parsed):
        return None
    return _naive(parsed)
