"""
Normalization library - canonical forms for comparing local and remote values.

Every normalizer is pure, total and idempotent: it never raises, and feeding
its output back in returns the same value. Equality of normalized values is
what decides whether two records differ.
"""
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional, Tuple


class FieldKind(str, Enum):
    DATE = "date"
    YEAR = "year"
    STRING = "string"
    KEY = "key"
    STRING_SET = "string_set"
    TRISTATE = "tristate"


MONTHS = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

_FULL_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
_YEAR_MONTH = re.compile(r"^(\d{4})[-/](\d{1,2})$")
_MONTH_YEAR = re.compile(r"^(\d{1,2})/(\d{4})$")
_YEAR_ONLY = re.compile(r"^(\d{4})$")
_MONTH_NAME_YEAR = re.compile(r"^([a-z]+)\.?,?\s+(\d{4})$")
_YEAR_RUN = re.compile(r"(?<!\d)(\d{4})(?!\d)")
_SET_SEPARATORS = re.compile(r"[,;\n]+")
_WHITESPACE = re.compile(r"\s+")

TRUE_WORDS = {"true", "yes", "y", "1", "on"}
FALSE_WORDS = {"false", "no", "n", "0", "off"}


# ============================================================================
# Helper Functions
# ============================================================================

def _format_date(year: int, month: int, day: int) -> str:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return ""


def pick(record: Any, *aliases: str, default: Any = None) -> Any:
    """Return the first alias of `record` holding a non-null, non-blank value."""
    if not isinstance(record, dict):
        return default
    for alias in aliases:
        value = record.get(alias)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return default


# ============================================================================
# Normalizers
# ============================================================================

def normalize_date(value: Any) -> str:
    """
    Canonical `YYYY-MM-DD` date, or "" when the value carries no usable date.

    Accepts full ISO dates/datetimes, `YYYY-MM`, `MM/YYYY`, bare years and
    month-name forms such as "Aug 2021". Partial dates pad to the first day.
    """
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, int):
        return _format_date(value, 1, 1) if 1000 <= value <= 9999 else ""

    text = str(value).strip().lower()
    if not text:
        return ""

    match = _FULL_DATE.match(text)
    if match:
        return _format_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    match = _YEAR_MONTH.match(text)
    if match:
        return _format_date(int(match.group(1)), int(match.group(2)), 1)

    match = _MONTH_YEAR.match(text)
    if match:
        return _format_date(int(match.group(2)), int(match.group(1)), 1)

    match = _YEAR_ONLY.match(text)
    if match:
        return _format_date(int(match.group(1)), 1, 1)

    match = _MONTH_NAME_YEAR.match(text)
    if match and match.group(1) in MONTHS:
        return _format_date(int(match.group(2)), MONTHS[match.group(1)], 1)

    # "present", "current", free text
    return ""


def normalize_year(value: Any) -> str:
    """First four-digit run in the value, or ""."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (date, datetime)):
        return f"{value.year:04d}"
    match = _YEAR_RUN.search(str(value))
    return match.group(1) if match else ""


def normalize_string(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_key(value: Any) -> str:
    """Trimmed, whitespace-collapsed, lower-cased string for content keys."""
    return _WHITESPACE.sub(" ", normalize_string(value)).lower()


def _iter_set_items(value: Any) -> Iterable[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        return _SET_SEPARATORS.split(value)
    if isinstance(value, dict):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        return value
    return [value]


def normalize_string_set(value: Any) -> Tuple[str, ...]:
    """Sorted tuple of distinct, trimmed, non-blank strings."""
    items = set()
    for item in _iter_set_items(value):
        if isinstance(item, dict):
            item = pick(item, "label", "name", "value")
        text = normalize_string(item)
        if text:
            items.add(text)
    return tuple(sorted(items))


def normalize_tristate(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in TRUE_WORDS:
        return True
    if text in FALSE_WORDS:
        return False
    return None


_NORMALIZERS = {
    FieldKind.DATE: normalize_date,
    FieldKind.YEAR: normalize_year,
    FieldKind.STRING: normalize_string,
    FieldKind.KEY: normalize_key,
    FieldKind.STRING_SET: normalize_string_set,
    FieldKind.TRISTATE: normalize_tristate,
}


def normalize(kind: FieldKind, value: Any) -> Any:
    """Dispatch to the normalizer for `kind`."""
    return _NORMALIZERS[FieldKind(kind)](value)
