"""Date formatting and other helpers shared by the HTML, PDF and Markdown renderers."""

import re
import unicodedata
from datetime import date, datetime
from typing import Any, Optional, Union
from jinja2 import Environment

ONGOING_MARKER = "Present"

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

# MM/YYYY, as entered in the forms
_MONTH_YEAR = re.compile(r"^(\d{1,2})/(\d{4})$")
# YYYY-MM with an optional day and time part
_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{1,2})(?:-\d{1,2})?(?:[T ].*)?$")

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9\-]+")


def _is_ongoing_marker(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() == ONGOING_MARKER.lower()


def format_date(value: Union[str, date, datetime, None]) -> str:
    """
    Format a date as "{3-letter month} {4-digit year}".

    Example: "01/2022" -> "Jan 2022", "2021-07-15" -> "Jul 2021"

    Args:
        value: MM/YYYY string, ISO date string, or date object

    Returns:
        str: Formatted date, "" for empty input, "Present" for the ongoing
        marker, or the input unchanged when it cannot be parsed
    """
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return f"{MONTH_ABBREVIATIONS[value.month - 1]} {value.year:04d}"

    text = str(value).strip()
    if not text:
        return ""
    if _is_ongoing_marker(text):
        return ONGOING_MARKER

    match = _MONTH_YEAR.match(text)
    if match:
        month, year = int(match.group(1)), match.group(2)
    else:
        match = _ISO_PREFIX.match(text)
        if not match:
            return text
        year, month = match.group(1), int(match.group(2))

    if not 1 <= month <= 12:
        return text
    return f"{MONTH_ABBREVIATIONS[month - 1]} {year}"


def is_ongoing(end_date: Optional[str], is_current: bool = False) -> bool:
    """
    Whether an entry is still running.

    ``is_current`` takes precedence: when it is set, any end date is ignored.
    Otherwise a missing end date or the "Present" marker means ongoing.
    """
    if is_current:
        return True
    if end_date is None or not str(end_date).strip():
        return True
    return _is_ongoing_marker(end_date)


def format_date_range(
    start_date: Optional[str],
    end_date: Optional[str] = None,
    is_current: bool = False,
) -> str:
    """
    Format a start/end pair as "{start} - {end}".

    Example: ("01/2020", None) -> "Jan 2020 - Present"
    """
    end = ONGOING_MARKER if is_ongoing(end_date, is_current) else format_date(end_date)
    return f"{format_date(start_date)} - {end}"


def entry_date_range(entry: Any) -> str:
    """Date range of any record with startDate/endDate/isCurrent attributes."""
    return format_date_range(
        getattr(entry, "startDate", None),
        getattr(entry, "endDate", None),
        getattr(entry, "isCurrent", False),
    )


def export_filename(full_name: Optional[str], extension: str, today: Optional[date] = None) -> str:
    """
    Build the download filename for an export.

    Example: ("Jane Doe", "pdf") -> "Jane_Doe_CV_2024-05-01.pdf"

    Args:
        full_name: Person's name; "CV" is used when empty
        extension: File extension without the dot
        today: Date to stamp, defaults to today

    Returns:
        str: ASCII-only, filesystem-safe filename; accents are folded and
        other non-ASCII characters dropped
    """
    today = today or date.today()
    folded = unicodedata.normalize("NFKD", (full_name or "").strip()).encode("ascii", "ignore").decode("ascii")
    name = _UNSAFE_FILENAME_CHARS.sub("_", folded).strip("_")
    stem = f"{name}_CV" if name else "CV"
    return f"{stem}_{today.isoformat()}.{extension.lstrip('.')}"


def register_jinja_filters(env: Environment) -> None:
    """
    Register helper functions as Jinja2 filters.

    Args:
        env: Jinja2 Environment instance
    """
    env.filters['format_date'] = format_date
    env.filters['date_range'] = entry_date_range
