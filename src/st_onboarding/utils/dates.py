import calendar
import datetime
import re
from typing import NamedTuple, Optional

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class DateParts(NamedTuple):
    """Year, month and day of a date as strings, for segmented date widgets."""

    year: str = ""
    month: str = ""
    day: str = ""


def parse_iso_date(value: Optional[str]) -> Optional[datetime.date]:
    """Parse a ``YYYY-MM-DD`` string, returning None when it is empty or invalid."""

    if not value or not ISO_DATE_RE.match(str(value)):
        return None

    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        return None


def compute_age(born: datetime.date, today: datetime.date) -> int:
    """Age in whole years: the year difference, minus one if the birthday has not come yet."""

    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1

    return age


def age_from_iso(value: Optional[str], today: Optional[datetime.date] = None) -> int:
    """Age for an ISO date string. Empty or unparseable dates count as age 0."""

    born = parse_iso_date(value)
    if born is None:
        return 0

    return compute_age(born, today or datetime.date.today())


def days_in_month(year: int, month: int) -> int:
    # month is 1..12
    return calendar.monthrange(year, month)[1]


def split_iso_date(value: Optional[str]) -> DateParts:
    """Decompose an ISO date into its parts. Anything else yields empty parts."""

    if not value or not ISO_DATE_RE.match(str(value)):
        return DateParts()

    year, month, day = value.split("-")
    return DateParts(year, month, day)


def join_date_parts(year: str, month: str, day: str) -> str:
    """
    Compose an ISO date from its parts.

    Returns "" until all three parts are present and numeric. The day is clamped
    to the last day of the month, so switching from 31 January to February keeps
    a valid date.
    """

    parts = [str(p).strip() for p in (year, month, day)]
    if not all(p.isdigit() for p in parts):
        return ""

    y, m, d = (int(p) for p in parts)
    if not (1 <= y <= 9999 and 1 <= m <= 12 and d >= 1):
        return ""

    d = min(d, days_in_month(y, m))
    return f"{y:04d}-{m:02d}-{d:02d}"


def format_nice_date(value: Optional[str]) -> str:
    """Render an ISO date as e.g. ``05 Mar 1999``; "" when it cannot be parsed."""

    parsed = parse_iso_date(value)
    if parsed is None:
        return ""

    return parsed.strftime("%d %b %Y")
