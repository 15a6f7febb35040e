# ABOUTME: ISO-8601 week arithmetic on UTC calendar days.
# ABOUTME: Parses publication timestamps and maps instants to week numbers, keys and ranges.

from datetime import UTC, date, datetime, time, timedelta
from email.utils import parsedate_to_datetime

from linkit_weekly.exceptions import InvalidInputError

DATE_FORMAT = "%d.%m.%Y"
RANGE_SEPARATOR = "–"

# Sunday of the last ISO week that fits entirely before date.max.
_LAST_WEEK_END = date.max - timedelta(days=date.max.weekday() + 1)


def parse_published_at(value: object) -> datetime | None:
    """Parse a publication timestamp into an aware UTC datetime.

    Accepts datetime objects, ISO-8601 strings, RFC-822 dates as used by RSS
    ``pubDate`` and epoch seconds. Naive values are taken as UTC.

    Returns:
        The instant in UTC, or None if the value is missing or unparsable.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, int | float):
        try:
            parsed = datetime.fromtimestamp(value, UTC)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            try:
                parsed = parsedate_to_datetime(text)
            except (TypeError, ValueError, IndexError):
                return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    try:
        parsed = parsed.astimezone(UTC)
    except OverflowError:
        return None

    # Weeks running past date.max have no representable range.
    if parsed.date() > _LAST_WEEK_END:
        return None
    return parsed


def _utc_day(value: datetime | date) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()
    return value


def iso_week(value: datetime | date) -> tuple[int, int]:
    """Return (ISO year, ISO week) of the UTC calendar day of ``value``."""
    iso = _utc_day(value).isocalendar()
    return iso.year, iso.week


def week_number(value: datetime | date) -> int:
    """ISO-8601 week number: the week holding the day's Thursday decides.

    Week 1 is the week containing the year's first Thursday.
    """
    return iso_week(value)[1]


def week_key(year: int, week: int) -> str:
    """Digest key, zero-padded so string order matches chronological order."""
    return f"{year}-W{week:02d}"


def week_monday(week: int, year: int) -> date:
    """Monday of ISO week ``week`` in ISO year ``year``."""
    try:
        return date.fromisocalendar(year, week, 1)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"No ISO week {week} in year {year}") from e


def week_date_range(week: int, year: int) -> str:
    """Human-readable Monday-Sunday span, e.g. '29.12.2025–04.01.2026'."""
    monday = week_monday(week, year)
    sunday = monday + timedelta(days=6)
    return f"{monday.strftime(DATE_FORMAT)}{RANGE_SEPARATOR}{sunday.strftime(DATE_FORMAT)}"


def week_start(value: datetime | date) -> datetime:
    """Monday 00:00:00.000000 UTC on or before ``value``."""
    day = _utc_day(value)
    monday = day - timedelta(days=day.weekday())
    return datetime.combine(monday, time.min, tzinfo=UTC)


def week_end(value: datetime | date) -> datetime:
    """Sunday 23:59:59.999999 UTC on or after ``value``."""
    day = _utc_day(value)
    sunday = day + timedelta(days=6 - day.weekday())
    return datetime.combine(sunday, time.max, tzinfo=UTC)


def in_week(instant: datetime, reference: datetime | date) -> bool:
    """Inclusive membership test: week_start <= instant <= week_end."""
    return week_start(reference) <= instant <= week_end(reference)
