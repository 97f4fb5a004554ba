"""Display formatting for amounts, dates and references."""

import re
from datetime import UTC, datetime

from marketplace.conf import settings

DateLike = str | datetime | None

NON_DIGIT = re.compile(r"\D")


def format_currency(amount: float, currency: str | None = None) -> str:
    """Format an amount with no decimals, e.g. `UGX 50,000`."""
    return f"{currency or settings.DEFAULT_CURRENCY} {round(amount):,}"


def parse_date(value: DateLike) -> datetime | None:
    """Parse an ISO 8601 string (a trailing `Z` is accepted); None if missing or invalid."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_date(value: DateLike, fmt: str = "%B %-d, %Y") -> str:
    """Long date, e.g. `March 7, 2026`; `N/A` when the date is missing or invalid."""
    parsed = parse_date(value)
    if parsed is None:
        return "N/A"
    return parsed.strftime(fmt)


def format_datetime(value: DateLike) -> str:
    """Long date with time, e.g. `March 7, 2026 7:30 PM`."""
    return format_date(value, "%B %-d, %Y %-I:%M %p")


def format_relative_time(value: DateLike, now: datetime | None = None) -> str:
    """Human distance from now, e.g. `3 hours ago` or `in 2 days`."""
    parsed = parse_date(value)
    if parsed is None:
        return "Just now"
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    now = now or datetime.now(UTC)
    seconds = (now - parsed).total_seconds()
    distance = _distance_in_words(abs(seconds))
    return f"{distance} ago" if seconds >= 0 else f"in {distance}"


_UNITS: list[tuple[str, float]] = [
    ("year", 365 * 24 * 3600),
    ("month", 30 * 24 * 3600),
    ("day", 24 * 3600),
    ("hour", 3600),
    ("minute", 60),
]


def _distance_in_words(seconds: float) -> str:
    if seconds < 60:
        return "less than a minute"
    for unit, size in _UNITS:
        if seconds >= size:
            count = round(seconds / size)
            return f"{count} {unit}" if count == 1 else f"{count} {unit}s"
    return "less than a minute"  # pragma: no cover


def format_ticket_number(ticket_number: str | None) -> str:
    return (ticket_number or "").upper()


def format_booking_ref(ref: str | None) -> str:
    return (ref or "").upper()


def truncate(text: str | None, length: int) -> str:
    """Cut `text` to `length` characters, appending `...` when shortened."""
    if not text:
        return ""
    if len(text) <= length:
        return text
    return text[:length] + "..."


def format_phone_number(phone: str | None) -> str:
    """Group digits as `+XXX XXX XXX XXX`; numbers with fewer than 10 digits are returned as given."""
    if not phone:
        return ""
    cleaned = NON_DIGIT.sub("", phone)
    if len(cleaned) >= 10:
        return f"+{cleaned[:3]} {cleaned[3:6]} {cleaned[6:9]} {cleaned[9:]}"
    return phone
