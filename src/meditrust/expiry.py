"""Resolution of heterogeneous expiry strings into dated assessments."""

from __future__ import annotations

import calendar
import math
import re
from datetime import date, datetime, time, timezone
from typing import Optional

from .models import UNKNOWN, ExpiryAssessment

NEAR_EXPIRY_DAYS = 30
SECONDS_PER_DAY = 86400

_ISO_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
_ISO_YEAR_MONTH = re.compile(r"^(\d{4})-(\d{2})$")
_MONTH_YEAR = re.compile(r"^(\d{1,2})[/-](\d{4})$")
_COMPACT_DATE = re.compile(r"^(\d{4})(\d{2})(\d{2})?$")

# Tried in order for anything the structured formats did not match.
_TEXTUAL_FORMATS = (
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%d.%m.%Y",
)

# Month precision only; resolved to the end of that month.
_TEXTUAL_MONTH_FORMATS = (
    "%B %Y",
    "%b %Y",
)


class ExpiryCalculator:
    """Classifies expiry strings relative to a caller supplied instant."""

    def __init__(self, near_expiry_days: int = NEAR_EXPIRY_DAYS) -> None:
        if near_expiry_days < 0:
            raise ValueError("near_expiry_days cannot be negative")
        self._near_expiry_days = near_expiry_days

    @property
    def near_expiry_days(self) -> int:
        return self._near_expiry_days

    def assess(self, raw_expiry: str, now: datetime) -> ExpiryAssessment:
        """Resolve ``raw_expiry`` and compare it against ``now``.

        ``now`` is always injected; naive datetimes are taken to be UTC.
        """

        instant = resolve_expiry(raw_expiry)
        if instant is None:
            return ExpiryAssessment(
                resolved_instant=None,
                is_expired=False,
                is_near_expiry=False,
                days_until_expiry=None,
            )

        delta = instant - _as_utc(now)
        days = math.ceil(delta.total_seconds() / SECONDS_PER_DAY)
        return ExpiryAssessment(
            resolved_instant=instant,
            is_expired=days < 0,
            is_near_expiry=0 <= days <= self._near_expiry_days,
            days_until_expiry=days,
        )


def resolve_expiry(raw_expiry: Optional[str]) -> Optional[datetime]:
    """Parse an expiry string into a UTC instant, or ``None`` if unparsable.

    Formats are tried in order, first match wins:

    1. ISO-8601 date or date/time.
    2. ``MM/YYYY`` or ``MM-YYYY``, meaning the end of the last day of the month.
       ISO ``YYYY-MM`` and textual ``Mar 2030`` are read the same way.
    3. ``YYYYMMDD`` or ``YYYYMM`` (day defaults to the 1st).
    4. A handful of textual forms such as ``15 March 2030``.
    """

    if not raw_expiry:
        return None
    text = raw_expiry.strip()
    if not text or text.lower() == UNKNOWN.lower():
        return None

    if _ISO_PREFIX.match(text):
        try:
            return _as_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except (ValueError, OverflowError):
            return None

    match = _ISO_YEAR_MONTH.match(text)
    if match:
        return _end_of_month(int(match.group(1)), int(match.group(2)))

    match = _MONTH_YEAR.match(text)
    if match:
        instant = _end_of_month(int(match.group(2)), int(match.group(1)))
        if instant is not None:
            return instant

    match = _COMPACT_DATE.match(text)
    if match:
        year, month = int(match.group(1)), int(match.group(2))
        day = int(match.group(3)) if match.group(3) else 1
        try:
            return datetime(year, month, day, tzinfo=timezone.utc)
        except ValueError:
            pass

    for fmt in _TEXTUAL_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    for fmt in _TEXTUAL_MONTH_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return _end_of_month(parsed.year, parsed.month)
    return None


def display_expiry(raw_expiry: str, assessment: ExpiryAssessment) -> str:
    """Normalized display form: ISO date when resolved, otherwise the raw text."""

    if assessment.resolved_instant is not None:
        return assessment.resolved_instant.date().isoformat()
    text = (raw_expiry or "").strip()
    return text or UNKNOWN


def _end_of_month(year: int, month: int) -> Optional[datetime]:
    if not (1 <= month <= 12 and year >= 1):
        return None
    last_day = calendar.monthrange(year, month)[1]
    return datetime.combine(date(year, month, last_day), time.max, tzinfo=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


__all__ = [
    "NEAR_EXPIRY_DAYS",
    "ExpiryCalculator",
    "resolve_expiry",
    "display_expiry",
]
