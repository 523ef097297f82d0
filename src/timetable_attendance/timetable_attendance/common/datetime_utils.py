from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Union

from ..core.exceptions import ValidationError

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?:\s*([AaPp][Mm]))?$")


def time_to_minutes(value: str) -> int:
    """Convert a wall-clock string to minutes since midnight.

    Accepts 12-hour strings with a meridiem ("09:30 AM", "12:15 PM") and
    24-hour strings ("14:00").
    """

    m = _CLOCK_RE.match((value or "").strip())
    if not m:
        raise ValidationError(f"Invalid time: {value!r}")

    hours = int(m.group(1))
    minutes = int(m.group(2))
    meridiem = (m.group(3) or "").upper()

    if minutes > 59:
        raise ValidationError(f"Invalid time: {value!r}")

    if meridiem:
        if not 1 <= hours <= 12:
            raise ValidationError(f"Invalid time: {value!r}")
        if hours == 12:
            hours = 0
        if meridiem == "PM":
            hours += 12
    elif hours > 23:
        raise ValidationError(f"Invalid time: {value!r}")

    return hours * 60 + minutes


def normalize_session_date(value: Union[date, datetime, str]) -> datetime:
    """Map any point in a calendar day to midnight UTC of that day.

    Aware datetimes are converted to UTC first; naive values are taken as UTC.
    """

    if isinstance(value, str):
        raw = value.strip()
        try:
            value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"Invalid date: {raw!r}")

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        day = value.date()
    elif isinstance(value, date):
        day = value
    else:
        raise ValidationError(f"Invalid date: {value!r}")

    return datetime.combine(day, time.min, tzinfo=timezone.utc)
