import calendar
from datetime import datetime
from typing import Optional


def current_period(now: Optional[datetime] = None) -> tuple[int, int]:
    """Return (month, year) for the submission window containing ``now``."""
    now = now or datetime.now()
    return now.month, now.year


def month_name(month: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    return calendar.month_name[month]


def period_label(month: int, year: int) -> str:
    return f"{month_name(month)} {year}"


def photo_extension(filename: str) -> str:
    # everything after the last dot, case kept; a name without a dot keeps the whole name
    return filename.rsplit(".", 1)[-1]
