"""Reporting period shorthands and date bucketing."""

from datetime import datetime, timedelta

from stayhub.database import utcnow

PERIODS = ("7d", "30d", "90d", "1y")
DEFAULT_PERIOD = "30d"

_DAYS = {"7d": 7, "30d": 30, "90d": 90}

BUCKET_FORMATS = {
    "hour": "%Y-%m-%d %H:00",
    "day": "%Y-%m-%d",
    "week": "%Y-W%U",
    "month": "%Y-%m",
}


def resolve_period(period: str | None, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Translate a period shorthand into a ``(start, end)`` range ending now.

    Unknown shorthands fall back to the last 30 days.
    """
    end = now or utcnow()
    if period == "1y":
        try:
            start = end.replace(year=end.year - 1)
        except ValueError:
            # Feb 29 has no counterpart in the previous year.
            start = end.replace(year=end.year - 1, day=28)
        return start, end
    return end - timedelta(days=_DAYS.get(period or DEFAULT_PERIOD, 30)), end


def normalize_period(period: str | None) -> str:
    return period if period in PERIODS else DEFAULT_PERIOD


def bucket(moment: datetime, group_by: str = "day") -> str:
    """Label for the reporting bucket containing ``moment``."""
    return moment.strftime(BUCKET_FORMATS.get(group_by, BUCKET_FORMATS["day"]))
