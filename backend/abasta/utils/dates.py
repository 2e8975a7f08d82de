"""Report date boundaries.

Accepted inputs:
  2025-12-07T14:23:59      ISO date-time (fractional seconds, offset or Z allowed)
  2025-12-07 14:23:59      space-separated date-time
  2025-12-07               bare date → start of day, or end of day for an end bound
"""

from datetime import datetime, time, timedelta, timezone

from abasta.middleware.exceptions import BadRequestError

END_OF_DAY = time(23, 59, 59, 999999)


def parse_report_date(value: str | None, end: bool = False) -> datetime | None:
    if value is None or not value.strip():
        return None
    value = value.strip()

    if "T" in value:
        # fromisoformat only accepts a "Z" suffix from Python 3.11
        if value.endswith(("Z", "z")):
            value = value[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            raise BadRequestError(f"Invalid date format: {value}")
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    try:
        return datetime.strptime(value, "%Y-%m-%d %H:%M:%S")
    except ValueError:
        pass

    try:
        day = datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise BadRequestError(f"Invalid date format: {value}")
    return datetime.combine(day, END_OF_DAY if end else time.min)


def resolve_window(
    start: str | None,
    end: str | None,
    default_days: int,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Turn optional query-string bounds into an inclusive [start, end] window.

    Missing bounds fall back to the trailing `default_days` ending now.
    """
    now = now or datetime.utcnow()
    start_dt = parse_report_date(start)
    end_dt = parse_report_date(end, end=True)

    if end_dt is None:
        end_dt = now
    if start_dt is None:
        start_dt = end_dt - timedelta(days=default_days)
    if start_dt > end_dt:
        raise BadRequestError("Start date must be before end date")
    return start_dt, end_dt

