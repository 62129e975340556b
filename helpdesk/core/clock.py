# helpdesk/core/clock.py
from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return to_iso(utc_now())


def parse_iso(value: str) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def stamp_after(previous: str) -> str:
    """Current time as ISO-8601, nudged forward so it sorts after ``previous``."""
    now = utc_now()
    last = parse_iso(previous)
    if last is not None and now <= last:
        now = last + timedelta(microseconds=1)
    return to_iso(now)
