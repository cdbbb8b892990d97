# critico/presenters/time_format.py
from datetime import datetime, timezone, tzinfo

_WEEKDAYS = ("Mo", "Di", "Mi", "Do", "Fr", "Sa", "So")


def format_clock(value: datetime, *, tz: tzinfo | None = None) -> str:
    local = value.astimezone(tz or timezone.utc)
    return local.strftime("%H:%M")


def format_list_time(value: datetime | None, *, now: datetime | None = None, tz: tzinfo | None = None) -> str:
    """Chat-list stamp: time today, "Gestern", weekday within a week, else dd.mm."""
    if value is None:
        return ""
    tz = tz or timezone.utc
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    now = (now or datetime.now(tz=timezone.utc)).astimezone(tz)
    local = value.astimezone(tz)

    diff_days = (now - local).days
    if diff_days <= 0:
        return local.strftime("%H:%M")
    if diff_days == 1:
        return "Gestern"
    if diff_days < 7:
        return _WEEKDAYS[local.weekday()]
    return local.strftime("%d.%m.")
