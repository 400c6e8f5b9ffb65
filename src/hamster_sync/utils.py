import datetime

from typing import Tuple

import pendulum


def format_duration(td: datetime.timedelta) -> str:
    total_minutes = int(td.total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes or not parts:
        parts.append(f"{minutes}m")
    return " ".join(parts)


def week_start(dt: pendulum.DateTime) -> pendulum.DateTime:
    """
    Midnight on the Monday of the week `dt` falls in, in `dt`'s timezone.
    """
    return dt.subtract(days=dt.weekday()).start_of("day")


def last_week(now: pendulum.DateTime) -> Tuple[datetime.date, datetime.date]:
    """
    Monday and Sunday of the week before the one `now` falls in.
    """
    monday = week_start(now).subtract(weeks=1)
    return monday.date(), monday.add(days=6).date()
