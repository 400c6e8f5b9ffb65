import os
import subprocess
import dateparser
from datetime import datetime, date, time

from pathlib import Path

def edit_file(path: Path) -> bool:
    """
    Open a file in the user's preferred editor and check if it was modified.
    If the file was modified, return True. Otherwise, return False.
    """
    editor = os.getenv("EDITOR", "vim") # Default to vim if $EDITOR is not set

    pre_edit = path.read_text()

    subprocess.run([editor, str(path)], check=True)

    post_edit = path.read_text()

    # Editors like vim add a trailing newline on save, which isn't a real change.
    return pre_edit.strip() != post_edit.strip()

def resolve_natural_date(today: date, arg: str | None) -> date:
    """
    Parse a natural-language date string and return a datetime.date.
    Examples: "today", "yesterday", "last monday", "2025-08-03".
    """
    if arg is None or arg.strip().lower() == "today":
        return today

    dt = dateparser.parse(
        arg,
        settings={
            "PREFER_DATES_FROM": "past",
            "RELATIVE_BASE": datetime.combine(today, time.min),
            "RETURN_AS_TIMEZONE_AWARE": False,
        },
    )
    if dt is None:
        raise ValueError(f"Invalid date string: {arg}")

    return dt.date()

def resolve_range(today: date, default: tuple[date, date],
                  from_arg: str | None, to_arg: str | None) -> tuple[date, date]:
    """
    Resolve --from/--to arguments, falling back to `default` for any that are missing.
    Both ends are inclusive.
    """
    from_date = resolve_natural_date(today, from_arg) if from_arg else default[0]
    to_date = resolve_natural_date(today, to_arg) if to_arg else default[1]
    if from_date > to_date:
        raise ValueError(f"Start date {from_date} is after end date {to_date}.")
    return from_date, to_date
