from __future__ import annotations

import datetime
import sqlite3

import pendulum

from pathlib import Path
from typing import List, Optional

from hamster_sync.exceptions import StoreError
from hamster_sync.models import ActivityRecord

HAMSTER_DATETIME_FORMAT = "YYYY-MM-DD HH:mm:ss"

FACTS_QUERY = """
    SELECT
        facts.id AS fact_id,
        activities.name AS activity_name,
        categories.name AS category_name,
        facts.start_time AS start_time,
        facts.end_time AS end_time,
        facts.description AS description
    FROM facts
    LEFT JOIN activities
        ON activities.id = facts.activity_id
    LEFT JOIN categories
        ON categories.id = activities.category_id
    WHERE
        facts.start_time >= :from
        AND facts.start_time < :to
    ORDER BY facts.id
"""


class HamsterStore:
    """Read-only access to a Hamster time tracker database."""

    def __init__(self, connection: sqlite3.Connection, timezone: pendulum.Timezone):
        self.connection = connection
        self.connection.row_factory = sqlite3.Row
        self.timezone = timezone

    @classmethod
    def open(cls, path: Path, timezone: pendulum.Timezone) -> HamsterStore:
        """
        Open the database at `path`.

        Raises:
            StoreError: if there is no database there or it can't be opened.
        """
        if not path.exists():
            raise StoreError(f"Hamster database not found at {path}.")
        try:
            connection = sqlite3.connect(f"file:{path}?mode=ro", uri=True)
        except sqlite3.Error as e:
            raise StoreError(f"Couldn't open Hamster database {path}: {e}") from e
        return cls(connection, timezone)

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> HamsterStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _parse_time(self, value: Optional[str]) -> Optional[pendulum.DateTime]:
        if value is None:
            return None
        # Hamster occasionally stores fractional seconds
        return pendulum.from_format(value[:19], HAMSTER_DATETIME_FORMAT, tz=self.timezone)

    def fetch_activities(self, from_date: datetime.date, to_date: datetime.date) -> List[ActivityRecord]:
        """
        Facts that started on or after `from_date` and before `to_date`, ordered by id.
        """
        try:
            rows = self.connection.execute(
                FACTS_QUERY, {"from": from_date.isoformat(), "to": to_date.isoformat()}).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Couldn't read facts from the Hamster database: {e}") from e

        return [
            ActivityRecord(
                id=row["fact_id"],
                start_time=self._parse_time(row["start_time"]),
                end_time=self._parse_time(row["end_time"]),
                description=row["description"] or "",
                activity_name=row["activity_name"] or "",
                category=row["category_name"] or "",
            )
            for row in rows
        ]
