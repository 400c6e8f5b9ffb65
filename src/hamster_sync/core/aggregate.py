from __future__ import annotations

import datetime

from typing import Callable, Dict, Iterable, Optional

from hamster_sync.core.enrichment import dedup, enrich
from hamster_sync.models import ActivityRecord, TaskAggregate


def aggregate(records: Iterable[ActivityRecord],
              at: datetime.datetime,
              warn: Optional[Callable[[str], None]] = None) -> Dict[Optional[str], TaskAggregate]:
    """
    Total up time and comments per task.

    Facts that can't be tied to a task are reported through `warn` and collected
    under the None key. Running facts are counted up to `at`.

    Args:
        records: Facts to aggregate, already filtered to the window and category.
        at: The current time, used for facts that have no end time yet.
        warn: Receives one line per fact without a usable task link.

    Returns:
        Dict[Optional[str], TaskAggregate]: Aggregates keyed by task id. No order is implied.
    """
    tasks: Dict[Optional[str], TaskAggregate] = {}

    for record in records:
        enriched = enrich(record)
        duration = record.duration(at)

        if enriched.task is None and warn is not None:
            warn(f"Fact {record.id} has no task ({enriched.unlinked_reason}): "
                 f"activity={record.activity_name!r} category={record.category!r} "
                 f"description={record.description!r}")

        key = enriched.task_id
        existing = tasks.get(key)
        if existing is None:
            tasks[key] = TaskAggregate(
                title=enriched.task.title if enriched.task else None,
                duration=duration,
                comments=dedup(enriched.comments),
            )
        else:
            existing.duration += duration
            existing.comments = dedup(existing.comments + enriched.comments)

    return tasks


def sorted_tasks(tasks: Dict[Optional[str], TaskAggregate]):
    """Task aggregates with the unlinked bucket first, then by task id."""
    return sorted(tasks.items(), key=lambda item: (item[0] is not None, item[0] or ""))


def total_duration(tasks: Dict[Optional[str], TaskAggregate]) -> datetime.timedelta:
    return sum((task.duration for task in tasks.values()), datetime.timedelta())
