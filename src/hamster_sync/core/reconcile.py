"""Day by day reconciliation of local task totals against the remote.

For every day in the range the local facts are aggregated per task and each task
is compared with the remote records fetched up front. `decide` picks what to do
with a single (day, task) cell; `Reconciler` drives the run and performs the
remote calls.
"""

from __future__ import annotations

import datetime

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from hamster_sync.core.aggregate import aggregate, sorted_tasks, total_duration
from hamster_sync.core.plugin import RemotePlugin
from hamster_sync.exceptions import MissingTaskReferenceError
from hamster_sync.models import ActivityRecord, RemoteRecord, TaskAggregate, TimeRecord
from hamster_sync.utils import format_duration

ONE_DAY = datetime.timedelta(days=1)


class RunMode(Enum):
    DRY_RUN = "dry-run"
    APPLY = "apply"


class Action(Enum):
    ADD = "add"
    UPDATE = "update"
    SKIP = "skip"
    ABORT = "abort"


@dataclass(frozen=True)
class Decision:
    action: Action
    mode: RunMode
    task_id: Optional[str]
    existing: Optional[RemoteRecord] = None

    def describe(self) -> str:
        dry = self.mode is RunMode.DRY_RUN
        if self.action is Action.SKIP:
            return "would skip - missing task id"
        if self.action is Action.ABORT:
            return "missing task id"
        if self.action is Action.ADD:
            return "would add" if dry else "added"
        verb = "would update" if dry else "updated"
        return f"{verb} existing {self.existing.record_id} (was {format_duration(datetime.timedelta(seconds=self.existing.duration))})"


def decide(task_id: Optional[str], existing: Optional[RemoteRecord], mode: RunMode) -> Decision:
    """
    Choose what to do with one task on one day. Has no side effects.
    """
    if task_id is None:
        action = Action.SKIP if mode is RunMode.DRY_RUN else Action.ABORT
        return Decision(action, mode, None)
    if existing is None:
        return Decision(Action.ADD, mode, task_id)
    return Decision(Action.UPDATE, mode, task_id, existing)


@dataclass(frozen=True)
class DayResult:
    day: datetime.date
    total: datetime.timedelta
    outcomes: List[Tuple[Optional[str], TaskAggregate, Decision]]


def index_records(records: List[RemoteRecord]) -> Dict[Tuple[datetime.date, str], RemoteRecord]:
    """
    Index remote records by (date, task). When a key repeats, the first record wins.
    """
    index: Dict[Tuple[datetime.date, str], RemoteRecord] = {}
    for record in records:
        index.setdefault((record.date, record.task_id), record)
    return index


def days(from_date: datetime.date, to_date: datetime.date):
    """Every date from `from_date` to `to_date`, both inclusive."""
    day = from_date
    while day <= to_date:
        yield day
        day = day + ONE_DAY


class Reconciler:

    def __init__(self,
                 remote: RemotePlugin,
                 fetch_activities: Callable[[datetime.date, datetime.date], List[ActivityRecord]],
                 task_prefix: str = "as:",
                 category: Optional[str] = None,
                 report: Callable[[str], None] = print,
                 warn: Optional[Callable[[str], None]] = None):
        self.remote = remote
        self.fetch_activities = fetch_activities
        self.task_prefix = task_prefix
        self.category = category
        self.report = report
        self.warn = warn or report

    def task_ref(self, task_id: str) -> str:
        return f"{self.task_prefix}{task_id}"

    def facts_for_day(self, day: datetime.date) -> List[ActivityRecord]:
        facts = self.fetch_activities(day, day + ONE_DAY)
        if self.category is None:
            return facts
        return [fact for fact in facts if fact.category == self.category]

    def run(self, from_date: datetime.date, to_date: datetime.date,
            mode: RunMode, at: datetime.datetime) -> List[DayResult]:
        """
        Reconcile every day from `from_date` to `to_date`, inclusive, in date order.

        Raises:
            MissingTaskReferenceError: if a day has unlinked time outside of a dry run.
                Days already synced stay synced.
            RemoteServiceError: if any remote call fails.
        """
        if from_date > to_date:
            raise ValueError(f"Start date {from_date} is after end date {to_date}.")

        user = self.remote.current_user()
        self.report(f"Syncing as {user}")

        index = index_records(self.remote.list_user_records(user.id, from_date, to_date))

        results = []
        for day in days(from_date, to_date):
            results.append(self._reconcile_day(day, user.id, index, mode, at))
        return results

    def _reconcile_day(self, day: datetime.date, user_id: int,
                       index: Dict[Tuple[datetime.date, str], RemoteRecord],
                       mode: RunMode, at: datetime.datetime) -> DayResult:
        tasks = aggregate(self.facts_for_day(day), at, warn=self.warn)

        if not tasks:
            self.report(f"{day.isoformat()}: no activities")
            return DayResult(day, datetime.timedelta(), [])

        self.report(f"{day.isoformat()}:")
        outcomes = []
        for task_id, task in sorted_tasks(tasks):
            existing = index.get((day, self.task_ref(task_id))) if task_id is not None else None
            decision = decide(task_id, existing, mode)

            if decision.action is Action.ABORT:
                raise MissingTaskReferenceError(day, task.comments)

            if mode is RunMode.APPLY:
                record = TimeRecord(day, user_id, int(task.duration.total_seconds()))
                if decision.action is Action.ADD:
                    self.remote.create_record(self.task_ref(task_id), record)
                elif decision.action is Action.UPDATE:
                    self.remote.update_record(self.task_ref(task_id), record)

            label = self.task_ref(task_id) if task_id is not None else "(no task)"
            title = task.title or ", ".join(task.comments)
            self.report(f"  {label} {title} {format_duration(task.duration)}: {decision.describe()}")
            outcomes.append((task_id, task, decision))

        total = total_duration(tasks)
        self.report(f"  total {format_duration(total)}")
        return DayResult(day, total, outcomes)
