from __future__ import annotations

import datetime

from dataclasses import dataclass, field
from typing import Optional, List

import pendulum

"""
This module defines the data models.
Facts coming out of Hamster and records coming back from the remote are immutable.
The only mutable model is TaskAggregate, which lives for a single aggregation pass.
"""

@dataclass(frozen=True)
class ActivityRecord:
    """A single Hamster fact."""
    id: int
    start_time: pendulum.DateTime
    end_time: Optional[pendulum.DateTime]  # None while the activity is running
    description: str
    activity_name: str
    category: str

    def duration(self, at: datetime.datetime) -> datetime.timedelta:
        """
        Time spent on this fact. A running fact is measured up to `at`.
        """
        end = self.end_time if self.end_time is not None else at
        return datetime.timedelta(seconds=(end - self.start_time).total_seconds())

    def is_running(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class TaskReference:
    """The task a fact is linked to, taken from the first link in its description."""
    title: str
    href: str
    task_id: str


@dataclass
class TaskAggregate:
    """Total time and comments for one task over an aggregation window."""
    title: Optional[str]
    duration: datetime.timedelta = field(default_factory=datetime.timedelta)
    comments: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RemoteUser:
    id: int
    name: str
    email: Optional[str] = None

    def __str__(self) -> str:
        if self.email:
            return f"{self.name} <{self.email}> (id {self.id})"
        return f"{self.name} (id {self.id})"


@dataclass(frozen=True)
class RemoteRecord:
    """A time record that already exists on the remote for a task and day."""
    date: datetime.date
    task_id: str  # remote task reference, prefix included, e.g. "as:123"
    record_id: str
    duration: int  # seconds


@dataclass(frozen=True)
class TimeRecord:
    """The time we want the remote to hold for a task on a day."""
    date: datetime.date
    user_id: int
    duration_seconds: int
