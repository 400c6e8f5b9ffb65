from __future__ import annotations

import re

from dataclasses import dataclass
from typing import List, Optional, Sequence

from hamster_sync.core.markdown import extract
from hamster_sync.exceptions import DescriptionParseError
from hamster_sync.models import ActivityRecord, TaskReference

# Task URLs end in .../<task id>/f, e.g. https://app.asana.com/0/1200/1234567/f
TASK_ID_PATTERN = re.compile(r"/(\d+)/f")


def resolve_task_id(href: str) -> Optional[str]:
    """
    Pull the task id out of a task URL, or None if the URL doesn't look like one.
    """
    match = TASK_ID_PATTERN.search(href)
    if match is None:
        return None
    return match.group(1)


def dedup(lines: Sequence[str]) -> List[str]:
    """
    Drop repeated lines, keeping the first occurrence of each in its original position.

    Lines are paired with their index and sorted by content, so equal lines end up
    next to each other with the earliest one first. Only the first of every run is
    kept, and the survivors are put back in their original order.
    """
    by_content = sorted(enumerate(lines), key=lambda pair: pair[1])

    kept = []
    for index, line in by_content:
        if kept and kept[-1][1] == line:
            continue
        kept.append((index, line))

    return [line for _, line in sorted(kept)]


@dataclass(frozen=True)
class EnrichedRecord:
    record: ActivityRecord
    task: Optional[TaskReference]
    comments: List[str]
    unlinked_reason: Optional[str] = None

    @property
    def task_id(self) -> Optional[str]:
        return self.task.task_id if self.task else None


def enrich(record: ActivityRecord) -> EnrichedRecord:
    """
    Work out which task a fact belongs to and what was done, from its description.

    The first link in the description is the task. Every list item is a comment;
    a description without any list items falls back to the activity name.

    Raises:
        DescriptionParseError: if the description isn't parseable.
    """
    try:
        parsed = extract(record.description)
    except DescriptionParseError as e:
        raise DescriptionParseError(str(e), record_id=record.id) from e

    comments = parsed.list_item_texts() or [record.activity_name]

    link = parsed.first_link()
    if link is None:
        return EnrichedRecord(record, None, comments, "no link in description")

    title, href = link
    task_id = resolve_task_id(href)
    if task_id is None:
        return EnrichedRecord(record, None, comments,
                              f"link {href} does not match the task URL convention")

    return EnrichedRecord(record, TaskReference(title, href, task_id), comments)
