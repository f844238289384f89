"""
Read-only views over revision items: what is due today, what is coming up.

These functions never mutate the items they receive.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from hifz.srs.item_state import RevisionItem, ensure_aware, local_day


@dataclass(frozen=True)
class DueRevision:
    """An item with its due date, as shown in revision lists."""
    item_id: int
    next_due_at: datetime
    overdue: bool = False  # due on an earlier calendar day
    completed: bool = False  # already reviewed on the as_of day


def _scheduled(items: Iterable[RevisionItem]):
    for item in items:
        if item.memorized and item.next_due_at is not None:
            yield item


def _reviewed_on(item: RevisionItem, day, tz) -> bool:
    return item.last_reviewed_at is not None and local_day(item.last_reviewed_at, tz) == day


def due_today(items: Iterable[RevisionItem], as_of: datetime) -> list[DueRevision]:
    """
    Items due on or before the calendar day of as_of.

    Days are compared in as_of's timezone. Sorted by item id.
    """
    as_of = ensure_aware(as_of)
    today = as_of.date()

    due = []
    for item in _scheduled(items):
        due_day = local_day(item.next_due_at, as_of.tzinfo)
        if due_day <= today:
            due.append(DueRevision(
                item_id=item.item_id,
                next_due_at=item.next_due_at,
                overdue=due_day < today,
                completed=_reviewed_on(item, today, as_of.tzinfo)
            ))

    due.sort(key=lambda d: d.item_id)
    return due


def due_within(
    items: Iterable[RevisionItem],
    days: int,
    as_of: datetime
) -> list[DueRevision]:
    """
    Items with as_of < next_due_at <= as_of + days.

    Sorted by due date (earliest first), then item id.

    Raises:
        ValueError: days is negative
    """
    if days < 0:
        raise ValueError("days must be non-negative")

    as_of = ensure_aware(as_of)
    horizon = as_of + timedelta(days=days)

    upcoming = [
        DueRevision(item_id=item.item_id, next_due_at=item.next_due_at)
        for item in _scheduled(items)
        if as_of < ensure_aware(item.next_due_at) <= horizon
    ]
    upcoming.sort(key=lambda d: (d.next_due_at, d.item_id))
    return upcoming


def next_due(items: Iterable[RevisionItem]) -> Optional[DueRevision]:
    """The single earliest scheduled revision, or None if nothing is scheduled."""
    scheduled = sorted(_scheduled(items), key=lambda i: (i.next_due_at, i.item_id))
    if not scheduled:
        return None
    first = scheduled[0]
    return DueRevision(item_id=first.item_id, next_due_at=first.next_due_at)
