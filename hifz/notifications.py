"""
Reminder hand-off.

The scheduler only emits (item_id, due_at) pairs; delivering them (local
notifications, push, e-mail) belongs to whatever implements ReminderSink.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Protocol, Tuple

from hifz.srs.item_state import RevisionItem, ensure_aware

Reminder = Tuple[int, datetime]


class ReminderSink(Protocol):
    """Receives reminder requests from the scheduler."""

    def schedule(self, item_id: int, due_at: datetime) -> None:
        """Replace any pending reminder for item_id with one at due_at."""

    def cancel(self, item_id: int) -> None:
        """Drop any pending reminder for item_id."""


class ReminderQueue:
    """
    In-process ReminderSink keeping the latest reminder per item.

    A delivery loop can poll pop_due() and hand the pairs to the platform.
    """

    def __init__(self):
        self._pending: dict[int, datetime] = {}

    def schedule(self, item_id: int, due_at: datetime) -> None:
        self._pending[item_id] = ensure_aware(due_at)

    def cancel(self, item_id: int) -> None:
        self._pending.pop(item_id, None)

    def pending(self) -> list[Reminder]:
        """All pending reminders, earliest first."""
        return sorted(self._pending.items(), key=lambda pair: (pair[1], pair[0]))

    def pop_due(self, as_of: datetime) -> list[Reminder]:
        """Remove and return reminders whose time has come."""
        as_of = ensure_aware(as_of)
        due = [pair for pair in self.pending() if pair[1] <= as_of]
        for item_id, _ in due:
            del self._pending[item_id]
        return due


def pending_reminders(items: Iterable[RevisionItem], as_of: datetime) -> list[Reminder]:
    """
    Future (item_id, next_due_at) pairs for every scheduled item.

    Used to resynchronise a delivery backend from scratch.
    """
    as_of = ensure_aware(as_of)
    pairs = [
        (item.item_id, item.next_due_at)
        for item in items
        if item.memorized and item.next_due_at is not None and item.next_due_at > as_of
    ]
    pairs.sort(key=lambda pair: (pair[1], pair[0]))
    return pairs
