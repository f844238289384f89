"""
Revision store interface and the in-process implementation.

The scheduler receives a store instance; nothing in the package holds a
global store. SqlRevisionStore (hifz.srs.database) is the durable
implementation; InMemoryRevisionStore backs tests and throwaway sessions.
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Iterator, Optional

from hifz.errors import NotFound
from hifz.schemas import Goals
from hifz.srs.item_state import ReviewEvent, RevisionItem


class RevisionStore(ABC):
    """Per-item scheduling state plus the append-only review log."""

    @abstractmethod
    def get(self, item_id: int) -> RevisionItem:
        """Return the item, or raise NotFound."""

    @abstractmethod
    def get_all(self) -> list[RevisionItem]:
        """Return every stored item (order is not significant)."""

    @abstractmethod
    def upsert(self, item: RevisionItem) -> None:
        """Insert or fully replace the item."""

    @abstractmethod
    def save_review(self, item: RevisionItem, event: ReviewEvent) -> ReviewEvent:
        """
        Persist the reviewed item and append its event as one unit.

        Either both writes land or neither does. Returns the stored event
        (with event_id assigned).
        """

    @abstractmethod
    def iter_events(self, item_id: Optional[int] = None) -> Iterator[ReviewEvent]:
        """Yield review events newest first, optionally for one item."""

    @abstractmethod
    def get_goals(self) -> Goals:
        """Return the saved goals (defaults if none were saved)."""

    @abstractmethod
    def save_goals(self, goals: Goals) -> None:
        """Replace the saved goals."""


class InMemoryRevisionStore(RevisionStore):
    """
    Dictionary-backed store.

    Items are copied on the way in and out so that callers never share
    mutable state with the store.
    """

    def __init__(self):
        self._items: dict[int, RevisionItem] = {}
        self._events: list[ReviewEvent] = []
        self._event_ids = itertools.count(1)
        self._goals = Goals()

    def get(self, item_id: int) -> RevisionItem:
        try:
            return replace(self._items[item_id])
        except KeyError:
            raise NotFound(item_id) from None

    def get_all(self) -> list[RevisionItem]:
        return [replace(item) for item in self._items.values()]

    def upsert(self, item: RevisionItem) -> None:
        self._items[item.item_id] = replace(item)

    def save_review(self, item: RevisionItem, event: ReviewEvent) -> ReviewEvent:
        stored = replace(event, event_id=next(self._event_ids))
        self._items[item.item_id] = replace(item)
        self._events.append(stored)
        return stored

    def iter_events(self, item_id: Optional[int] = None) -> Iterator[ReviewEvent]:
        events = [e for e in self._events if item_id is None or e.item_id == item_id]
        events.sort(key=lambda e: (e.occurred_at, e.event_id), reverse=True)
        return iter(events)

    def get_goals(self) -> Goals:
        return self._goals.model_copy()

    def save_goals(self, goals: Goals) -> None:
        self._goals = goals.model_copy()
