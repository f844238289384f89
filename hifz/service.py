"""
RevisionScheduler - the entry point used by UI and storage collaborators.

Ties together the pure review processor, an injected RevisionStore and an
optional ReminderSink.

Main workflow for a revision:
1. Load the item from the store
2. Run process_review() with an explicit timestamp
3. Persist the item and its event in one write
4. Hand the new due date to the reminder sink
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Callable, Iterable, Iterator, Optional, Tuple, Union

from hifz import analytics
from hifz.errors import AlreadyMemorized, InvalidReviewDate, NotFound
from hifz.notifications import ReminderSink
from hifz.schemas import Goals
from hifz.srs import queries
from hifz.srs.constants import DEFAULT_PARAMS, ReviewOutcome, SchedulerParams
from hifz.srs.item_state import (
    ReviewEvent,
    RevisionItem,
    cleared_item,
    ensure_aware,
    new_memorized_item,
)
from hifz.srs.scheduler import process_review
from hifz.srs.store import RevisionStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
BackdatedEntry = Tuple[int, Union[ReviewOutcome, str], Union[date, datetime]]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


class RevisionScheduler:
    """
    Spaced-repetition scheduler for memorized items.

    Args:
        store: Where item state and review events live
        clock: Source of "now" when the caller does not pass a timestamp
        params: Tuning constants for the review processor
        reminders: Optional sink receiving (item_id, due_at) pairs
    """

    def __init__(
        self,
        store: RevisionStore,
        clock: Clock = utc_now,
        params: SchedulerParams = DEFAULT_PARAMS,
        reminders: Optional[ReminderSink] = None
    ):
        self.store = store
        self.clock = clock
        self.params = params
        self.reminders = reminders

    def _now(self) -> datetime:
        return ensure_aware(self.clock())

    # ---- Reviews ----

    def complete_review(
        self,
        item_id: int,
        outcome: Union[ReviewOutcome, str],
        at: Optional[datetime] = None
    ) -> RevisionItem:
        """
        Record a revision of item_id and reschedule it.

        Raises:
            NotFound: unknown item id
            ItemNotMemorized: item is not under scheduling
            InvalidOutcome: outcome is not easy/medium/hard
            InvalidReviewDate: at is later than now
            PersistenceFailure: the store could not save the result
        """
        now = self._now()
        reviewed_at = now if at is None else ensure_aware(at)
        if reviewed_at > now:
            raise InvalidReviewDate(at)
        return self._review(item_id, outcome, reviewed_at, now)

    def add_backdated_review(
        self,
        item_id: int,
        outcome: Union[ReviewOutcome, str],
        occurred_on: Union[date, datetime]
    ) -> RevisionItem:
        """
        Record a revision that happened earlier.

        A plain date is taken as midnight of that day in the clock's
        timezone. The next due date is never placed before now.

        Raises:
            InvalidReviewDate: occurred_on is in the future
            plus everything complete_review() raises
        """
        now = self._now()
        if isinstance(occurred_on, datetime):
            reviewed_at = ensure_aware(occurred_on)
        else:
            reviewed_at = datetime.combine(occurred_on, time.min, tzinfo=now.tzinfo)

        if reviewed_at > now:
            raise InvalidReviewDate(occurred_on)

        return self._review(item_id, outcome, reviewed_at, now)

    def add_backdated_reviews(self, entries: Iterable[BackdatedEntry]) -> list[RevisionItem]:
        """
        Record several past revisions in order.

        Each entry is committed on its own; the first failure stops the
        batch and propagates, leaving earlier entries saved.
        """
        return [
            self.add_backdated_review(item_id, outcome, occurred_on)
            for item_id, outcome, occurred_on in entries
        ]

    def _review(
        self,
        item_id: int,
        outcome: Union[ReviewOutcome, str],
        reviewed_at: datetime,
        now: datetime
    ) -> RevisionItem:
        outcome = ReviewOutcome.parse(outcome)
        item = self.store.get(item_id)
        updated, event = process_review(item, outcome, reviewed_at, now=now, params=self.params)
        self.store.save_review(updated, event)

        if updated.next_due_at == now and reviewed_at < now:
            logger.debug("Backdated review of item %s clamped to now", item_id)
        logger.info(
            "Reviewed item %s (%s): step=%s interval=%sd next due %s",
            item_id, outcome.value, updated.learning_step,
            updated.interval_days, updated.next_due_at.isoformat()
        )

        self._notify_scheduled(updated)
        return updated

    # ---- Lifecycle ----

    def mark_memorized(self, item_id: int, strict: bool = False) -> RevisionItem:
        """
        Put item_id under scheduling, first revision due after one day.

        Marking an already-memorized item returns it unchanged, or raises
        AlreadyMemorized when strict is set.
        """
        try:
            existing = self.store.get(item_id)
        except NotFound:
            existing = None

        if existing is not None and existing.memorized:
            if strict:
                raise AlreadyMemorized(item_id)
            logger.debug("Item %s already memorized; leaving schedule as is", item_id)
            return existing

        item = new_memorized_item(item_id, self._now(), self.params)
        self.store.upsert(item)
        logger.info("Marked item %s memorized, first revision %s", item_id, item.next_due_at.isoformat())

        self._notify_scheduled(item)
        return item

    def mark_memorized_many(self, item_ids: Iterable[int]) -> list[RevisionItem]:
        """
        Mark several items memorized; each is saved independently.
        """
        return [self.mark_memorized(item_id) for item_id in item_ids]

    def mark_unmemorized(self, item_id: int) -> RevisionItem:
        """
        Take item_id out of scheduling. Review history is kept.

        Raises:
            NotFound: unknown item id
        """
        item = cleared_item(self.store.get(item_id), self.params)
        self.store.upsert(item)
        logger.info("Marked item %s not memorized", item_id)

        if self.reminders is not None:
            try:
                self.reminders.cancel(item_id)
            except Exception:
                logger.exception("Failed to cancel reminder for item %s", item_id)
        return item

    # ---- Queries ----

    def get_item(self, item_id: int) -> RevisionItem:
        return self.store.get(item_id)

    def items(self) -> list[RevisionItem]:
        return sorted(self.store.get_all(), key=lambda i: i.item_id)

    def due_today(self, as_of: Optional[datetime] = None) -> list[queries.DueRevision]:
        as_of = self._now() if as_of is None else as_of
        return queries.due_today(self.store.get_all(), as_of)

    def due_within(self, days: int, as_of: Optional[datetime] = None) -> list[queries.DueRevision]:
        as_of = self._now() if as_of is None else as_of
        return queries.due_within(self.store.get_all(), days, as_of)

    def current_streak(self, as_of: Optional[datetime] = None) -> int:
        as_of = self._now() if as_of is None else as_of
        return analytics.current_streak(self.store, as_of)

    def history_for(self, item_id: int) -> Iterator[ReviewEvent]:
        """
        Lazy iterator over item_id's review events, newest first.

        Raises:
            NotFound: unknown item id (checked before iteration starts)
        """
        self.store.get(item_id)
        return self.store.iter_events(item_id)

    # ---- Goals ----

    def goals(self) -> Goals:
        return self.store.get_goals()

    def update_goals(self, goals: Goals) -> Goals:
        self.store.save_goals(goals)
        logger.info("Updated goals: %s", goals.model_dump())
        return goals

    def goal_progress(self, as_of: Optional[datetime] = None) -> analytics.GoalProgress:
        as_of = self._now() if as_of is None else as_of
        return analytics.build_goal_progress(self.store, as_of)

    # ---- Reminders ----

    def _notify_scheduled(self, item: RevisionItem) -> None:
        if self.reminders is None or item.next_due_at is None:
            return
        try:
            self.reminders.schedule(item.item_id, item.next_due_at)
        except Exception:
            # Review is already committed
            logger.exception("Failed to schedule reminder for item %s", item.item_id)
