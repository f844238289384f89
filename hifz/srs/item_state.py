"""
Item State - Revision Items, Review Events and Calendar Helpers

Defines the scheduling state kept for each memorized unit and the
append-only review log entry.

Key concepts:
- Learning step: 1..3 are fixed-gap early repetitions, the graduation
  step and above is the mature phase driven by the ease factor
- Ease factor: multiplier applied to the interval in the mature phase
- Lapse: a mature item demoted back to step 1 after a Hard revision
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from hifz.srs.constants import DEFAULT_PARAMS, ReviewOutcome, SchedulerParams


@dataclass
class RevisionItem:
    """
    Scheduling state for a single memorizable unit (a surah).

    An unmemorized item has no due date and no last review.
    """
    item_id: int
    memorized: bool = False

    # Timing
    last_reviewed_at: Optional[datetime] = None
    next_due_at: Optional[datetime] = None

    # Interval state
    interval_days: int = 0
    ease_factor: float = DEFAULT_PARAMS.initial_ease
    learning_step: int = 0  # 0 = never memorized

    # Counters
    consecutive_correct: int = 0
    lapse_count: int = 0

    # When the current memorization began (reset on un-marking)
    memorized_at: Optional[datetime] = None

    def is_mature(self, params: SchedulerParams = DEFAULT_PARAMS) -> bool:
        """True once the item has graduated out of the learning steps."""
        return self.learning_step >= params.graduation_step


@dataclass(frozen=True)
class ReviewEvent:
    """
    Log entry for one completed revision. Never mutated after creation.

    occurred_at is when the revision happened (may be backdated);
    recorded_at is when it was entered.
    """
    item_id: int
    occurred_at: datetime
    outcome: ReviewOutcome
    recorded_at: Optional[datetime] = None
    event_id: Optional[int] = None


def new_memorized_item(
    item_id: int,
    now: datetime,
    params: SchedulerParams = DEFAULT_PARAMS
) -> RevisionItem:
    """
    Initialize state for an item the user has just memorized.

    Args:
        item_id: Item identifier
        now: Current time (first revision is scheduled relative to it)
        params: Tuning constants

    Returns:
        RevisionItem at learning step 1 with a fresh ease factor
    """
    delay = params.first_review_delay_days
    return RevisionItem(
        item_id=item_id,
        memorized=True,
        last_reviewed_at=None,
        next_due_at=now + timedelta(days=delay),
        interval_days=1,
        ease_factor=params.initial_ease,
        learning_step=1,
        consecutive_correct=0,
        lapse_count=0,
        memorized_at=now
    )


def cleared_item(item: RevisionItem, params: SchedulerParams = DEFAULT_PARAMS) -> RevisionItem:
    """Return a copy of item with every scheduling field reset."""
    return replace(
        item,
        memorized=False,
        last_reviewed_at=None,
        next_due_at=None,
        interval_days=0,
        ease_factor=params.initial_ease,
        learning_step=0,
        consecutive_correct=0,
        lapse_count=0,
        memorized_at=None
    )


# ---- Calendar helpers ----

def ensure_aware(ts: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def local_day(ts: datetime, tz=None) -> date:
    """Calendar day of ts, seen from timezone tz (ts's own zone if None)."""
    ts = ensure_aware(ts)
    if tz is not None:
        ts = ts.astimezone(tz)
    return ts.date()
