"""
Scheduler - Revision Algorithm Logic

Pure scheduling and state updates (no database calls, no clock reads).

Main workflow:
1. Load item state (caller's responsibility)
2. Determine learning vs. mature phase
3. Apply the phase's update rules
4. Compute the next due date (clamped to "now")
5. Return the updated item + review event

This module handles ONLY the algorithm logic.
Persistence is handled by the store modules.
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional, Tuple

from hifz.errors import ItemNotMemorized
from hifz.srs.constants import DEFAULT_PARAMS, ReviewOutcome, SchedulerParams
from hifz.srs.item_state import ReviewEvent, RevisionItem, ensure_aware


def process_review(
    item: RevisionItem,
    outcome: ReviewOutcome,
    reviewed_at: datetime,
    now: Optional[datetime] = None,
    params: SchedulerParams = DEFAULT_PARAMS
) -> Tuple[RevisionItem, ReviewEvent]:
    """
    Process a revision and return the updated item + its review event.

    The input item is left untouched. Caller is responsible for:
    1. Loading the item
    2. Persisting the item and the event together

    Args:
        item: Current state of the item
        outcome: EASY, MEDIUM or HARD (strings are coerced)
        reviewed_at: When the revision happened (may be in the past)
        now: True current time, used to clamp the next due date
             (defaults to reviewed_at)
        params: Tuning constants

    Returns:
        Tuple of (updated_item, review_event)

    Raises:
        ItemNotMemorized: item is not under scheduling
        InvalidOutcome: outcome is not a known value
    """
    outcome = ReviewOutcome.parse(outcome)
    if not item.memorized:
        raise ItemNotMemorized(item.item_id)

    reviewed_at = ensure_aware(reviewed_at)
    now = reviewed_at if now is None else ensure_aware(now)

    if item.is_mature(params):
        updated = _apply_mature_update(item, outcome, params)
    else:
        updated = _apply_learning_update(item, outcome, params)

    next_due_at = reviewed_at + timedelta(days=updated.interval_days)
    if next_due_at < now:
        # Backdated entry whose interval already elapsed
        next_due_at = now

    if outcome == ReviewOutcome.HARD:
        consecutive_correct = 0
    else:
        consecutive_correct = item.consecutive_correct + 1

    updated = replace(
        updated,
        last_reviewed_at=reviewed_at,
        next_due_at=next_due_at,
        consecutive_correct=consecutive_correct
    )

    event = ReviewEvent(
        item_id=item.item_id,
        occurred_at=reviewed_at,
        outcome=outcome,
        recorded_at=now
    )

    return updated, event


def _apply_learning_update(
    item: RevisionItem,
    outcome: ReviewOutcome,
    params: SchedulerParams
) -> RevisionItem:
    """
    Learning-phase rules: the interval in days equals the learning step.

    - EASY moves one step up (the graduation step enters the mature phase)
    - MEDIUM repeats the current gap
    - HARD restarts at step 1 and lowers the ease factor
    """
    if outcome == ReviewOutcome.EASY:
        step = item.learning_step + 1
        return replace(item, learning_step=step, interval_days=step)

    if outcome == ReviewOutcome.MEDIUM:
        step = max(item.learning_step, 1)
        return replace(item, learning_step=step, interval_days=step)

    return replace(
        item,
        learning_step=1,
        interval_days=1,
        ease_factor=_floor_ease(item.ease_factor - params.hard_penalty, params)
    )


def _apply_mature_update(
    item: RevisionItem,
    outcome: ReviewOutcome,
    params: SchedulerParams
) -> RevisionItem:
    """
    Mature-phase rules: the interval grows (or shrinks) by the ease factor.

    - EASY raises ease, then interval = round(interval * ease)
    - MEDIUM lowers ease, then interval = round(interval * ease)
    - HARD is a lapse: back to step 1 with a one-day interval
    """
    if outcome == ReviewOutcome.HARD:
        return replace(
            item,
            lapse_count=item.lapse_count + 1,
            learning_step=1,
            interval_days=1,
            ease_factor=_floor_ease(item.ease_factor - params.hard_penalty, params)
        )

    if outcome == ReviewOutcome.EASY:
        ease = _floor_ease(item.ease_factor + params.easy_bonus, params)
    else:
        ease = _floor_ease(item.ease_factor - params.medium_penalty, params)

    return replace(
        item,
        ease_factor=ease,
        interval_days=scale_interval(item.interval_days, ease)
    )


def scale_interval(interval_days: int, ease_factor: float) -> int:
    """
    Multiply an interval by the ease factor, rounding half up, minimum 1 day.

    >>> scale_interval(4, 2.65)
    11
    """
    return max(1, int(math.floor(interval_days * ease_factor + 0.5)))


def _floor_ease(ease_factor: float, params: SchedulerParams) -> float:
    # Round away float noise from repeated +/- deltas
    return max(params.min_ease, round(ease_factor, 4))
