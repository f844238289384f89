"""
Service layer to assemble streak and goal-progress figures.
"""

from __future__ import annotations

from datetime import datetime

from hifz.analytics.metrics import (
    compute_current_streak,
    compute_daily_progress,
    compute_monthly_memorized,
    compute_weekly_progress,
)
from hifz.analytics.queries import load_memorized_items_df, load_review_events_df
from hifz.analytics.types import GoalProgress
from hifz.srs.store import RevisionStore


def current_streak(store: RevisionStore, as_of: datetime) -> int:
    """
    Consecutive days with at least one revision, ending today or yesterday.
    """
    events_df = load_review_events_df(store)
    return compute_current_streak(events_df, as_of)


def build_goal_progress(store: RevisionStore, as_of: datetime) -> GoalProgress:
    """
    Build daily, weekly and monthly progress against the saved goals.
    """
    events_df = load_review_events_df(store)
    items_df = load_memorized_items_df(store)

    return GoalProgress(
        goals=store.get_goals(),
        daily=compute_daily_progress(events_df, as_of),
        weekly=compute_weekly_progress(events_df, as_of),
        monthly=compute_monthly_memorized(items_df, as_of),
        streak=compute_current_streak(events_df, as_of),
    )
