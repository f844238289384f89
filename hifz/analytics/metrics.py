"""
Metric computations for streaks and goal progress.

Calendar days are taken in the timezone of the as_of timestamp.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pandas as pd

from hifz.srs.item_state import ensure_aware


def local_days(timestamps: pd.Series, as_of: datetime) -> pd.Series:
    """
    Convert UTC timestamps to calendar days in as_of's timezone.
    """
    tz = ensure_aware(as_of).tzinfo
    return timestamps.dt.tz_convert(tz).dt.date


def compute_review_days(events_df: pd.DataFrame, as_of: datetime) -> set[date]:
    """
    Set of calendar days with at least one review, up to as_of's day.
    """
    if events_df.empty:
        return set()
    today = ensure_aware(as_of).date()
    days = local_days(events_df["timestamp"], as_of)
    return {d for d in days.unique() if d <= today}


def compute_current_streak(events_df: pd.DataFrame, as_of: datetime) -> int:
    """
    Consecutive review days walking backward from as_of.

    The streak may end yesterday (one day of grace); with no review today
    or yesterday it is 0.
    """
    days = compute_review_days(events_df, as_of)
    today = ensure_aware(as_of).date()

    if today in days:
        cursor = today
    elif today - timedelta(days=1) in days:
        cursor = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def week_start(day: date) -> date:
    """Sunday on or before day."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def compute_daily_progress(events_df: pd.DataFrame, as_of: datetime) -> int:
    """
    Distinct items reviewed on as_of's calendar day.
    """
    if events_df.empty:
        return 0
    today = ensure_aware(as_of).date()
    days = local_days(events_df["timestamp"], as_of)
    return int(events_df.loc[days == today, "item_id"].nunique())


def compute_weekly_progress(events_df: pd.DataFrame, as_of: datetime) -> int:
    """
    Review events from the start of the week (Sunday) through as_of's day.
    """
    if events_df.empty:
        return 0
    today = ensure_aware(as_of).date()
    days = local_days(events_df["timestamp"], as_of)
    in_week = (days >= week_start(today)) & (days <= today)
    return int(in_week.sum())


def compute_monthly_memorized(items_df: pd.DataFrame, as_of: datetime) -> int:
    """
    Memorized items whose memorization began in as_of's calendar month.
    """
    if items_df.empty:
        return 0
    today = ensure_aware(as_of).date()
    days = local_days(items_df["memorized_at"], as_of)
    in_month = days.map(lambda d: (d.year, d.month) == (today.year, today.month) and d <= today)
    return int(in_month.sum())
