"""
Data-loading helpers for analytics.
"""

from __future__ import annotations

import pandas as pd

from hifz.srs.store import RevisionStore

EVENT_COLUMNS = ["item_id", "outcome", "timestamp"]
ITEM_COLUMNS = ["item_id", "memorized_at"]


def load_review_events_df(store: RevisionStore) -> pd.DataFrame:
    """
    Load all review events into a dataframe with UTC timestamps.
    """
    rows = [
        {"item_id": e.item_id, "outcome": e.outcome.value, "timestamp": e.occurred_at}
        for e in store.iter_events()
    ]
    if not rows:
        return pd.DataFrame(columns=EVENT_COLUMNS)

    df = pd.DataFrame(rows, columns=EVENT_COLUMNS)
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    return df.sort_values("timestamp").reset_index(drop=True)


def load_memorized_items_df(store: RevisionStore) -> pd.DataFrame:
    """
    Load currently memorized items with their memorization start time.
    """
    rows = [
        {"item_id": item.item_id, "memorized_at": item.memorized_at}
        for item in store.get_all()
        if item.memorized and item.memorized_at is not None
    ]
    if not rows:
        return pd.DataFrame(columns=ITEM_COLUMNS)

    df = pd.DataFrame(rows, columns=ITEM_COLUMNS)
    df["memorized_at"] = pd.to_datetime(df["memorized_at"], utc=True)
    return df
