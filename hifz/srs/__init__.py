"""
SRS - Day-based Spaced Repetition for Memorized Items

This module implements the revision schedule with:
- Learning phase: fixed gaps of 1, 2, 3 days while the item settles
- Mature phase: interval multiplied by an ease factor (floor 1.3)
- Lapses: a Hard revision of a mature item restarts the learning phase

Quick start:
    from hifz import srs

    # Durable store
    engine = srs.get_engine()
    srs.init_db(engine)
    store = srs.SqlRevisionStore(engine)

    # Process a review (algorithm only, no DB calls)
    item, event = srs.process_review(item, srs.ReviewOutcome.EASY, reviewed_at)

    # Due items
    due = srs.due_today(store.get_all(), as_of)
"""

# Core scheduler API (algorithm logic)
from hifz.srs.scheduler import process_review, scale_interval

# Stores
from hifz.srs.store import InMemoryRevisionStore, RevisionStore
from hifz.srs.database import SqlRevisionStore, get_engine, init_db, reset_db

# Queries
from hifz.srs.queries import DueRevision, due_today, due_within, next_due

# Constants and parameters
from hifz.srs.constants import (
    DEFAULT_PARAMS,
    EASY_EASE_BONUS,
    GRADUATION_STEP,
    HARD_EASE_PENALTY,
    INITIAL_EASE_FACTOR,
    MEDIUM_EASE_PENALTY,
    MIN_EASE_FACTOR,
    ReviewOutcome,
    SchedulerParams,
)

# Item state
from hifz.srs.item_state import (
    ReviewEvent,
    RevisionItem,
    cleared_item,
    new_memorized_item,
)


__all__ = [
    # Core algorithm
    "process_review",
    "scale_interval",

    # Stores
    "RevisionStore",
    "InMemoryRevisionStore",
    "SqlRevisionStore",
    "get_engine",
    "init_db",
    "reset_db",

    # Queries
    "DueRevision",
    "due_today",
    "due_within",
    "next_due",

    # Enums
    "ReviewOutcome",

    # Item state
    "RevisionItem",
    "ReviewEvent",
    "new_memorized_item",
    "cleared_item",

    # Parameters
    "SchedulerParams",
    "DEFAULT_PARAMS",
    "GRADUATION_STEP",
    "INITIAL_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "EASY_EASE_BONUS",
    "MEDIUM_EASE_PENALTY",
    "HARD_EASE_PENALTY",
]
