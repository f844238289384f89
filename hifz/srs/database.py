"""
Database - Revision Database I/O Operations

Handles all database operations for revision items, review events and
goals. Uses SQLAlchemy ORM; any SQLAlchemy-supported backend works
(SQLite file by default, Postgres in deployment).

This module handles ONLY database I/O.
Algorithm logic is handled by the scheduler module.
"""

from __future__ import annotations

import logging
from datetime import timezone
from typing import Iterator, Optional

from sqlalchemy import and_, create_engine, inspect, or_, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from hifz import config
from hifz.errors import NotFound, PersistenceFailure
from hifz.schemas import Goals
from hifz.srs.constants import ReviewOutcome
from hifz.srs.item_state import ReviewEvent, RevisionItem, ensure_aware
from hifz.srs.models import Base, GoalsRow, ReviewEventRow, RevisionItemRow
from hifz.srs.store import RevisionStore

logger = logging.getLogger(__name__)

GOALS_ROW_ID = 1
HISTORY_BATCH_SIZE = 100


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Get SQLAlchemy engine for database connection.

    Uses connection pooling for server databases. In-memory SQLite shares
    one connection so that every session sees the same database.

    Args:
        database_url: SQLAlchemy URL (defaults to config.get_database_url())

    Returns:
        SQLAlchemy Engine instance
    """
    db_url = database_url or config.get_database_url()
    url = make_url(db_url)

    if url.get_backend_name() == "sqlite":
        if url.database in (None, "", ":memory:"):
            return create_engine(
                db_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=False
            )
        config.ensure_sqlite_directory(url.database)
        return create_engine(db_url, echo=False)

    return create_engine(
        db_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


def init_db(engine: Engine) -> None:
    """
    Initialize database schema if tables don't exist.

    Safe to call multiple times - only creates missing tables.
    """
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())
    missing = set(Base.metadata.tables) - existing_tables
    if missing:
        Base.metadata.create_all(engine)
        logger.info("Created tables: %s", ", ".join(sorted(missing)))


def reset_db(engine: Engine) -> None:
    """
    DANGEROUS: Delete all data and recreate tables.

    All revision history will be lost!
    """
    Base.metadata.drop_all(engine)
    logger.warning("All revision tables dropped")
    init_db(engine)


class SqlRevisionStore(RevisionStore):
    """
    RevisionStore backed by a SQLAlchemy engine.

    Each public call opens its own session. Writes commit once at the end,
    so a reviewed item and its event land together or not at all.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def _session(self) -> Session:
        return self._session_factory()

    # ---- Items ----

    def get(self, item_id: int) -> RevisionItem:
        session = self._session()
        try:
            row = session.get(RevisionItemRow, item_id)
            if row is None:
                raise NotFound(item_id)
            return _item_from_row(row)
        except SQLAlchemyError as exc:
            raise _persistence_failure("load item %s" % item_id, exc) from exc
        finally:
            session.close()

    def get_all(self) -> list[RevisionItem]:
        session = self._session()
        try:
            rows = session.scalars(select(RevisionItemRow)).all()
            return [_item_from_row(row) for row in rows]
        except SQLAlchemyError as exc:
            raise _persistence_failure("load items", exc) from exc
        finally:
            session.close()

    def upsert(self, item: RevisionItem) -> None:
        session = self._session()
        try:
            session.merge(_item_to_row(item))
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise _persistence_failure("save item %s" % item.item_id, exc) from exc
        finally:
            session.close()

    # ---- Reviews ----

    def save_review(self, item: RevisionItem, event: ReviewEvent) -> ReviewEvent:
        session = self._session()
        try:
            session.merge(_item_to_row(item))
            event_row = ReviewEventRow(
                item_id=event.item_id,
                occurred_at=_utc_or_none(event.occurred_at),
                recorded_at=_utc_or_none(event.recorded_at),
                outcome=event.outcome.value
            )
            session.add(event_row)
            session.flush()
            stored = _event_from_row(event_row)
            session.commit()
            return stored
        except SQLAlchemyError as exc:
            session.rollback()
            raise _persistence_failure("save review of item %s" % item.item_id, exc) from exc
        finally:
            session.close()

    def iter_events(self, item_id: Optional[int] = None) -> Iterator[ReviewEvent]:
        """
        Stream events newest first.

        Rows are fetched in pages of HISTORY_BATCH_SIZE, each in its own
        short session, so a partly read iterator holds no connection or lock.
        """
        after = None
        while True:
            page = self._event_page(item_id, after)
            yield from page
            if len(page) < HISTORY_BATCH_SIZE:
                return
            after = (page[-1].occurred_at, page[-1].event_id)

    def _event_page(self, item_id: Optional[int], after) -> list[ReviewEvent]:
        stmt = select(ReviewEventRow).order_by(
            ReviewEventRow.occurred_at.desc(),
            ReviewEventRow.id.desc()
        )
        if item_id is not None:
            stmt = stmt.where(ReviewEventRow.item_id == item_id)
        if after is not None:
            occurred_at, event_id = after
            occurred_at = _utc_or_none(occurred_at)
            stmt = stmt.where(or_(
                ReviewEventRow.occurred_at < occurred_at,
                and_(ReviewEventRow.occurred_at == occurred_at, ReviewEventRow.id < event_id)
            ))

        session = self._session()
        try:
            rows = session.scalars(stmt.limit(HISTORY_BATCH_SIZE)).all()
            return [_event_from_row(row) for row in rows]
        except SQLAlchemyError as exc:
            raise _persistence_failure("load review events", exc) from exc
        finally:
            session.close()

    # ---- Goals ----

    def get_goals(self) -> Goals:
        session = self._session()
        try:
            row = session.get(GoalsRow, GOALS_ROW_ID)
            if row is None:
                return Goals()
            return Goals(
                daily_revisions=row.daily_revisions,
                weekly_revisions=row.weekly_revisions,
                memorize_per_month=row.memorize_per_month
            )
        except SQLAlchemyError as exc:
            raise _persistence_failure("load goals", exc) from exc
        finally:
            session.close()

    def save_goals(self, goals: Goals) -> None:
        session = self._session()
        try:
            session.merge(GoalsRow(id=GOALS_ROW_ID, **goals.model_dump()))
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise _persistence_failure("save goals", exc) from exc
        finally:
            session.close()


# ---- Row conversion ----

def _item_to_row(item: RevisionItem) -> RevisionItemRow:
    return RevisionItemRow(
        item_id=item.item_id,
        memorized=item.memorized,
        last_reviewed_at=_utc_or_none(item.last_reviewed_at),
        next_due_at=_utc_or_none(item.next_due_at),
        memorized_at=_utc_or_none(item.memorized_at),
        interval_days=item.interval_days,
        ease_factor=item.ease_factor,
        learning_step=item.learning_step,
        consecutive_correct=item.consecutive_correct,
        lapse_count=item.lapse_count
    )


def _item_from_row(row: RevisionItemRow) -> RevisionItem:
    return RevisionItem(
        item_id=row.item_id,
        memorized=bool(row.memorized),
        last_reviewed_at=_aware_or_none(row.last_reviewed_at),
        next_due_at=_aware_or_none(row.next_due_at),
        interval_days=row.interval_days,
        ease_factor=row.ease_factor,
        learning_step=row.learning_step,
        consecutive_correct=row.consecutive_correct,
        lapse_count=row.lapse_count,
        memorized_at=_aware_or_none(row.memorized_at)
    )


def _event_from_row(row: ReviewEventRow) -> ReviewEvent:
    return ReviewEvent(
        item_id=row.item_id,
        occurred_at=ensure_aware(row.occurred_at),
        outcome=ReviewOutcome(row.outcome),
        recorded_at=_aware_or_none(row.recorded_at),
        event_id=row.id
    )


def _aware_or_none(ts):
    return ensure_aware(ts) if ts is not None else None


def _utc_or_none(ts):
    # SQLite drops the offset, so everything is stored as UTC
    return ensure_aware(ts).astimezone(timezone.utc) if ts is not None else None


def _persistence_failure(action: str, exc: SQLAlchemyError) -> PersistenceFailure:
    logger.error("Database error during %s: %s", action, exc)
    return PersistenceFailure(f"Failed to {action}: {exc}")
