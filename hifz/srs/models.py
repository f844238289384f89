"""
SQLAlchemy ORM Models for the Revision Database

Defines RevisionItem, ReviewEvent and goal rows for SQL persistence.
"""

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class RevisionItemRow(Base):
    """
    Scheduling state for a single memorizable unit.
    """
    __tablename__ = 'revision_items'

    item_id = Column(Integer, primary_key=True, autoincrement=False)
    memorized = Column(Boolean, nullable=False, default=False)

    # Timing
    last_reviewed_at = Column(DateTime(timezone=True), nullable=True)
    next_due_at = Column(DateTime(timezone=True), nullable=True, index=True)
    memorized_at = Column(DateTime(timezone=True), nullable=True)

    # Interval state
    interval_days = Column(Integer, nullable=False, default=0)
    ease_factor = Column(Float, nullable=False)
    learning_step = Column(Integer, nullable=False, default=0)

    # Counters
    consecutive_correct = Column(Integer, nullable=False, default=0)
    lapse_count = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<RevisionItemRow({self.item_id}, step={self.learning_step}, due={self.next_due_at})>"


class ReviewEventRow(Base):
    """
    Log entry for a single completed revision. Rows are only ever inserted.
    """
    __tablename__ = 'review_events'

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(Integer, nullable=False, index=True)

    occurred_at = Column(DateTime(timezone=True), nullable=False, index=True)
    recorded_at = Column(DateTime(timezone=True), nullable=True)
    outcome = Column(String(16), nullable=False)  # "easy", "medium", "hard"

    def __repr__(self):
        return f"<ReviewEventRow(id={self.id}, item={self.item_id}, outcome={self.outcome})>"


class GoalsRow(Base):
    """Single-row table holding the user's revision goals."""
    __tablename__ = 'revision_goals'

    id = Column(Integer, primary_key=True, autoincrement=False)
    daily_revisions = Column(Integer, nullable=False)
    weekly_revisions = Column(Integer, nullable=False)
    memorize_per_month = Column(Integer, nullable=False)
