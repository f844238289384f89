"""
Pydantic models for user-editable revision settings.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


# Defaults carried over from the mobile app's first-run data
DEFAULT_DAILY_REVISIONS = 3
DEFAULT_WEEKLY_REVISIONS = 20
DEFAULT_MEMORIZE_PER_MONTH = 2


class Goals(BaseModel):
    """Revision and memorization targets."""
    model_config = ConfigDict(frozen=True)

    daily_revisions: int = Field(
        default=DEFAULT_DAILY_REVISIONS, ge=0,
        description="Distinct items to revise per day"
    )
    weekly_revisions: int = Field(
        default=DEFAULT_WEEKLY_REVISIONS, ge=0,
        description="Revisions to complete per week (weeks start Sunday)"
    )
    memorize_per_month: int = Field(
        default=DEFAULT_MEMORIZE_PER_MONTH, ge=0,
        description="New items to memorize per calendar month"
    )
