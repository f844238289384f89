"""
Types for progress summaries.
"""

from __future__ import annotations

from dataclasses import dataclass

from hifz.schemas import Goals


@dataclass(frozen=True)
class GoalProgress:
    """
    Progress toward each goal at a point in time.
    """
    goals: Goals
    daily: int
    weekly: int
    monthly: int
    streak: int

    @property
    def daily_met(self) -> bool:
        return self.daily >= self.goals.daily_revisions

    @property
    def weekly_met(self) -> bool:
        return self.weekly >= self.goals.weekly_revisions

    @property
    def monthly_met(self) -> bool:
        return self.monthly >= self.goals.memorize_per_month
