"""
Analytics package exports.
"""

from hifz.analytics.service import build_goal_progress, current_streak
from hifz.analytics.types import GoalProgress

__all__ = [
    "build_goal_progress",
    "current_streak",
    "GoalProgress",
]
