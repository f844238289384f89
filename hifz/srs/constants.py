"""
Revision Scheduling Constants and Parameters

All tunable parameters for the day-based revision algorithm in one place.
The phase structure (learning steps, then ease-factor growth) is fixed;
the numbers below are product tuning and can be overridden from the
environment via hifz.config.load_scheduler_params().
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from hifz.errors import InvalidOutcome


# ---- Review Outcomes ----

class ReviewOutcome(str, Enum):
    """How the revision went, as reported by the user."""
    EASY = "easy"      # Recited fluently
    MEDIUM = "medium"  # Recited with some hesitation
    HARD = "hard"      # Struggled or forgot parts

    @classmethod
    def parse(cls, value) -> "ReviewOutcome":
        """
        Coerce a member or a case-insensitive name/value into an outcome.

        Raises:
            InvalidOutcome: for anything outside {easy, medium, hard}
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidOutcome(value)


# ---- Ease Factor ----

INITIAL_EASE_FACTOR = 2.5  # Ease of a freshly memorized item
MIN_EASE_FACTOR = 1.3      # Floor, prevents runaway shrinkage

EASY_EASE_BONUS = 0.15      # Mature Easy raises ease
MEDIUM_EASE_PENALTY = 0.15  # Mature Medium lowers ease
HARD_EASE_PENALTY = 0.2     # Hard lowers ease in either phase


# ---- Learning Phase ----

GRADUATION_STEP = 4            # Step at which an item enters the mature phase
FIRST_REVIEW_DELAY_DAYS = 1    # Gap between memorizing and the first revision


@dataclass(frozen=True)
class SchedulerParams:
    """Bundle of tuning constants passed to the review processor."""
    graduation_step: int = GRADUATION_STEP
    initial_ease: float = INITIAL_EASE_FACTOR
    min_ease: float = MIN_EASE_FACTOR
    easy_bonus: float = EASY_EASE_BONUS
    medium_penalty: float = MEDIUM_EASE_PENALTY
    hard_penalty: float = HARD_EASE_PENALTY
    first_review_delay_days: int = FIRST_REVIEW_DELAY_DAYS

    def __post_init__(self):
        if self.graduation_step < 2:
            raise ValueError("graduation_step must be at least 2")
        if self.min_ease <= 1.0:
            raise ValueError("min_ease must be greater than 1.0")
        if self.initial_ease < self.min_ease:
            raise ValueError("initial_ease must not be below min_ease")
        if min(self.easy_bonus, self.medium_penalty, self.hard_penalty) < 0:
            raise ValueError("ease deltas must be non-negative")
        if self.first_review_delay_days < 0:
            raise ValueError("first_review_delay_days must be non-negative")


DEFAULT_PARAMS = SchedulerParams()
