"""Domain models for recently used foods."""

from dataclasses import dataclass
from datetime import datetime

from fitpro.domain.nutrition import FoodCandidate


@dataclass(frozen=True)
class RecentFood:
    """A food the user logged before, with usage metadata."""

    food: FoodCandidate
    last_used_at: datetime
    use_count: int
    last_amount: float
