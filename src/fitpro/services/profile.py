"""Profile and onboarding business logic."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol
from uuid import UUID

from fitpro.domain.profile import (
    ActivityLevel,
    CalculatedMetrics,
    Gender,
    Goal,
    Occupation,
    UserProfile,
)
from fitpro.services.live import ChangeFeed, profile_topic
from fitpro.services.metrics import calculate_user_metrics, has_required_age

MINIMUM_AGE = 18


class ProfileValidationError(ValueError):
    """Onboarding input was rejected."""


class ProfileRepository(Protocol):
    """Persistence interface for profile documents."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile for a user, if present."""

    def merge_profile(self, user_id: UUID, changes: dict[str, object]) -> UserProfile:
        """Merge the given fields into the profile and return the result."""


@dataclass
class ProfileService:
    """Application service for the onboarding wizard.

    Each step writes only its own fields. ``finish_onboarding`` stores the
    derived targets together with the onboarded flag.
    """

    repository: ProfileRepository
    feed: ChangeFeed
    today: Callable[[], date] = field(default=date.today)

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the user's profile."""
        return self.repository.get_profile(user_id)

    def save_birthday(self, user_id: UUID, birthday: date) -> UserProfile:
        """Onboarding step 1."""
        if not has_required_age(birthday, MINIMUM_AGE, self.today()):
            raise ProfileValidationError(
                f"Users must be at least {MINIMUM_AGE} years old"
            )
        return self._merge(user_id, {"birthday": birthday})

    def save_lifestyle(
        self, user_id: UUID, occupation: Occupation, activity_level: ActivityLevel
    ) -> UserProfile:
        """Onboarding step 1b."""
        return self._merge(
            user_id, {"occupation": occupation, "activity_level": activity_level}
        )

    def save_body(
        self, user_id: UUID, height_cm: float, weight_kg: float, gender: Gender
    ) -> UserProfile:
        """Onboarding step 2."""
        if height_cm <= 0 or weight_kg <= 0:
            raise ProfileValidationError("Height and weight must be positive")
        return self._merge(
            user_id,
            {"height_cm": height_cm, "weight_kg": weight_kg, "gender": gender},
        )

    def save_goal(
        self,
        user_id: UUID,
        goal: Goal,
        target_weight_kg: float | None,
        target_date: date | None,
    ) -> UserProfile:
        """Onboarding step 3; a target weight is required unless maintaining."""
        if goal != Goal.MAINTAIN:
            if target_weight_kg is None or target_weight_kg <= 0:
                raise ProfileValidationError("A target weight is required")
            current = self.repository.get_profile(user_id)
            weight = current.weight_kg if current else None
            if weight and goal == Goal.LOSE and target_weight_kg >= weight:
                raise ProfileValidationError(
                    "Target weight must be below the current weight to lose weight"
                )
            if weight and goal == Goal.GAIN and target_weight_kg <= weight:
                raise ProfileValidationError(
                    "Target weight must be above the current weight to gain weight"
                )
        return self._merge(
            user_id,
            {
                "goal": goal,
                "target_weight_kg": target_weight_kg,
                "target_date": target_date,
            },
        )

    def preview_metrics(self, user_id: UUID) -> CalculatedMetrics | None:
        """Return the metrics the current profile would produce."""
        profile = self.repository.get_profile(user_id)
        if profile is None:
            return None
        return calculate_user_metrics(profile, self.today())

    def finish_onboarding(self, user_id: UUID) -> UserProfile:
        """Compute and store derived targets, then mark the user onboarded."""
        metrics = self.preview_metrics(user_id)
        if metrics is None:
            raise ProfileValidationError(
                "Profile is incomplete; metrics could not be calculated"
            )
        return self._merge(user_id, {"metrics": metrics, "is_onboarded": True})

    def _merge(self, user_id: UUID, changes: dict[str, object]) -> UserProfile:
        profile = self.repository.merge_profile(user_id, changes)
        self.feed.publish(profile_topic(user_id), profile)
        return profile
