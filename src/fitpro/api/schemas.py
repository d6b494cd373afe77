"""Pydantic request models and response serializers."""

from datetime import date
from typing import Annotated

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from fitpro.domain.food_log import DailyNutrition, MealType
from fitpro.domain.nutrition import FoodCandidate
from fitpro.domain.profile import ActivityLevel, Gender, Goal, Occupation
from fitpro.domain.recipes import (
    Difficulty,
    Ingredient,
    MacroOverrides,
    Recipe,
    RecipeDraft,
    RecipeSocialState,
)
from fitpro.services.food_log import FoodPortion

NonNegative = Annotated[float, Field(ge=0, allow_inf_nan=False)]


class BirthdayRequest(BaseModel):
    """Onboarding step 1 payload."""

    birthday: date


class LifestyleRequest(BaseModel):
    """Onboarding step 1b payload."""

    occupation: Occupation
    activity_level: ActivityLevel


class BodyRequest(BaseModel):
    """Onboarding step 2 payload."""

    height_cm: float
    weight_kg: float
    gender: Gender


class GoalRequest(BaseModel):
    """Onboarding step 3 payload."""

    goal: Goal
    target_weight_kg: float | None = None
    target_date: date | None = None


class FoodCandidateModel(BaseModel):
    """Food with nutrition values per 100 g."""

    barcode: str = ""
    name: str
    calories: NonNegative
    protein_g: NonNegative
    carbs_g: NonNegative
    fat_g: NonNegative
    brand: str | None = None
    image_url: str | None = None
    fiber_g: NonNegative | None = None
    sugar_g: NonNegative | None = None
    nutriscore: str | None = None

    def to_domain(self) -> FoodCandidate:
        return FoodCandidate(**self.model_dump())


class FoodItemRequest(BaseModel):
    """One food plus the amount eaten in grams."""

    food: FoodCandidateModel
    grams: NonNegative = 0.0

    def to_portion(self) -> FoodPortion:
        return FoodPortion(food=self.food.to_domain(), grams=self.grams)


class AddEntriesRequest(BaseModel):
    """Foods to append to one meal of a day."""

    meal_type: MealType
    items: list[FoodItemRequest] = Field(min_length=1)


class IngredientModel(BaseModel):
    """Recipe ingredient; macros are per 100 g."""

    name: str
    amount: NonNegative = 0.0
    unit: str = "g"
    calories: NonNegative | None = None
    protein_g: NonNegative | None = None
    carbs_g: NonNegative | None = None
    fat_g: NonNegative | None = None


class MacroOverridesModel(BaseModel):
    """Whole-recipe totals that replace ingredient sums."""

    calories: NonNegative | None = None
    protein_g: NonNegative | None = None
    carbs_g: NonNegative | None = None
    fat_g: NonNegative | None = None


class RecipeRequest(BaseModel):
    """Create or edit payload for a recipe."""

    title: str
    difficulty: Difficulty | None = None
    portions: int
    prep_time_minutes: int
    cook_time_minutes: int
    is_public: bool = True
    is_vegan: bool = False
    ingredients: list[IngredientModel] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    overrides: MacroOverridesModel = Field(default_factory=MacroOverridesModel)

    def to_domain(self) -> RecipeDraft:
        return RecipeDraft(
            title=self.title,
            difficulty=self.difficulty,
            portions=self.portions,
            prep_time_minutes=self.prep_time_minutes,
            cook_time_minutes=self.cook_time_minutes,
            is_public=self.is_public,
            is_vegan=self.is_vegan,
            ingredients=[Ingredient(**item.model_dump()) for item in self.ingredients],
            instructions=list(self.instructions),
            overrides=MacroOverrides(**self.overrides.model_dump()),
        )


def daily_nutrition_payload(summary: DailyNutrition) -> dict[str, object]:
    """Encode a daily summary, including the over-target flags."""
    payload = jsonable_encoder(summary)
    payload["is_over"] = {
        "calories": summary.is_over_calories,
        "protein_g": summary.is_over_protein,
        "carbs_g": summary.is_over_carbs,
        "fat_g": summary.is_over_fat,
    }
    return payload


def recipe_payload(
    recipe: Recipe,
    image_url: str | None,
    social: RecipeSocialState | None = None,
) -> dict[str, object]:
    """Encode a recipe with a freshly resolved image URL."""
    payload = jsonable_encoder(recipe)
    payload["image_url"] = image_url
    if social is not None:
        payload["social"] = jsonable_encoder(social)
    return payload
