"""Domain models for recipes and their social relations."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class Difficulty(StrEnum):
    """Recipe difficulty."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class Ingredient:
    """Recipe ingredient. Optional macros are per 100 g of the ingredient."""

    name: str
    amount: float
    unit: str
    calories: float | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None

    @property
    def has_complete_macros(self) -> bool:
        """Return True when all four macro values are present."""
        return None not in (self.calories, self.protein_g, self.carbs_g, self.fat_g)


@dataclass(frozen=True)
class MacroOverrides:
    """Whole-recipe macro totals entered by the author."""

    calories: float | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None

    @property
    def is_complete(self) -> bool:
        return None not in (self.calories, self.protein_g, self.carbs_g, self.fat_g)


@dataclass(frozen=True)
class RecipeNutrition:
    """Per-portion nutrition for a recipe."""

    calories_per_portion: int
    protein_per_portion: float
    carbs_per_portion: float
    fat_per_portion: float
    has_complete_data: bool


@dataclass(frozen=True)
class RecipeDraft:
    """Author-provided recipe fields, before validation."""

    title: str
    difficulty: Difficulty | None
    portions: int
    prep_time_minutes: int
    cook_time_minutes: int
    is_public: bool = True
    is_vegan: bool = False
    ingredients: list[Ingredient] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    overrides: MacroOverrides = field(default_factory=MacroOverrides)


@dataclass(frozen=True)
class Recipe:
    """Stored recipe owned by an author."""

    id: UUID
    author_id: UUID
    title: str
    difficulty: Difficulty
    portions: int
    prep_time_minutes: int
    cook_time_minutes: int
    is_public: bool
    is_vegan: bool
    ingredients: list[Ingredient]
    instructions: list[str]
    overrides: MacroOverrides
    nutrition: RecipeNutrition
    like_count: int
    created_at: datetime
    image_path: str | None = None


@dataclass
class RecipeSocialState:
    """Viewer-local like/save state for a recipe."""

    recipe_id: UUID
    liked: bool
    saved: bool
    like_count: int
