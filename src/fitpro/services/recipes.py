"""Recipe authoring, nutrition and like/save relations."""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from fitpro.domain.nutrition import round1, round_int
from fitpro.domain.recipes import (
    Ingredient,
    MacroOverrides,
    Recipe,
    RecipeDraft,
    RecipeNutrition,
    RecipeSocialState,
)
from fitpro.services.optimistic import apply_optimistic

MAX_INSTRUCTION_LENGTH = 300
LIKES = "likes"
SAVES = "saves"


class RecipeValidationError(ValueError):
    """The recipe draft is missing required fields."""


class RecipePermissionError(PermissionError):
    """Only the author may change a recipe."""


class RecipeNotFoundError(LookupError):
    """No recipe exists with the given id."""


class RecipeRepository(Protocol):
    """Persistence interface for recipes."""

    def insert_recipe(self, recipe: Recipe) -> Recipe:
        """Store a new recipe and return it."""

    def update_recipe(self, recipe: Recipe) -> Recipe:
        """Replace the editable fields of a recipe and return it."""

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id, if present."""

    def delete_recipe(self, recipe_id: UUID) -> None:
        """Delete a recipe."""

    def list_by_author(self, author_id: UUID) -> list[Recipe]:
        """Return recipes written by an author, newest first."""

    def list_public(self, limit: int) -> list[Recipe]:
        """Return public recipes, most liked first."""

    def list_by_ids(self, recipe_ids: list[UUID]) -> list[Recipe]:
        """Return the recipes with the given ids."""

    def set_image_path(self, recipe_id: UUID, image_path: str) -> None:
        """Store the storage path of a recipe's cover image."""

    def adjust_like_count(self, recipe_id: UUID, delta: int) -> int:
        """Add delta to the like count (never below 0) and return the new count."""


class RecipeRelationRepository(Protocol):
    """Persistence interface for per-user like/save relations."""

    def has_relation(self, kind: str, user_id: UUID, recipe_id: UUID) -> bool:
        """Return True when the relation exists."""

    def add_relation(self, kind: str, user_id: UUID, recipe_id: UUID) -> None:
        """Create the relation."""

    def remove_relation(self, kind: str, user_id: UUID, recipe_id: UUID) -> None:
        """Delete the relation."""

    def list_recipe_ids(self, kind: str, user_id: UUID) -> list[UUID]:
        """Return recipe ids related to a user, newest first."""


class RecipeImageStore(Protocol):
    """Binary storage for recipe images."""

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        """Upload or replace an object."""

    def signed_url(self, path: str, ttl_seconds: int) -> str:
        """Return a fetchable URL for an object."""


@dataclass
class RecipeService:
    """Application service for recipe authoring."""

    repository: RecipeRepository
    relations: RecipeRelationRepository
    images: RecipeImageStore
    image_url_ttl_seconds: int = 3600
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    def save_recipe(
        self, author_id: UUID, draft: RecipeDraft, recipe_id: UUID | None = None
    ) -> Recipe:
        """Create a recipe, or edit one when ``recipe_id`` is given."""
        _validate(draft)
        instructions = clean_instructions(draft.instructions)
        nutrition = calculate_recipe_nutrition(
            draft.ingredients, draft.portions, draft.overrides
        )
        if recipe_id is None:
            return self.repository.insert_recipe(
                Recipe(
                    id=uuid4(),
                    author_id=author_id,
                    title=draft.title.strip(),
                    difficulty=draft.difficulty,
                    portions=draft.portions,
                    prep_time_minutes=draft.prep_time_minutes,
                    cook_time_minutes=draft.cook_time_minutes,
                    is_public=draft.is_public,
                    is_vegan=draft.is_vegan,
                    ingredients=list(draft.ingredients),
                    instructions=instructions,
                    overrides=draft.overrides,
                    nutrition=nutrition,
                    like_count=0,
                    created_at=self.clock(),
                )
            )

        existing = self._owned_recipe(author_id, recipe_id)
        return self.repository.update_recipe(
            replace(
                existing,
                title=draft.title.strip(),
                difficulty=draft.difficulty,
                portions=draft.portions,
                prep_time_minutes=draft.prep_time_minutes,
                cook_time_minutes=draft.cook_time_minutes,
                is_public=draft.is_public,
                is_vegan=draft.is_vegan,
                ingredients=list(draft.ingredients),
                instructions=instructions,
                overrides=draft.overrides,
                nutrition=nutrition,
            )
        )

    def attach_image(
        self, author_id: UUID, recipe_id: UUID, content: bytes, content_type: str
    ) -> Recipe:
        """Upload a cover image and link it to the recipe."""
        recipe = self._owned_recipe(author_id, recipe_id)
        path = f"users/{author_id}/recipes/{recipe_id}.jpg"
        self.images.upload(path, content, content_type)
        self.repository.set_image_path(recipe_id, path)
        return replace(recipe, image_path=path)

    def image_url(self, recipe: Recipe) -> str | None:
        """Resolve a fresh URL for the cover image; URLs expire, do not cache them."""
        if not recipe.image_path:
            return None
        return self.images.signed_url(recipe.image_path, self.image_url_ttl_seconds)

    def get_recipe(self, recipe_id: UUID) -> Recipe:
        """Return a recipe or raise RecipeNotFoundError."""
        recipe = self.repository.get_recipe(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(str(recipe_id))
        return recipe

    def delete_recipe(self, author_id: UUID, recipe_id: UUID) -> None:
        """Delete a recipe owned by the author."""
        self._owned_recipe(author_id, recipe_id)
        self.repository.delete_recipe(recipe_id)

    def list_by_author(self, author_id: UUID) -> list[Recipe]:
        """Return an author's recipes."""
        return self.repository.list_by_author(author_id)

    def list_public(self, limit: int = 50) -> list[Recipe]:
        """Return public recipes for discovery."""
        return self.repository.list_public(limit)

    def list_saved(self, user_id: UUID) -> list[Recipe]:
        """Return recipes the user saved, hiding ones that went private."""
        recipe_ids = self.relations.list_recipe_ids(SAVES, user_id)
        if not recipe_ids:
            return []
        return [
            recipe
            for recipe in self.repository.list_by_ids(recipe_ids)
            if _visible_to(recipe, user_id)
        ]

    def _owned_recipe(self, author_id: UUID, recipe_id: UUID) -> Recipe:
        recipe = self.get_recipe(recipe_id)
        if recipe.author_id != author_id:
            raise RecipePermissionError("Only the author can change this recipe")
        return recipe


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of a like/save toggle; ``committed`` is False after a rollback."""

    state: RecipeSocialState
    committed: bool


@dataclass
class RecipeSocialService:
    """Like and save toggles with optimistic local state."""

    repository: RecipeRepository
    relations: RecipeRelationRepository

    def get_state(self, user_id: UUID, recipe_id: UUID) -> RecipeSocialState:
        """Return the viewer's like/save state for a recipe."""
        recipe = self.repository.get_recipe(recipe_id)
        if recipe is None or not _visible_to(recipe, user_id):
            raise RecipeNotFoundError(str(recipe_id))
        return RecipeSocialState(
            recipe_id=recipe_id,
            liked=self.relations.has_relation(LIKES, user_id, recipe_id),
            saved=self.relations.has_relation(SAVES, user_id, recipe_id),
            like_count=recipe.like_count,
        )

    async def toggle_like(self, user_id: UUID, recipe_id: UUID) -> ToggleResult:
        """Flip the like locally, then persist the relation and like count."""
        state = self.get_state(user_id, recipe_id)
        was_liked = state.liked
        previous_count = state.like_count
        delta = -1 if was_liked else 1

        def apply() -> None:
            state.liked = not was_liked
            state.like_count = max(0, previous_count + delta)

        def revert() -> None:
            state.liked = was_liked
            state.like_count = previous_count

        async def commit() -> None:
            self._set_relation(LIKES, user_id, recipe_id, not was_liked)
            try:
                state.like_count = self.repository.adjust_like_count(recipe_id, delta)
            except Exception:
                self._set_relation(LIKES, user_id, recipe_id, was_liked)
                raise

        committed = await apply_optimistic(apply, revert, commit, action="like")
        return ToggleResult(state=state, committed=committed)

    async def toggle_save(self, user_id: UUID, recipe_id: UUID) -> ToggleResult:
        """Flip the saved flag locally, then persist it."""
        state = self.get_state(user_id, recipe_id)
        was_saved = state.saved

        def apply() -> None:
            state.saved = not was_saved

        def revert() -> None:
            state.saved = was_saved

        async def commit() -> None:
            self._set_relation(SAVES, user_id, recipe_id, not was_saved)

        committed = await apply_optimistic(apply, revert, commit, action="save")
        return ToggleResult(state=state, committed=committed)

    def _set_relation(
        self, kind: str, user_id: UUID, recipe_id: UUID, present: bool
    ) -> None:
        if present:
            self.relations.add_relation(kind, user_id, recipe_id)
        else:
            self.relations.remove_relation(kind, user_id, recipe_id)


def calculate_recipe_nutrition(
    ingredients: list[Ingredient], portions: int, overrides: MacroOverrides
) -> RecipeNutrition:
    """Per-portion nutrition from overrides where given, else from ingredients.

    Ingredient macros are per 100 g and scaled by the ingredient amount.
    """
    if portions <= 0 or (not ingredients and overrides == MacroOverrides()):
        return RecipeNutrition(0, 0.0, 0.0, 0.0, has_complete_data=False)

    totals = {"calories": 0.0, "protein_g": 0.0, "carbs_g": 0.0, "fat_g": 0.0}
    for ingredient in ingredients:
        factor = (ingredient.amount or 0) / 100
        for key in totals:
            totals[key] += (getattr(ingredient, key) or 0) * factor
    for key in totals:
        override = getattr(overrides, key)
        if override is not None:
            totals[key] = override

    complete = overrides.is_complete or (
        bool(ingredients) and all(item.has_complete_macros for item in ingredients)
    )
    return RecipeNutrition(
        calories_per_portion=round_int(totals["calories"] / portions),
        protein_per_portion=round1(totals["protein_g"] / portions),
        carbs_per_portion=round1(totals["carbs_g"] / portions),
        fat_per_portion=round1(totals["fat_g"] / portions),
        has_complete_data=complete,
    )


def clean_instructions(steps: list[str]) -> list[str]:
    """Trim steps to the maximum length and drop empty ones."""
    cleaned = []
    for step in steps:
        text = step.strip()[:MAX_INSTRUCTION_LENGTH]
        if text:
            cleaned.append(text)
    return cleaned


def _validate(draft: RecipeDraft) -> None:
    if not draft.title.strip():
        raise RecipeValidationError("Title is required")
    if draft.difficulty is None:
        raise RecipeValidationError("Difficulty is required")
    for name, value in (
        ("portions", draft.portions),
        ("prep_time_minutes", draft.prep_time_minutes),
        ("cook_time_minutes", draft.cook_time_minutes),
    ):
        if value <= 0:
            raise RecipeValidationError(f"{name} must be positive")
    for ingredient in draft.ingredients:
        if not ingredient.name.strip():
            raise RecipeValidationError("Ingredient name is required")
        if ingredient.amount < 0:
            raise RecipeValidationError("Ingredient amount cannot be negative")


def _visible_to(recipe: Recipe, user_id: UUID) -> bool:
    return recipe.is_public or recipe.author_id == user_id
