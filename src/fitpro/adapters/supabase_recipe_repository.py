"""Supabase implementation for recipes and like/save relations."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from fitpro.domain.recipes import (
    Difficulty,
    Ingredient,
    MacroOverrides,
    Recipe,
    RecipeNutrition,
)
from fitpro.services.recipes import (
    LIKES,
    SAVES,
    RecipeRelationRepository,
    RecipeRepository,
)

_RELATION_TABLES = {
    LIKES: "recipe_likes",
    SAVES: "recipe_saves",
}


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase-backed repository for recipe documents."""

    client: Client

    def insert_recipe(self, recipe: Recipe) -> Recipe:
        """Create a recipe row and return it."""
        response = (
            self.client.table("recipes")
            .insert(
                {
                    "id": str(recipe.id),
                    "author_id": str(recipe.author_id),
                    "like_count": recipe.like_count,
                    "created_at": recipe.created_at.isoformat(),
                    **_editable_columns(recipe),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create recipe")
        return _parse_recipe(response.data[0])

    def update_recipe(self, recipe: Recipe) -> Recipe:
        """Update the editable columns of a recipe and return it."""
        response = (
            self.client.table("recipes")
            .update(_editable_columns(recipe))
            .eq("id", str(recipe.id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update recipe")
        return _parse_recipe(response.data[0])

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id, if present."""
        response = (
            self.client.table("recipes")
            .select("*")
            .eq("id", str(recipe_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_recipe(response.data[0])

    def delete_recipe(self, recipe_id: UUID) -> None:
        """Delete a recipe row."""
        self.client.table("recipes").delete().eq("id", str(recipe_id)).execute()

    def list_by_author(self, author_id: UUID) -> list[Recipe]:
        """Return an author's recipes, newest first."""
        response = (
            self.client.table("recipes")
            .select("*")
            .eq("author_id", str(author_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_recipe(row) for row in response.data or []]

    def list_public(self, limit: int) -> list[Recipe]:
        """Return public recipes ordered by likes."""
        response = (
            self.client.table("recipes")
            .select("*")
            .eq("is_public", True)
            .order("like_count", desc=True)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_recipe(row) for row in response.data or []]

    def list_by_ids(self, recipe_ids: list[UUID]) -> list[Recipe]:
        """Return recipes by id, keeping the order of ``recipe_ids``."""
        if not recipe_ids:
            return []
        response = (
            self.client.table("recipes")
            .select("*")
            .in_("id", [str(recipe_id) for recipe_id in recipe_ids])
            .execute()
        )
        by_id = {
            recipe.id: recipe
            for recipe in (_parse_recipe(row) for row in response.data or [])
        }
        return [by_id[recipe_id] for recipe_id in recipe_ids if recipe_id in by_id]

    def set_image_path(self, recipe_id: UUID, image_path: str) -> None:
        """Store the cover image path."""
        self.client.table("recipes").update({"image_path": image_path}).eq(
            "id", str(recipe_id)
        ).execute()

    def adjust_like_count(self, recipe_id: UUID, delta: int) -> int:
        """Read the current count and write the adjusted one."""
        response = (
            self.client.table("recipes")
            .select("like_count")
            .eq("id", str(recipe_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to read like count")
        like_count = max(0, int(response.data[0].get("like_count") or 0) + delta)
        update = (
            self.client.table("recipes")
            .update({"like_count": like_count})
            .eq("id", str(recipe_id))
            .execute()
        )
        if not update.data:
            raise RuntimeError("Failed to update like count")
        return like_count


@dataclass
class SupabaseRecipeRelationRepository(RecipeRelationRepository):
    """Supabase-backed like and save relations."""

    client: Client

    def has_relation(self, kind: str, user_id: UUID, recipe_id: UUID) -> bool:
        response = (
            self.client.table(_relation_table(kind))
            .select("recipe_id")
            .eq("user_id", str(user_id))
            .eq("recipe_id", str(recipe_id))
            .limit(1)
            .execute()
        )
        return bool(response.data)

    def add_relation(self, kind: str, user_id: UUID, recipe_id: UUID) -> None:
        self.client.table(_relation_table(kind)).upsert(
            {"user_id": str(user_id), "recipe_id": str(recipe_id)},
            on_conflict="user_id,recipe_id",
        ).execute()

    def remove_relation(self, kind: str, user_id: UUID, recipe_id: UUID) -> None:
        self.client.table(_relation_table(kind)).delete().eq(
            "user_id", str(user_id)
        ).eq("recipe_id", str(recipe_id)).execute()

    def list_recipe_ids(self, kind: str, user_id: UUID) -> list[UUID]:
        response = (
            self.client.table(_relation_table(kind))
            .select("recipe_id")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [UUID(str(row["recipe_id"])) for row in response.data or []]


def _relation_table(kind: str) -> str:
    try:
        return _RELATION_TABLES[kind]
    except KeyError:
        raise ValueError(f"Unknown relation kind: {kind}") from None


def _editable_columns(recipe: Recipe) -> dict[str, object]:
    return {
        "title": recipe.title,
        "difficulty": recipe.difficulty.value,
        "portions": recipe.portions,
        "prep_time_minutes": recipe.prep_time_minutes,
        "cook_time_minutes": recipe.cook_time_minutes,
        "is_public": recipe.is_public,
        "is_vegan": recipe.is_vegan,
        "ingredients": [
            {
                "name": item.name,
                "amount": item.amount,
                "unit": item.unit,
                "calories": item.calories,
                "protein_g": item.protein_g,
                "carbs_g": item.carbs_g,
                "fat_g": item.fat_g,
            }
            for item in recipe.ingredients
        ],
        "instructions": list(recipe.instructions),
        "override_calories": recipe.overrides.calories,
        "override_protein_g": recipe.overrides.protein_g,
        "override_carbs_g": recipe.overrides.carbs_g,
        "override_fat_g": recipe.overrides.fat_g,
        "calories_per_portion": recipe.nutrition.calories_per_portion,
        "protein_per_portion": recipe.nutrition.protein_per_portion,
        "carbs_per_portion": recipe.nutrition.carbs_per_portion,
        "fat_per_portion": recipe.nutrition.fat_per_portion,
        "has_complete_data": recipe.nutrition.has_complete_data,
        "image_path": recipe.image_path,
    }


def _parse_recipe(row: dict[str, object]) -> Recipe:
    """Parse a recipe row into a domain model."""
    return Recipe(
        id=UUID(str(row["id"])),
        author_id=UUID(str(row["author_id"])),
        title=str(row.get("title", "")),
        difficulty=Difficulty(row.get("difficulty") or Difficulty.EASY),
        portions=int(row.get("portions") or 1),
        prep_time_minutes=int(row.get("prep_time_minutes") or 0),
        cook_time_minutes=int(row.get("cook_time_minutes") or 0),
        is_public=bool(row.get("is_public")),
        is_vegan=bool(row.get("is_vegan")),
        ingredients=[
            Ingredient(
                name=str(item.get("name", "")),
                amount=float(item.get("amount") or 0.0),
                unit=str(item.get("unit") or "g"),
                calories=item.get("calories"),
                protein_g=item.get("protein_g"),
                carbs_g=item.get("carbs_g"),
                fat_g=item.get("fat_g"),
            )
            for item in row.get("ingredients") or []
        ],
        instructions=[str(step) for step in row.get("instructions") or []],
        overrides=MacroOverrides(
            calories=row.get("override_calories"),
            protein_g=row.get("override_protein_g"),
            carbs_g=row.get("override_carbs_g"),
            fat_g=row.get("override_fat_g"),
        ),
        nutrition=RecipeNutrition(
            calories_per_portion=int(row.get("calories_per_portion") or 0),
            protein_per_portion=float(row.get("protein_per_portion") or 0.0),
            carbs_per_portion=float(row.get("carbs_per_portion") or 0.0),
            fat_per_portion=float(row.get("fat_per_portion") or 0.0),
            has_complete_data=bool(row.get("has_complete_data")),
        ),
        like_count=int(row.get("like_count") or 0),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        image_path=row.get("image_path"),
    )
