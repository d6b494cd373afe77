"""Recipe endpoints: authoring, discovery, images and like/save toggles."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from fitpro.api.dependencies import current_user_id, require_api_token
from fitpro.api.schemas import RecipeRequest, recipe_payload

if TYPE_CHECKING:
    from fitpro.containers import AppContainer
    from fitpro.domain.recipes import Recipe
    from fitpro.services.recipes import ToggleResult

router = APIRouter(
    prefix="/recipes",
    tags=["recipes"],
    dependencies=[Depends(require_api_token)],
)


@router.get("")
@router.get("/public")
async def list_public(
    request: Request, limit: int = Query(default=50, ge=1, le=200)
) -> dict[str, object]:
    """Return public recipes, most liked first."""
    container: AppContainer = request.app.state.container
    return {"recipes": _payloads(container, container.recipe_service.list_public(limit))}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_recipe(
    payload: RecipeRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    recipe = container.recipe_service.save_recipe(user_id, payload.to_domain())
    return recipe_payload(recipe, container.recipe_service.image_url(recipe))


@router.get("/mine")
async def list_mine(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    recipes = container.recipe_service.list_by_author(user_id)
    return {"recipes": _payloads(container, recipes)}


@router.get("/saved")
async def list_saved(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    recipes = container.recipe_service.list_saved(user_id)
    return {"recipes": _payloads(container, recipes)}


@router.get("/{recipe_id}")
async def get_recipe(
    recipe_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return a recipe with the caller's like/save state."""
    container: AppContainer = request.app.state.container
    recipe = container.recipe_service.get_recipe(recipe_id)
    if not recipe.is_public and recipe.author_id != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    social = container.recipe_social_service.get_state(user_id, recipe_id)
    return recipe_payload(recipe, container.recipe_service.image_url(recipe), social)


@router.put("/{recipe_id}")
async def update_recipe(
    recipe_id: UUID,
    payload: RecipeRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    recipe = container.recipe_service.save_recipe(
        user_id, payload.to_domain(), recipe_id=recipe_id
    )
    return recipe_payload(recipe, container.recipe_service.image_url(recipe))


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> Response:
    container: AppContainer = request.app.state.container
    container.recipe_service.delete_recipe(user_id, recipe_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{recipe_id}/image")
async def upload_image(
    recipe_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Store the raw request body as the recipe's cover image."""
    container: AppContainer = request.app.state.container
    content = await request.body()
    if not content:
        raise HTTPException(
            status_code=422,
            detail="Image body is empty",
        )
    content_type = request.headers.get("content-type", "image/jpeg")
    recipe = container.recipe_service.attach_image(
        user_id, recipe_id, content, content_type
    )
    return recipe_payload(recipe, container.recipe_service.image_url(recipe))


@router.post("/{recipe_id}/like")
async def toggle_like(
    recipe_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    result = await container.recipe_social_service.toggle_like(user_id, recipe_id)
    return _toggle_payload(result)


@router.post("/{recipe_id}/save")
async def toggle_save(
    recipe_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    result = await container.recipe_social_service.toggle_save(user_id, recipe_id)
    return _toggle_payload(result)


def _payloads(container: AppContainer, recipes: list[Recipe]) -> list[dict[str, object]]:
    return [
        recipe_payload(recipe, container.recipe_service.image_url(recipe))
        for recipe in recipes
    ]


def _toggle_payload(result: ToggleResult) -> dict[str, object]:
    return {
        "liked": result.state.liked,
        "saved": result.state.saved,
        "like_count": result.state.like_count,
        "committed": result.committed,
    }
