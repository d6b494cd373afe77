"""Profile and onboarding endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request

from fitpro.api.dependencies import current_user_id, require_api_token
from fitpro.api.schemas import BirthdayRequest, BodyRequest, GoalRequest, LifestyleRequest

if TYPE_CHECKING:
    from fitpro.containers import AppContainer

router = APIRouter(
    prefix="/profile",
    tags=["profile"],
    dependencies=[Depends(require_api_token)],
)


@router.get("")
async def get_profile(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the caller's profile, or null before the first onboarding step."""
    container: AppContainer = request.app.state.container
    return {"profile": container.profile_service.get_profile(user_id)}


@router.put("/onboarding/birthday")
async def save_birthday(
    payload: BirthdayRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    profile = container.profile_service.save_birthday(user_id, payload.birthday)
    return {"profile": profile}


@router.put("/onboarding/lifestyle")
async def save_lifestyle(
    payload: LifestyleRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    profile = container.profile_service.save_lifestyle(
        user_id, payload.occupation, payload.activity_level
    )
    return {"profile": profile}


@router.put("/onboarding/body")
async def save_body(
    payload: BodyRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    profile = container.profile_service.save_body(
        user_id, payload.height_cm, payload.weight_kg, payload.gender
    )
    return {"profile": profile}


@router.put("/onboarding/goal")
async def save_goal(
    payload: GoalRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    profile = container.profile_service.save_goal(
        user_id, payload.goal, payload.target_weight_kg, payload.target_date
    )
    return {"profile": profile}


@router.get("/metrics")
async def preview_metrics(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the metrics the profile would produce, or null if incomplete."""
    container: AppContainer = request.app.state.container
    return {"metrics": container.profile_service.preview_metrics(user_id)}


@router.post("/onboarding/finish")
async def finish_onboarding(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Store the derived targets and mark the profile onboarded."""
    container: AppContainer = request.app.state.container
    return {"profile": container.profile_service.finish_onboarding(user_id)}
