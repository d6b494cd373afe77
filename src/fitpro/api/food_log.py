"""Food log endpoints, including the live daily summary websocket."""

from __future__ import annotations

import asyncio
import logging
from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import (
    APIRouter,
    Depends,
    Request,
    Response,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from fitpro.api.dependencies import (
    current_user_id,
    require_api_token,
    websocket_user_id,
)
from fitpro.api.schemas import AddEntriesRequest, daily_nutrition_payload
from fitpro.services.live import LiveDailyNutrition

if TYPE_CHECKING:
    from fitpro.containers import AppContainer
    from fitpro.domain.food_log import DailyNutrition

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/food-log", tags=["food-log"])


@router.get("/{day}", dependencies=[Depends(require_api_token)])
async def get_day(
    day: date, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the day's meals, totals and progress against targets."""
    container: AppContainer = request.app.state.container
    summary = container.daily_nutrition_service.get_day(user_id, day)
    return daily_nutrition_payload(summary)


@router.post(
    "/{day}/entries",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_api_token)],
)
async def add_entries(
    day: date,
    payload: AddEntriesRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Log one or more foods to a meal."""
    container: AppContainer = request.app.state.container
    entries = container.food_log_service.add_entries(
        user_id,
        day,
        [item.to_portion() for item in payload.items],
        payload.meal_type,
    )
    return {"entries": entries}


@router.delete(
    "/{day}/entries/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_api_token)],
)
async def delete_entry(
    day: date,
    entry_id: UUID,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> Response:
    container: AppContainer = request.app.state.container
    container.food_log_service.delete_entry(user_id, day, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/{day}/live")
async def live_day(
    websocket: WebSocket, day: date, user_id: UUID = Depends(websocket_user_id)
) -> None:
    """Push the daily summary now and after every profile or food log change."""
    container: AppContainer = websocket.app.state.container
    session = LiveDailyNutrition(
        user_id=user_id,
        day=day,
        feed=container.change_feed,
        food_log=container.food_log_service,
        profiles=container.profile_service,
    )
    loop = asyncio.get_running_loop()
    updates: asyncio.Queue[DailyNutrition] = asyncio.Queue()
    session.on_change(
        lambda summary: loop.call_soon_threadsafe(updates.put_nowait, summary)
    )

    await websocket.accept()
    initial = session.start()

    async def forward() -> None:
        await websocket.send_json(daily_nutrition_payload(initial))
        while True:
            summary = await updates.get()
            await websocket.send_json(daily_nutrition_payload(summary))

    sender = asyncio.create_task(forward())
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        _logger.info("Live food log closed for %s on %s", user_id, day)
    finally:
        sender.cancel()
        session.close()
