"""Food database search, barcode lookup and recent foods."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder

from fitpro.api.dependencies import (
    current_user_id,
    require_api_token,
    websocket_user_id,
)

if TYPE_CHECKING:
    from fitpro.containers import AppContainer
    from fitpro.services.food_search import SearchDebouncer

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/foods", tags=["foods"])


@router.get("/search", dependencies=[Depends(require_api_token)])
async def search_foods(request: Request, q: str = "") -> dict[str, object]:
    """Search the food database; queries shorter than two characters return nothing."""
    container: AppContainer = request.app.state.container
    results = await container.food_search_service.search(q)
    return {"query": q, "results": results}


@router.get("/barcode/{barcode}", dependencies=[Depends(require_api_token)])
async def lookup_barcode(barcode: str, request: Request) -> dict[str, object]:
    """Look up a product by barcode; unknown codes are not an error."""
    container: AppContainer = request.app.state.container
    food = await container.food_search_service.lookup_barcode(barcode)
    return {"found": food is not None, "food": food}


@router.get("/recent", dependencies=[Depends(require_api_token)])
async def recent_foods(
    request: Request,
    user_id: UUID = Depends(current_user_id),
    limit: int = Query(default=20, ge=1, le=100),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return {"recent": container.recent_foods_service.list_recent(user_id, limit)}


@router.websocket("/search/live")
async def live_search(
    websocket: WebSocket, user_id: UUID = Depends(websocket_user_id)
) -> None:
    """Search as the user types; only the latest query gets an answer."""
    container: AppContainer = websocket.app.state.container
    debouncer = container.new_search_debouncer()
    pending: set[asyncio.Task[None]] = set()
    await websocket.accept()
    try:
        while True:
            query = await websocket.receive_text()
            task = asyncio.create_task(_answer(websocket, debouncer, query))
            pending.add(task)
            task.add_done_callback(pending.discard)
    except WebSocketDisconnect:
        _logger.info("Live search closed for %s", user_id)
    finally:
        for task in list(pending):
            task.cancel()


async def _answer(websocket: WebSocket, debouncer: SearchDebouncer, query: str) -> None:
    outcome = await debouncer.submit(query)
    if outcome is None:
        return
    await websocket.send_json(jsonable_encoder(outcome))
