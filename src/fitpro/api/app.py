"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from fitpro.api.food_log import router as food_log_router
from fitpro.api.foods import router as foods_router
from fitpro.api.profile import router as profile_router
from fitpro.api.recipes import router as recipes_router
from fitpro.app_logging import configure_logging
from fitpro.containers import AppContainer
from fitpro.services.food_log import (
    FoodEntryNotFoundError,
    FoodEntryValidationError,
)
from fitpro.services.food_search import FoodSearchError
from fitpro.services.profile import ProfileValidationError
from fitpro.services.recipes import (
    RecipeNotFoundError,
    RecipePermissionError,
    RecipeValidationError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting FitPro API (%s)", container.settings.environment)
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(profile_router)
    app.include_router(food_log_router)
    app.include_router(foods_router)
    app.include_router(recipes_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.exception_handler(FoodEntryValidationError)
    @app.exception_handler(ProfileValidationError)
    @app.exception_handler(RecipeValidationError)
    async def validation_error(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(RecipePermissionError)
    async def permission_error(
        request: Request, exc: RecipePermissionError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)}
        )

    @app.exception_handler(FoodEntryNotFoundError)
    @app.exception_handler(RecipeNotFoundError)
    async def not_found_error(request: Request, exc: LookupError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": "not found"}
        )

    @app.exception_handler(FoodSearchError)
    async def search_error(request: Request, exc: FoodSearchError) -> JSONResponse:
        logger.warning("Food search request failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": "search failed"}
        )

    return app
