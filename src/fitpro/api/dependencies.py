"""Shared FastAPI dependencies for token checks and caller identity."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import Depends, Header, HTTPException, WebSocketException, status
from fastapi.requests import HTTPConnection

if TYPE_CHECKING:
    from fitpro.containers import AppContainer


def _get_api_token(connection: HTTPConnection) -> str:
    container: AppContainer = connection.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def current_user_id(x_user_id: str | None = Header(default=None)) -> UUID:
    """Return the caller's user id from the ``X-User-Id`` header."""
    user_id = _parse_user_id(x_user_id)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return user_id


async def websocket_user_id(
    x_api_token: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> UUID:
    """Token and identity check for websocket handshakes."""
    user_id = _parse_user_id(x_user_id)
    if not x_api_token or x_api_token != api_token or user_id is None:
        raise WebSocketException(code=status.WS_1008_POLICY_VIOLATION)
    return user_id


def _parse_user_id(value: str | None) -> UUID | None:
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        return None
