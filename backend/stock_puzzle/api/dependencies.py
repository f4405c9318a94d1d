"""Shared FastAPI dependencies."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, Request, status

from stock_puzzle.context import AppContext


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def verify_internal_token(
    x_internal_token: str | None = Header(default=None),
    context: AppContext = Depends(get_context),
) -> None:
    expected = context.settings.internal_auth_token
    if expected is None:
        return
    if x_internal_token != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid internal token")


InternalAuth = Depends(verify_internal_token)


@dataclass
class RequestContext:
    user_id: str


def get_request_context(x_user_id: str | None = Header(default=None)) -> RequestContext:
    """Identity supplied by the upstream identity provider."""

    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user context")
    return RequestContext(user_id=x_user_id.strip())


__all__ = ["get_context", "InternalAuth", "RequestContext", "get_request_context"]
