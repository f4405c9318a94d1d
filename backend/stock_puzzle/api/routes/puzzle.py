"""Today's puzzle for the calling user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from stock_puzzle.api.dependencies import RequestContext, get_context, get_request_context
from stock_puzzle.context import AppContext
from stock_puzzle.schemas import PredictionSubmissionRequest, PuzzleViewSchema
from stock_puzzle.services.session import (
    PuzzleLockedError,
    PuzzleNotOpenError,
    SessionState,
    SubmissionRejected,
    SubmissionSaveError,
)

router = APIRouter()


@router.get("/today", response_model=PuzzleViewSchema)
async def get_today(
    request_context: RequestContext = Depends(get_request_context),
    context: AppContext = Depends(get_context),
) -> PuzzleViewSchema:
    session = context.session_for(request_context.user_id)
    view = await session.load()
    if view.state is SessionState.ERROR:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=view.error)
    return PuzzleViewSchema.from_view(view)


@router.post("/today/predictions", response_model=PuzzleViewSchema)
async def submit_today(
    payload: PredictionSubmissionRequest,
    request_context: RequestContext = Depends(get_request_context),
    context: AppContext = Depends(get_context),
) -> PuzzleViewSchema:
    session = context.session_for(request_context.user_id)
    view = await session.load()
    if view.state is SessionState.ERROR:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=view.error)

    try:
        for symbol, value in payload.predictions.items():
            session.select_prediction(symbol, value)
        view = await session.submit(confirmed=payload.confirm)
    except (PuzzleLockedError, PuzzleNotOpenError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except SubmissionRejected as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except SubmissionSaveError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return PuzzleViewSchema.from_view(view)


__all__ = ["router"]
