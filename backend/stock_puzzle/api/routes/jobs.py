"""Manual trigger for the daily puzzle job."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from stock_puzzle.api.dependencies import InternalAuth, get_context
from stock_puzzle.context import AppContext
from stock_puzzle.scheduler import run_daily_puzzle
from stock_puzzle.schemas import GenerationResultSchema

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/puzzle", response_model=GenerationResultSchema, dependencies=[InternalAuth])
async def trigger_puzzle(context: AppContext = Depends(get_context)) -> GenerationResultSchema:
    """Run the generator inline; reruns for the same day are safe."""

    try:
        result = await run_daily_puzzle(context)
    except asyncio.TimeoutError as exc:
        raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail="Puzzle generation timed out") from exc
    if result is None:
        logger.warning("Manual puzzle generation did not publish")
    return GenerationResultSchema.from_result(result)


__all__ = ["router"]
