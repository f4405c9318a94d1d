"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .jobs import router as jobs_router
from .puzzle import router as puzzle_router

api_router = APIRouter()
api_router.include_router(puzzle_router, prefix="/puzzle", tags=["puzzle"])
api_router.include_router(jobs_router, prefix="/jobs", tags=["jobs"])

__all__ = ["api_router"]
