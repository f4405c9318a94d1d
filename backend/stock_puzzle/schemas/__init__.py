"""Pydantic schemas exposed by the API."""

from .puzzle import (
    CompanySchema,
    GenerationResultSchema,
    PredictionSubmissionRequest,
    PuzzleViewSchema,
)

__all__ = [
    "CompanySchema",
    "GenerationResultSchema",
    "PredictionSubmissionRequest",
    "PuzzleViewSchema",
]
