"""Pydantic schemas for the daily puzzle view and submissions."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from stock_puzzle.models import Prediction
from stock_puzzle.services.generator import GenerationResult
from stock_puzzle.services.session import PuzzleView, SessionState


class CompanySchema(BaseModel):
    symbol: str = Field(..., examples=["AAPL"])
    name: str
    price: Optional[float] = None
    logo_url: Optional[str] = None


class PuzzleViewSchema(BaseModel):
    state: SessionState
    date_key: Optional[str] = Field(default=None, examples=["2025-01-02"])
    companies: list[CompanySchema] = Field(default_factory=list)
    predictions: dict[str, Optional[Prediction]] = Field(default_factory=dict)
    streak: int = 0
    locked: bool = False
    selected_count: int = 0
    total: int = 0

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "state": "open",
                "date_key": "2025-01-02",
                "companies": [
                    {"symbol": "AAPL", "name": "Apple Inc.", "price": 150.0, "logo_url": "https://logo.clearbit.com/aapl.com"}
                ],
                "predictions": {"AAPL": None},
                "streak": 4,
                "locked": False,
                "selected_count": 0,
                "total": 1,
            }
        }
    )

    @classmethod
    def from_view(cls, view: PuzzleView) -> "PuzzleViewSchema":
        return cls(
            state=view.state,
            date_key=view.date_key,
            companies=[
                CompanySchema(symbol=c.symbol, name=c.name, price=c.price, logo_url=c.logo_url)
                for c in view.companies
            ],
            predictions=view.predictions,
            streak=view.streak,
            locked=view.locked,
            selected_count=view.selected_count,
            total=len(view.companies),
        )


class PredictionSubmissionRequest(BaseModel):
    predictions: dict[str, Prediction] = Field(..., examples=[{"AAPL": "up", "MSFT": "down"}])
    confirm: bool = Field(default=False, description="Set once the user has confirmed the final answers.")


class GenerationResultSchema(BaseModel):
    status: str
    date_key: Optional[str] = None
    symbols: list[str] = Field(default_factory=list)
    priced: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: GenerationResult | None) -> "GenerationResultSchema":
        if result is None:
            return cls(status="failed")
        return cls(
            status="published",
            date_key=result.date_key,
            symbols=result.symbols,
            priced=result.priced,
            missing=result.missing,
        )
