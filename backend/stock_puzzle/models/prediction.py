"""Per-user daily prediction records."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from stock_puzzle.db.base import Base


class Prediction(str, enum.Enum):
    UP = "up"
    DOWN = "down"


class UserPrediction(Base):
    """A user's locked-in choices and resulting streak for one day."""

    __tablename__ = "user_predictions"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    date_key: Mapped[str] = mapped_column(String(10), primary_key=True)
    predictions: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    # Nullable so rows written by older clients without a streak still load.
    streak: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


__all__ = ["Prediction", "UserPrediction"]
