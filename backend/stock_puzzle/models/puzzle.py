"""Daily puzzle and per-symbol company snapshot models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from stock_puzzle.db.base import Base


class Puzzle(Base):
    """The published set of symbols for one calendar day."""

    __tablename__ = "puzzles"

    date_key: Mapped[str] = mapped_column(String(10), primary_key=True)
    symbols: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_ready: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class DailyCompany(Base):
    """Latest price snapshot for a symbol; overwritten by every generator run."""

    __tablename__ = "daily_companies"
    __table_args__ = (Index("ix_daily_companies_date_key", "date_key"),)

    symbol: Mapped[str] = mapped_column(String(20), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date_key: Mapped[str] = mapped_column(String(10), nullable=False)
    price: Mapped[float | None] = mapped_column(Float, nullable=True)
    logo_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


__all__ = ["Puzzle", "DailyCompany"]
