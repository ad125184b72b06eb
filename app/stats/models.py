"""Stats dashboard response — Pydantic v2 models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.challenges.models import Challenge, ChallengeStatus


class MonthlyStat(BaseModel):
    month: str
    books: int = 0
    pages: int = 0


class YearlyStat(BaseModel):
    year: int
    books: int = 0
    pages: int = 0
    avg_rating: float = 0.0


class GenreStat(BaseModel):
    genre: str
    count: int
    percentage: int


class StatsResponse(BaseModel):
    year: int
    challenge: Challenge | None = None
    progress: int = 0
    status: ChallengeStatus | None = None

    avg_monthly_books: float = 0.0
    avg_pages_per_day: int | None = None  # this year
    avg_days_per_book: int = 0  # all years
    avg_pages_per_day_per_book: int = 0  # all years

    monthly_data: list[MonthlyStat] = Field(default_factory=list)
    yearly_data: list[YearlyStat] = Field(default_factory=list)
    genre_stats: list[GenreStat] = Field(default_factory=list)
