"""Stats HTTP router — headline challenge plus reading statistics for a year."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.challenges import connector as challenge_connector
from app.challenges.evaluator import evaluate
from app.challenges.models import Challenge
from app.challenges.selection import select_main_challenge
from app.clock import current_year
from app.db import get_session
from app.llm import LLMClient, get_llm_client
from app.stats import connector, features
from app.stats.models import StatsResponse

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=StatsResponse)
async def get_stats(
    session: AsyncSession = Depends(get_session),
    llm: LLMClient = Depends(get_llm_client),
    year: int | None = Query(default=None, description="Year (default: current year)"),
) -> StatsResponse:
    this_year = current_year()
    target_year = year or this_year

    rows = await challenge_connector.fetch_challenges_for_year(session, target_year)
    candidates = [Challenge.model_validate(r) for r in rows]
    main = await select_main_challenge(llm, candidates, target_year)

    progress = None
    if main is not None:
        progress = await evaluate(session, main, this_year, this_year - 1)

    year_books = await connector.fetch_finished_books(session, target_year)
    all_books = await connector.fetch_finished_books(session)
    genre_counts = await connector.fetch_genre_counts(session, target_year)

    return StatsResponse(
        year=target_year,
        challenge=main,
        progress=progress.current_progress if progress else 0,
        status=progress.status if progress else None,
        avg_monthly_books=features.avg_monthly_books(year_books),
        avg_pages_per_day=features.avg_pages_per_day(year_books),
        avg_days_per_book=features.avg_days_per_book(all_books),
        avg_pages_per_day_per_book=features.avg_pages_per_day(all_books) or 0,
        monthly_data=features.monthly_breakdown(year_books),
        yearly_data=features.yearly_breakdown(all_books),
        genre_stats=features.genre_shares(genre_counts),
    )
