"""Database connector — finished-book reads for the stats dashboard."""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import rows_as_dicts


async def fetch_finished_books(
    session: AsyncSession,
    year: int | None = None,
) -> list[dict[str, Any]]:
    """Books with an end_date, optionally limited to those finished in ``year``.

    Columns: id, title, start_date, end_date, pages, rating.
    """
    query = (
        "SELECT id, title, start_date, end_date, pages, rating "
        "FROM books "
        "WHERE end_date IS NOT NULL"
    )
    params: dict[str, Any] = {}
    if year is not None:
        query += " AND end_date >= :start AND end_date < :end"
        params["start"] = date(year, 1, 1)
        params["end"] = date(year + 1, 1, 1)
    query += " ORDER BY end_date"

    result = await session.execute(text(query), params)
    return rows_as_dicts(result)


async def fetch_genre_counts(session: AsyncSession, year: int) -> list[dict[str, Any]]:
    """Books finished in ``year`` per genre name. Columns: genre, count."""
    query = (
        "SELECT g.name AS genre, COUNT(*) AS count "
        "FROM book_genre bg "
        "JOIN genres g ON g.id = bg.genre_id "
        "JOIN books b ON b.id = bg.book_id "
        "WHERE b.end_date >= :start AND b.end_date < :end "
        "GROUP BY g.name"
    )
    result = await session.execute(
        text(query),
        {"start": date(year, 1, 1), "end": date(year + 1, 1, 1)},
    )
    return rows_as_dicts(result)
