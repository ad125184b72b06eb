"""Pure stateless reading statistics — math only, never raises."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _as_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def reading_days(book: dict[str, Any]) -> int | None:
    """Days between start_date and end_date. None if either is missing."""
    start, end = _as_date(book.get("start_date")), _as_date(book.get("end_date"))
    if start is None or end is None:
        return None
    return (end - start).days


def pages_per_day(book: dict[str, Any]) -> float | None:
    """Reading speed for one book. None without pages or a positive duration."""
    days = reading_days(book)
    pages = book.get("pages")
    if not days or days <= 0 or not pages:
        return None
    return float(pages) / days


def avg_monthly_books(books: list[dict[str, Any]]) -> float:
    return round(len(books) / 12, 1)


def avg_pages_per_day(books: list[dict[str, Any]]) -> int | None:
    """Mean reading speed over books with a usable speed. None if there are none."""
    speeds = [s for s in (pages_per_day(b) for b in books) if s is not None]
    if not speeds:
        return None
    return round(sum(speeds) / len(speeds))


def avg_days_per_book(books: list[dict[str, Any]]) -> int:
    durations = [d for d in (reading_days(b) for b in books) if d is not None and d > 0]
    if not durations:
        return 0
    return round(sum(durations) / len(durations))


def monthly_breakdown(books: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Twelve entries of books and pages finished per calendar month."""
    buckets = [{"month": m, "books": 0, "pages": 0} for m in MONTHS]
    for book in books:
        end = _as_date(book.get("end_date"))
        if end is None:
            continue
        bucket = buckets[end.month - 1]
        bucket["books"] += 1
        bucket["pages"] += book.get("pages") or 0
    return buckets


def yearly_breakdown(books: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Books, pages and mean rating per finish year, newest first."""
    years: dict[int, dict[str, Any]] = {}
    for book in books:
        end = _as_date(book.get("end_date"))
        if end is None:
            continue
        entry = years.setdefault(end.year, {"year": end.year, "books": 0, "pages": 0, "ratings": []})
        entry["books"] += 1
        entry["pages"] += book.get("pages") or 0
        if book.get("rating"):
            entry["ratings"].append(float(book["rating"]))

    out = []
    for y in sorted(years, reverse=True):
        entry = years[y]
        ratings = entry.pop("ratings")
        entry["avg_rating"] = round(sum(ratings) / len(ratings), 1) if ratings else 0.0
        out.append(entry)
    return out


def genre_shares(counts: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Attach a rounded percentage to each genre count, most common first."""
    total = sum(int(c["count"]) for c in counts)
    if total <= 0:
        return []
    shares = [
        {"genre": c["genre"], "count": int(c["count"]), "percentage": round(int(c["count"]) / total * 100)}
        for c in counts
        if c.get("genre")
    ]
    return sorted(shares, key=lambda s: (-s["count"], s["genre"]))
