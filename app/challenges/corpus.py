"""Book corpus schema — what compiled progress queries may read.

Configuration only. Rendered into prompts so the model knows the tables.
"""

from __future__ import annotations

CORPUS_TABLES: dict[str, tuple[str, ...]] = {
    "books": (
        "id", "title", "author_id", "rating", "type", "start_date", "end_date", "year",
        "pages", "publisher", "language", "era", "format", "audience",
        "reading_difficulty", "favorite", "awards", "summary", "review",
        "main_characters", "favorite_character", "image_url", "series_id",
    ),
    "authors": (
        "id", "name", "nationality", "continent", "birth_year", "death_year",
        "gender", "literary_genre", "biography", "awards", "img_url",
    ),
    "genres": ("id", "name", "description"),
    "book_genre": ("book_id", "genre_id"),
}


def describe_corpus() -> str:
    return "\n".join(f"- {table}: {', '.join(cols)}" for table, cols in CORPUS_TABLES.items())
