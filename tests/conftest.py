"""Shared fixtures for the test suite."""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Callable

import pytest
from httpx import ASGITransport, AsyncClient

from app.db import get_session
from app.llm import get_llm_client
from app.main import app


# ---------------------------------------------------------------------------
# Golden model responses
# ---------------------------------------------------------------------------

GOLDEN_FENCED = (
    "```sql\n"
    "SELECT COUNT(*) AS count FROM books "
    "WHERE EXTRACT(YEAR FROM end_date) = 2024 AND end_date IS NOT NULL;\n"
    "```"
)

GOLDEN_QUOTED = (
    'sql\nSELECT COUNT(DISTINCT b.id) AS "count" FROM books b '
    "JOIN book_genre bg ON b.id = bg.book_id JOIN genres g ON g.id = bg.genre_id "
    "WHERE EXTRACT(YEAR FROM b.end_date) = 2024 AND b.end_date IS NOT NULL "
    "AND g.name = $$Fantasy$$"
)

BOOKS_2024_SQL = (
    "SELECT COUNT(*) AS count FROM books "
    "WHERE EXTRACT(YEAR FROM end_date) = 2024 AND end_date IS NOT NULL"
)


# ---------------------------------------------------------------------------
# Fake DB session (no real Postgres needed)
# ---------------------------------------------------------------------------

Responder = Callable[[str, dict[str, Any]], "list[dict[str, Any]] | Exception"]


class FakeResult:
    def __init__(self, rows: list[dict[str, Any]]):
        self._rows = rows
        self._keys = list(rows[0].keys()) if rows else []
        self.rowcount = len(rows)

    def keys(self):
        return self._keys

    def fetchall(self):
        return [tuple(r[k] for k in self._keys) for r in self._rows]


class _FakeSavepoint:
    def __init__(self, session: FakeSession):
        self._session = session

    async def __aenter__(self):
        self._session.savepoints += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self._session.rollbacks += 1
        return False


class FakeSession:
    """Minimal stand-in for AsyncSession.

    Every statement goes to ``responder(sql, params)``, which returns rows
    or an exception to raise. Statements are recorded for assertions.
    """

    def __init__(self, responder: Responder | None = None):
        self.responder: Responder = responder or (lambda sql, params: [])
        self.statements: list[tuple[str, dict[str, Any]]] = []
        self.commits = 0
        self.savepoints = 0
        self.rollbacks = 0

    async def execute(self, stmt, params=None):
        sql = str(stmt)
        params = params or {}
        self.statements.append((sql, params))
        if sql.startswith("SET LOCAL"):
            return FakeResult([])
        outcome = self.responder(sql, params)
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResult(outcome)

    def begin_nested(self):
        return _FakeSavepoint(self)

    async def commit(self):
        self.commits += 1

    def executed(self, fragment: str) -> list[tuple[str, dict[str, Any]]]:
        return [s for s in self.statements if fragment in s[0]]


# ---------------------------------------------------------------------------
# Fake text generation
# ---------------------------------------------------------------------------


class FakeLLM:
    """Scripted LLMClient replacement; never touches the network."""

    def __init__(self, responses: list[str] | None = None, error: Exception | None = None):
        self.responses = list(responses or [])
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def complete(self, prompt: str, temperature: float = 0.1, max_output_tokens: int = 500) -> str:
        self.calls.append(
            {"prompt": prompt, "temperature": temperature, "max_output_tokens": max_output_tokens}
        )
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)


# ---------------------------------------------------------------------------
# Corpus helpers
# ---------------------------------------------------------------------------

_YEAR_FILTER = re.compile(r"EXTRACT\(YEAR FROM (?:\w+\.)?end_date\) = (\d{4})", re.IGNORECASE)


def corpus_responder(books: list[dict[str, Any]]) -> Responder:
    """Answer progress queries by counting ``books`` finished in the filtered year."""

    def _respond(sql: str, params: dict[str, Any]):
        match = _YEAR_FILTER.search(sql)
        if match is None:
            return []
        year = int(match.group(1))
        count = sum(1 for b in books if b.get("end_date") and b["end_date"].year == year)
        return [{"count": count}]

    return _respond


def make_books(year: int, n: int, pages: int = 300) -> list[dict[str, Any]]:
    return [
        {
            "id": i + 1,
            "title": f"Book {i + 1}",
            "start_date": date(year, (i % 12) + 1, 1),
            "end_date": date(year, (i % 12) + 1, 11),
            "pages": pages,
            "rating": 4.0,
        }
        for i in range(n)
    ]


def make_challenge_row(
    challenge_id: int = 1,
    name: str = "Read 12 books",
    goal_value: int = 12,
    unit: str = "books",
    year: int = 2024,
    query_sql: str | None = BOOKS_2024_SQL,
    **extra: Any,
) -> dict[str, Any]:
    row = {
        "id": challenge_id,
        "name": name,
        "icon_name": None,
        "description": None,
        "goal_value": goal_value,
        "unit": unit,
        "year": year,
        "rule_description": None,
        "query_sql": query_sql,
    }
    row.update(extra)
    return row


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_session():
    """FakeSession answering nothing (replace ``responder`` in tests)."""
    return FakeSession()


@pytest.fixture()
def fake_llm():
    """FakeLLM with no scripted responses (fill ``responses`` in tests)."""
    return FakeLLM()


@pytest.fixture()
def override_deps(fake_session, fake_llm):
    """Override FastAPI dependencies so no real DB or model is needed."""
    async def _session():
        yield fake_session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    yield fake_session, fake_llm
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_deps):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
