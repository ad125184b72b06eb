"""Database connector — the challenges table and compiled progress queries.

Table: challenges(id, name, icon_name, description, goal_value, unit, year,
rule_description, query_sql). Writes return the stored row via RETURNING so
each create/update is a single statement carrying both the edited fields
and the freshly compiled query.
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.challenges.errors import ExecutionError
from app.challenges.guard import check_query_shape
from app.db import rows_as_dicts

WRITABLE_COLUMNS = (
    "name",
    "icon_name",
    "description",
    "goal_value",
    "unit",
    "year",
    "rule_description",
    "query_sql",
)
_RETURNING = "RETURNING id, " + ", ".join(WRITABLE_COLUMNS)


async def fetch_challenges(session: AsyncSession, years: Sequence[int]) -> list[dict[str, Any]]:
    """Challenges for any of ``years``, newest year first, then newest id first."""
    query = text(
        "SELECT * FROM challenges "
        "WHERE year IN :years "
        "ORDER BY year DESC, id DESC"
    ).bindparams(bindparam("years", expanding=True))
    result = await session.execute(query, {"years": list(years)})
    return rows_as_dicts(result)


async def fetch_challenges_for_year(session: AsyncSession, year: int) -> list[dict[str, Any]]:
    """Challenges of one year in creation order."""
    result = await session.execute(
        text("SELECT * FROM challenges WHERE year = :year ORDER BY id"),
        {"year": year},
    )
    return rows_as_dicts(result)


async def get_challenge(session: AsyncSession, challenge_id: int) -> dict[str, Any] | None:
    result = await session.execute(
        text("SELECT * FROM challenges WHERE id = :id"),
        {"id": challenge_id},
    )
    rows = rows_as_dicts(result)
    return rows[0] if rows else None


async def insert_challenge(session: AsyncSession, values: dict[str, Any]) -> dict[str, Any]:
    params = {col: values.get(col) for col in WRITABLE_COLUMNS}
    query = (
        f"INSERT INTO challenges ({', '.join(WRITABLE_COLUMNS)}) "
        f"VALUES ({', '.join(':' + c for c in WRITABLE_COLUMNS)}) "
        f"{_RETURNING}"
    )
    result = await session.execute(text(query), params)
    return rows_as_dicts(result)[0]


async def update_challenge(
    session: AsyncSession,
    challenge_id: int,
    values: dict[str, Any],
) -> dict[str, Any] | None:
    """Overwrite every writable column of one row. None if the id is unknown."""
    params = {col: values.get(col) for col in WRITABLE_COLUMNS}
    params["id"] = challenge_id
    query = (
        "UPDATE challenges SET "
        f"{', '.join(f'{c} = :{c}' for c in WRITABLE_COLUMNS)} "
        f"WHERE id = :id {_RETURNING}"
    )
    result = await session.execute(text(query), params)
    rows = rows_as_dicts(result)
    return rows[0] if rows else None


async def delete_challenge(session: AsyncSession, challenge_id: int) -> bool:
    result = await session.execute(
        text("DELETE FROM challenges WHERE id = :id"),
        {"id": challenge_id},
    )
    return bool(result.rowcount)


async def run_progress_query(
    session: AsyncSession,
    sql: str,
    timeout_ms: int,
) -> list[dict[str, Any]]:
    """Execute a compiled progress query and return its rows.

    Runs inside a savepoint with a statement timeout, so a failing query
    leaves the surrounding transaction usable for the next challenge.
    Raises ExecutionError on refusal or any database error.
    """
    problem = check_query_shape(sql)
    if problem:
        raise ExecutionError(f"Refused to run stored query: {problem}")

    try:
        async with session.begin_nested():
            await session.execute(text(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))
            result = await session.execute(text(sql))
            return rows_as_dicts(result)
    except SQLAlchemyError as exc:
        raise ExecutionError(str(exc)) from exc
