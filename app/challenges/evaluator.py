"""Challenge evaluator — live progress and status from stored queries.

Status is recomputed from scratch on every call; nothing is cached.
A broken query only affects its own challenge.
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.challenges import connector
from app.challenges.errors import ExecutionError
from app.challenges.models import (
    Challenge,
    ChallengeProgress,
    ChallengeStatus,
    ChallengeWithProgress,
)
from app.config import settings

logger = logging.getLogger(__name__)


def derive_status(
    year: int,
    progress: int,
    goal_value: int | None,
    current_year: int,
    previous_year: int,
) -> ChallengeStatus:
    """Status for a query that ran. Past-year challenges end Completed or Expired."""
    reached = progress >= (goal_value or 0)
    if year == previous_year:
        return ChallengeStatus.completed if reached else ChallengeStatus.expired
    return ChallengeStatus.completed if reached else ChallengeStatus.in_progress


def failure_status(year: int, previous_year: int) -> ChallengeStatus:
    return ChallengeStatus.expired if year == previous_year else ChallengeStatus.error


def read_count(rows: list[dict[str, Any]]) -> int:
    """Extract the ``count`` value from a progress query result.

    Raises ExecutionError when the result is empty or not shaped as a
    single ``count`` column holding a finite number. NULL counts as 0.
    """
    if not rows:
        raise ExecutionError("Progress query returned no rows")
    first = rows[0]
    if list(first.keys()) != ["count"]:
        raise ExecutionError(f"Progress query returned columns {list(first.keys())}, expected ['count']")
    value = first["count"]
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ExecutionError(f"Progress query returned non-numeric count {value!r}")
    finite = value.is_finite() if isinstance(value, Decimal) else isinstance(value, int) or math.isfinite(value)
    if not finite:
        raise ExecutionError(f"Progress query returned non-finite count {value!r}")
    return max(int(value), 0)


async def evaluate(
    session: AsyncSession,
    challenge: Challenge,
    current_year: int,
    previous_year: int,
) -> ChallengeProgress:
    if not challenge.query_sql:
        status = ChallengeStatus.pending if challenge.year == current_year else ChallengeStatus.expired
        return ChallengeProgress(current_progress=0, status=status)

    try:
        rows = await connector.run_progress_query(session, challenge.query_sql, settings.query_timeout_ms)
        progress = read_count(rows)
    except ExecutionError as exc:
        logger.warning("Progress query for challenge %s failed: %s", challenge.id, exc)
        return ChallengeProgress(
            current_progress=0,
            status=failure_status(challenge.year, previous_year),
        )

    return ChallengeProgress(
        current_progress=progress,
        status=derive_status(challenge.year, progress, challenge.goal_value, current_year, previous_year),
    )


async def evaluate_all(
    session: AsyncSession,
    challenges: list[Challenge],
    current_year: int,
    previous_year: int,
) -> list[ChallengeWithProgress]:
    """Annotate each challenge with its progress, one query at a time."""
    results: list[ChallengeWithProgress] = []
    for challenge in challenges:
        progress = await evaluate(session, challenge, current_year, previous_year)
        results.append(
            ChallengeWithProgress(**challenge.model_dump(), **progress.model_dump())
        )
    return results
