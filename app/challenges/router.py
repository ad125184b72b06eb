"""Challenges HTTP router — list with live progress, create/update/delete."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.challenges import connector
from app.challenges.compiler import compile_challenge
from app.challenges.errors import ChallengeValidationError, CompilationError
from app.challenges.evaluator import evaluate_all
from app.challenges.models import (
    Challenge,
    ChallengeDraft,
    ChallengeIn,
    ChallengeWithProgress,
    SqlPreview,
)
from app.clock import current_year
from app.db import get_session
from app.llm import LLMClient, get_llm_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/challenges", tags=["challenges"])


def _validated(payload: ChallengeIn) -> ChallengeDraft:
    try:
        return payload.to_draft(default_year=current_year())
    except ChallengeValidationError:
        raise HTTPException(status_code=400, detail="Name and unit are required")


async def _compile(llm: LLMClient, draft: ChallengeDraft) -> str:
    try:
        return await compile_challenge(llm, draft)
    except CompilationError as exc:
        logger.error("Compilation failed for challenge %r: %s", draft.name, exc)
        raise HTTPException(status_code=500, detail=str(exc))


# ---------------------------------------------------------------------------
# /challenges
# ---------------------------------------------------------------------------


@router.get("", response_model=list[ChallengeWithProgress])
async def list_challenges(
    session: AsyncSession = Depends(get_session),
) -> list[ChallengeWithProgress]:
    year = current_year()
    rows = await connector.fetch_challenges(session, [year, year - 1])
    challenges = [Challenge.model_validate(r) for r in rows]
    return await evaluate_all(session, challenges, year, year - 1)


@router.post("", response_model=Challenge)
async def create_challenge(
    payload: ChallengeIn,
    session: AsyncSession = Depends(get_session),
    llm: LLMClient = Depends(get_llm_client),
) -> Challenge:
    draft = _validated(payload)
    query_sql = await _compile(llm, draft)

    row = await connector.insert_challenge(session, {**draft.model_dump(), "query_sql": query_sql})
    await session.commit()
    logger.info("Created challenge %s (%r)", row["id"], draft.name)
    return Challenge.model_validate(row)


@router.post("/generate-sql", response_model=SqlPreview)
async def generate_sql(
    payload: ChallengeIn,
    llm: LLMClient = Depends(get_llm_client),
) -> SqlPreview:
    draft = _validated(payload)
    sql = await _compile(llm, draft)
    return SqlPreview(sql=sql, note="SQL query generated by the language model")


# ---------------------------------------------------------------------------
# /challenges/{challenge_id}
# ---------------------------------------------------------------------------


@router.put("/{challenge_id}", response_model=Challenge)
async def update_challenge(
    challenge_id: int,
    payload: ChallengeIn,
    session: AsyncSession = Depends(get_session),
    llm: LLMClient = Depends(get_llm_client),
) -> Challenge:
    draft = _validated(payload)
    if await connector.get_challenge(session, challenge_id) is None:
        raise HTTPException(status_code=404, detail=f"Unknown challenge: {challenge_id}")

    query_sql = await _compile(llm, draft)

    row = await connector.update_challenge(
        session, challenge_id, {**draft.model_dump(), "query_sql": query_sql}
    )
    if row is None:
        raise HTTPException(status_code=404, detail=f"Unknown challenge: {challenge_id}")
    await session.commit()
    logger.info("Updated challenge %s (%r)", challenge_id, draft.name)
    return Challenge.model_validate(row)


@router.delete("/{challenge_id}")
async def delete_challenge(
    challenge_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict:
    deleted = await connector.delete_challenge(session, challenge_id)
    await session.commit()
    if deleted:
        logger.info("Deleted challenge %s", challenge_id)
    return {"success": True, "message": "Challenge deleted successfully"}
