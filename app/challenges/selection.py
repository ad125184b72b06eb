"""Main-challenge selection for the stats dashboard.

Advisory only: any failure falls back to the first candidate so the
dashboard always has a headline challenge.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence, TypeVar

from app.challenges.models import Challenge
from app.config import settings
from app.llm import LLMClient

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=Challenge)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def build_selection_prompt(candidates: Sequence[Challenge], year: int) -> str:
    lines = []
    for i, c in enumerate(candidates, start=1):
        goal = f"{c.goal_value or 0} {c.unit or ''}".strip()
        lines.append(f"{i}. {c.name} | {c.description or 'no description'} | goal: {goal}")
    return (
        f"These are the reading challenges for {year}:\n"
        + "\n".join(lines)
        + "\n\nWhich one is the general, overall annual reading goal, as opposed to "
        "a challenge limited to a genre, author or theme?\n"
        "Answer with the number only."
    )


def parse_selection(text: str, count: int) -> int | None:
    """Parse a 1-based pick from model text. Returns a 0-based index or None."""
    match = _LEADING_INT.match(text or "")
    if not match:
        return None
    pick = int(match.group(1))
    if 1 <= pick <= count:
        return pick - 1
    return None


async def select_main_challenge(llm: LLMClient, candidates: Sequence[C], year: int) -> C | None:
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    try:
        text = await llm.complete(
            build_selection_prompt(candidates, year),
            temperature=settings.llm_temperature,
            max_output_tokens=settings.llm_selection_max_tokens,
        )
    except Exception as exc:  # selection must never break the page
        logger.warning("Main challenge selection for %s failed, using first: %s", year, exc)
        return candidates[0]

    index = parse_selection(text, len(candidates))
    if index is None:
        logger.warning("Unusable main challenge pick %r for %s, using first", text, year)
        return candidates[0]
    return candidates[index]
