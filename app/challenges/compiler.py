"""Goal compiler — turns a challenge description into a progress query.

One model call per compile, low temperature, no retry. The returned text
is cleaned of markup and quote characters, then shape-checked; anything
unusable raises CompilationError so the triggering write never happens.
"""

from __future__ import annotations

import logging
import re

from app.challenges.corpus import describe_corpus
from app.challenges.errors import CompilationError
from app.challenges.guard import check_query_shape
from app.challenges.models import ChallengeDraft
from app.config import settings
from app.llm import LLMClient, LLMError

logger = logging.getLogger(__name__)

DEFAULT_RULE = "Count books read in the specified year"

_FENCES_AND_TAG = re.compile(r"```(?:sql)?|\bsql\b", re.IGNORECASE)
_QUOTES = re.compile(r"[\"']")
_NOT_NULL_FILTER = re.compile(r"end_date\s+is\s+not\s+null", re.IGNORECASE)

PROMPT_TEMPLATE = """\
Generate a PostgreSQL SQL query for a reading challenge.

DATABASE SCHEMA:
{schema}

CHALLENGE: {name}
DESCRIPTION: {description}
GOAL: {goal_value} {unit}
YEAR: {year}
RULES: {rules}

REQUIREMENTS:
- Return a single SELECT statement
- Return exactly one column named count
- Filter by: EXTRACT(YEAR FROM end_date) = {year} AND end_date IS NOT NULL
- Use JOINs with authors, genres or book_genre only if the rules need them
- Write text literals with dollar quoting ($$like this$$), never with quote characters
- Return only the SQL query, no explanations

SQL QUERY:
"""


def build_prompt(draft: ChallengeDraft) -> str:
    return PROMPT_TEMPLATE.format(
        schema=describe_corpus(),
        name=draft.name,
        description=draft.description or "",
        goal_value=draft.goal_value,
        unit=draft.unit,
        year=draft.year,
        rules=draft.rule_description or DEFAULT_RULE,
    )


def clean_sql_response(raw: str) -> str:
    """Strip code fences, the bare word ``sql``, quote characters and trailing ``;``."""
    sql = _FENCES_AND_TAG.sub("", raw)
    sql = _QUOTES.sub("", sql)
    return sql.strip().rstrip(";").strip()


def check_compiled_query(sql: str, year: int) -> str | None:
    """Shape check plus the year filter every progress query must carry."""
    problem = check_query_shape(sql)
    if problem:
        return problem
    if not re.search(rf"\b{year}\b", sql):
        return f"query does not filter on year {year}"
    if not _NOT_NULL_FILTER.search(sql):
        return "query does not require end_date IS NOT NULL"
    return None


async def compile_challenge(llm: LLMClient, draft: ChallengeDraft) -> str:
    """Compile ``draft`` into a stored-ready progress query or raise CompilationError."""
    logger.info("Compiling progress query for challenge %r (%s)", draft.name, draft.year)
    try:
        raw = await llm.complete(
            build_prompt(draft),
            temperature=settings.llm_temperature,
            max_output_tokens=settings.llm_max_output_tokens,
        )
    except LLMError as exc:
        raise CompilationError(f"Could not generate SQL query: {exc}") from exc

    sql = clean_sql_response(raw)
    problem = check_compiled_query(sql, draft.year)
    if problem:
        logger.warning("Rejected generated query for %r: %s", draft.name, problem)
        raise CompilationError(f"Generated SQL query is unusable: {problem}")
    return sql
