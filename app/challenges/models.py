"""Challenge contract — Pydantic v2 models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from app.challenges.errors import ChallengeValidationError


class ChallengeStatus(str, Enum):
    pending = "Pending"
    in_progress = "In Progress"
    completed = "Completed"
    expired = "Expired"
    error = "Error"


class ChallengeIn(BaseModel):
    """Create/update payload. ``id`` and ``query_sql`` are never accepted from clients."""

    name: str | None = None
    icon_name: str | None = None
    description: str | None = None
    goal_value: int | None = Field(default=None, ge=0)
    unit: str | None = None
    year: int | None = None
    rule_description: str | None = None

    def to_draft(self, default_year: int) -> ChallengeDraft:
        """Apply defaults; raises ChallengeValidationError if name or unit is blank."""
        missing = [f for f in ("name", "unit") if not (getattr(self, f) or "").strip()]
        if missing:
            raise ChallengeValidationError(missing)
        return ChallengeDraft(
            name=self.name.strip(),
            icon_name=self.icon_name or None,
            description=self.description or None,
            goal_value=self.goal_value or 0,
            unit=self.unit.strip(),
            year=self.year or default_year,
            rule_description=self.rule_description or None,
        )


class ChallengeDraft(BaseModel):
    """Validated descriptive fields, as handed to the compiler."""

    name: str
    icon_name: str | None = None
    description: str | None = None
    goal_value: int = 0
    unit: str
    year: int
    rule_description: str | None = None


class Challenge(ChallengeDraft):
    """A stored challenge row."""

    id: int
    goal_value: int | None = 0
    unit: str | None = None
    query_sql: str | None = None


class ChallengeProgress(BaseModel):
    current_progress: int = 0
    status: ChallengeStatus


class ChallengeWithProgress(Challenge):
    current_progress: int = 0
    status: ChallengeStatus


class SqlPreview(BaseModel):
    sql: str
    note: str = ""
