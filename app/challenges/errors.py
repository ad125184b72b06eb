"""Challenge error taxonomy.

Validation and compilation errors abort the write that raised them.
Execution errors are absorbed per challenge by the evaluator.
"""

from __future__ import annotations


class ChallengeError(Exception):
    pass


class ChallengeValidationError(ChallengeError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing required fields: {', '.join(missing)}")


class CompilationError(ChallengeError):
    """The goal could not be turned into a usable progress query."""


class ExecutionError(ChallengeError):
    """A stored progress query failed or was refused before running."""
