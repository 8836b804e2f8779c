"""Error kinds raised by the skillswap core."""

from __future__ import annotations

__all__ = [
    "SkillSwapError",
    "ValidationError",
    "InvalidTransitionError",
    "SchemaError",
    "PersistenceError",
    "AuthRequiredError",
    "SkillNotFoundError",
    "MatchNotFoundError",
]


class SkillSwapError(Exception):
    """Base class for every error the core raises.

    Each error carries a short human-readable ``message`` and an optional
    ``cause`` so that the calling surface can report a single line.
    """

    def __init__(self, message: str, cause: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def user_message(self) -> str:
        """Return the message and cause as one line."""
        if self.cause:
            return f"{self.message} ({self.cause})"
        return self.message


class ValidationError(SkillSwapError):
    """Raised when submitted fields are missing or outside their enumeration."""

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        self.fields = list(fields or [])
        cause = f"fields: {', '.join(self.fields)}" if self.fields else None
        super().__init__(message, cause)


class InvalidTransitionError(ValidationError):
    """Raised when a match request cannot move to the requested status."""


class SchemaError(SkillSwapError):
    """Raised when a fetched record does not narrow to the expected entity."""

    def __init__(self, entity: str, problems: list[str]) -> None:
        self.entity = entity
        self.problems = problems
        super().__init__(f"Malformed {entity} record", "; ".join(problems))


class PersistenceError(SkillSwapError):
    """Raised when the underlying record store call fails."""


class AuthRequiredError(SkillSwapError):
    """Raised when an operation is attempted without a signed-in identity."""

    def __init__(self, action: str = "this action") -> None:
        super().__init__(f"Sign in required for {action}")


class SkillNotFoundError(SkillSwapError, KeyError):
    """Raised when a requested skill is not in the store."""

    def __init__(self, skill_id: str) -> None:
        super().__init__(f"Skill '{skill_id}' not found")
        self.skill_id = skill_id

    def __str__(self) -> str:
        return self.message


class MatchNotFoundError(SkillSwapError, KeyError):
    """Raised when a requested match request is not in the store."""

    def __init__(self, match_id: str) -> None:
        super().__init__(f"Match request '{match_id}' not found")
        self.match_id = match_id

    def __str__(self) -> str:
        return self.message
