"""
Error kinds raised by the skill swap services.

All are recoverable at the caller; the API layer maps each to an HTTP status.
"""


class SkillSwapError(Exception):
    """Base exception for marketplace operations."""

    def __init__(self, message: str, *, recoverable: bool = True, **context):
        super().__init__(message)
        self.recoverable = recoverable
        self.context = context


class InvalidTransition(SkillSwapError):
    """Illegal or unauthorized swap status change."""


class InvalidFeedback(SkillSwapError):
    """Feedback on a swap that isn't completed, from a non-participant, or a duplicate."""


class InvalidSwapRequest(SkillSwapError):
    """Swap request that can't be created as proposed."""


class InvalidProfile(SkillSwapError):
    """Registration or profile edit that conflicts with existing data."""


class Forbidden(SkillSwapError):
    """Actor lacks the role the operation needs."""


class NotFound(SkillSwapError):
    """Referenced id is absent from the in-memory collections."""


class PersistenceFailure(SkillSwapError):
    """The backing database call failed; nothing was applied locally."""

    def __init__(self, message: str, *, operation: str = "unknown", **context):
        super().__init__(message, recoverable=False, operation=operation, **context)
        self.operation = operation
