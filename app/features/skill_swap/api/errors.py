"""
Translate service errors into HTTP responses.
"""

from fastapi import HTTPException, status

from app.features.skill_swap.services.errors import (
    Forbidden,
    InvalidFeedback,
    InvalidProfile,
    InvalidSwapRequest,
    InvalidTransition,
    NotFound,
    PersistenceFailure,
    SkillSwapError,
)
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

ERROR_STATUS_CODES: dict[type[SkillSwapError], int] = {
    NotFound: status.HTTP_404_NOT_FOUND,
    Forbidden: status.HTTP_403_FORBIDDEN,
    InvalidTransition: status.HTTP_409_CONFLICT,
    InvalidFeedback: 422,
    InvalidSwapRequest: 422,
    InvalidProfile: 422,
    PersistenceFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(error: SkillSwapError) -> HTTPException:
    status_code = ERROR_STATUS_CODES.get(type(error), status.HTTP_400_BAD_REQUEST)

    if isinstance(error, PersistenceFailure):
        # Already logged at error by the store; don't leak driver messages to clients
        return HTTPException(
            status_code=status_code, detail="Storage unavailable, nothing was changed"
        )

    logger.warning(
        "Request rejected",
        error_type=type(error).__name__,
        status_code=status_code,
        reason=str(error),
        context=error.context,
    )
    return HTTPException(status_code=status_code, detail=str(error))
