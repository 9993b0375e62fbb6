"""
HTTP request/response models for the skill swap routes.

Domain models go out as-is where every field is safe to show; public profile
views drop the email address.
"""

from datetime import date

from pydantic import BaseModel, Field

from app.features.skill_swap.domain import (
    ActivityDay,
    AdminMessage,
    Availability,
    Feedback,
    SwapRequest,
    User,
)


class PublicUserResponse(BaseModel):
    """Profile as other members see it."""

    id: str
    name: str
    location: str | None = None
    profile_photo: str | None = None
    skills_offered: list[str]
    skills_wanted: list[str]
    availability: list[Availability]
    rating: float
    total_swaps: int
    join_date: date

    @classmethod
    def from_user(cls, user: User) -> "PublicUserResponse":
        return cls.model_validate(user.model_dump(include=set(cls.model_fields)))


class UserSearchResponse(BaseModel):
    """Response for GET /users/search"""

    users: list[PublicUserResponse]
    count: int


class FeedbackCreateRequest(BaseModel):
    """Body for POST /swaps/{swap_id}/feedback"""

    rating: int = Field(..., description="Whole stars, 1 to 5")
    comment: str = ""


class UserFeedbackResponse(BaseModel):
    """Response for GET /users/{user_id}/feedback"""

    user_id: str
    rating: float
    feedback: list[Feedback]


class SwapListResponse(BaseModel):
    """Response for GET /admin/swaps"""

    swaps: list[SwapRequest]
    count: int


class AdminMessagesResponse(BaseModel):
    """Response for GET /messages and GET /admin/messages"""

    messages: list[AdminMessage]


class ActivityReportResponse(BaseModel):
    """Response for GET /admin/activity"""

    days: int
    report: list[ActivityDay]
