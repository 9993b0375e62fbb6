"""
Domain models for the skill swap marketplace.

Field names mirror the database columns so repository rows validate straight
into these models. Derived fields (rating, total_swaps) are only ever written
by the store after recomputation.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

SwapStatus = Literal["pending", "accepted", "rejected", "completed", "cancelled"]
UserRole = Literal["user", "admin"]
AdminMessageType = Literal["info", "warning", "maintenance"]
Availability = Literal["Weekdays", "Weekends", "Mornings", "Afternoons", "Evenings"]

TERMINAL_STATUSES: frozenset[str] = frozenset({"rejected", "completed", "cancelled"})
DEFAULT_RATING = 5.0


def normalize_skills(skills: list[str]) -> list[str]:
    """Strip blanks and drop repeats, keeping the first spelling of each skill."""
    seen: set[str] = set()
    normalized = []
    for skill in skills:
        cleaned = skill.strip()
        if not cleaned or cleaned.lower() in seen:
            continue
        seen.add(cleaned.lower())
        normalized.append(cleaned)
    return normalized


class User(BaseModel):
    """Marketplace member (users table)."""

    id: str
    name: str
    email: str
    location: str | None = None
    profile_photo: str | None = None
    skills_offered: list[str] = Field(default_factory=list)
    skills_wanted: list[str] = Field(default_factory=list)
    availability: list[Availability] = Field(default_factory=list)
    is_public: bool = True
    role: UserRole = "user"
    rating: float = Field(default=DEFAULT_RATING, ge=0.0, le=5.0)
    total_swaps: int = Field(default=0, ge=0)
    is_active: bool = True
    join_date: date
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("skills_offered", "skills_wanted", mode="before")
    @classmethod
    def _clean_skills(cls, value):
        return normalize_skills(value or [])

    @field_validator("availability", mode="before")
    @classmethod
    def _null_availability(cls, value):
        return value or []

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_discoverable(self) -> bool:
        """Public, active, non-admin users are the only ones search and aggregates see."""
        return self.is_public and self.is_active and not self.is_admin


class SwapRequest(BaseModel):
    """A proposed skill exchange (swap_requests table)."""

    id: str
    from_user_id: str
    to_user_id: str
    skill_offered: str
    skill_wanted: str
    message: str = ""
    status: SwapStatus = "pending"
    created_at: datetime
    updated_at: datetime

    @field_validator("message", mode="before")
    @classmethod
    def _null_message(cls, value):
        return value or ""

    @model_validator(mode="after")
    def _distinct_participants(self):
        if self.from_user_id == self.to_user_id:
            raise ValueError("from_user_id and to_user_id must differ")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def involves(self, user_id: str) -> bool:
        return user_id in (self.from_user_id, self.to_user_id)

    def counterpart_of(self, user_id: str) -> str | None:
        if user_id == self.from_user_id:
            return self.to_user_id
        if user_id == self.to_user_id:
            return self.from_user_id
        return None


class Feedback(BaseModel):
    """Post-completion review of one swap participant by the other (feedback table)."""

    id: str
    from_user_id: str
    to_user_id: str
    swap_request_id: str
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    created_at: datetime


class AdminMessage(BaseModel):
    """Platform-wide announcement (admin_messages table)."""

    id: str
    title: str
    content: str
    type: AdminMessageType = "info"
    is_active: bool = True
    created_at: datetime


class SearchFilters(BaseModel):
    """Optional browse filters, applied as a conjunction."""

    location: str | None = None
    min_rating: float | None = Field(default=None, ge=0.0, le=5.0)
    availability: Availability | None = None


class UserSwaps(BaseModel):
    """A user's swap requests split the way the requests screen shows them."""

    incoming: list[SwapRequest]
    outgoing: list[SwapRequest]
    completed: list[SwapRequest]


class SkillCount(BaseModel):
    skill: str
    count: int


class PlatformAnalytics(BaseModel):
    """Admin dashboard summary."""

    total_users: int = 0
    active_users: int = 0
    pending_swaps: int = 0
    completed_swaps: int = 0
    total_swaps: int = 0
    average_rating: float = DEFAULT_RATING
    top_skills: list[SkillCount] = Field(default_factory=list)
    swap_success_rate: float = 0.0
    active_user_rate: float = 0.0


class ActivityDay(BaseModel):
    """One row of the daily activity report."""

    day: date
    new_users: int = 0
    new_swaps: int = 0
    completed_swaps: int = 0
