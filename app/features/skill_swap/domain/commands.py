"""
Typed commands and creation drafts accepted by the marketplace store.

Every mutation the API can ask for is one of these models, validated before
the store touches persistence. Nothing is merged into an entity unchecked.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from .models import AdminMessageType, Availability, SwapStatus, normalize_skills


class AcceptSwap(BaseModel):
    kind: Literal["accept"] = "accept"
    swap_id: str


class RejectSwap(BaseModel):
    kind: Literal["reject"] = "reject"
    swap_id: str


class CancelSwap(BaseModel):
    kind: Literal["cancel"] = "cancel"
    swap_id: str


class CompleteSwap(BaseModel):
    kind: Literal["complete"] = "complete"
    swap_id: str


SwapCommand = Annotated[
    AcceptSwap | RejectSwap | CancelSwap | CompleteSwap, Field(discriminator="kind")
]

SWAP_COMMAND_TARGETS: dict[str, SwapStatus] = {
    "accept": "accepted",
    "reject": "rejected",
    "cancel": "cancelled",
    "complete": "completed",
}


class UpdateProfile(BaseModel):
    """Self-service profile edit. Only fields that are set get applied."""

    kind: Literal["update_profile"] = "update_profile"
    name: str | None = Field(default=None, min_length=1, max_length=120)
    location: str | None = None
    profile_photo: str | None = None
    skills_offered: list[str] | None = None
    skills_wanted: list[str] | None = None
    availability: list[Availability] | None = None
    is_public: bool | None = None

    @field_validator("skills_offered", "skills_wanted")
    @classmethod
    def _clean_skills(cls, value):
        return normalize_skills(value) if value is not None else None

    @model_validator(mode="after")
    def _at_least_one_field(self):
        changes = self.changes()
        if not changes:
            raise ValueError("UpdateProfile requires at least one field")
        # location and profile_photo may be cleared; the rest may not
        for field in ("name", "skills_offered", "skills_wanted", "availability", "is_public"):
            if field in changes and changes[field] is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude={"kind"}, exclude_unset=True)


class SetUserActive(BaseModel):
    """Admin ban (is_active=False) or unban (is_active=True)."""

    kind: Literal["set_user_active"] = "set_user_active"
    user_id: str
    is_active: bool


class NewUser(BaseModel):
    """Registration payload; the id comes from the authenticated token."""

    name: str = Field(min_length=1, max_length=120)
    email: str = Field(min_length=3, max_length=320)
    location: str | None = None
    profile_photo: str | None = None
    skills_offered: list[str] = Field(default_factory=list)
    skills_wanted: list[str] = Field(default_factory=list)
    availability: list[Availability] = Field(default_factory=list)
    is_public: bool = True

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("email must contain '@'")
        return value

    @field_validator("skills_offered", "skills_wanted")
    @classmethod
    def _clean_skills(cls, value):
        return normalize_skills(value)


class NewSwapRequest(BaseModel):
    to_user_id: str
    skill_offered: str = Field(min_length=1)
    skill_wanted: str = Field(min_length=1)
    message: str = ""


class NewFeedback(BaseModel):
    swap_request_id: str
    rating: int
    comment: str = ""


class NewAdminMessage(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    type: AdminMessageType = "info"
    is_active: bool = True


class UpdateAdminMessage(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    content: str | None = Field(default=None, min_length=1)
    type: AdminMessageType | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def _at_least_one_field(self):
        changes = self.changes()
        if not changes:
            raise ValueError("UpdateAdminMessage requires at least one field")
        for field, value in changes.items():
            if value is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
