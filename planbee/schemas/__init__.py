"""Pydantic schemas used across the project."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from planbee.modules.accounts import Account


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Request bodies keep every field optional so the service can report missing
# fields with its own ordered messages.


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    tag: Optional[str] = None
    username: Optional[str] = None


class LoginRequest(BaseModel):
    identifier: Optional[str] = Field(default=None, description="Email or tag")
    password: Optional[str] = None


class ChangeTagRequest(CamelModel):
    new_tag: Optional[str] = Field(default=None, alias="newTag")


class AccountStatsResponse(CamelModel):
    total_tasks_completed: int = Field(0, alias="totalTasksCompleted")
    current_streak: int = Field(0, alias="currentStreak")
    highest_streak: int = Field(0, alias="highestStreak")
    total_points: int = Field(0, alias="totalPoints")


class PublicAccount(CamelModel):
    id: str
    email: str
    tag: str
    username: str
    profile_picture: Optional[str] = Field(None, alias="profilePicture")
    stats: AccountStatsResponse

    @classmethod
    def from_account(cls, account: Account) -> "PublicAccount":
        return cls.model_validate(account.to_public())


class MessageResponse(BaseModel):
    success: bool
    message: str


class AuthResponse(MessageResponse):
    token: str
    user: PublicAccount


class ChangeTagResponse(CamelModel):
    success: bool
    message: str
    old_tag: str = Field(alias="oldTag")
    new_tag: str = Field(alias="newTag")


class MeResponse(MessageResponse):
    user: PublicAccount


class ErrorResponse(CamelModel):
    success: bool = False
    message: str
    next_change_allowed: Optional[datetime] = Field(None, alias="nextChangeAllowed")
