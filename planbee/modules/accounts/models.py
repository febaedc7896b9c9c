"""Domain models for accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(slots=True)
class AccountStats:
    total_tasks_completed: int = 0
    current_streak: int = 0
    highest_streak: int = 0
    total_points: int = 0

    def to_public(self) -> dict[str, int]:
        return {
            "totalTasksCompleted": self.total_tasks_completed,
            "currentStreak": self.current_streak,
            "highestStreak": self.highest_streak,
            "totalPoints": self.total_points,
        }


@dataclass(slots=True)
class PrivacySettings:
    profile_visibility: str = "public"
    require_approval: bool = False


@dataclass(slots=True)
class NotificationPreferences:
    in_app: bool = True
    email: bool = True


@dataclass(slots=True)
class Account:
    id: str
    email: str
    tag: str
    username: str
    tag_last_changed: datetime
    # Holds the bcrypt hash, or a new raw password right before
    # ``save(..., password_changed=True)``.
    password_hash: str = field(repr=False)
    profile_picture: Optional[str] = None
    is_email_verified: bool = False
    privacy_settings: PrivacySettings = field(default_factory=PrivacySettings)
    notification_preferences: NotificationPreferences = field(default_factory=NotificationPreferences)
    stats: AccountStats = field(default_factory=AccountStats)
    created_at: Optional[datetime] = None

    def to_public(self) -> dict[str, Any]:
        """Fields that are safe to hand to clients."""
        return {
            "id": self.id,
            "email": self.email,
            "tag": self.tag,
            "username": self.username,
            "profilePicture": self.profile_picture,
            "stats": self.stats.to_public(),
        }


@dataclass(slots=True)
class AccountCreateInput:
    email: Optional[str]
    password: Optional[str]
    tag: Optional[str]
    username: Optional[str]


@dataclass(slots=True)
class AuthResult:
    token: str
    account: Account


@dataclass(slots=True)
class TagChange:
    old_tag: str
    new_tag: str
    changed_at: datetime
