"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from planbee.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("email", name="uq_accounts_email"),
        UniqueConstraint("tag", name="uq_accounts_tag"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(254), nullable=False)
    password_hash = Column(String(255), nullable=False)
    tag = Column(String(30), nullable=False)
    username = Column(String(30), nullable=False)
    tag_last_changed = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    profile_picture = Column(String(2048), nullable=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)

    # privacy settings
    profile_visibility = Column(String(10), nullable=False, default="public")
    require_approval = Column(Boolean, nullable=False, default=False)

    # notification preferences
    notify_in_app = Column(Boolean, nullable=False, default=True)
    notify_email = Column(Boolean, nullable=False, default=True)

    # stats, maintained by task completion outside this service
    total_tasks_completed = Column(Integer, nullable=False, default=0)
    current_streak = Column(Integer, nullable=False, default=0)
    highest_streak = Column(Integer, nullable=False, default=0)
    total_points = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
