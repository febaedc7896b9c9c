"""Domain services for account management."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.ext.asyncio import AsyncSession

from planbee.core.crypto import verify_password
from planbee.core.security import create_access_token

from .exceptions import (
    AccountNotFoundError,
    AccountValidationError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    TagAlreadyTakenError,
    TagChangeCooldownError,
)
from .models import Account, AccountCreateInput, AuthResult, TagChange
from .repository import AccountRepository

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 6
# bcrypt only looks at the first 72 bytes and newer releases reject longer input.
PASSWORD_MAX_BYTES = 72
TAG_MIN_LENGTH = 3
TAG_MAX_LENGTH = 30
USERNAME_MAX_LENGTH = 30
TAG_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
TAG_CHANGE_COOLDOWN = relativedelta(months=3)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_tag(tag: str) -> None:
    if not TAG_PATTERN.fullmatch(tag):
        raise AccountValidationError("Tag can only contain letters, numbers, and underscores")
    if not TAG_MIN_LENGTH <= len(tag) <= TAG_MAX_LENGTH:
        raise AccountValidationError(
            f"Tag must be between {TAG_MIN_LENGTH} and {TAG_MAX_LENGTH} characters"
        )


def validate_password(password: str) -> None:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise AccountValidationError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        )
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise AccountValidationError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes long")


def next_tag_change_allowed(tag_last_changed: datetime) -> datetime:
    """Moment after which ``can_change_tag`` accepts a new tag.

    ``relativedelta`` clamps month ends (Nov 30 + 3 months is Feb 28), while the
    check keeps refusing until three months before ``now`` passes Nov 30. For
    clamped dates that first happens at midnight on the next month's first day.
    """
    candidate = tag_last_changed + TAG_CHANGE_COOLDOWN
    if candidate - TAG_CHANGE_COOLDOWN == tag_last_changed:
        return candidate
    return candidate + relativedelta(months=1, day=1, hour=0, minute=0, second=0, microsecond=0)


def can_change_tag(tag_last_changed: datetime, now: datetime) -> bool:
    """The tag may change once it is older than three calendar months."""
    return tag_last_changed < now - TAG_CHANGE_COOLDOWN


class AccountService:
    """Encapsulates core account use cases."""

    def __init__(self, repository: AccountRepository, clock: Optional[Clock] = None) -> None:
        self._repository = repository
        self._clock = clock or utcnow

    @classmethod
    def with_session(cls, session: AsyncSession, clock: Optional[Clock] = None) -> "AccountService":
        # imported here because the SQL repository imports this package
        from planbee.infrastructure.database.repositories.account_repository import SqlAccountRepository

        return cls(SqlAccountRepository(session), clock=clock)

    async def get_by_id(self, account_id: str) -> Account | None:
        return await self._repository.get_by_id(account_id)

    async def get_by_identifier(self, identifier: str) -> Account | None:
        return await self._repository.get_by_identifier(identifier)

    def issue_token(self, account: Account) -> str:
        return create_access_token(account.id, issued_at=self._clock())

    async def register(self, payload: AccountCreateInput) -> AuthResult:
        email = (payload.email or "").strip()
        # tags are validated as sent; surrounding whitespace fails the pattern
        tag = payload.tag or ""
        username = (payload.username or "").strip()
        password = payload.password or ""

        if not email or not password or not tag.strip() or not username:
            raise AccountValidationError("Email, password, tag, and username are required")
        validate_password(password)
        validate_tag(tag)
        if len(username) > USERNAME_MAX_LENGTH:
            raise AccountValidationError(
                f"Username must be at most {USERNAME_MAX_LENGTH} characters"
            )

        # Friendly pre-checks; the unique indexes remain the source of truth.
        if await self._repository.get_by_email(email) is not None:
            raise EmailAlreadyRegisteredError()
        if await self._repository.get_by_tag(tag) is not None:
            raise TagAlreadyTakenError()

        account = await self._repository.create_account(
            email=normalize_email(email),
            password=password,
            tag=tag,
            username=username,
            created_at=self._clock(),
        )
        logger.info("Registered account %s with tag %s", account.id, account.tag)
        return AuthResult(token=self.issue_token(account), account=account)

    async def authenticate(self, identifier: str, password: str) -> Account | None:
        account = await self._repository.get_by_identifier(identifier)
        if account is None:
            return None
        if not verify_password(password, account.password_hash):
            return None
        return account

    async def login(self, identifier: Optional[str], password: Optional[str]) -> AuthResult:
        identifier = (identifier or "").strip()
        if not identifier or not password:
            raise AccountValidationError("Identifier (email or tag) and password are required")

        account = await self.authenticate(identifier, password)
        if account is None:
            logger.info("Rejected login attempt")
            raise InvalidCredentialsError()

        logger.info("Account %s logged in", account.id)
        return AuthResult(token=self.issue_token(account), account=account)

    async def change_tag(self, account_id: str, new_tag: Optional[str]) -> TagChange:
        account = await self._repository.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)

        now = self._clock()
        if not can_change_tag(account.tag_last_changed, now):
            raise TagChangeCooldownError(next_tag_change_allowed(account.tag_last_changed))

        new_tag = new_tag or ""
        if not new_tag.strip():
            raise AccountValidationError("New tag is required")
        validate_tag(new_tag)

        if await self._repository.get_by_tag(new_tag) is not None:
            raise TagAlreadyTakenError()

        updated = await self._repository.update_tag(
            account.id,
            new_tag=new_tag,
            changed_at=now,
            changed_before=now - TAG_CHANGE_COOLDOWN,
        )
        if updated is None:
            # A concurrent change landed between the read and the write.
            current = await self._repository.get_by_id(account.id)
            last_changed = current.tag_last_changed if current else now
            raise TagChangeCooldownError(next_tag_change_allowed(last_changed))

        logger.info("Account %s changed tag from %s to %s", account.id, account.tag, updated.tag)
        return TagChange(old_tag=account.tag, new_tag=updated.tag, changed_at=now)

    async def reset_password(self, account_id: str, new_password: str) -> Account:
        account = await self._repository.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        validate_password(new_password)

        account.password_hash = new_password
        saved = await self._repository.save(account, password_changed=True)
        logger.info("Password reset for account %s", account.id)
        return saved
