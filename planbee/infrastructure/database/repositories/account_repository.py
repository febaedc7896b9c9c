"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import case, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from planbee.core.crypto import hash_password
from planbee.db.models import Account as AccountModel
from planbee.modules.accounts.exceptions import (
    AccountAlreadyExistsError,
    AccountNotFoundError,
    EmailAlreadyRegisteredError,
    TagAlreadyTakenError,
)
from planbee.modules.accounts.models import (
    Account,
    AccountStats,
    NotificationPreferences,
    PrivacySettings,
)
from planbee.modules.accounts.repository import AccountRepository


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is written in UTC.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _duplicate_error(exc: IntegrityError) -> AccountAlreadyExistsError:
    message = str(exc.orig)
    if "uq_accounts_email" in message or "accounts.email" in message:
        return EmailAlreadyRegisteredError()
    if "uq_accounts_tag" in message or "accounts.tag" in message:
        return TagAlreadyTakenError()
    return AccountAlreadyExistsError("Account already exists")


class SqlAccountRepository(AccountRepository):
    """Account repository backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.id == account_id).execution_options(
            populate_existing=True
        )
        return await self._first(stmt)

    async def get_by_email(self, email: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.email == email.strip().lower())
        return await self._first(stmt)

    async def get_by_tag(self, tag: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.tag == tag)
        return await self._first(stmt)

    async def get_by_identifier(self, identifier: str) -> Account | None:
        stmt = (
            select(AccountModel)
            .where(
                or_(
                    AccountModel.email == identifier.strip().lower(),
                    AccountModel.tag == identifier,
                )
            )
            # an email match wins over a tag match on another account
            .order_by(case((AccountModel.email == identifier.strip().lower(), 0), else_=1))
        )
        return await self._first(stmt)

    async def create_account(
        self,
        *,
        email: str,
        password: str,
        tag: str,
        username: str,
        created_at: datetime,
    ) -> Account:
        model = AccountModel(
            email=email.strip().lower(),
            password_hash=hash_password(password),
            tag=tag,
            username=username,
            tag_last_changed=created_at,
            created_at=created_at,
        )
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            raise _duplicate_error(exc) from exc
        await self._session.refresh(model)
        return self._to_domain(model)

    async def save(self, account: Account, *, password_changed: bool = False) -> Account:
        stmt = select(AccountModel).where(AccountModel.id == account.id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            raise AccountNotFoundError(account.id)

        model.email = account.email.strip().lower()
        model.tag = account.tag
        model.username = account.username
        model.profile_picture = account.profile_picture
        model.is_email_verified = account.is_email_verified
        model.profile_visibility = account.privacy_settings.profile_visibility
        model.require_approval = account.privacy_settings.require_approval
        model.notify_in_app = account.notification_preferences.in_app
        model.notify_email = account.notification_preferences.email
        if model.tag_last_changed is None or account.tag_last_changed > _as_utc(model.tag_last_changed):
            model.tag_last_changed = account.tag_last_changed
        if password_changed:
            model.password_hash = hash_password(account.password_hash)

        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            raise _duplicate_error(exc) from exc
        await self._session.refresh(model)
        return self._to_domain(model)

    async def update_tag(
        self,
        account_id: str,
        *,
        new_tag: str,
        changed_at: datetime,
        changed_before: datetime,
    ) -> Account | None:
        stmt = (
            update(AccountModel)
            .where(
                AccountModel.id == account_id,
                AccountModel.tag_last_changed < changed_before,
            )
            .values(tag=new_tag, tag_last_changed=changed_at)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
        except IntegrityError as exc:
            await self._session.rollback()
            raise _duplicate_error(exc) from exc
        if result.rowcount == 0:
            return None

        return await self.get_by_id(account_id)

    async def _first(self, stmt) -> Account | None:
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalars().first())

    @staticmethod
    def _to_domain(model: AccountModel | None) -> Account | None:
        if model is None:
            return None
        return Account(
            id=str(model.id),
            email=model.email,
            tag=model.tag,
            username=model.username,
            tag_last_changed=_as_utc(model.tag_last_changed),
            password_hash=model.password_hash,
            profile_picture=model.profile_picture,
            is_email_verified=bool(model.is_email_verified),
            privacy_settings=PrivacySettings(
                profile_visibility=model.profile_visibility or "public",
                require_approval=bool(model.require_approval),
            ),
            notification_preferences=NotificationPreferences(
                in_app=bool(model.notify_in_app),
                email=bool(model.notify_email),
            ),
            stats=AccountStats(
                total_tasks_completed=model.total_tasks_completed or 0,
                current_streak=model.current_streak or 0,
                highest_streak=model.highest_streak or 0,
                total_points=model.total_points or 0,
            ),
            created_at=_as_utc(model.created_at),
        )
