"""Repository protocol for accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .models import Account


class AccountRepository(Protocol):
    """Abstract repository interface for account persistence.

    Implementations own password hashing on write and enforce email/tag
    uniqueness atomically, raising ``EmailAlreadyRegisteredError`` or
    ``TagAlreadyTakenError`` when the store rejects a row.
    """

    async def get_by_id(self, account_id: str) -> Account | None:
        ...

    async def get_by_email(self, email: str) -> Account | None:
        ...

    async def get_by_tag(self, tag: str) -> Account | None:
        ...

    async def get_by_identifier(self, identifier: str) -> Account | None:
        ...

    async def create_account(
        self,
        *,
        email: str,
        password: str,
        tag: str,
        username: str,
        created_at: datetime,
    ) -> Account:
        ...

    async def save(self, account: Account, *, password_changed: bool = False) -> Account:
        ...

    async def update_tag(
        self,
        account_id: str,
        *,
        new_tag: str,
        changed_at: datetime,
        changed_before: datetime,
    ) -> Account | None:
        ...
