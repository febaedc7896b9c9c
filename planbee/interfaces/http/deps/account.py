"""Account related dependency providers."""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from planbee.core.security import InvalidTokenError, decode_access_token
from planbee.infrastructure.database.repositories.account_repository import SqlAccountRepository
from planbee.modules.accounts import Account
from planbee.modules.accounts.service import AccountService, Clock, utcnow

from .database import get_db_session

bearer_scheme = HTTPBearer(auto_error=False)


def get_clock() -> Clock:
    return utcnow


def get_account_repository(db: AsyncSession = Depends(get_db_session)) -> SqlAccountRepository:
    return SqlAccountRepository(db)


def get_account_service(
    repository: SqlAccountRepository = Depends(get_account_repository),
    clock: Clock = Depends(get_clock),
) -> AccountService:
    return AccountService(repository, clock=clock)


async def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    account_service: AccountService = Depends(get_account_service),
) -> Account:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")
    try:
        account_id = decode_access_token(credentials.credentials)
    except InvalidTokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    account = await account_service.get_by_id(account_id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return account


__all__ = [
    "bearer_scheme",
    "get_clock",
    "get_account_repository",
    "get_account_service",
    "get_current_account",
]
