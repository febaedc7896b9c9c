"""Account domain services and models."""

from .models import Account, AccountCreateInput, AccountStats, AuthResult, TagChange
from .service import AccountService
from .exceptions import (
    AccountError,
    AccountAlreadyExistsError,
    AccountNotFoundError,
    AccountValidationError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    TagAlreadyTakenError,
    TagChangeCooldownError,
)

__all__ = [
    "Account",
    "AccountCreateInput",
    "AccountStats",
    "AuthResult",
    "TagChange",
    "AccountService",
    "AccountError",
    "AccountAlreadyExistsError",
    "AccountNotFoundError",
    "AccountValidationError",
    "EmailAlreadyRegisteredError",
    "InvalidCredentialsError",
    "TagAlreadyTakenError",
    "TagChangeCooldownError",
]
