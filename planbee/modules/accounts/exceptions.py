"""Account domain specific exceptions."""

from __future__ import annotations

from datetime import datetime


class AccountError(Exception):
    """Base class for account domain errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AccountValidationError(AccountError):
    """Raised when input is missing or malformed."""


class AccountAlreadyExistsError(AccountError):
    """Raised when a unique account field collides with an existing account."""


class EmailAlreadyRegisteredError(AccountAlreadyExistsError):
    def __init__(self, message: str = "User with this email already exists") -> None:
        super().__init__(message)


class TagAlreadyTakenError(AccountAlreadyExistsError):
    def __init__(self, message: str = "This tag is already taken") -> None:
        super().__init__(message)


class InvalidCredentialsError(AccountError):
    """Login failed. Deliberately says nothing about which check failed."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class AccountNotFoundError(AccountError):
    """Raised when the requested account cannot be found."""


class TagChangeCooldownError(AccountError):
    """Raised when the tag was changed less than the cooldown period ago."""

    def __init__(self, next_allowed: datetime) -> None:
        self.next_allowed = next_allowed
        super().__init__(
            "Tag can only be changed every 3 months. "
            f"Next change allowed on {next_allowed.strftime('%a %b %d %Y')}"
        )
