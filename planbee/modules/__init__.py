"""Feature modules."""

from . import accounts

__all__ = [
    "accounts",
]
