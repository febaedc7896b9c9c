"""ORM models for the account store."""
