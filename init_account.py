"""
Create the demo account used for local testing.

If the account already exists, ``--reset-password`` sets a new password for it.
"""
import argparse
import asyncio
from contextlib import aclosing

from sqlalchemy.ext.asyncio import AsyncSession

from planbee.infrastructure.database import close_db, get_session, init_db
from planbee.modules.accounts import AccountCreateInput, AccountService

DEMO_EMAIL = "demo@planbee.dev"
DEMO_TAG = "demo_bee"
DEMO_USERNAME = "Demo Bee"
DEMO_PASSWORD = "honey123"


async def _seed(db: AsyncSession, reset_password: bool) -> str:
    service = AccountService.with_session(db)

    existing = await service.get_by_identifier(DEMO_EMAIL)
    if existing:
        if not reset_password:
            return "Demo account already exists"
        await service.reset_password(existing.id, DEMO_PASSWORD)
        await db.commit()
        return f"Password reset: {DEMO_EMAIL} / {DEMO_PASSWORD}"

    await service.register(
        AccountCreateInput(
            email=DEMO_EMAIL,
            password=DEMO_PASSWORD,
            tag=DEMO_TAG,
            username=DEMO_USERNAME,
        )
    )
    await db.commit()
    return f"Demo account created: {DEMO_EMAIL} (@{DEMO_TAG}) / {DEMO_PASSWORD}"


async def create_default_account(reset_password: bool = False) -> str:
    await init_db()

    async with aclosing(get_session()) as sessions:
        async for db in sessions:
            return await _seed(db, reset_password)
    raise RuntimeError("get_session yielded no session")


async def main(reset_password: bool) -> None:
    try:
        print(await create_default_account(reset_password))
    finally:
        await close_db()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reset-password", action="store_true")
    args = parser.parse_args()
    asyncio.run(main(args.reset_password))
