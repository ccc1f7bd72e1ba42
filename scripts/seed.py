"""Database seeder: recreates the schema and loads the fixture data."""
import argparse
import asyncio
import time

from app.database import engine, async_session, Base
from app.models import AccountRow, MessageRow

FIXTURE_ACCOUNTS = [("testuser1", "password")]
FIXTURE_MESSAGES = [(1, "test message 1", 1669947792)]


async def seed(extra_accounts: int = 0):
    print(f"Seeding: {len(FIXTURE_ACCOUNTS) + extra_accounts} accounts, {len(FIXTURE_MESSAGES)} messages")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        for username, password in FIXTURE_ACCOUNTS:
            session.add(AccountRow(username=username, password=password))
        for i in range(extra_accounts):
            session.add(AccountRow(username=f"user_{i:04d}", password=f"password{i}"))
        await session.flush()
        print(f"  Created {len(FIXTURE_ACCOUNTS) + extra_accounts} accounts")

        for posted_by, text, epoch in FIXTURE_MESSAGES:
            session.add(MessageRow(posted_by=posted_by, message_text=text, time_posted_epoch=epoch))
        await session.flush()
        print(f"  Created {len(FIXTURE_MESSAGES)} messages")

        await session.commit()

    print(f"\nSeeding complete in {time.perf_counter() - start:.1f}s")


def main():
    parser = argparse.ArgumentParser(description="Seed the message board database")
    parser.add_argument("--extra-accounts", type=int, default=0, help="Additional generated accounts")
    args = parser.parse_args()
    asyncio.run(seed(extra_accounts=args.extra_accounts))


if __name__ == "__main__":
    main()
