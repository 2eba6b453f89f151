"""
Database setup script

Creates the PostgreSQL database named in DATABASE_URL if it does not exist,
then creates tables and an optional first account.

Usage:
    python scripts/setup_db.py [email password "Full Name"]
"""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine

from backend.config import get_settings
from backend.database import Database, _get_async_url
from backend.models import *  # noqa: F401,F403
from backend.models.user import User
from backend.api.auth import get_password_hash


async def ensure_postgres_database(url: str):
    """Connect to the server's default database and CREATE DATABASE if missing"""
    target = make_url(_get_async_url(url))
    if not target.drivername.startswith("postgresql"):
        return

    admin_engine = create_async_engine(
        target.set(database="postgres"),
        isolation_level="AUTOCOMMIT",
    )
    try:
        async with admin_engine.connect() as conn:
            result = await conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": target.database},
            )
            if result.scalar() is None:
                await conn.execute(text(f'CREATE DATABASE "{target.database}"'))
                print(f'Database "{target.database}" created')
            else:
                print(f'Database "{target.database}" already exists')
    finally:
        await admin_engine.dispose()


async def setup_database(account: list[str]):
    """Create tables and seed the first account"""
    settings = get_settings()
    await ensure_postgres_database(settings.DATABASE_URL)

    print("Creating database tables...")
    async with Database(settings.DATABASE_URL) as db:
        print("Tables created")

        if len(account) < 2:
            print("\nDatabase setup complete!")
            return

        email, password = account[0].lower(), account[1]
        full_name = account[2] if len(account) > 2 else email
        async with db.session() as session:
            result = await session.execute(select(User).where(User.email == email))
            if result.scalar_one_or_none():
                print(f"User {email} already exists")
            else:
                session.add(User(
                    email=email,
                    full_name=full_name,
                    hashed_password=get_password_hash(password),
                ))
                await session.commit()
                print(f"Created user {email}")

    print("\nDatabase setup complete!")


if __name__ == "__main__":
    asyncio.run(setup_database(sys.argv[1:]))
