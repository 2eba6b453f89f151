"""Initialize database tables"""
import asyncio
from backend.config import get_settings
from backend.database import Database
from backend.models import *  # noqa: F401,F403 - Import all models to register them


async def init():
    async with Database(get_settings().DATABASE_URL):
        pass
    print("Database tables created successfully.")


if __name__ == "__main__":
    asyncio.run(init())
