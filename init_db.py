"""Initialize database tables"""
import asyncio
from bhojnalay.database import engine, Base
from bhojnalay.models import *  # noqa: F401,F403 - Import all models to register them


async def init():
    if engine is None:
        print("DATABASE_URL is empty; nothing to initialize (local storage only).")
        return
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print("Database tables created successfully.")


if __name__ == "__main__":
    asyncio.run(init())
