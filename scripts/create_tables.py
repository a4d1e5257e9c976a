# scripts/create_tables.py

import sys
from pathlib import Path

# Ensure project root is on the path when running this script directly
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio

from sqlalchemy import text

from app.infrastructure.database.session import create_tables, get_engine


async def main():
    engine = get_engine()
    async with engine.begin() as conn:
        result = await conn.execute(text("SELECT 1"))
        print("DB Connected:", result.scalar())

    await create_tables(engine)
    print("Tables created: users, tasks, task_histories")
    await engine.dispose()


asyncio.run(main())
