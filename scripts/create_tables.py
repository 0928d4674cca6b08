"""
Create the catalog schema in the database named by DATABASE_URL.

    python scripts/create_tables.py           # create missing tables
    python scripts/create_tables.py --reset   # drop everything first (development only)
"""
import argparse
import asyncio
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'Backend')))

from vintage_admin.core.config import settings
import vintage_admin.models.registry  # noqa: F401  (registers every table)
from vintage_admin.services.database import Base, engine


async def create_schema(reset: bool) -> None:
    async with engine.begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
            print(f"Dropped {len(Base.metadata.tables)} tables")
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print(f"Schema ready: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--reset", action="store_true", help="drop all tables before creating them")
    args = parser.parse_args()
    if args.reset and not settings.is_development:
        sys.exit(f"Refusing to drop tables in {settings.ENVIRONMENT}")
    asyncio.run(create_schema(args.reset))
