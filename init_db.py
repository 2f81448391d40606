"""Initialize database schema for the directory search service.

Creates the companies table and optionally imports dataset files.
Run this before starting the API server:

    python init_db.py                      # schema only
    python init_db.py dataset/*.csv        # schema + import
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from nutra.config import settings
from nutra.db import AsyncSessionMaker, engine
from nutra.models import Base
from nutra.parsers import parse_dataset
from nutra.pipelines.ingest import import_companies


async def init_database():
    """Drop and recreate all database tables."""
    print(f"Initializing database: {settings.db.url}")
    print("Creating tables...")

    async with engine.begin() as conn:
        # Drop all tables (for clean start)
        await conn.run_sync(Base.metadata.drop_all)
        print("✓ Dropped existing tables")

        # Create all tables
        await conn.run_sync(Base.metadata.create_all)
        print("✓ Created all tables")

    print(f"Tables created: {', '.join(Base.metadata.tables.keys())}")


async def import_files(paths: list[Path]) -> int:
    """Import dataset files, skipping ones that do not exist."""
    total = 0
    async with AsyncSessionMaker() as session:
        for path in paths:
            if not path.exists():
                print(f"⚠ File not found: {path}, skipping")
                continue
            with path.open("rb") as file_obj:
                records = parse_dataset(file_obj, path.name)
            inserted = await import_companies(session, records)
            await session.commit()
            print(f"✓ Inserted {inserted} companies from {path.name}")
            total += inserted
    return total


async def main():
    """Main entry point."""
    try:
        await init_database()
        paths = [Path(p) for p in sys.argv[1:]]
        if paths:
            total = await import_files(paths)
            print(f"\nTotal companies imported: {total}")
        print("\n✅ Database initialization complete!")
    except Exception as e:
        print(f"\n❌ Error initializing database: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
