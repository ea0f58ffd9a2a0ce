#!/usr/bin/env python3
"""Load the demo catalog: streaming services, genres, moods and content.

Rows are upserted by uid, so the script can be re-run after editing the data
file. Genre links and availability of each seeded title are replaced.

Usage:
    python scripts/seed_catalog.py [--file=PATH] [--create-tables]

Options:
    --file           Catalog JSON file (default: scripts/data/catalog.json)
    --create-tables  Create missing tables before seeding (no Alembic)
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import delete, insert

from cinecrib.db.database import async_session_maker, init_db
from cinecrib.models.base import utcnow
from cinecrib.models.content import (
    Content,
    ContentStreamingAvailability,
    ContentType,
    Genre,
    Mood,
    StreamingService,
    content_genres,
)
from cinecrib.utils.cache import cache, invalidate_lookups
from cinecrib.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

DEFAULT_CATALOG = Path(__file__).parent / "data" / "catalog.json"


async def seed_catalog(catalog_path: Path, create_tables: bool = False) -> None:
    """Upsert every row of the catalog file."""
    catalog = json.loads(catalog_path.read_text(encoding="utf-8"))

    if create_tables:
        await init_db()

    async with async_session_maker() as db:
        for row in catalog["streaming_services"]:
            await db.merge(StreamingService(**row))
        for row in catalog["genres"]:
            await db.merge(Genre(**row))
        for row in catalog["moods"]:
            await db.merge(Mood(**row))
        await db.flush()

        for item in catalog["content"]:
            genre_uids = item.pop("genres", [])
            availability = item.pop("availability", [])
            item["content_type"] = ContentType(item["content_type"])

            await db.merge(Content(**item, last_synced_at=utcnow()))
            await db.flush()

            await db.execute(delete(content_genres).where(content_genres.c.content_uid == item["uid"]))
            if genre_uids:
                await db.execute(
                    insert(content_genres),
                    [{"content_uid": item["uid"], "genre_uid": uid} for uid in genre_uids],
                )

            await db.execute(
                delete(ContentStreamingAvailability).where(
                    ContentStreamingAvailability.content_uid == item["uid"]
                )
            )
            for link in availability:
                db.add(ContentStreamingAvailability(content_uid=item["uid"], **link))

        await db.commit()

    logger.info(
        f"Seeded {len(catalog['streaming_services'])} services, {len(catalog['genres'])} genres, "
        f"{len(catalog['moods'])} moods, {len(catalog['content'])} titles"
    )

    if await cache.connect():
        await invalidate_lookups()
        await cache.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Load the demo catalog")
    parser.add_argument("--file", type=Path, default=DEFAULT_CATALOG, help="Catalog JSON file")
    parser.add_argument(
        "--create-tables", action="store_true", help="Create missing tables before seeding"
    )
    args = parser.parse_args()

    setup_logging()
    asyncio.run(seed_catalog(args.file, create_tables=args.create_tables))


if __name__ == "__main__":
    main()
