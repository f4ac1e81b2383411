"""Rewrite legacy amenity data into the canonical list form.

Older catalog imports stored ``amenities`` (and sometimes room ``amenities``
and hotel ``images``) as a single comma-joined string. The API already
normalizes these on the way out; this script fixes the stored rows once so
every reader sees lists.

Run from the project root:
    python -m scripts.normalize_amenities [--dry-run]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from stayhub.database import async_session_factory, engine
from stayhub.models.hotel import Hotel
from stayhub.schemas.hotel import normalize_string_list

logger = logging.getLogger("scripts.normalize_amenities")


def _needs_rewrite(value) -> bool:
    return not isinstance(value, list) or value != normalize_string_list(value)


async def normalize(dry_run: bool = False) -> tuple[int, int]:
    """Normalize every hotel and room. Returns ``(hotels_changed, rooms_changed)``."""
    hotels_changed = rooms_changed = 0
    async with async_session_factory() as session:
        hotels = (await session.execute(select(Hotel))).scalars().all()
        for hotel in hotels:
            touched = False
            if _needs_rewrite(hotel.amenities):
                logger.info("Hotel %s amenities: %r", hotel.id, hotel.amenities)
                hotel.amenities = normalize_string_list(hotel.amenities)
                touched = True
            if not isinstance(hotel.images, list):
                hotel.images = normalize_string_list(hotel.images)
                touched = True
            hotels_changed += touched

            for room in hotel.rooms:
                if _needs_rewrite(room.amenities):
                    logger.info("Room %s amenities: %r", room.id, room.amenities)
                    room.amenities = normalize_string_list(room.amenities)
                    rooms_changed += 1

        if dry_run:
            await session.rollback()
        else:
            await session.commit()

    await engine.dispose()
    return hotels_changed, rooms_changed


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--dry-run", action="store_true", help="report changes without writing them")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    hotels, rooms = asyncio.run(normalize(dry_run=args.dry_run))
    verb = "Would normalize" if args.dry_run else "Normalized"
    print(f"{verb} {hotels} hotels and {rooms} rooms")


if __name__ == "__main__":
    main()
