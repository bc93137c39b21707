"""Drop and recreate all database tables, optionally seeding demo data afterwards."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from resourcehub.database import dispose_engine, drop_db, init_db


async def _reset_db(seed: bool) -> None:
    print("Dropping all tables...")
    await drop_db()
    print("Creating all tables...")
    await init_db()
    if seed:
        from seed_db import seed_catalog

        await seed_catalog()
    await dispose_engine()
    print("Database reset complete.")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reset the local ResourceHub database.")
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Populate demo accounts and approved resources after recreating tables.",
    )
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    asyncio.run(_reset_db(args.seed))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
