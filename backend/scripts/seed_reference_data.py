#!/usr/bin/env python
"""Seed script for the activity catalog, the default users and demo matters.

Safe to run more than once: rows are matched by name and only missing ones are
inserted. Demo matters are only inserted with --demo-matters.

Usage:
    python backend/scripts/seed_reference_data.py [--demo-matters]

Environment Variables:
    DATABASE_URL: SQLAlchemy async connection string
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add backend to Python path
backend_root = Path(__file__).parent.parent
sys.path.insert(0, str(backend_root))

from sqlalchemy import select

from adms.audit.catalog import seed_activity_catalog
from adms.audit.seed_data import SEED_MATTERS, SEED_USERS
from adms.config import get_settings
from adms.database import create_engine_from_settings, create_session_factory, session_scope
from adms.models import Matter, User
from adms.models.base import utcnow


async def seed(demo_matters: bool) -> None:
    settings = get_settings()
    engine = create_engine_from_settings(settings)
    try:
        async with session_scope(create_session_factory(engine)) as session:
            activities_added = await seed_activity_catalog(session)

            existing_users = set((await session.execute(select(User.name))).scalars().all())
            users_added = 0
            for user_id, name in SEED_USERS:
                if name not in existing_users:
                    session.add(User(id=user_id, name=name))
                    users_added += 1

            matters_added = 0
            if demo_matters:
                existing_matters = set((await session.execute(select(Matter.description))).scalars().all())
                for matter_id, description in SEED_MATTERS:
                    if description not in existing_matters:
                        session.add(
                            Matter(
                                id=matter_id,
                                description=description,
                                is_archived=False,
                                is_deleted=False,
                                creation_date=utcnow(),
                            )
                        )
                        matters_added += 1

            await session.commit()
    finally:
        await engine.dispose()

    print("Reference data seeded:")
    print(f"  Activities added: {activities_added}")
    print(f"  Users added:      {users_added}")
    if demo_matters:
        print(f"  Matters added:    {matters_added}")


def main():
    parser = argparse.ArgumentParser(description="Seed ADMS reference data")
    parser.add_argument("--demo-matters", action="store_true", help="Also insert the demo matters")
    args = parser.parse_args()

    try:
        asyncio.run(seed(args.demo_matters))
    except Exception as e:
        print(f"ERROR: Failed to seed reference data: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
