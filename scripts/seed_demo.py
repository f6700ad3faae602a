"""
Demo Workspace Seeder

Creates demo analytics sources and saved reports for one user.

Usage:
    python -m scripts.seed_demo --user-id <auth user id> [--sources 2] [--seed 42]
"""

import argparse
import asyncio

import structlog

from src.config.logging import configure_logging
from src.data.generators import DemoWorkspaceGenerator
from src.database.connection import close_database, get_db, init_database
from src.database.repositories import SqlReportStore, SqlSourceStore

logger = structlog.get_logger(__name__)


async def seed(user_id: str, n_sources: int, seed_value: int) -> None:
    generator = DemoWorkspaceGenerator(seed=seed_value)

    await init_database(create_tables=True)
    try:
        async with get_db() as db:
            sources = SqlSourceStore(db)
            reports = SqlReportStore(db)

            created = []
            for data in generator.generate_sources(n_sources):
                created.append(await sources.create(user_id, data, data.credentials))

            names = {s.id: s.name for s in created}
            report_count = 0
            for data in generator.generate_reports(list(names)):
                await reports.create(user_id, data, source_name=names[data.source_id])
                report_count += 1

        logger.info("Demo workspace seeded", user_id=user_id, sources=len(created), reports=report_count)
    finally:
        await close_database()


def main():
    parser = argparse.ArgumentParser(description="Seed demo analytics sources and reports")
    parser.add_argument("--user-id", required=True, help="Owner of the demo records")
    parser.add_argument("--sources", type=int, default=2, help="Number of sources (default: 2)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    configure_logging()
    asyncio.run(seed(args.user_id, args.sources, args.seed))


if __name__ == "__main__":
    main()
