"""
Create (or recreate) all party tables directly from the ORM models.

Intended for development and test databases; production schemas are
managed with Alembic (`alembic upgrade head`).

Usage:
    python create_schema.py                 # uses DB_* / DATABASE_URL
    python create_schema.py --drop          # drop everything first
    python create_schema.py --database customer_test_db
"""

import argparse
import logging

from database.connection import DatabaseSessionProvider, DatabaseSettings

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the Customer Master Data schema")
    parser.add_argument("--database", help="Database name (overrides DB_NAME)")
    parser.add_argument("--drop", action="store_true", help="Drop all tables before creating them")
    parser.add_argument("--echo", action="store_true", help="Log every SQL statement")
    return parser.parse_args(argv)


def create_schema(settings: DatabaseSettings, drop: bool = False, echo: bool = False) -> DatabaseSessionProvider:
    """Create all tables for `settings`; optionally drop them first."""
    provider = DatabaseSessionProvider(settings=settings)
    provider.init(echo=echo)
    if drop:
        provider.drop_tables()
    provider.create_tables()
    return provider


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    args = parse_args(argv)

    settings = DatabaseSettings.from_env()
    if args.database:
        settings.database = args.database

    logger.info(f"Creating tables in {settings.database}...")
    provider = create_schema(settings, drop=args.drop, echo=args.echo)
    provider.close()
    logger.info("Tables created")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
