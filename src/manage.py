"""Marketplace database management CLI.

Provides commands to create and drop the database schema of the
marketplace domain for SQL-backed providers.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys

import structlog

logger = structlog.get_logger(__name__)


def setup_database():
    """Create the marketplace database schema."""
    from marketplace.domain import marketplace
    from marketplace.utils.db import setup_db

    logger.info("Initializing domain", domain=marketplace.name)
    marketplace.init()
    setup_db(marketplace)
    logger.info("Schema ready", domain=marketplace.name)


def drop_database():
    """Drop the marketplace database schema."""
    from marketplace.domain import marketplace
    from marketplace.utils.db import drop_db

    logger.info("Initializing domain", domain=marketplace.name)
    marketplace.init()
    drop_db(marketplace)
    logger.info("Schema dropped", domain=marketplace.name)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Marketplace database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
