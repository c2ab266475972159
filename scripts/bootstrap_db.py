"""
Scripts - Bootstrap Database.

============================================================
RESPONSIBILITY
============================================================
Initializes the alert store for first-time setup.

- Creates the alert schema
- Validates setup

============================================================
USAGE
============================================================
python -m scripts.bootstrap_db

Options:
  --database-url     Override DATABASE_URL
  --drop-existing    Drop existing tables (DANGEROUS, deletes all alerts)
  --validate-only    Only validate, don't create

EXIT CODES:
- 0: Schema present
- 1: Configuration or connection failed
- 2: Schema creation failed or tables missing

============================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

from sqlalchemy import inspect

from core.config import AlertServiceConfig, configure_logging
from core.exceptions import ConfigurationError, StorageError
from storage.database import Database, DatabaseConfig, open_database


logger = logging.getLogger("bootstrap_db")


def missing_tables(database: Database) -> List[str]:
    """Schema tables that do not exist in the database."""
    existing = set(inspect(database.engine).get_table_names())
    return [name for name in database.table_names() if name not in existing]


def bootstrap(
    database: Database,
    drop_existing: bool = False,
    validate_only: bool = False,
) -> int:
    """
    Create and/or validate the schema.

    Returns:
        Process exit code
    """
    database.verify_connection()

    if not validate_only:
        if drop_existing:
            logger.warning("Dropping existing alert tables")
            database.drop_all_tables()
        database.create_all_tables()

    missing = missing_tables(database)
    if missing:
        logger.error(f"Missing tables: {', '.join(missing)}")
        return 2

    logger.info(f"Schema OK: {', '.join(database.table_names())}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Bootstrap database entry point."""
    parser = argparse.ArgumentParser(
        description="Create or validate the name alert database schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy database URL (default: DATABASE_URL or sqlite:///name_alerts.db)",
    )
    parser.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop existing tables before creating them",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only check that every table exists",
    )
    args = parser.parse_args(argv)

    try:
        config = AlertServiceConfig.from_env()
    except ConfigurationError as e:
        configure_logging()
        logger.error(f"Configuration error: {e}")
        return 1

    configure_logging(config.log_level)
    db_config = config.database_config()
    if args.database_url:
        db_config = DatabaseConfig(url=args.database_url, echo=config.database_echo)

    database = open_database(db_config)
    try:
        return bootstrap(
            database,
            drop_existing=args.drop_existing,
            validate_only=args.validate_only,
        )
    except StorageError as e:
        logger.error(f"Bootstrap failed: {e}")
        return 1 if "connect" in str(e).lower() else 2
    finally:
        database.close()


if __name__ == "__main__":
    sys.exit(main())
