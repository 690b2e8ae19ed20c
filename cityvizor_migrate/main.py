"""
CLI entry point

    python -m cityvizor_migrate.main [--dry-run] [--data-path PATH]
"""
import argparse
import logging
import sys
from pathlib import Path

from cityvizor_migrate.application.migration import run_migration
from cityvizor_migrate.config import get_settings
from cityvizor_migrate.infrastructure.db.session import (
    check_db_connection,
    dispose_engine,
    get_session_factory,
)
from cityvizor_migrate.infrastructure.source.store import MongoSourceStore

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="cityvizor-migrate",
        description="Migrate CityVizor data from MongoDB to PostgreSQL",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Read and compute everything but write nothing (default: DRY env)",
    )
    parser.add_argument(
        "--data-path",
        type=Path,
        help="Directory for avatars/ (default: DATA_PATH env)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        help="Rows per bulk insert (default: BATCH_SIZE env)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def main(args: list[str] | None = None) -> int:
    parsed = create_cli().parse_args(args)
    setup_logging(parsed.verbose)

    settings = get_settings()
    dry_run = settings.DRY if parsed.dry_run is None else parsed.dry_run
    data_path = parsed.data_path or Path(settings.DATA_PATH)
    batch_size = parsed.batch_size or settings.BATCH_SIZE

    source = MongoSourceStore(settings.MONGODB_URL, settings.MONGODB_DATABASE)
    db = None
    try:
        source.check_connection()
        check_db_connection()

        db = get_session_factory()()
        run_migration(source, db, data_path, dry_run=dry_run, batch_size=batch_size)
    except Exception:
        logger.exception("Migration failed")
        return 1
    finally:
        source.close()
        if db is not None:
            db.close()
        dispose_engine()

    return 0


if __name__ == "__main__":
    sys.exit(main())
