#!/usr/bin/env python3

from logger import get_logger

logger = get_logger()


def cmd_status(args, db_manager):
    """Show which migrations are applied and which snapshots are stored."""
    db_path = db_manager.get_db_path()

    if not db_path.exists():
        logger.info(
            "Database does not exist. Run 'python -m cli migrate apply' to create it."
        )
        return

    status = db_manager.migration_status()
    if not status.applied and not status.pending:
        logger.info("No migrations found.")
        return

    logger.info(f"Database: {db_path}")
    for migration in status.applied:
        logger.info(f"  {migration}: APPLIED")
    for migration in status.pending:
        logger.info(f"  {migration}: PENDING")
    logger.info(
        f"Pending: {len(status.pending)} of {len(status.applied) + len(status.pending)}"
    )

    snapshots = db_manager.list_snapshots()
    if not snapshots:
        logger.info("\nNo snapshots stored.")
        return

    logger.info("\nSnapshots:")
    for snapshot in snapshots:
        logger.info(
            f"  {snapshot.key}: {snapshot.size} bytes, updated {snapshot.updated_at}"
        )


def cmd_apply(args, db_manager):
    """Apply pending migrations."""
    applied = db_manager.ensure_schema()
    if not applied:
        logger.info("No pending migrations.")
        return
    logger.info(f"✓ Applied {len(applied)} migration(s): {', '.join(applied)}")


def setup_parser(subparsers):
    """Setup migrate subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "migrate",
        help="Database migrations",
        description="Create or upgrade the snapshot database",
    )

    migrate_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available migration commands",
        dest="subcommand",
        required=True,
    )

    status_parser = migrate_subparsers.add_parser(
        "status", help="Show migration and snapshot status"
    )
    status_parser.set_defaults(func=cmd_status)

    apply_parser = migrate_subparsers.add_parser(
        "apply", help="Apply pending migrations"
    )
    apply_parser.set_defaults(func=cmd_apply)
