#!/usr/bin/env python3
"""
Gagyebu CLI - household ledger and category taxonomy.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    categories   Manage the 유형/관/항/목 taxonomy
    transactions Record, edit and import transactions
    reports      Totals, breakdowns and period summaries
    migrate      Database migrations

Examples:
    python -m cli categories tree 지출
    python -m cli categories move-up 지출 교통비
    python -m cli transactions add 2024-01-10 지출 식비 외식 점심 12000
    python -m cli transactions import backup.csv
    python -m cli reports breakdown 지출 --depth 3
"""

import sys
import argparse
from cli import categories, migrate, reports, transactions
from config import load_config
from db.manager import DatabaseManager
from errors import LedgerError
from logger import setup_logging
from services.base import Services


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Gagyebu - household ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    categories.setup_parser(subparsers)
    transactions.setup_parser(subparsers)
    reports.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    config = load_config()
    logger = setup_logging(config)
    db_manager = DatabaseManager(config)

    try:
        if args.command == "migrate":
            # Migrate commands need db_manager for raw database operations
            args.func(args, db_manager)
        else:
            db_manager.ensure_schema()
            args.func(args, Services(config, db_manager=db_manager))
    except LedgerError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
