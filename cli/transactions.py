#!/usr/bin/env python3

import sys
from datetime import date
from pathlib import Path

from cli.categories import kind_argument
from errors import ImportFormatError
from interchange import transactions as transaction_csv
from interchange.fields import format_amount, parse_amount, parse_date
from logger import get_logger

logger = get_logger()


def _format_transaction(t) -> str:
    memo = f" ({t.memo})" if t.memo else ""
    return (
        f"[{t.id}] {t.date.isoformat()} {t.kind.value} "
        f"{t.level1} > {t.level2} > {t.level3} {format_amount(t.amount)}원{memo}"
    )


def cmd_list(args, services):
    """List transactions, most recent first."""
    transactions = sorted(
        services.transactions.find_all(), key=lambda t: t.date, reverse=True
    )
    if args.kind:
        transactions = [t for t in transactions if t.kind == args.kind]
    if args.limit:
        transactions = transactions[: args.limit]

    if not transactions:
        logger.info("No transactions found.")
        return

    for t in transactions:
        logger.info(_format_transaction(t))
    logger.info(f"\nShown: {len(transactions)}")


def cmd_daily(args, services):
    """Show transactions grouped by day with daily income and expense."""
    days = services.transactions.group_by_date()
    if args.limit:
        days = days[: args.limit]

    if not days:
        logger.info("No transactions found.")
        return

    for day in days:
        logger.info(
            f"{day.date.isoformat()}  수입 {format_amount(day.total_income)}원  "
            f"지출 {format_amount(day.total_expense)}원"
        )
        for t in day.transactions:
            logger.info(f"    {_format_transaction(t)}")


def cmd_add(args, services):
    """Record a transaction."""
    transaction = services.transactions.create(
        date=args.date,
        kind=args.kind,
        level1=args.level1,
        level2=args.level2,
        level3=args.level3,
        amount=args.amount,
        memo=args.memo,
    )
    logger.info(f"✓ Transaction recorded: {_format_transaction(transaction)}")

    if not services.categories.exists(transaction.category):
        logger.warning("  (category is not in the taxonomy)")


def cmd_edit(args, services):
    """Change fields of an existing transaction."""
    existing = services.transactions.find(args.transaction_id)
    if not existing:
        logger.error(f"Transaction {args.transaction_id} not found.")
        sys.exit(1)

    changes = {
        name: getattr(args, name)
        for name in ("date", "kind", "level1", "level2", "level3", "amount", "memo")
        if getattr(args, name) is not None
    }
    if not changes:
        logger.info("Nothing to change.")
        return

    updated = existing.with_changes(**changes)
    services.transactions.update(updated)
    logger.info(f"✓ Transaction updated: {_format_transaction(services.transactions.find(updated.id))}")


def cmd_delete(args, services):
    existing = services.transactions.find(args.transaction_id)
    if not existing:
        logger.error(f"Transaction {args.transaction_id} not found.")
        sys.exit(1)

    services.transactions.delete(existing)
    logger.info(f"✓ Transaction {existing.id} deleted.")


def cmd_export(args, services):
    """Export the ledger to CSV or JSON."""
    transactions = services.transactions.find_all()
    if args.format == "json":
        content = transaction_csv.encode_json(transactions)
        encoding = "utf-8"
    else:
        content = transaction_csv.encode(transactions)
        encoding = "utf-8-sig"

    if args.output:
        output = Path(args.output)
    else:
        output = services.config.export_dir / (
            f"transactions_{date.today().isoformat()}.{args.format}"
        )
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content, encoding=encoding)
    logger.info(f"✓ Exported {len(transactions)} transactions to {output}")


def cmd_import(args, services):
    """Replace the ledger with the transactions in a CSV or JSON file."""
    path = Path(args.file)
    if not path.exists():
        logger.error(f"File not found: {args.file}")
        sys.exit(1)

    text = path.read_text(encoding="utf-8-sig")
    try:
        if args.format == "json" or (args.format is None and path.suffix == ".json"):
            transactions = transaction_csv.decode_json(text)
        else:
            transactions = transaction_csv.decode(text)
    except ImportFormatError as e:
        logger.error(f"Import failed: {e}")
        sys.exit(1)

    count = services.transactions.replace_all(transactions)
    logger.info(f"✓ Imported {count} transactions")


def cmd_reset(args, services):
    """Delete every transaction and category snapshot."""
    if not args.yes:
        response = input("This will delete ALL transactions and categories. Continue? (yes/no): ")
        if response.strip().lower() != "yes":
            logger.info("Reset cancelled.")
            return

    services.reset()
    logger.info("✓ Ledger and taxonomy reset.")


def setup_parser(subparsers):
    """Setup transactions subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "transactions",
        help="Manage the ledger",
        description="Record, edit, delete, export and import transactions",
    )

    transactions_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available transaction commands",
        dest="subcommand",
        required=True,
    )

    list_parser = transactions_subparsers.add_parser("list", help="List transactions")
    list_parser.add_argument("--kind", type=kind_argument, help="Only this kind")
    list_parser.add_argument("--limit", type=int, help="Maximum rows to show")
    list_parser.set_defaults(func=cmd_list)

    daily_parser = transactions_subparsers.add_parser(
        "daily", help="Show transactions grouped by day"
    )
    daily_parser.add_argument("--limit", type=int, help="Maximum days to show")
    daily_parser.set_defaults(func=cmd_daily)

    add_parser = transactions_subparsers.add_parser("add", help="Record a transaction")
    add_parser.add_argument("date", help="YYYY-MM-DD (or YYYY.MM.DD)")
    add_parser.add_argument("kind", type=kind_argument, help="수입 or 지출")
    add_parser.add_argument("level1", help="관")
    add_parser.add_argument("level2", help="항")
    add_parser.add_argument("level3", help="목")
    add_parser.add_argument("amount", type=parse_amount, help="Amount in won, e.g. 12,000")
    add_parser.add_argument("--memo", help="Optional memo")
    add_parser.set_defaults(func=cmd_add)

    edit_parser = transactions_subparsers.add_parser(
        "edit", help="Change fields of a transaction"
    )
    edit_parser.add_argument("transaction_id", help="Transaction ID")
    edit_parser.add_argument("--date", type=parse_date)
    edit_parser.add_argument("--kind", type=kind_argument)
    edit_parser.add_argument("--level1", help="관")
    edit_parser.add_argument("--level2", help="항")
    edit_parser.add_argument("--level3", help="목")
    edit_parser.add_argument("--amount", type=parse_amount)
    edit_parser.add_argument("--memo")
    edit_parser.set_defaults(func=cmd_edit)

    delete_parser = transactions_subparsers.add_parser(
        "delete", help="Delete a transaction"
    )
    delete_parser.add_argument("transaction_id", help="Transaction ID")
    delete_parser.set_defaults(func=cmd_delete)

    export_parser = transactions_subparsers.add_parser(
        "export", help="Export the ledger"
    )
    export_parser.add_argument("-o", "--output", help="Output file path")
    export_parser.add_argument(
        "--format", choices=["csv", "json"], default="csv", help="Output format"
    )
    export_parser.set_defaults(func=cmd_export)

    import_parser = transactions_subparsers.add_parser(
        "import", help="Replace the ledger from a CSV or JSON file"
    )
    import_parser.add_argument("file", help="Path to the file to import")
    import_parser.add_argument(
        "--format", choices=["csv", "json"], help="Defaults to the file extension"
    )
    import_parser.set_defaults(func=cmd_import)

    reset_parser = transactions_subparsers.add_parser(
        "reset", help="Delete all transactions and categories"
    )
    reset_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")
    reset_parser.set_defaults(func=cmd_reset)
