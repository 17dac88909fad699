#!/usr/bin/env python3

import argparse
import sys
from pathlib import Path

from errors import ImportFormatError
from interchange import categories as category_csv
from logger import get_logger
from models.category import Category, Kind

logger = get_logger()

_KIND_ALIASES = {
    "수입": Kind.INCOME,
    "income": Kind.INCOME,
    "지출": Kind.EXPENSE,
    "expense": Kind.EXPENSE,
}


def kind_argument(value: str) -> Kind:
    """argparse type for 유형: accepts 수입/지출 or income/expense."""
    try:
        return _KIND_ALIASES[value.strip().lower()]
    except KeyError:
        raise argparse.ArgumentTypeError(
            f"Invalid kind '{value}'. Use 수입/지출 (or income/expense)."
        )


def _category_from_args(args) -> Category:
    return Category(
        kind=args.kind, level1=args.level1, level2=args.level2, level3=args.level3
    )


def _format_category(category: Category) -> str:
    return f"{category.kind.value} > {category.level1} > {category.level2} > {category.level3}"


def cmd_list(args, services):
    """List categories, optionally for one kind."""
    if args.kind:
        categories = services.categories.find_by_kind(args.kind)
    else:
        categories = services.categories.find_all()

    if not categories:
        logger.info("No categories found.")
        return

    for category in categories:
        logger.info(_format_category(category))
    logger.info(f"\nTotal categories: {len(categories)}")


def cmd_tree(args, services):
    """Show one kind's categories grouped by 관 and 항."""
    tree = services.categories.tree(args.kind)
    if not tree:
        logger.info(f"No {args.kind.value} categories found.")
        return

    logger.info(f"{args.kind.value}")
    for position, (level1, level2_groups) in enumerate(tree.items(), start=1):
        logger.info(f"{position}. {level1}")
        for level2, level3_labels in level2_groups.items():
            logger.info(f"    {level2}: {', '.join(level3_labels)}")


def cmd_add(args, services):
    """Add a category."""
    category = services.categories.add(_category_from_args(args))
    logger.info(f"✓ Category added: {_format_category(category)}")


def cmd_edit(args, services):
    """Replace a category with a new (kind, 관, 항, 목)."""
    old = _category_from_args(args)
    new = Category(
        kind=args.new_kind or old.kind,
        level1=args.new_level1 or old.level1,
        level2=args.new_level2 or old.level2,
        level3=args.new_level3 or old.level3,
    )

    new = services.categories.validate(new, editing=old)
    if services.categories.update(old, new):
        logger.info(f"✓ Category updated: {_format_category(new)}")
    else:
        logger.error(f"Category not found: {_format_category(old)}")
        sys.exit(1)


def cmd_delete(args, services):
    """Delete a category. Transactions filed under it are kept."""
    category = _category_from_args(args)
    if not services.categories.exists(category):
        logger.error(f"Category not found: {_format_category(category)}")
        sys.exit(1)

    if not args.yes:
        confirm = (
            input(f"Delete '{_format_category(category)}'? (yes/no): ").strip().lower()
        )
        if confirm != "yes":
            logger.info("Deletion cancelled.")
            return

    services.categories.delete(category)
    logger.info(f"✓ Category '{_format_category(category)}' deleted.")


def cmd_move_up(args, services):
    if services.categories.move_up(args.level1, args.kind):
        logger.info(f"✓ Moved '{args.level1}' up")
    else:
        logger.info(f"'{args.level1}' cannot move up")


def cmd_move_down(args, services):
    if services.categories.move_down(args.level1, args.kind):
        logger.info(f"✓ Moved '{args.level1}' down")
    else:
        logger.info(f"'{args.level1}' cannot move down")


def cmd_export(args, services):
    """Export categories to a CSV file."""
    output = Path(args.output) if args.output else (
        services.config.export_dir / "categories.csv"
    )
    output.parent.mkdir(parents=True, exist_ok=True)

    categories = services.categories.find_all()
    output.write_text(category_csv.encode(categories), encoding="utf-8-sig")
    logger.info(f"✓ Exported {len(categories)} categories to {output}")


def cmd_import(args, services):
    """Replace the taxonomy with the categories in a CSV file."""
    csv_path = Path(args.csv_file)
    if not csv_path.exists():
        logger.error(f"File not found: {args.csv_file}")
        sys.exit(1)

    try:
        categories = category_csv.decode(csv_path.read_text(encoding="utf-8-sig"))
    except ImportFormatError as e:
        logger.error(f"Import failed: {e}")
        sys.exit(1)

    count = services.categories.replace_all(categories)
    logger.info(f"✓ Imported {count} categories")


def _add_category_arguments(parser):
    parser.add_argument("kind", type=kind_argument, help="수입 or 지출")
    parser.add_argument("level1", help="관")
    parser.add_argument("level2", help="항")
    parser.add_argument("level3", help="목")


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage the category taxonomy",
        description="Add, edit, delete, reorder, export and import categories",
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    list_parser = categories_subparsers.add_parser("list", help="List categories")
    list_parser.add_argument("--kind", type=kind_argument, help="Only this kind")
    list_parser.set_defaults(func=cmd_list)

    tree_parser = categories_subparsers.add_parser(
        "tree", help="Show categories grouped by 관 and 항"
    )
    tree_parser.add_argument("kind", type=kind_argument, help="수입 or 지출")
    tree_parser.set_defaults(func=cmd_tree)

    add_parser = categories_subparsers.add_parser("add", help="Add a category")
    _add_category_arguments(add_parser)
    add_parser.set_defaults(func=cmd_add)

    edit_parser = categories_subparsers.add_parser(
        "edit", help="Change a category's kind or labels"
    )
    _add_category_arguments(edit_parser)
    edit_parser.add_argument("--new-kind", type=kind_argument, dest="new_kind")
    edit_parser.add_argument("--new-level1", dest="new_level1", help="New 관")
    edit_parser.add_argument("--new-level2", dest="new_level2", help="New 항")
    edit_parser.add_argument("--new-level3", dest="new_level3", help="New 목")
    edit_parser.set_defaults(func=cmd_edit)

    delete_parser = categories_subparsers.add_parser("delete", help="Delete a category")
    _add_category_arguments(delete_parser)
    delete_parser.add_argument(
        "-y", "--yes", action="store_true", help="Skip confirmation"
    )
    delete_parser.set_defaults(func=cmd_delete)

    for name, func, help_text in (
        ("move-up", cmd_move_up, "Move a 관 group one position up"),
        ("move-down", cmd_move_down, "Move a 관 group one position down"),
    ):
        move_parser = categories_subparsers.add_parser(name, help=help_text)
        move_parser.add_argument("kind", type=kind_argument, help="수입 or 지출")
        move_parser.add_argument("level1", help="관 to move")
        move_parser.set_defaults(func=func)

    export_parser = categories_subparsers.add_parser(
        "export", help="Export categories to CSV"
    )
    export_parser.add_argument("-o", "--output", help="Output file path")
    export_parser.set_defaults(func=cmd_export)

    import_parser = categories_subparsers.add_parser(
        "import", help="Replace categories from a CSV file"
    )
    import_parser.add_argument("csv_file", help="Path to a 유형,관,항,목 CSV file")
    import_parser.set_defaults(func=cmd_import)

