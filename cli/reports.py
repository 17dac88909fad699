#!/usr/bin/env python3

from datetime import date

from cli.categories import kind_argument
from interchange.fields import format_amount
from logger import get_logger
from models.category import Kind
from tools.aggregation import (
    category_distribution,
    compute_totals,
    hierarchical_breakdown,
    period_summary,
    spending_insights,
)

logger = get_logger()


def cmd_summary(args, services):
    """Show total income, expense and balance."""
    totals = compute_totals(services.transactions.find_all())
    logger.info(f"수입: {format_amount(totals.income)}원")
    logger.info(f"지출: {format_amount(totals.expense)}원")
    logger.info(f"잔액: {format_amount(totals.balance)}원")


def _log_nodes(nodes, indent: int = 0):
    for node in nodes:
        logger.info(
            f"{'    ' * indent}{node.label}: {format_amount(node.amount)}원 "
            f"({node.percentage:.1f}%)"
        )
        _log_nodes(node.children, indent + 1)


def cmd_breakdown(args, services):
    """Show amounts rolled up through 관, 항 (and 목)."""
    taxonomy = services.categories.find_all() if args.with_empty else None
    nodes = hierarchical_breakdown(
        services.transactions.find_all(), args.kind, categories=taxonomy, depth=args.depth
    )
    if not nodes:
        logger.info(f"No {args.kind.value} transactions found.")
        return
    _log_nodes(nodes)


def cmd_periods(args, services):
    """Show income, expense and balance per month or year."""
    buckets = period_summary(services.transactions.find_all(), period=args.period)
    if not buckets:
        logger.info("No transactions found.")
        return

    for bucket in buckets:
        logger.info(
            f"{bucket.key}  수입 {format_amount(bucket.income)}  "
            f"지출 {format_amount(bucket.expense)}  잔액 {format_amount(bucket.balance)}"
        )


def cmd_distribution(args, services):
    """Show each 관's share of the kind's total, largest first."""
    entries = category_distribution(services.transactions.find_all(), args.kind)
    if not entries:
        logger.info(f"No {args.kind.value} transactions found.")
        return

    for entry in entries:
        logger.info(
            f"{entry.label}: {format_amount(entry.amount)}원 ({entry.percentage:.1f}%)"
        )


def cmd_insights(args, services):
    """Compare last month's spending with the month before."""
    insights = spending_insights(services.transactions.find_all(), date.today())

    logger.info(
        f"{insights.month} 지출 {format_amount(insights.total)}원 "
        f"({insights.previous_month} 대비 {insights.total_change:+.1f}%)"
    )
    if insights.has_notable_increase:
        label, increase = insights.top_increase
        logger.info(f"{label} 지출이 전월 대비 {round(increase)}% 증가했습니다.")


def setup_parser(subparsers):
    """Setup reports subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "reports",
        help="Ledger statistics",
        description="Totals, breakdowns and period summaries of the ledger",
    )

    reports_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available reports",
        dest="subcommand",
        required=True,
    )

    summary_parser = reports_subparsers.add_parser(
        "summary", help="Total income, expense and balance"
    )
    summary_parser.set_defaults(func=cmd_summary)

    breakdown_parser = reports_subparsers.add_parser(
        "breakdown", help="Amounts by 관 and 항"
    )
    breakdown_parser.add_argument(
        "kind", type=kind_argument, nargs="?", default=Kind.EXPENSE
    )
    breakdown_parser.add_argument("--depth", type=int, choices=[1, 2, 3], default=2)
    breakdown_parser.add_argument(
        "--with-empty",
        action="store_true",
        help="Include taxonomy groups with no transactions, in taxonomy order",
    )
    breakdown_parser.set_defaults(func=cmd_breakdown)

    periods_parser = reports_subparsers.add_parser(
        "periods", help="Income and expense per month or year"
    )
    periods_parser.add_argument("--period", choices=["month", "year"], default="month")
    periods_parser.set_defaults(func=cmd_periods)

    distribution_parser = reports_subparsers.add_parser(
        "distribution", help="Share of each 관"
    )
    distribution_parser.add_argument(
        "kind", type=kind_argument, nargs="?", default=Kind.EXPENSE
    )
    distribution_parser.set_defaults(func=cmd_distribution)

    insights_parser = reports_subparsers.add_parser(
        "insights", help="Month-over-month spending changes"
    )
    insights_parser.set_defaults(func=cmd_insights)
