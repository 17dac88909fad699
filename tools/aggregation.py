"""Reporting aggregates derived from a ledger snapshot.

Every function here is a pure function of the transactions (and, where noted,
the taxonomy) passed in. Nothing reads from or writes to the stores, so the
results can be recomputed on every read.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from errors import ValidationError
from interchange.fields import parse_date
from models.category import Category, Kind
from models.transaction import Transaction

logger = logging.getLogger(__name__)

PERIOD_FORMATS = {
    "month": "%Y.%m",
    "year": "%Y",
}

# Month-over-month increase above which a category is worth pointing out
NOTABLE_INCREASE_PERCENT = 20.0


@dataclass
class Totals:
    income: int
    expense: int
    balance: int


@dataclass
class BreakdownNode:
    """One group in the 관 → 항 → 목 breakdown.

    ``percentage`` is relative to the enclosing group; for 관 groups it is
    relative to the grand total of the kind.
    """

    label: str
    amount: int
    percentage: float
    children: List["BreakdownNode"] = field(default_factory=list)


@dataclass
class PeriodBucket:
    key: str
    income: int = 0
    expense: int = 0

    @property
    def balance(self) -> int:
        return self.income - self.expense


@dataclass
class DistributionEntry:
    label: str
    amount: int
    percentage: float


@dataclass
class DailyActivity:
    date: date
    count: int = 0
    amount: int = 0
    details: List[Tuple[str, int]] = field(default_factory=list)


@dataclass
class SpendingInsights:
    month: str
    previous_month: str
    total: int
    previous_total: int
    total_change: float
    top_increase: Optional[Tuple[str, float]] = None

    @property
    def has_notable_increase(self) -> bool:
        return (
            self.top_increase is not None
            and self.top_increase[1] > NOTABLE_INCREASE_PERCENT
        )


def percentage_of(amount: int, parent_amount: int) -> float:
    """Share of ``amount`` in ``parent_amount`` in percent; 0.0 for an empty parent."""
    if parent_amount == 0:
        return 0.0
    return amount / parent_amount * 100


def compute_totals(transactions: Iterable[Transaction]) -> Totals:
    """Sum income and expense and derive the balance."""
    income = 0
    expense = 0
    for t in transactions:
        if t.kind == Kind.INCOME:
            income += t.amount
        elif t.kind == Kind.EXPENSE:
            expense += t.amount
    return Totals(income=income, expense=expense, balance=income - expense)


def hierarchical_breakdown(
    transactions: Iterable[Transaction],
    kind: Kind,
    categories: Optional[Iterable[Category]] = None,
    depth: int = 2,
) -> List[BreakdownNode]:
    """Roll one kind's transactions up through 관 and 항 (and 목 at depth 3).

    Args:
        transactions: Ledger snapshot.
        kind: Which side of the ledger to break down.
        categories: Optional taxonomy. When given, groups appear in taxonomy
            order and empty groups are included with amount 0. Groups found
            only in the ledger follow in first-seen order.
        depth: 1 (관 only), 2 (관 → 항) or 3 (관 → 항 → 목).

    Returns:
        The 관 groups, each with nested children down to ``depth``.
    """
    if depth not in (1, 2, 3):
        raise ValueError(f"depth must be 1, 2 or 3, got {depth}")

    root: Dict[str, dict] = {}

    for category in categories or []:
        if category.kind == kind:
            _group_path(root, category.path[:depth])

    for t in transactions:
        if t.kind != kind:
            continue
        children = root
        for label in (t.level1, t.level2, t.level3)[:depth]:
            group = children.setdefault(label, {"amount": 0, "children": {}})
            group["amount"] += t.amount
            children = group["children"]

    grand_total = sum(group["amount"] for group in root.values())
    return _to_nodes(root, grand_total)


def _group_path(root: Dict[str, dict], path: Tuple[str, ...]) -> None:
    children = root
    for label in path:
        group = children.setdefault(label, {"amount": 0, "children": {}})
        children = group["children"]


def _to_nodes(groups: Dict[str, dict], parent_amount: int) -> List[BreakdownNode]:
    return [
        BreakdownNode(
            label=label,
            amount=group["amount"],
            percentage=percentage_of(group["amount"], parent_amount),
            children=_to_nodes(group["children"], group["amount"]),
        )
        for label, group in groups.items()
    ]


def period_summary(
    transactions: Iterable[Transaction], period: str = "month"
) -> List[PeriodBucket]:
    """Bucket income and expense by calendar month ("YYYY.MM") or year ("YYYY").

    Transactions whose date cannot be interpreted are skipped with a warning.

    Returns:
        Buckets sorted ascending by key.
    """
    if period not in PERIOD_FORMATS:
        raise ValueError(f"Unknown period: {period}")
    key_format = PERIOD_FORMATS[period]

    buckets: Dict[str, PeriodBucket] = {}
    for t in transactions:
        try:
            day = parse_date(t.date)
        except ValidationError:
            logger.warning(f"Skipping transaction {t.id} with invalid date {t.date!r}")
            continue

        key = day.strftime(key_format)
        bucket = buckets.setdefault(key, PeriodBucket(key=key))
        if t.kind == Kind.INCOME:
            bucket.income += t.amount
        else:
            bucket.expense += t.amount

    return [buckets[key] for key in sorted(buckets)]


def category_distribution(
    transactions: Iterable[Transaction], kind: Kind
) -> List[DistributionEntry]:
    """Share of each 관 in the kind's total, largest first."""
    amounts: Dict[str, int] = {}
    for t in transactions:
        if t.kind == kind:
            amounts[t.level1] = amounts.get(t.level1, 0) + t.amount

    total = sum(amounts.values())
    entries = [
        DistributionEntry(label=label, amount=amount, percentage=percentage_of(amount, total))
        for label, amount in amounts.items()
    ]
    # sorted() is stable, so equal amounts keep first-seen order
    return sorted(entries, key=lambda e: e.amount, reverse=True)


def daily_activity(
    transactions: Iterable[Transaction], kind: Optional[Kind] = None
) -> List[DailyActivity]:
    """Per-day transaction count, total amount and (관, amount) details.

    Args:
        transactions: Ledger snapshot.
        kind: Optionally restrict to income or expense.

    Returns:
        One entry per day with activity, oldest first.
    """
    days: Dict[date, DailyActivity] = {}
    for t in transactions:
        if kind is not None and t.kind != kind:
            continue
        try:
            day = parse_date(t.date)
        except ValidationError:
            logger.warning(f"Skipping transaction {t.id} with invalid date {t.date!r}")
            continue

        activity = days.setdefault(day, DailyActivity(date=day))
        activity.count += 1
        activity.amount += t.amount
        activity.details.append((t.level1, t.amount))

    return [days[day] for day in sorted(days)]


def spending_insights(
    transactions: Iterable[Transaction], today: date
) -> SpendingInsights:
    """Compare last month's expenses by 관 with the month before.

    For ``today`` in March, February is compared with January.

    Returns:
        Totals of both months, the overall change in percent (0.0 when the
        earlier month is empty) and the 관 with the largest increase among those
        that had spending in the earlier month.
    """
    month_start = today.replace(day=1) - relativedelta(months=1)
    previous_start = month_start - relativedelta(months=1)
    month_end = month_start + relativedelta(months=1)

    current: Dict[str, int] = {}
    previous: Dict[str, int] = {}
    for t in transactions:
        if t.kind != Kind.EXPENSE:
            continue
        if month_start <= t.date < month_end:
            current[t.level1] = current.get(t.level1, 0) + t.amount
        elif previous_start <= t.date < month_start:
            previous[t.level1] = previous.get(t.level1, 0) + t.amount

    top_increase = None
    for label, amount in current.items():
        prior = previous.get(label, 0)
        if prior <= 0:
            continue
        increase = (amount - prior) / prior * 100
        if increase > 0 and (top_increase is None or increase > top_increase[1]):
            top_increase = (label, increase)

    total = sum(current.values())
    previous_total = sum(previous.values())
    return SpendingInsights(
        month=month_start.strftime(PERIOD_FORMATS["month"]),
        previous_month=previous_start.strftime(PERIOD_FORMATS["month"]),
        total=total,
        previous_total=previous_total,
        total_change=percentage_of(total - previous_total, previous_total),
        top_increase=top_increase,
    )
