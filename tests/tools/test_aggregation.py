from datetime import date

import pytest

from models.category import Category, Kind
from tests.helpers import make_transaction
from tools.aggregation import (
    category_distribution,
    compute_totals,
    daily_activity,
    hierarchical_breakdown,
    percentage_of,
    period_summary,
    spending_insights,
)


def salary(amount=3000000, on=date(2024, 1, 25)):
    return make_transaction(
        kind=Kind.INCOME,
        level1="급여",
        level2="월급",
        level3="정액",
        amount=amount,
        on=on,
    )


@pytest.fixture
def ledger():
    return [
        make_transaction(amount=12000, on=date(2024, 1, 10)),
        make_transaction(level2="장보기", level3="채소", amount=8000, on=date(2024, 1, 12)),
        make_transaction(level1="교통비", level2="대중교통", level3="버스", amount=5000, on=date(2024, 2, 1)),
        make_transaction(level3="저녁", amount=15000, on=date(2024, 2, 3)),
        salary(),
    ]


class TestComputeTotals:
    """Tests for compute_totals function."""

    def test_single_expense(self):
        """Test the single lunch expense case."""
        totals = compute_totals([make_transaction(amount=12000)])

        assert totals.expense == 12000
        assert totals.income == 0
        assert totals.balance == -12000

    def test_income_and_expense(self, ledger):
        totals = compute_totals(ledger)

        assert totals.income == 3000000
        assert totals.expense == 40000
        assert totals.balance == totals.income - totals.expense

    def test_empty_ledger(self):
        totals = compute_totals([])

        assert (totals.income, totals.expense, totals.balance) == (0, 0, 0)


class TestHierarchicalBreakdown:
    """Tests for hierarchical_breakdown function."""

    def test_single_expense_is_whole_total(self):
        """Test that one 식비 lunch is 100% of the expense total."""
        categories = [
            Category(Kind.INCOME, "급여", "월급", "정액"),
            Category(Kind.EXPENSE, "식비", "외식", "점심"),
        ]

        nodes = hierarchical_breakdown(
            [make_transaction(amount=12000)], Kind.EXPENSE, categories
        )

        assert len(nodes) == 1
        assert nodes[0].label == "식비"
        assert nodes[0].amount == 12000
        assert nodes[0].percentage == 100.0

    def test_children_sum_to_parent(self, ledger):
        nodes = hierarchical_breakdown(ledger, Kind.EXPENSE, depth=3)

        assert sum(n.amount for n in nodes) == compute_totals(ledger).expense
        for node in nodes:
            assert sum(child.amount for child in node.children) == node.amount
            for child in node.children:
                assert sum(leaf.amount for leaf in child.children) == child.amount

    def test_percentages_relative_to_parent(self, ledger):
        nodes = hierarchical_breakdown(ledger, Kind.EXPENSE)
        food = nodes[0]

        assert food.label == "식비"
        assert food.amount == 35000
        assert food.percentage == pytest.approx(87.5)
        assert [(c.label, c.amount) for c in food.children] == [("외식", 27000), ("장보기", 8000)]
        assert food.children[0].percentage == pytest.approx(27000 / 35000 * 100)
        assert sum(n.percentage for n in nodes) == pytest.approx(100.0)

    def test_depth_one_has_no_children(self, ledger):
        nodes = hierarchical_breakdown(ledger, Kind.EXPENSE, depth=1)

        assert all(node.children == [] for node in nodes)

    def test_depth_two_stops_at_level2(self, ledger):
        nodes = hierarchical_breakdown(ledger, Kind.EXPENSE)

        assert all(child.children == [] for node in nodes for child in node.children)

    def test_empty_taxonomy_group_has_zero_percent(self):
        """Test that a group without spending has 0% and its children too."""
        categories = [
            Category(Kind.EXPENSE, "주거비", "공과금", "전기세"),
            Category(Kind.EXPENSE, "식비", "외식", "점심"),
        ]

        nodes = hierarchical_breakdown([make_transaction()], Kind.EXPENSE, categories)

        assert [n.label for n in nodes] == ["주거비", "식비"]
        housing = nodes[0]
        assert housing.amount == 0
        assert housing.percentage == 0.0
        assert housing.children[0].percentage == 0.0

    def test_no_transactions_of_kind(self, ledger):
        nodes = hierarchical_breakdown(
            ledger, Kind.INCOME, [Category(Kind.INCOME, "금융소득", "이자수입", "예금이자")]
        )

        assert [(n.label, n.percentage) for n in nodes] == [("금융소득", 0.0), ("급여", 100.0)]

    def test_invalid_depth_raises(self):
        with pytest.raises(ValueError, match="depth"):
            hierarchical_breakdown([], Kind.EXPENSE, depth=4)


class TestPeriodSummary:
    """Tests for period_summary function."""

    def test_monthly_buckets_sorted_ascending(self, ledger):
        buckets = period_summary(reversed(ledger))

        assert [b.key for b in buckets] == ["2024.01", "2024.02"]
        assert buckets[0].expense == 20000
        assert buckets[0].income == 3000000
        assert buckets[1].expense == 20000
        assert buckets[1].balance == -20000

    def test_buckets_sum_to_totals(self, ledger):
        buckets = period_summary(ledger)
        totals = compute_totals(ledger)

        assert sum(b.income for b in buckets) == totals.income
        assert sum(b.expense for b in buckets) == totals.expense

    def test_yearly_buckets(self, ledger):
        ledger.append(make_transaction(on=date(2023, 12, 31)))

        assert [b.key for b in period_summary(ledger, period="year")] == ["2023", "2024"]

    def test_accepts_string_dates(self):
        transaction = make_transaction().with_changes(date="2024.03.05")

        assert [b.key for b in period_summary([transaction])] == ["2024.03"]

    def test_skips_unreadable_dates(self):
        good = make_transaction()
        bad = make_transaction().with_changes(date="someday")

        assert [b.key for b in period_summary([bad, good])] == ["2024.01"]

    def test_unknown_period_raises(self):
        with pytest.raises(ValueError, match="Unknown period"):
            period_summary([], period="week")


class TestCategoryDistribution:
    """Tests for category_distribution function."""

    def test_sorted_descending(self, ledger):
        entries = category_distribution(ledger, Kind.EXPENSE)

        assert [(e.label, e.amount) for e in entries] == [("식비", 35000), ("교통비", 5000)]
        assert entries[0].percentage == pytest.approx(87.5)
        assert sum(e.percentage for e in entries) == pytest.approx(100.0)

    def test_ties_keep_first_seen_order(self):
        transactions = [
            make_transaction(level1="B", amount=100),
            make_transaction(level1="A", amount=100),
        ]

        assert [e.label for e in category_distribution(transactions, Kind.EXPENSE)] == ["B", "A"]

    def test_empty(self):
        assert category_distribution([], Kind.EXPENSE) == []


class TestDailyActivity:
    """Tests for daily_activity function."""

    def test_groups_by_day_oldest_first(self, ledger):
        ledger.append(make_transaction(level1="교통비", amount=1500, on=date(2024, 1, 10)))

        days = daily_activity(ledger, Kind.EXPENSE)

        assert [d.date for d in days] == [
            date(2024, 1, 10),
            date(2024, 1, 12),
            date(2024, 2, 1),
            date(2024, 2, 3),
        ]
        assert days[0].count == 2
        assert days[0].amount == 13500
        assert days[0].details == [("식비", 12000), ("교통비", 1500)]

    def test_without_kind_includes_income(self, ledger):
        days = daily_activity(ledger)

        assert date(2024, 1, 25) in [d.date for d in days]


class TestSpendingInsights:
    """Tests for spending_insights function."""

    def test_compares_last_two_full_months(self):
        transactions = [
            make_transaction(amount=10000, on=date(2024, 1, 5)),
            make_transaction(level1="교통비", amount=5000, on=date(2024, 1, 6)),
            make_transaction(amount=15000, on=date(2024, 2, 5)),
            make_transaction(level1="교통비", amount=5500, on=date(2024, 2, 6)),
            make_transaction(amount=99999, on=date(2024, 3, 1)),
            salary(on=date(2024, 2, 25)),
        ]

        insights = spending_insights(transactions, today=date(2024, 3, 15))

        assert insights.month == "2024.02"
        assert insights.previous_month == "2024.01"
        assert insights.total == 20500
        assert insights.previous_total == 15000
        assert insights.total_change == pytest.approx(5500 / 15000 * 100)
        assert insights.top_increase[0] == "식비"
        assert insights.top_increase[1] == pytest.approx(50.0)
        assert insights.has_notable_increase

    def test_year_boundary(self):
        insights = spending_insights([], today=date(2024, 1, 20))

        assert insights.month == "2023.12"
        assert insights.previous_month == "2023.11"

    def test_new_category_is_not_an_increase(self):
        """Test that a 관 with no spending the month before is ignored."""
        transactions = [make_transaction(amount=5000, on=date(2024, 2, 5))]

        insights = spending_insights(transactions, today=date(2024, 3, 1))

        assert insights.top_increase is None
        assert insights.total_change == 0.0
        assert not insights.has_notable_increase

    def test_small_increase_is_not_notable(self):
        transactions = [
            make_transaction(amount=10000, on=date(2024, 1, 5)),
            make_transaction(amount=11000, on=date(2024, 2, 5)),
        ]

        insights = spending_insights(transactions, today=date(2024, 3, 1))

        assert insights.top_increase[1] == pytest.approx(10.0)
        assert not insights.has_notable_increase


def test_percentage_of_zero_parent():
    assert percentage_of(0, 0) == 0.0
    assert percentage_of(50, 200) == 25.0
