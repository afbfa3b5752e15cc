"""Tests for report projections over a completed run."""

from datetime import date
from decimal import Decimal

import pytest

from retail_sales_sim.analyses import (
    RankedItem,
    build_comparison_report,
    daily_top_items,
    rank_top_items,
    summarize,
)
from retail_sales_sim.foundation import (
    DEFAULT_WINDOW_DAYS,
    REPORT_CATEGORIES,
    Product,
    ProductCatalog,
    TransactionAggregator,
)

DAY_1 = date(2024, 1, 1)
DAY_2 = date(2024, 1, 2)


@pytest.fixture
def catalog():
    return ProductCatalog.from_products(
        [
            Product(1, "Whole Milk", "Milk", Decimal("2.00")),
            Product(2, "Corn Flakes", "Cereal", Decimal("4.00")),
            Product(3, "Bananas", "Produce", Decimal("0.50")),
        ]
    )


@pytest.fixture
def aggregator(catalog):
    agg = TransactionAggregator(catalog, {"Milk": 0.5, "Cereal": 0.25}, 2.0)
    agg.record_customers(DAY_1, 4)
    agg.record_customers(DAY_2, 6)
    for day, sku, price in [
        (DAY_1, 3, "0.50"),
        (DAY_1, 1, "2.00"),
        (DAY_1, 1, "2.00"),
        (DAY_2, 2, "4.00"),
        (DAY_2, 3, "0.50"),
        (DAY_2, 99, "1.00"),
    ]:
        agg.record_transaction(day, 1, 1, sku, Decimal(price))
    return agg


class TestRanking:
    """Test top-N item projections."""

    def test_rank_top_items(self, aggregator, catalog):
        ranked = rank_top_items(aggregator, catalog, 2)
        assert ranked == [
            RankedItem(rank=1, sku=3, count=2, name="Bananas"),
            RankedItem(rank=2, sku=1, count=2, name="Whole Milk"),
        ]

    def test_unknown_sku_named_unknown(self, aggregator, catalog):
        ranked = rank_top_items(aggregator, catalog, 10)
        assert len(ranked) == 4
        assert ranked[-1].sku == 99
        assert ranked[-1].name == "UNKNOWN"

    def test_daily_top_items_sorted_by_date(self, aggregator, catalog):
        daily = daily_top_items(aggregator, catalog, 1)
        assert list(daily) == [DAY_1, DAY_2]
        assert daily[DAY_1][0].sku == 1
        assert daily[DAY_2][0].sku == 2
        assert all(len(items) == 1 for items in daily.values())


class TestSummarize:
    """Test run summaries."""

    def test_totals_and_top_items(self, aggregator, catalog):
        summary = summarize(aggregator, catalog, 3)
        assert summary.total_customers == 10
        assert summary.total_items == 6
        assert summary.total_sales == Decimal("10.00")
        assert [item.rank for item in summary.top_items] == [1, 2, 3]

    def test_empty_run(self, catalog):
        summary = summarize(TransactionAggregator(catalog), catalog)
        assert summary.total_items == 0
        assert summary.total_sales == Decimal("0")
        assert summary.top_items == ()


class TestComparisonReport:
    """Test the windowed actual-vs-expected report."""

    def test_report_fields(self, aggregator):
        report = build_comparison_report(aggregator, window_days=14)
        assert report.window_days == 2
        assert report.probabilities == {"Milk": 0.5, "Cereal": 0.25}
        assert report.avg_customers_per_day == pytest.approx(5.0)
        assert report.avg_items_per_day == pytest.approx(3.0)
        assert report.total_items_in_window == 6
        # bananas are the only known non-special SKU
        assert (report.min_non_special, report.max_non_special) == (2, 2)

    def test_categories_in_report_order(self, aggregator):
        report = build_comparison_report(aggregator)
        assert tuple(s.category for s in report.actual) == REPORT_CATEGORIES
        assert tuple(s.category for s in report.expected) == REPORT_CATEGORIES

    def test_grand_totals(self, aggregator):
        report = build_comparison_report(aggregator)
        # the unknown SKU has no category and is left out of the grouping
        assert report.actual_grand_total == pytest.approx(2.5)
        assert report.expected_grand_total == pytest.approx(10.0)

    def test_default_window(self, aggregator):
        default = build_comparison_report(aggregator)
        explicit = build_comparison_report(aggregator, DEFAULT_WINDOW_DAYS)
        assert default == explicit

    def test_zero_window(self, aggregator):
        report = build_comparison_report(aggregator, window_days=0)
        assert report.window_days == 0
        assert report.total_items_in_window == 0
        assert report.actual_grand_total == 0.0
        assert report.expected_grand_total == 0.0
