"""Report projections over a completed simulation.

Turns :class:`TransactionAggregator` state into ranked and grouped views:

- top-N items overall and per date;
- a run summary with totals;
- the windowed actual-vs-expected comparison by reporting category.

The projections only read the aggregator; every number comes from the
aggregator's own queries so the views stay consistent with its invariants.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Sequence

from retail_sales_sim.foundation.aggregator import (
    DEFAULT_WINDOW_DAYS,
    CategoryWindowStats,
    TransactionAggregator,
)
from retail_sales_sim.foundation.catalog import REPORT_CATEGORIES, ProductCatalog

UNKNOWN_PRODUCT_NAME = "UNKNOWN"
DEFAULT_TOP_N = 10


@dataclass(frozen=True)
class RankedItem:
    """One entry of a top-N ranking."""

    rank: int
    sku: int
    count: int
    name: str


@dataclass(frozen=True)
class SimulationSummary:
    """Totals of a run plus its best-selling items."""

    total_customers: int
    total_items: int
    total_sales: Decimal
    top_items: tuple[RankedItem, ...]


@dataclass(frozen=True)
class SalesComparisonReport:
    """Windowed actual-vs-expected sales by reporting category.

    Attributes
    ----------
    window_days:
        Number of active dates actually in the window (may be fewer than
        requested when the run has fewer active dates).
    probabilities:
        Marginal purchase probability per modelled category.
    avg_customers_per_day:
        Mean customers per window day.
    avg_items_per_day:
        Mean units sold per window day.
    min_non_special:
        Fewest units sold by a non-special SKU over the window.
    max_non_special:
        Most units sold by a non-special SKU over the window.
    actual:
        Observed statistics in :data:`REPORT_CATEGORIES` order.
    expected:
        Model-implied statistics in :data:`REPORT_CATEGORIES` order.
    total_items_in_window:
        Units sold over the window.
    """

    window_days: int
    probabilities: dict[str, float]
    avg_customers_per_day: float
    avg_items_per_day: float
    min_non_special: int
    max_non_special: int
    actual: tuple[CategoryWindowStats, ...]
    expected: tuple[CategoryWindowStats, ...]
    total_items_in_window: int

    @property
    def actual_grand_total(self) -> float:
        return sum(stats.avg_per_day for stats in self.actual)

    @property
    def expected_grand_total(self) -> float:
        return sum(stats.avg_per_day for stats in self.expected)


def _rank(
    counts: Sequence[tuple[int, int]], catalog: ProductCatalog
) -> list[RankedItem]:
    ranked = []
    for position, (sku, count) in enumerate(counts, start=1):
        product = catalog.product_by_sku(sku)
        name = product.name if product is not None else UNKNOWN_PRODUCT_NAME
        ranked.append(RankedItem(rank=position, sku=sku, count=count, name=name))
    return ranked


def rank_top_items(
    aggregator: TransactionAggregator,
    catalog: ProductCatalog,
    n: int = DEFAULT_TOP_N,
) -> list[RankedItem]:
    """Top ``n`` SKUs by units sold over the whole run."""
    return _rank(aggregator.top_n(n), catalog)


def daily_top_items(
    aggregator: TransactionAggregator,
    catalog: ProductCatalog,
    n: int = DEFAULT_TOP_N,
) -> dict[date, list[RankedItem]]:
    """Top ``n`` SKUs for each active date, in ascending date order."""
    return {
        day: _rank(aggregator.top_n_for_date(day, n), catalog)
        for day in sorted(aggregator.daily_sku_counts)
    }


def summarize(
    aggregator: TransactionAggregator,
    catalog: ProductCatalog,
    n: int = DEFAULT_TOP_N,
) -> SimulationSummary:
    return SimulationSummary(
        total_customers=aggregator.total_customers,
        total_items=aggregator.total_items,
        total_sales=aggregator.total_sales,
        top_items=tuple(rank_top_items(aggregator, catalog, n)),
    )


def build_comparison_report(
    aggregator: TransactionAggregator, window_days: int = DEFAULT_WINDOW_DAYS
) -> SalesComparisonReport:
    """Build the actual-vs-expected comparison over the first active dates.

    A window of size 0, or a run with no sales, produces an all-zero
    report rather than an error.
    """
    actual = aggregator.windowed_actual_average(window_days)
    expected = aggregator.windowed_expected_average(window_days)
    low, high = aggregator.min_max_non_special_in_window(window_days)
    return SalesComparisonReport(
        window_days=len(aggregator.window_dates(window_days)),
        probabilities=dict(aggregator.category_probabilities),
        avg_customers_per_day=aggregator.average_customers_per_day(window_days),
        avg_items_per_day=aggregator.average_items_per_day(window_days),
        min_non_special=low,
        max_non_special=high,
        actual=tuple(actual[category] for category in REPORT_CATEGORIES),
        expected=tuple(expected[category] for category in REPORT_CATEGORIES),
        total_items_in_window=aggregator.total_items_in_window(window_days),
    )
