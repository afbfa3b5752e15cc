"""Running and windowed statistics over the simulated transaction stream.

:class:`TransactionAggregator` folds every emitted transaction and every
daily customer count into running totals plus a per-date breakdown. After
the run it answers windowed queries over the first ``N`` active dates
(dates with at least one recorded transaction, in ascending order):

- actual per-day units by reporting category, from observed counts;
- expected per-day units by reporting category, derived analytically from
  the purchase probabilities and the window's average customer volume;
- the minimum and maximum units sold by any non-special SKU.

Both per-category views use the same :class:`CategoryWindowStats` shape so
that reports can compare them line by line.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from retail_sales_sim.foundation.catalog import (
    REPORT_CATEGORIES,
    SPECIAL_CATEGORIES,
    ProductCatalog,
    category_group,
)

logger = logging.getLogger(__name__)

#: Number of active dates covered by windowed statistics unless overridden.
DEFAULT_WINDOW_DAYS = 14


@dataclass(frozen=True)
class CategoryWindowStats:
    """Per-category statistics over a window.

    Attributes
    ----------
    category:
        Reporting bucket (a special category or ``"Other"``).
    total_units:
        Units sold in the window. For expected statistics this is the
        per-day expectation times the window length, rounded half up.
    avg_per_day:
        Mean units per window day.
    pct_of_total:
        Share of the grand total of ``avg_per_day`` across all buckets (0-100).
    item_count:
        Number of catalog SKUs in the bucket.
    per_item_avg:
        ``avg_per_day`` divided by ``item_count`` (0.0 when empty).
    """

    category: str
    total_units: int
    avg_per_day: float
    pct_of_total: float
    item_count: int
    per_item_avg: float

    def __post_init__(self) -> None:
        if self.total_units < 0:
            raise ValueError(f"Total units cannot be negative: {self.total_units}")
        if self.avg_per_day < 0:
            raise ValueError(f"Average per day cannot be negative: {self.avg_per_day}")


def _safe_div(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class TransactionAggregator:
    """Accumulate transactions and customer counts for one simulation run.

    Parameters
    ----------
    catalog:
        Product catalog used to map SKUs to reporting categories.
    category_probabilities:
        Marginal purchase probability of each modelled category, as baked
        into the purchase rules. Drives the expected statistics.
    avg_items_per_customer:
        Mean target basket size of the configured item range.
    """

    def __init__(
        self,
        catalog: ProductCatalog,
        category_probabilities: Mapping[str, float] | None = None,
        avg_items_per_customer: float = 0.0,
    ) -> None:
        self.catalog = catalog
        self.category_probabilities = dict(category_probabilities or {})
        self.avg_items_per_customer = float(avg_items_per_customer)

        self._total_customers = 0
        self._total_items = 0
        self._total_sales = Decimal("0")
        self._sku_counts: dict[int, int] = {}
        self._daily_sku_counts: dict[date, dict[int, int]] = {}
        self._daily_customers: dict[date, int] = {}

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def record_customers(self, day: date, count: int) -> None:
        """Add ``count`` customers to the run and to ``day``."""
        self._total_customers += count
        self._daily_customers[day] = self._daily_customers.get(day, 0) + count

    def record_transaction(
        self,
        day: date,
        store_id: int,
        customer_id: int,
        sku: int,
        price: Decimal | float,
    ) -> None:
        """Fold one sale into the running totals and the per-date counts.

        The price is added as-is; it was already rounded to cents when the
        sale was priced and is not re-rounded here.
        """
        if not isinstance(price, Decimal):
            price = Decimal(str(price))
        self._total_items += 1
        self._total_sales += price
        self._sku_counts[sku] = self._sku_counts.get(sku, 0) + 1
        day_counts = self._daily_sku_counts.setdefault(day, {})
        day_counts[sku] = day_counts.get(sku, 0) + 1

    def merge(self, other: TransactionAggregator) -> None:
        """Fold another aggregator's state into this one.

        Counts and sums are commutative, so shards produced by independent
        workers can be merged in any order with the same final totals.
        """
        self._total_customers += other._total_customers
        self._total_items += other._total_items
        self._total_sales += other._total_sales
        for sku, count in other._sku_counts.items():
            self._sku_counts[sku] = self._sku_counts.get(sku, 0) + count
        for day, counts in other._daily_sku_counts.items():
            target = self._daily_sku_counts.setdefault(day, {})
            for sku, count in counts.items():
                target[sku] = target.get(sku, 0) + count
        for day, count in other._daily_customers.items():
            self._daily_customers[day] = self._daily_customers.get(day, 0) + count

    # ------------------------------------------------------------------
    # Running totals
    # ------------------------------------------------------------------

    @property
    def total_customers(self) -> int:
        return self._total_customers

    @property
    def total_items(self) -> int:
        return self._total_items

    @property
    def total_sales(self) -> Decimal:
        return self._total_sales

    @property
    def sku_counts(self) -> Mapping[int, int]:
        return MappingProxyType(self._sku_counts)

    @property
    def daily_sku_counts(self) -> Mapping[date, Mapping[int, int]]:
        return MappingProxyType(
            {day: MappingProxyType(counts) for day, counts in self._daily_sku_counts.items()}
        )

    @property
    def daily_customers(self) -> Mapping[date, int]:
        return MappingProxyType(self._daily_customers)

    def top_n(self, n: int) -> list[tuple[int, int]]:
        """Return ``(sku, count)`` pairs ranked by descending count.

        Ties keep the order in which each SKU was first recorded (the sort
        is stable over insertion order). The result has exactly
        ``min(n, distinct SKUs)`` entries.
        """
        if n <= 0:
            return []
        ranked = sorted(self._sku_counts.items(), key=lambda item: -item[1])
        return ranked[:n]

    def top_n_for_date(self, day: date, n: int) -> list[tuple[int, int]]:
        """Same ranking as :meth:`top_n` restricted to a single date."""
        if n <= 0:
            return []
        counts = self._daily_sku_counts.get(day, {})
        return sorted(counts.items(), key=lambda item: -item[1])[:n]

    # ------------------------------------------------------------------
    # Window queries
    # ------------------------------------------------------------------

    def window_dates(self, window_days: int) -> list[date]:
        """First ``window_days`` active dates in ascending order."""
        if window_days <= 0:
            return []
        return sorted(self._daily_sku_counts)[:window_days]

    def average_customers_per_day(self, window_days: int) -> float:
        dates = self.window_dates(window_days)
        total = sum(self._daily_customers.get(day, 0) for day in dates)
        return _safe_div(total, len(dates))

    def total_items_in_window(self, window_days: int) -> int:
        return sum(
            sum(self._daily_sku_counts[day].values())
            for day in self.window_dates(window_days)
        )

    def average_items_per_day(self, window_days: int) -> float:
        dates = self.window_dates(window_days)
        return _safe_div(self.total_items_in_window(window_days), len(dates))

    def sku_counts_in_window(self, window_days: int) -> dict[int, int]:
        totals: dict[int, int] = {}
        for day in self.window_dates(window_days):
            for sku, count in self._daily_sku_counts[day].items():
                totals[sku] = totals.get(sku, 0) + count
        return totals

    def actual_average_per_sku(self, window_days: int) -> dict[int, float]:
        """Observed mean units per window day for each SKU sold in the window."""
        n = len(self.window_dates(window_days))
        return {
            sku: _safe_div(total, n)
            for sku, total in self.sku_counts_in_window(window_days).items()
        }

    def expected_average_per_sku(self, window_days: int) -> dict[int, float]:
        """Model-implied mean units per window day for every catalog SKU.

        Each modelled category contributes ``avg_customers * p`` spread
        evenly over its SKUs; whatever remains of
        ``avg_customers * avg_items_per_customer`` is spread evenly over
        every SKU in the catalog. Categories without SKUs contribute nothing.
        """
        avg_customers = self.average_customers_per_day(window_days)
        result: dict[int, float] = {}
        special_total = 0.0
        for category, probability in self.category_probabilities.items():
            skus = self.catalog.skus_by_category(category)
            if not skus:
                continue
            expected_total = avg_customers * probability
            special_total += expected_total
            per_sku = expected_total / len(skus)
            for sku in skus:
                result[sku] = result.get(sku, 0.0) + per_sku

        all_skus = self.catalog.all_skus()
        if all_skus:
            expected_items = avg_customers * self.avg_items_per_customer
            other_total = max(0.0, expected_items - special_total)
            per_sku = other_total / len(all_skus)
            for sku in all_skus:
                result[sku] = result.get(sku, 0.0) + per_sku
        return result

    def _group_by_category(self, per_sku: Mapping[int, float]) -> dict[str, float]:
        grouped = {category: 0.0 for category in REPORT_CATEGORIES}
        for sku, value in per_sku.items():
            product = self.catalog.product_by_sku(sku)
            if product is None:
                continue
            grouped[category_group(product.category)] += value
        return grouped

    def _build_stats(
        self, averages: Mapping[str, float], totals: Mapping[str, int]
    ) -> dict[str, CategoryWindowStats]:
        grand_total = sum(averages.values())
        stats: dict[str, CategoryWindowStats] = {}
        for category in REPORT_CATEGORIES:
            avg = averages.get(category, 0.0)
            item_count = self.catalog.item_count(category)
            stats[category] = CategoryWindowStats(
                category=category,
                total_units=totals.get(category, 0),
                avg_per_day=avg,
                pct_of_total=_safe_div(avg, grand_total) * 100.0,
                item_count=item_count,
                per_item_avg=_safe_div(avg, item_count),
            )
        return stats

    def windowed_actual_average(self, window_days: int) -> dict[str, CategoryWindowStats]:
        """Observed per-category statistics over the window."""
        averages = self._group_by_category(self.actual_average_per_sku(window_days))
        totals = {category: 0 for category in REPORT_CATEGORIES}
        for sku, count in self.sku_counts_in_window(window_days).items():
            product = self.catalog.product_by_sku(sku)
            if product is None:
                continue
            totals[category_group(product.category)] += count
        return self._build_stats(averages, totals)

    def windowed_expected_average(
        self, window_days: int
    ) -> dict[str, CategoryWindowStats]:
        """Model-implied per-category statistics over the window."""
        n = len(self.window_dates(window_days))
        if n == 0:
            logger.debug("Expected statistics requested for an empty window")
        averages = self._group_by_category(self.expected_average_per_sku(window_days))
        totals = {category: _round_half_up(avg * n) for category, avg in averages.items()}
        return self._build_stats(averages, totals)

    def min_max_non_special_in_window(self, window_days: int) -> tuple[int, int]:
        """Smallest and largest window unit count among non-special SKUs.

        Only SKUs sold at least once in the window are considered. Returns
        ``(0, 0)`` when no non-special SKU sold in the window.
        """
        counts = []
        for sku, count in self.sku_counts_in_window(window_days).items():
            product = self.catalog.product_by_sku(sku)
            if product is None or product.category in SPECIAL_CATEGORIES:
                continue
            counts.append(count)
        if not counts:
            return 0, 0
        return min(counts), max(counts)
