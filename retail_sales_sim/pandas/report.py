"""Pandas DataFrame adapters for aggregator state and report projections."""

from typing import Iterable, Sequence

import pandas as pd  # type: ignore

from retail_sales_sim.analyses.report import (
    RankedItem,
    SalesComparisonReport,
    SimulationSummary,
)
from retail_sales_sim.foundation.aggregator import (
    CategoryWindowStats,
    TransactionAggregator,
)
from ._utils import decimal_to_float

CATEGORY_COLUMNS = [
    "category",
    "total_units",
    "avg_per_day",
    "pct_of_total",
    "item_count",
    "per_item_avg",
]


def category_stats_to_dataframe(stats: Iterable[CategoryWindowStats]) -> pd.DataFrame:
    """Convert category window statistics to one row per category.

    Example:
        >>> actual = aggregator.windowed_actual_average(14)
        >>> df = category_stats_to_dataframe(actual.values())
        >>> df.set_index("category").loc["Milk", "avg_per_day"]
    """
    rows = [
        {
            "category": item.category,
            "total_units": item.total_units,
            "avg_per_day": item.avg_per_day,
            "pct_of_total": item.pct_of_total,
            "item_count": item.item_count,
            "per_item_avg": item.per_item_avg,
        }
        for item in stats
    ]
    return pd.DataFrame(rows, columns=CATEGORY_COLUMNS)


def comparison_to_dataframe(report: SalesComparisonReport) -> pd.DataFrame:
    """Side-by-side actual and expected statistics, one row per category.

    Columns are prefixed with ``actual_`` and ``expected_`` except for
    ``category`` and ``item_count``, which both sides share.
    """
    actual = category_stats_to_dataframe(report.actual).set_index("category")
    expected = category_stats_to_dataframe(report.expected).set_index("category")
    item_count = actual.pop("item_count")
    expected = expected.drop(columns=["item_count"])
    merged = actual.add_prefix("actual_").join(expected.add_prefix("expected_"))
    merged.insert(0, "item_count", item_count)
    return merged.reset_index()


def daily_sku_counts_to_dataframe(aggregator: TransactionAggregator) -> pd.DataFrame:
    """Long-form ``date, sku, count`` frame sorted by date then SKU."""
    rows = [
        {"date": day, "sku": sku, "count": count}
        for day, counts in aggregator.daily_sku_counts.items()
        for sku, count in counts.items()
    ]
    frame = pd.DataFrame(rows, columns=["date", "sku", "count"])
    return frame.sort_values(["date", "sku"], ignore_index=True)


def ranked_items_to_dataframe(items: Sequence[RankedItem]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"rank": item.rank, "sku": item.sku, "count": item.count, "name": item.name}
            for item in items
        ],
        columns=["rank", "sku", "count", "name"],
    )


def summary_to_dataframe(summary: SimulationSummary) -> pd.DataFrame:
    """Convert a run summary to a single-row DataFrame."""
    return pd.DataFrame(
        [
            {
                "total_customers": summary.total_customers,
                "total_items": summary.total_items,
                "total_sales": decimal_to_float(summary.total_sales),
            }
        ]
    )
