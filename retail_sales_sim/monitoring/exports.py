"""Export simulation results to various formats.

This module writes run summaries, item rankings, actual-vs-expected
comparisons and the per-customer sanity-check records to JSON, CSV and
plain-text files for dashboards and audit trails.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Mapping, Sequence

import pandas as pd

from retail_sales_sim.analyses.report import (
    RankedItem,
    SalesComparisonReport,
    SimulationSummary,
)
from retail_sales_sim.foundation.aggregator import CategoryWindowStats
from retail_sales_sim.pandas.report import comparison_to_dataframe
from retail_sales_sim.synthetic.customer_summary import CustomerSummaryCollector

logger = logging.getLogger(__name__)

RULE = "-" * 53
BANNER = "=" * 53
TABLE_HEADER = "Type,Total Sales,Avg Sales Per Day,% Total,# Items in Type,Sales Per Item"


def _prepare(output_path: str | Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def _ranked_payload(items: Sequence[RankedItem]) -> list[dict[str, object]]:
    return [
        {"rank": item.rank, "sku": item.sku, "count": item.count, "name": item.name}
        for item in items
    ]


def export_summary_json(summary: SimulationSummary, output_path: str | Path) -> None:
    """Export run totals to JSON.

    Parameters
    ----------
    summary:
        Run summary to export
    output_path:
        Path where JSON file will be saved

    Examples
    --------
    >>> export_summary_json(summarize(aggregator, catalog), "out/summary.json")
    """
    output_path = _prepare(output_path)
    payload = {
        "totalCustomers": summary.total_customers,
        "totalItems": summary.total_items,
        "totalSales": float(summary.total_sales),
    }
    with open(output_path, "w") as f:
        json.dump(payload, f, indent=2)

    logger.info(f"Summary exported to {output_path}")


def export_top_items_json(items: Sequence[RankedItem], output_path: str | Path) -> None:
    """Export a top-N ranking as a JSON list of ``rank, sku, count, name``."""
    output_path = _prepare(output_path)
    with open(output_path, "w") as f:
        json.dump(_ranked_payload(items), f, indent=2)

    logger.info(f"Top items exported to {output_path}")


def export_daily_top_items_json(
    daily: Mapping[date, Sequence[RankedItem]], output_path: str | Path
) -> None:
    """Export per-date rankings as a JSON object keyed by ISO date."""
    output_path = _prepare(output_path)
    payload = {day.isoformat(): _ranked_payload(items) for day, items in daily.items()}
    with open(output_path, "w") as f:
        json.dump(payload, f, indent=2)

    logger.info(f"Daily top items exported to {output_path} ({len(payload)} dates)")


def _category_line(stats: CategoryWindowStats) -> str:
    return (
        f"{stats.category},{stats.total_units},{stats.avg_per_day:.2f},"
        f"{stats.pct_of_total:.2f}%,{stats.item_count},{stats.per_item_avg:.2f}"
    )


def format_comparison_report(report: SalesComparisonReport) -> str:
    """Render the comparison report as sectioned comma-separated text."""
    lines = [
        BANNER,
        "                SALES COMPARISON REPORT",
        BANNER,
        "",
        "Probabilities of Each Item Type",
        RULE,
        "Type,Probability",
    ]
    for category, probability in report.probabilities.items():
        lines.append(f"{category},{probability * 100:.1f}%")
    lines.extend(
        [
            RULE,
            f"Actual Avg Customers per day,{report.avg_customers_per_day:.2f}",
            f"Actual Avg Sales per day,{report.avg_items_per_day:.2f}",
            f"Minimum # products sold, non-special sku, {report.window_days} days,"
            f"{report.min_non_special}",
            f"Maximum # products sold, non-special sku, {report.window_days} days,"
            f"{report.max_non_special}",
            "",
            "Average Sales Per Day (Actual)",
            RULE,
            TABLE_HEADER,
        ]
    )
    lines.extend(_category_line(stats) for stats in report.actual)
    lines.extend(["", "Average Predicted Sales Per Day", RULE, TABLE_HEADER])
    lines.extend(_category_line(stats) for stats in report.expected)
    lines.extend(["", f"Total sales,{report.total_items_in_window}"])
    return "\n".join(lines) + "\n"


def export_comparison_report(
    report: SalesComparisonReport, output_path: str | Path
) -> None:
    """Write the actual-vs-expected comparison report as text."""
    output_path = _prepare(output_path)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(format_comparison_report(report))

    logger.info(f"Comparison report exported to {output_path}")


def export_category_stats_csv(
    report: SalesComparisonReport, output_path: str | Path
) -> None:
    """Export the side-by-side category comparison as a flat CSV."""
    output_path = _prepare(output_path)
    comparison_to_dataframe(report).to_csv(output_path, index=False)

    logger.info(f"Category statistics exported to {output_path}")


def export_customer_summaries_csv(
    collector: CustomerSummaryCollector, output_path: str | Path
) -> None:
    """Export one row per customer visit with a flag per special category."""
    output_path = _prepare(output_path)
    df = pd.DataFrame([summary.as_row() for summary in collector.summaries()])
    df.to_csv(output_path, index=False)

    logger.info(f"Customer summaries exported to {output_path} ({len(df)} rows)")
