"""Markdown table formatters for simulation results.

Formats run summaries and actual-vs-expected comparisons as markdown tables
suitable for terminals and markdown renderers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from retail_sales_sim.analyses.report import SalesComparisonReport, SimulationSummary
    from retail_sales_sim.foundation.aggregator import CategoryWindowStats


def format_summary_table(summary: SimulationSummary) -> str:
    """Format run totals and the top items as markdown tables.

    Parameters
    ----------
    summary:
        Run summary from :func:`retail_sales_sim.analyses.summarize`

    Returns
    -------
    str:
        Markdown-formatted totals and ranking

    Examples
    --------
    >>> from decimal import Decimal
    >>> from retail_sales_sim.analyses.report import RankedItem, SimulationSummary
    >>> summary = SimulationSummary(
    ...     total_customers=5,
    ...     total_items=5,
    ...     total_sales=Decimal("10.00"),
    ...     top_items=(RankedItem(1, 101, 5, "Whole Milk"),),
    ... )
    >>> print(format_summary_table(summary))
    """
    table = f"""## Simulation Summary

| Metric | Value |
|--------|-------|
| Total Customers | {summary.total_customers:,} |
| Total Items | {summary.total_items:,} |
| Total Sales | ${summary.total_sales:,.2f} |
"""

    if summary.top_items:
        table += f"\n### Top {len(summary.top_items)} Items (by count)\n\n"
        table += "| Rank | SKU | Count | Name |\n"
        table += "|------|-----|-------|------|\n"
        for item in summary.top_items:
            table += f"| {item.rank} | {item.sku} | {item.count:,} | {item.name} |\n"

    return table


def _category_rows(stats: Sequence[CategoryWindowStats]) -> str:
    rows = ""
    for item in stats:
        rows += (
            f"| {item.category} | {item.total_units:,} | {item.avg_per_day:.2f} | "
            f"{item.pct_of_total:.2f}% | {item.item_count} | {item.per_item_avg:.2f} |\n"
        )
    return rows


def format_comparison_table(report: SalesComparisonReport) -> str:
    """Format the windowed actual-vs-expected comparison as markdown tables."""
    header = (
        "| Type | Total Sales | Avg Sales Per Day | % Total | # Items in Type | Sales Per Item |\n"
        "|------|-------------|-------------------|---------|-----------------|----------------|\n"
    )

    table = f"""## Sales Comparison ({report.window_days} days)

| Metric | Value |
|--------|-------|
| Avg Customers per Day | {report.avg_customers_per_day:.2f} |
| Avg Sales per Day | {report.avg_items_per_day:.2f} |
| Min Units, Non-Special SKU | {report.min_non_special:,} |
| Max Units, Non-Special SKU | {report.max_non_special:,} |
| Total Units in Window | {report.total_items_in_window:,} |

### Purchase Probabilities

| Type | Probability |
|------|-------------|
"""
    for category, probability in report.probabilities.items():
        table += f"| {category} | {probability * 100:.1f}% |\n"

    table += "\n### Actual\n\n" + header + _category_rows(report.actual)
    table += "\n### Expected\n\n" + header + _category_rows(report.expected)
    return table
