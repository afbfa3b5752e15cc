"""Report projections over completed simulation runs."""

from .report import (
    DEFAULT_TOP_N,
    RankedItem,
    SalesComparisonReport,
    SimulationSummary,
    build_comparison_report,
    daily_top_items,
    rank_top_items,
    summarize,
)

__all__ = [
    "DEFAULT_TOP_N",
    "RankedItem",
    "SalesComparisonReport",
    "SimulationSummary",
    "build_comparison_report",
    "daily_top_items",
    "rank_top_items",
    "summarize",
]
