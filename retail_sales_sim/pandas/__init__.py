"""Pandas DataFrame adapters for simulation results."""

from .report import (
    category_stats_to_dataframe,
    comparison_to_dataframe,
    daily_sku_counts_to_dataframe,
    ranked_items_to_dataframe,
    summary_to_dataframe,
)

__all__ = [
    "category_stats_to_dataframe",
    "comparison_to_dataframe",
    "daily_sku_counts_to_dataframe",
    "ranked_items_to_dataframe",
    "summary_to_dataframe",
]
