"""Report export utilities for simulation results."""

from .exports import (
    export_category_stats_csv,
    export_comparison_report,
    export_customer_summaries_csv,
    export_daily_top_items_json,
    export_summary_json,
    export_top_items_json,
    format_comparison_report,
)

__all__ = [
    "export_category_stats_csv",
    "export_comparison_report",
    "export_customer_summaries_csv",
    "export_daily_top_items_json",
    "export_summary_json",
    "export_top_items_json",
    "format_comparison_report",
]
