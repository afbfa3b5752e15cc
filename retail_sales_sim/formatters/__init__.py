"""Text formatting for simulation summaries and comparison reports."""

from retail_sales_sim.formatters.markdown_tables import (
    format_comparison_table,
    format_summary_table,
)

__all__ = [
    "format_comparison_table",
    "format_summary_table",
]
