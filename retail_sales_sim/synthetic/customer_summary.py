"""Per-customer record of which special categories each customer chose.

The collector is an independent cross-check on the aggregator: it records
purchase *decisions* (a flag per special category) rather than sold units,
so the two can be compared after a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterator

from retail_sales_sim.foundation.catalog import SPECIAL_CATEGORIES


@dataclass(slots=True)
class CustomerSummary:
    """Special categories chosen by one customer visit."""

    day: date
    store_id: int
    customer_id: int
    categories: set[str] = field(default_factory=set)

    @property
    def key(self) -> str:
        return f"{self.day.isoformat()}-{self.store_id}-{self.customer_id}"

    def mark(self, category: str) -> None:
        self.categories.add(category)

    def bought(self, category: str) -> bool:
        return category in self.categories

    def as_row(self) -> dict[str, object]:
        row: dict[str, object] = {
            "date": self.day.isoformat(),
            "store_id": self.store_id,
            "customer_id": self.customer_id,
        }
        for category in SPECIAL_CATEGORIES:
            row[category] = category in self.categories
        return row


class CustomerSummaryCollector:
    """Collect :class:`CustomerSummary` records keyed by visit."""

    def __init__(self) -> None:
        self._summaries: dict[str, CustomerSummary] = {}

    def start(self, day: date, store_id: int, customer_id: int) -> CustomerSummary:
        """Create and register the summary for a new customer visit."""
        summary = CustomerSummary(day, store_id, customer_id)
        self._summaries[summary.key] = summary
        return summary

    def get(self, key: str) -> CustomerSummary | None:
        return self._summaries.get(key)

    def summaries(self) -> Iterator[CustomerSummary]:
        return iter(self._summaries.values())

    def __len__(self) -> int:
        return len(self._summaries)

    def category_customer_counts(self) -> dict[str, int]:
        """Number of customers flagged for each special category."""
        counts = {category: 0 for category in SPECIAL_CATEGORIES}
        for summary in self._summaries.values():
            for category in summary.categories:
                if category in counts:
                    counts[category] += 1
        return counts
