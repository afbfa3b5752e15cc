"""Foundational building blocks shared by the simulation and reports.

This package exposes the product catalog and the transaction aggregator
that folds the simulated sales stream into running and windowed
statistics.
"""

from .aggregator import (
    DEFAULT_WINDOW_DAYS,
    CategoryWindowStats,
    TransactionAggregator,
)
from .catalog import (
    OTHER_CATEGORY,
    REPORT_CATEGORIES,
    SPECIAL_CATEGORIES,
    Product,
    ProductCatalog,
    catalog_from_records,
    category_group,
    load_catalog,
)

__all__ = [
    "DEFAULT_WINDOW_DAYS",
    "CategoryWindowStats",
    "TransactionAggregator",
    "OTHER_CATEGORY",
    "REPORT_CATEGORIES",
    "SPECIAL_CATEGORIES",
    "Product",
    "ProductCatalog",
    "catalog_from_records",
    "category_group",
    "load_catalog",
]
