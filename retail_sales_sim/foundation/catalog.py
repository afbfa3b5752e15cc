"""Product catalog definitions and loading utilities.

The catalog is the read-only source of truth for every SKU the simulation
can sell. It is built once at startup and shared by the purchase engine,
the aggregator and the report projection. Products are grouped by their
category ("type" in the source data); a fixed set of special categories
is modelled explicitly by the purchase rules and every other category
rolls up into ``"Other"`` for reporting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Iterable, Mapping

import pandas as pd

#: Categories that have a dedicated purchase rule.
SPECIAL_CATEGORIES = (
    "Milk",
    "Cereal",
    "Baby Food",
    "Diapers",
    "Peanut Butter",
    "Bread",
    "Jelly/Jam",
)

#: Reporting bucket for every non-special category.
OTHER_CATEGORY = "Other"

#: Fixed reporting order: special categories followed by the catch-all.
REPORT_CATEGORIES = SPECIAL_CATEGORIES + (OTHER_CATEGORY,)

REQUIRED_COLUMNS = ("sku", "name", "type", "base_price")


def category_group(category: str) -> str:
    """Return the reporting bucket for ``category``."""
    return category if category in SPECIAL_CATEGORIES else OTHER_CATEGORY


@dataclass(frozen=True)
class Product:
    """Immutable catalog entry.

    Attributes
    ----------
    sku:
        Unique positive stock keeping unit identifier.
    name:
        Display name used in reports.
    category:
        Product type, either one of :data:`SPECIAL_CATEGORIES` or any
        other free-form category.
    base_price:
        Non-negative list price before the sale multiplier is applied.
    """

    sku: int
    name: str
    category: str
    base_price: Decimal

    def __post_init__(self) -> None:
        if self.sku <= 0:
            raise ValueError(f"SKU must be a positive integer: {self.sku}")
        if self.base_price < 0:
            raise ValueError(
                f"Base price cannot be negative for SKU {self.sku}: {self.base_price}"
            )


@dataclass(frozen=True)
class ProductCatalog:
    """Immutable SKU and category index over a set of products."""

    products: Mapping[int, Product]
    categories: Mapping[str, tuple[int, ...]] = field(default_factory=dict)
    skus: tuple[int, ...] = ()

    @classmethod
    def from_products(cls, products: Iterable[Product]) -> ProductCatalog:
        """Index ``products`` preserving their input order.

        Raises
        ------
        ValueError
            If the same SKU appears more than once.
        """
        by_sku: dict[int, Product] = {}
        by_category: dict[str, list[int]] = {}
        for idx, product in enumerate(products):
            if product.sku in by_sku:
                raise ValueError(
                    "Duplicate SKU in product catalog",
                    {"sku": product.sku, "record_index": idx},
                )
            by_sku[product.sku] = product
            by_category.setdefault(product.category, []).append(product.sku)

        return cls(
            products=by_sku,
            categories={key: tuple(value) for key, value in by_category.items()},
            skus=tuple(by_sku),
        )

    def product_by_sku(self, sku: int) -> Product | None:
        return self.products.get(sku)

    def skus_by_category(self, category: str) -> tuple[int, ...]:
        return self.categories.get(category, ())

    def all_skus(self) -> tuple[int, ...]:
        return self.skus

    def item_count(self, group: str) -> int:
        """Number of SKUs in a reporting bucket.

        For :data:`OTHER_CATEGORY` this is every SKU outside the special
        categories.
        """
        if group == OTHER_CATEGORY:
            special = sum(len(self.skus_by_category(c)) for c in SPECIAL_CATEGORIES)
            return len(self.skus) - special
        return len(self.skus_by_category(group))

    def __len__(self) -> int:
        return len(self.skus)


def _parse_record(idx: int, record: Mapping[str, Any]) -> Product:
    try:
        sku = int(record["sku"])
        base_price = Decimal(str(record["base_price"]).strip())
    except (TypeError, ValueError, InvalidOperation) as exc:
        raise ValueError(
            "Product record has an invalid sku or base_price",
            {"record_index": idx, "sku": record.get("sku"), "base_price": record.get("base_price")},
        ) from exc

    return Product(
        sku=sku,
        name=str(record["name"]).strip(),
        category=str(record["type"]).strip(),
        base_price=base_price,
    )


def catalog_from_records(records: Iterable[Mapping[str, Any]]) -> ProductCatalog:
    """Validate raw product dictionaries and build a catalog.

    Each record must provide the fields in :data:`REQUIRED_COLUMNS`.
    """
    products: list[Product] = []
    for idx, record in enumerate(records):
        missing = [column for column in REQUIRED_COLUMNS if column not in record]
        if missing:
            raise ValueError(
                "Product record missing required fields",
                {"missing_fields": missing, "record_index": idx},
            )
        products.append(_parse_record(idx, record))
    return ProductCatalog.from_products(products)


def load_catalog(path: str | Path) -> ProductCatalog:
    """Load a product catalog from a CSV file.

    The file must have a header row with ``sku,name,type,base_price``.
    Prices are read as strings so that they convert to ``Decimal``
    without binary floating point error.
    """
    path = Path(path)
    frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    frame.columns = [str(column).strip() for column in frame.columns]
    missing = [column for column in REQUIRED_COLUMNS if column not in frame.columns]
    if missing:
        raise ValueError(
            f"Product file {path} is missing required columns",
            {"missing_columns": missing},
        )
    return catalog_from_records(frame.to_dict(orient="records"))
