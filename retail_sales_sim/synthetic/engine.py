"""Per-customer purchase simulation across stores and days.

For each store and each calendar date the engine draws a daily customer
count, then walks every customer through the ordered purchase rules:

1. draw a target basket size;
2. evaluate each rule block in order, stopping as soon as the basket is
   full (skipped blocks draw nothing);
3. fill any remaining slots with uniformly random catalog SKUs.

All randomness comes from :class:`KeyedRandom`, addressed by
``(store, day_index, customer, rule, sub_index)``, so the engine keeps no
random state and any store can be simulated on its own with identical
results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from retail_sales_sim.foundation.aggregator import TransactionAggregator
from retail_sales_sim.foundation.catalog import ProductCatalog
from retail_sales_sim.synthetic.config import SimulationConfig
from retail_sales_sim.synthetic.customer_summary import (
    CustomerSummary,
    CustomerSummaryCollector,
)
from retail_sales_sim.synthetic.keyed_random import DecisionKey, KeyedRandom, RuleId
from retail_sales_sim.synthetic.rules import PurchaseRule, category_probabilities

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Transaction:
    """A single sale handed to the aggregator."""

    day: date
    store_id: int
    customer_id: int
    sku: int
    sale_price: Decimal


@dataclass(slots=True)
class CustomerBasket:
    """Outcome of one customer visit."""

    store_id: int
    day: date
    customer_id: int
    target_items: int
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def items_added(self) -> int:
        return len(self.transactions)

    @property
    def is_full(self) -> bool:
        return self.items_added >= self.target_items


def sale_price(base_price: Decimal, multiplier: Decimal) -> Decimal:
    """Apply the sale multiplier and round half up to cents."""
    return (Decimal(base_price) * Decimal(multiplier)).quantize(
        CENT, rounding=ROUND_HALF_UP
    )


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def build_aggregator(
    catalog: ProductCatalog, config: SimulationConfig
) -> TransactionAggregator:
    """Create an aggregator whose expectations match ``config``'s rules."""
    return TransactionAggregator(
        catalog,
        category_probabilities=category_probabilities(config.rules),
        avg_items_per_customer=config.avg_items_per_customer,
    )


class SimulationEngine:
    """Drive the purchase rules and feed every sale into an aggregator.

    Parameters
    ----------
    catalog:
        Read-only product catalog.
    aggregator:
        Receives every daily customer count and every transaction.
    config:
        Run parameters; defaults to :class:`SimulationConfig` defaults.
    summary_collector:
        Optional cross-check collector marked with each positive
        special-category decision.
    """

    def __init__(
        self,
        catalog: ProductCatalog,
        aggregator: TransactionAggregator,
        config: SimulationConfig | None = None,
        summary_collector: CustomerSummaryCollector | None = None,
    ) -> None:
        self.catalog = catalog
        self.aggregator = aggregator
        self.config = config or SimulationConfig()
        self.summary_collector = summary_collector
        self.rng = KeyedRandom(self.config.seed)
        self._all_skus = catalog.all_skus()
        if not self._all_skus:
            logger.warning("Product catalog is empty; no transactions will be emitted")

    def run(self) -> None:
        """Simulate every configured store in order."""
        for store_id in range(1, self.config.store_count + 1):
            self.run_store(store_id)

    def run_store(self, store_id: int) -> None:
        """Simulate every date of the configured range for one store."""
        items_before = self.aggregator.total_items
        customers = 0
        for day_index, day in self.config.date_range():
            count = self.customers_for_day(store_id, day, day_index)
            self.aggregator.record_customers(day, count)
            customers += count
            for customer_id in range(1, count + 1):
                self.simulate_customer(store_id, day, day_index, customer_id)
        logger.info(
            f"Store {store_id}: {customers} customers, "
            f"{self.aggregator.total_items - items_before} items"
        )

    def customers_for_day(self, store_id: int, day: date, day_index: int) -> int:
        """Daily customer count for one store, including the weekend uplift."""
        count = self.rng.uniform_int_inclusive(
            self.config.customers_low,
            self.config.customers_high,
            DecisionKey(store_id, day_index, 0, RuleId.CUSTOMERS_FOR_DAY),
        )
        if is_weekend(day):
            count += self.config.weekend_uplift
        return count

    def simulate_customer(
        self, store_id: int, day: date, day_index: int, customer_id: int
    ) -> CustomerBasket:
        """Run the purchase rules for one customer and emit their sales."""
        target = self.rng.uniform_int_inclusive(
            self.config.items_low,
            self.config.items_high,
            DecisionKey(store_id, day_index, customer_id, RuleId.ITEM_COUNT),
        )
        basket = CustomerBasket(store_id, day, customer_id, target)
        summary = None
        if self.summary_collector is not None:
            summary = self.summary_collector.start(day, store_id, customer_id)

        for rule in self.config.rules:
            if basket.is_full:
                return basket
            self._apply_rule(rule, basket, day_index, summary)

        if not basket.is_full:
            self._fill_random(basket, day_index)
        return basket

    def _apply_rule(
        self,
        rule: PurchaseRule,
        basket: CustomerBasket,
        day_index: int,
        summary: CustomerSummary | None,
    ) -> None:
        primary = rule.primary
        bought_primary = self._decide(
            primary.probability, primary.decision_rule, basket, day_index
        )
        if bought_primary:
            if summary is not None:
                summary.mark(primary.category)
            self._pick(primary.category, primary.pick_rule, basket, day_index)
            if basket.is_full:
                return

        secondary = rule.secondary
        if secondary is None:
            return
        if bought_primary:
            probability, decision_rule = secondary.given_probability, secondary.given_rule
        else:
            probability, decision_rule = (
                secondary.without_probability,
                secondary.without_rule,
            )
        if self._decide(probability, decision_rule, basket, day_index):
            if summary is not None:
                summary.mark(secondary.category)
            self._pick(secondary.category, secondary.pick_rule, basket, day_index)

    def _decide(
        self, probability: float, rule_id: RuleId, basket: CustomerBasket, day_index: int
    ) -> bool:
        key = DecisionKey(basket.store_id, day_index, basket.customer_id, rule_id)
        return self.rng.bernoulli(probability, key)

    def _pick(
        self, category: str, pick_rule: RuleId, basket: CustomerBasket, day_index: int
    ) -> bool:
        """Buy one SKU from ``category``; a no-op when the category is empty."""
        skus = self.catalog.skus_by_category(category)
        if not skus:
            logger.debug(f"No SKUs in category {category!r}; pick skipped")
            return False
        idx = self.rng.uniform_int_inclusive(
            0,
            len(skus) - 1,
            DecisionKey(
                basket.store_id,
                day_index,
                basket.customer_id,
                pick_rule,
                basket.items_added,
            ),
        )
        return self._emit(basket, skus[idx])

    def _fill_random(self, basket: CustomerBasket, day_index: int) -> None:
        if not self._all_skus:
            return
        last = len(self._all_skus) - 1
        for slot in range(basket.items_added, basket.target_items):
            idx = self.rng.uniform_int_inclusive(
                0,
                last,
                DecisionKey(
                    basket.store_id,
                    day_index,
                    basket.customer_id,
                    RuleId.RANDOM_PICK,
                    slot,
                ),
            )
            self._emit(basket, self._all_skus[idx])

    def _emit(self, basket: CustomerBasket, sku: int) -> bool:
        product = self.catalog.product_by_sku(sku)
        if product is None:
            logger.debug(f"SKU {sku} missing from catalog; sale skipped")
            return False
        txn = Transaction(
            day=basket.day,
            store_id=basket.store_id,
            customer_id=basket.customer_id,
            sku=sku,
            sale_price=sale_price(product.base_price, self.config.price_multiplier),
        )
        basket.transactions.append(txn)
        self.aggregator.record_transaction(
            txn.day, txn.store_id, txn.customer_id, txn.sku, txn.sale_price
        )
        return True


def run_simulation(
    catalog: ProductCatalog,
    config: SimulationConfig | None = None,
    *,
    summary_collector: CustomerSummaryCollector | None = None,
) -> TransactionAggregator:
    """Run a full simulation and return the populated aggregator."""
    config = config or SimulationConfig()
    aggregator = build_aggregator(catalog, config)
    SimulationEngine(catalog, aggregator, config, summary_collector).run()
    logger.info(
        f"Simulation complete: {aggregator.total_customers} customers, "
        f"{aggregator.total_items} items, sales {aggregator.total_sales}"
    )
    return aggregator
