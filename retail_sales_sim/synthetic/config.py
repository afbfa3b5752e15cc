from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Iterator, Mapping

from retail_sales_sim.foundation.aggregator import DEFAULT_WINDOW_DAYS
from retail_sales_sim.synthetic.rules import (
    DEFAULT_RULES,
    PurchaseRule,
    override_probabilities,
)


@dataclass(frozen=True)
class SimulationConfig:
    """Parameters of one simulation run.

    Attributes
    ----------
    seed: Namespace for every keyed random decision in the run.
    store_count: Number of stores, numbered from 1.
    start_date: First simulated calendar date (inclusive).
    end_date: Last simulated calendar date (inclusive).
    customers_low: Lower bound of the daily customer count per store.
    customers_high: Upper bound of the daily customer count per store.
    items_low: Lower bound of a customer's target basket size.
    items_high: Upper bound of a customer's target basket size.
    weekend_uplift: Customers added on Saturdays and Sundays.
    price_multiplier: Factor applied to the base price of every sale.
    window_days: Number of active days used for windowed statistics.
    rules: Ordered purchase rules evaluated for each customer.
    """

    seed: int = 0
    store_count: int = 6
    start_date: date = date(2024, 1, 1)
    end_date: date = date(2024, 12, 31)
    customers_low: int = 1070
    customers_high: int = 1100
    items_low: int = 1
    items_high: int = 60
    weekend_uplift: int = 50
    price_multiplier: Decimal = Decimal("1.03")
    window_days: int = DEFAULT_WINDOW_DAYS
    rules: tuple[PurchaseRule, ...] = DEFAULT_RULES

    def __post_init__(self) -> None:
        if self.store_count < 0:
            raise ValueError(f"store_count cannot be negative: {self.store_count}")
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date {self.end_date} is before start_date {self.start_date}"
            )
        if self.customers_low < 0:
            raise ValueError(f"customers_low cannot be negative: {self.customers_low}")
        if self.customers_low > self.customers_high:
            raise ValueError(
                "customers_low must be <= customers_high",
                {"low": self.customers_low, "high": self.customers_high},
            )
        if self.items_low < 0:
            raise ValueError(f"items_low cannot be negative: {self.items_low}")
        if self.items_low > self.items_high:
            raise ValueError(
                "items_low must be <= items_high",
                {"low": self.items_low, "high": self.items_high},
            )
        if self.weekend_uplift < 0:
            raise ValueError(f"weekend_uplift cannot be negative: {self.weekend_uplift}")
        if self.price_multiplier < 0:
            raise ValueError(
                f"price_multiplier cannot be negative: {self.price_multiplier}"
            )
        if self.window_days < 0:
            raise ValueError(f"window_days cannot be negative: {self.window_days}")

    @property
    def days(self) -> int:
        """Number of simulated calendar dates."""
        return (self.end_date - self.start_date).days + 1

    @property
    def avg_items_per_customer(self) -> float:
        return (self.items_low + self.items_high) / 2.0

    def date_range(self) -> Iterator[tuple[int, date]]:
        """Yield ``(day_index, date)`` for every simulated date."""
        for offset in range(self.days):
            yield offset, self.start_date + timedelta(days=offset)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SimulationConfig:
        """Build a config from a JSON-like mapping.

        Dates are ISO strings and ``price_multiplier`` may be a string or a
        number. An optional ``rule_probabilities`` entry maps a rule name to
        its primary probability or a ``[primary, given, without]`` list.
        Unknown keys are rejected.
        """
        known = {f.name for f in fields(cls)} - {"rules"}
        unknown = sorted(set(data) - known - {"rule_probabilities"})
        if unknown:
            raise ValueError("Unknown configuration keys", {"keys": unknown})

        kwargs: dict[str, Any] = {}
        for name in known & set(data):
            value = data[name]
            if name in ("start_date", "end_date"):
                if isinstance(value, str):
                    value = date.fromisoformat(value)
                elif not isinstance(value, date):
                    raise ValueError(f"{name} must be an ISO date string: {value!r}")
            elif name == "price_multiplier":
                try:
                    value = Decimal(str(value))
                except InvalidOperation as exc:
                    raise ValueError(
                        f"price_multiplier is not a number: {value!r}"
                    ) from exc
            else:
                try:
                    value = int(value)
                except TypeError as exc:
                    raise ValueError(f"{name} must be an integer: {value!r}") from exc
            kwargs[name] = value

        overrides = data.get("rule_probabilities")
        if overrides:
            if not isinstance(overrides, Mapping):
                raise ValueError(
                    f"rule_probabilities must map rule names to probabilities: {overrides!r}"
                )
            kwargs["rules"] = override_probabilities(DEFAULT_RULES, overrides)
        return cls(**kwargs)
