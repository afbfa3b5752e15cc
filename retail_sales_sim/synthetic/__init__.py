"""Synthetic point-of-sale generation and validation utilities.

This package turns a product catalog and a :class:`SimulationConfig` into a
reproducible stream of transactions, driven entirely by key-addressed
random decisions.
"""

from .config import DEFAULT_WINDOW_DAYS, SimulationConfig
from .customer_summary import CustomerSummary, CustomerSummaryCollector
from .engine import (
    CustomerBasket,
    SimulationEngine,
    Transaction,
    build_aggregator,
    run_simulation,
    sale_price,
)
from .keyed_random import DecisionKey, KeyedRandom, RuleId
from .rules import (
    DEFAULT_RULES,
    ConditionalStep,
    PurchaseRule,
    RuleStep,
    category_probabilities,
    override_probabilities,
)
from .scenarios import (
    BASELINE_SCENARIO,
    SINGLE_DAY_SCENARIO,
    SMALL_STORE_SCENARIO,
    WEEKEND_RUSH_SCENARIO,
)
from .validation import (
    ValidationResult,
    check_actual_vs_expected,
    check_aggregator_consistency,
    check_bernoulli_rate,
    check_summary_consistency,
    check_uniform_int_distribution,
)

__all__ = [
    "DEFAULT_WINDOW_DAYS",
    "SimulationConfig",
    "CustomerSummary",
    "CustomerSummaryCollector",
    "CustomerBasket",
    "SimulationEngine",
    "Transaction",
    "build_aggregator",
    "run_simulation",
    "sale_price",
    "DecisionKey",
    "KeyedRandom",
    "RuleId",
    "DEFAULT_RULES",
    "ConditionalStep",
    "PurchaseRule",
    "RuleStep",
    "category_probabilities",
    "override_probabilities",
    "BASELINE_SCENARIO",
    "SINGLE_DAY_SCENARIO",
    "SMALL_STORE_SCENARIO",
    "WEEKEND_RUSH_SCENARIO",
    "ValidationResult",
    "check_actual_vs_expected",
    "check_aggregator_consistency",
    "check_bernoulli_rate",
    "check_summary_consistency",
    "check_uniform_int_distribution",
]
