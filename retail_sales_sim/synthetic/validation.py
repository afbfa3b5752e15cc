from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy import stats

from retail_sales_sim.analyses.report import SalesComparisonReport
from retail_sales_sim.foundation.aggregator import TransactionAggregator
from retail_sales_sim.foundation.catalog import SPECIAL_CATEGORIES
from retail_sales_sim.synthetic.customer_summary import CustomerSummaryCollector
from retail_sales_sim.synthetic.keyed_random import DecisionKey, KeyedRandom, RuleId


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    message: str = ""


def check_aggregator_consistency(aggregator: TransactionAggregator) -> ValidationResult:
    """Per-date SKU counts must add up to the global counts and total items."""
    rolled_up: dict[int, int] = {}
    for counts in aggregator.daily_sku_counts.values():
        for sku, count in counts.items():
            rolled_up[sku] = rolled_up.get(sku, 0) + count

    if rolled_up != dict(aggregator.sku_counts):
        mismatched = sorted(
            sku
            for sku in set(rolled_up) | set(aggregator.sku_counts)
            if rolled_up.get(sku, 0) != aggregator.sku_counts.get(sku, 0)
        )
        return ValidationResult(
            False, f"per-date counts disagree with global counts for SKUs {mismatched[:10]}"
        )

    counted = sum(aggregator.sku_counts.values())
    if counted != aggregator.total_items:
        return ValidationResult(
            False,
            f"SKU counts sum to {counted} but {aggregator.total_items} items were recorded",
        )
    return ValidationResult(True, f"{counted} items consistent across views")


def check_bernoulli_rate(
    rng: KeyedRandom,
    p: float,
    *,
    samples: int = 20_000,
    tolerance: float = 0.02,
    rule_id: RuleId = RuleId.MILK,
) -> ValidationResult:
    """Empirical true-rate of ``bernoulli(p)`` over distinct customer keys."""
    if samples <= 0:
        return ValidationResult(False, "no samples requested")
    draws = np.fromiter(
        (
            rng.bernoulli(p, DecisionKey(1, customer // 1000, customer, rule_id))
            for customer in range(samples)
        ),
        dtype=bool,
        count=samples,
    )
    rate = float(draws.mean())
    if abs(rate - p) > tolerance:
        return ValidationResult(
            False, f"true-rate {rate:.4f} deviates from p={p} by more than {tolerance}"
        )
    return ValidationResult(True, f"true-rate {rate:.4f} within {tolerance} of p={p}")


def check_uniform_int_distribution(
    rng: KeyedRandom,
    low: int,
    high: int,
    *,
    samples: int = 20_000,
    alpha: float = 0.001,
    rule_id: RuleId = RuleId.ITEM_COUNT,
) -> ValidationResult:
    """Chi-square goodness of fit of ``uniform_int_inclusive`` to uniform."""
    if samples <= 0:
        return ValidationResult(False, "no samples requested")
    span = high - low + 1
    if span < 2:
        return ValidationResult(True, "single-value range is trivially uniform")
    values = np.fromiter(
        (
            rng.uniform_int_inclusive(
                low, high, DecisionKey(customer % 7 + 1, customer // 7, customer, rule_id)
            )
            for customer in range(samples)
        ),
        dtype=np.int64,
        count=samples,
    )
    if values.min() < low or values.max() > high:
        return ValidationResult(False, f"values escaped [{low}, {high}]")

    observed = np.bincount(values - low, minlength=span)
    statistic, p_value = stats.chisquare(observed)
    if p_value < alpha:
        return ValidationResult(
            False, f"distribution not uniform: chi2={statistic:.2f} p={p_value:.5f}"
        )
    return ValidationResult(True, f"uniform: chi2={statistic:.2f} p={p_value:.5f}")


def check_actual_vs_expected(
    report: SalesComparisonReport,
    *,
    tolerance: float = 0.25,
    categories: tuple[str, ...] = SPECIAL_CATEGORIES,
) -> ValidationResult:
    """Compare observed and model-implied daily averages per category.

    Categories with no expected volume are skipped. ``tolerance`` is the
    allowed relative deviation.
    """
    if report.window_days == 0:
        return ValidationResult(False, "no active dates in window")

    expected = {stats.category: stats.avg_per_day for stats in report.expected}
    failures = []
    for actual in report.actual:
        if actual.category not in categories:
            continue
        target = expected.get(actual.category, 0.0)
        if target <= 0:
            continue
        deviation = abs(actual.avg_per_day - target) / target
        if deviation > tolerance:
            failures.append(f"{actual.category} ({deviation:.0%})")

    if failures:
        return ValidationResult(
            False, "actual deviates from expected for: " + ", ".join(failures)
        )
    return ValidationResult(True, f"all categories within {tolerance:.0%} of expected")


def check_summary_consistency(
    collector: CustomerSummaryCollector, aggregator: TransactionAggregator
) -> ValidationResult:
    """Customers flagged for a category cannot exceed units sold in it.

    Random fill can add extra units of a special category, so units may
    exceed flags but never the other way round. Categories without any
    SKU in the catalog are skipped: their decisions never produce a sale.
    """
    catalog = aggregator.catalog
    units = {category: 0 for category in SPECIAL_CATEGORIES}
    for sku, count in aggregator.sku_counts.items():
        product = catalog.product_by_sku(sku)
        if product is not None and product.category in units:
            units[product.category] += count

    violations = []
    for category, flagged in collector.category_customer_counts().items():
        if not catalog.skus_by_category(category):
            continue
        if flagged > units[category]:
            violations.append(f"{category}: {flagged} customers > {units[category]} units")

    if violations:
        return ValidationResult(False, "; ".join(violations))
    return ValidationResult(True, f"{len(collector)} customer summaries consistent")
