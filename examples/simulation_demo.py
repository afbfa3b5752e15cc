"""Retail sales simulation demo.

This example demonstrates the full pipeline:
1. Load the sample product catalog
2. Simulate a small store for four weeks
3. Replay a single customer's basket from its keys alone
4. Compare actual and expected category sales over the first 14 days
5. Run the built-in sanity checks
"""

from pathlib import Path

from retail_sales_sim.analyses import build_comparison_report, summarize
from retail_sales_sim.foundation import load_catalog
from retail_sales_sim.formatters import format_comparison_table, format_summary_table
from retail_sales_sim.synthetic import (
    SMALL_STORE_SCENARIO,
    CustomerSummaryCollector,
    SimulationEngine,
    build_aggregator,
    check_actual_vs_expected,
    check_aggregator_consistency,
    check_summary_consistency,
    run_simulation,
)


def main():
    """Demonstrate simulation, replay and reporting."""
    print("=" * 80)
    print("Retail Sales Simulation Demo")
    print("=" * 80)

    # Step 1: Load catalog
    print("\n📦 Step 1: Loading product catalog...")
    catalog = load_catalog(Path(__file__).with_name("products.csv"))
    print(f"✓ Loaded {len(catalog)} products")

    # Step 2: Simulate
    print("\n🛒 Step 2: Simulating one store for four weeks...")
    config = SMALL_STORE_SCENARIO
    collector = CustomerSummaryCollector()
    aggregator = run_simulation(catalog, config, summary_collector=collector)
    print(format_summary_table(summarize(aggregator, catalog)))

    # Step 3: Replay one customer in isolation
    print("\n🔁 Step 3: Replaying customer 7 on day 3 without re-running the store...")
    day_index, day = list(config.date_range())[3]
    engine = SimulationEngine(catalog, build_aggregator(catalog, config), config)
    basket = engine.simulate_customer(1, day, day_index, 7)
    skus = [txn.sku for txn in basket.transactions]
    print(f"✓ Target {basket.target_items} items, bought SKUs {skus}")

    # Step 4: Compare actual vs expected
    print("\n📈 Step 4: Actual vs expected over the first 14 active days...")
    report = build_comparison_report(aggregator, config.window_days)
    print(format_comparison_table(report))

    # Step 5: Sanity checks
    print("\n✅ Step 5: Sanity checks")
    for name, result in [
        ("aggregator", check_aggregator_consistency(aggregator)),
        ("customer summaries", check_summary_consistency(collector, aggregator)),
        ("actual vs expected", check_actual_vs_expected(report, tolerance=0.5)),
    ]:
        status = "✓" if result.ok else "✗"
        print(f"  {status} {name}: {result.message}")


if __name__ == "__main__":
    main()
