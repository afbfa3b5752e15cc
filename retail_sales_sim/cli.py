"""Command line entry points for the retail sales simulator."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

from retail_sales_sim.analyses.report import (
    build_comparison_report,
    daily_top_items,
    summarize,
)
from retail_sales_sim.foundation.aggregator import DEFAULT_WINDOW_DAYS
from retail_sales_sim.foundation.catalog import load_catalog
from retail_sales_sim.formatters.markdown_tables import (
    format_comparison_table,
    format_summary_table,
)
from retail_sales_sim.monitoring.exports import (
    export_category_stats_csv,
    export_comparison_report,
    export_customer_summaries_csv,
    export_daily_top_items_json,
    export_summary_json,
    export_top_items_json,
)
from retail_sales_sim.synthetic.config import SimulationConfig
from retail_sales_sim.synthetic.customer_summary import CustomerSummaryCollector
from retail_sales_sim.synthetic.engine import run_simulation
from retail_sales_sim.synthetic.validation import (
    check_aggregator_consistency,
    check_summary_consistency,
)

logger = logging.getLogger(__name__)


MAX_CONFIG_BYTES = 1024 * 1024  # configs are small; refuse anything larger


def _load_config(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    resolved = path.resolve()
    size = resolved.stat().st_size
    if size > MAX_CONFIG_BYTES:
        raise ValueError(
            f"Config file {resolved} is {size} bytes; exceeds limit of {MAX_CONFIG_BYTES} bytes"
        )
    with path.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)
    if not isinstance(payload, dict):
        raise ValueError("Expected a JSON object in the config file")
    return payload


def _build_config(args: argparse.Namespace) -> SimulationConfig:
    config = SimulationConfig.from_mapping(_load_config(args.config))
    overrides: dict[str, Any] = {}
    if args.stores is not None:
        overrides["store_count"] = args.stores
    if args.start is not None:
        overrides["start_date"] = date.fromisoformat(args.start)
    if args.end is not None:
        overrides["end_date"] = date.fromisoformat(args.end)
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.window_days is not None:
        overrides["window_days"] = args.window_days
    return dataclasses.replace(config, **overrides) if overrides else config


def run_simulation_cli(argv: list[str] | None = None) -> int:
    """Run a simulation and export its reports.

    This command:
    1. Loads the product catalog CSV (``sku,name,type,base_price``)
    2. Builds the run configuration from ``--config`` plus overrides
    3. Simulates every store and day
    4. Prints the summary and comparison tables
    5. Writes JSON/CSV/text reports to ``--output-dir``

    Args:
        argv: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = argparse.ArgumentParser(
        description="Simulate retail point-of-sale transactions and report sales"
    )
    parser.add_argument("products", type=Path, help="Path to the product catalog CSV")
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional JSON file with SimulationConfig fields",
    )
    parser.add_argument("--stores", type=int, help="Number of stores to simulate")
    parser.add_argument("--start", type=str, help="First date (ISO format: YYYY-MM-DD)")
    parser.add_argument("--end", type=str, help="Last date, inclusive (YYYY-MM-DD)")
    parser.add_argument("--seed", type=int, help="Seed namespacing every random decision")
    parser.add_argument(
        "--window-days",
        type=int,
        help=f"Active days used for the comparison report (default: {DEFAULT_WINDOW_DAYS})",
    )
    parser.add_argument(
        "--top-n",
        type=int,
        default=10,
        help="Number of items in the rankings (default: 10)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("Dataset"),
        help="Directory for exported reports (default: Dataset)",
    )
    parser.add_argument(
        "--sanity-check",
        action="store_true",
        help="Record per-customer category flags and cross-check them",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _build_config(args)
    except ValueError as exc:
        logger.error(f"Invalid configuration: {exc}")
        return 1

    logger.info(f"Loading product catalog from {args.products}")
    try:
        catalog = load_catalog(args.products)
    except ValueError as exc:
        logger.error(f"Invalid product catalog: {exc}")
        return 1
    logger.info(f"Loaded {len(catalog)} products")

    logger.info(
        f"Simulating {config.store_count} stores from {config.start_date} "
        f"to {config.end_date} (seed={config.seed})"
    )
    collector = CustomerSummaryCollector() if args.sanity_check else None
    aggregator = run_simulation(catalog, config, summary_collector=collector)

    summary = summarize(aggregator, catalog, args.top_n)
    report = build_comparison_report(aggregator, config.window_days)
    print(format_summary_table(summary))
    print(format_comparison_table(report))

    output_dir = args.output_dir
    export_summary_json(summary, output_dir / "summary.json")
    export_top_items_json(summary.top_items, output_dir / "top10.json")
    export_daily_top_items_json(
        daily_top_items(aggregator, catalog, args.top_n),
        output_dir / "top10_daily.json",
    )
    export_comparison_report(report, output_dir / "sales_comparison.csv")
    export_category_stats_csv(report, output_dir / "category_stats.csv")

    consistency = check_aggregator_consistency(aggregator)
    if not consistency.ok:
        logger.error(f"Aggregator consistency check failed: {consistency.message}")
        return 1

    if collector is not None:
        export_customer_summaries_csv(collector, output_dir / "customer_summaries.csv")
        result = check_summary_consistency(collector, aggregator)
        if not result.ok:
            logger.error(f"Sanity check failed: {result.message}")
            return 1
        logger.info(f"Sanity check passed: {result.message}")

    return 0


def main() -> None:
    raise SystemExit(run_simulation_cli())


if __name__ == "__main__":  # pragma: no cover
    main()
