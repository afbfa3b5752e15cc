"""Pre-configured simulation scenarios.

Ready-to-use :class:`SimulationConfig` presets for common testing and
demonstration needs.

Examples
--------
>>> from retail_sales_sim.synthetic.scenarios import SMALL_STORE_SCENARIO
>>> from retail_sales_sim.synthetic import run_simulation
>>> aggregator = run_simulation(catalog, SMALL_STORE_SCENARIO)
"""

from datetime import date
from decimal import Decimal

from retail_sales_sim.synthetic.config import SimulationConfig

# Full-year, six-store run with the default purchase rules
BASELINE_SCENARIO = SimulationConfig()

# One store for four weeks with modest traffic, fast enough for demos
SMALL_STORE_SCENARIO = SimulationConfig(
    seed=42,
    store_count=1,
    start_date=date(2024, 1, 1),
    end_date=date(2024, 1, 28),
    customers_low=40,
    customers_high=60,
    items_low=1,
    items_high=20,
    weekend_uplift=10,
    price_multiplier=Decimal("1.03"),
)

# A single weekday with a fixed customer count, for reproducibility checks
SINGLE_DAY_SCENARIO = SimulationConfig(
    seed=1,
    store_count=1,
    start_date=date(2024, 1, 3),  # Wednesday
    end_date=date(2024, 1, 3),
    customers_low=25,
    customers_high=25,
    items_low=1,
    items_high=10,
    weekend_uplift=0,
    price_multiplier=Decimal("1.00"),
)

# Two stores over two weeks with heavy weekend traffic
WEEKEND_RUSH_SCENARIO = SimulationConfig(
    seed=7,
    store_count=2,
    start_date=date(2024, 3, 4),  # Monday
    end_date=date(2024, 3, 17),
    customers_low=30,
    customers_high=40,
    items_low=2,
    items_high=12,
    weekend_uplift=60,
    price_multiplier=Decimal("1.10"),
)
