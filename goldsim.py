import argparse
import logging
import sys
import traceback
from datetime import datetime

from rich.console import Console

from device_coordinator import get_device_info
from markets import markets
from src.data.loader import DEFAULT_PRICE_COLUMN, PriceLoader
from src.simulation.errors import SimulationError
from src.simulation.montecarlo import MonteCarloSimulator, RunParameters
from src.simulation.report import build_simulation_report, render_simulation_report
from src.simulation.utils import DEFAULT_CONFIDENCE, DEFAULT_HORIZON_DAYS, DEFAULT_PATH_COUNT

logger = logging.getLogger('goldsim')

BANNER = r"""
   ____       _     _   ____  _
  / ___| ___ | | __| | / ___|(_)_ __ ___
 | |  _ / _ \| |/ _` | \___ \| | '_ ` _ \
 | |_| | (_) | | (_| |  ___) | | | | | | |
  \____|\___/|_|\__,_| |____/|_|_| |_| |_|
 Monte Carlo gold price paths (GBM)
"""


def configure_logging(level="INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def parse_cli(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Estimate drift and volatility from gold prices and simulate future price paths."
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("-m", "--market", type=str.lower, choices=markets, default="combined",
                        help="Built-in market price table to simulate from (default: %(default)s)")
    source.add_argument("--csv", dest="csv_path",
                        help="CSV file with historical prices, oldest first")
    parser.add_argument("--column", default=DEFAULT_PRICE_COLUMN,
                        help="Price column in the CSV file (default: %(default)s)")
    parser.add_argument("-d", "--days", type=int, default=DEFAULT_HORIZON_DAYS,
                        help="Simulation horizon in days (default: %(default)s)")
    parser.add_argument("-p", "--paths", type=int, default=DEFAULT_PATH_COUNT,
                        help="Number of simulated paths (default: %(default)s)")
    parser.add_argument("-c", "--confidence", type=float, default=DEFAULT_CONFIDENCE,
                        help="Confidence level shown in the report, in percent (default: %(default)s)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for a reproducible run")
    parser.add_argument("--workers", type=int, default=None,
                        help="Worker threads for large runs")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: %(default)s)")
    parser.add_argument("--no-banner", action="store_true", help="Do not print the banner")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_cli(argv)
    configure_logging(args.log_level)
    start = datetime.now()

    logger.debug(f"Compute device: {get_device_info()}")

    console = Console()
    if not args.no_banner:
        console.print(BANNER)

    try:
        params = RunParameters(horizon_days=args.days, path_count=args.paths,
                               confidence=args.confidence)

        loader = PriceLoader()
        if args.csv_path:
            loader.load_csv(args.csv_path, column=args.column)
        else:
            loader.load_market(args.market)

        simulator = MonteCarloSimulator(loader, random_seed=args.seed, max_workers=args.workers)
        result = simulator.run(params)

        report = build_simulation_report(result)
        render_simulation_report(report, console)
    except SimulationError as e:
        logger.error(f"Simulation failed: {e}")
        logger.debug(traceback.format_exc())
        return 1

    logger.info(f"Simulation finished in {(datetime.now() - start).total_seconds():.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
