# funnel_model/cli.py
# Command-line interface entry point (argparse)
import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from funnel_model.chain.calculator import MarkovChainCalculator
from funnel_model.chain.exceptions import MarkovChainError
from funnel_model.chain.loader import chain_from_definition, load_chain_definition
from funnel_model.chain.subscription import create_subscription_markov_chain
from funnel_model.config.loaders import ConfigLoadError, load_funnel_config
from funnel_model.config.models import FunnelConfig, ModelConfig
from funnel_model.reporting.formatting import format_currency
from funnel_model.reporting.metrics import (
    build_cohort_table,
    estimate_cohort_size,
    revenue_at_scale,
    summarize_analysis,
)

# Import logging configuration
from logging_config import (
    ANALYSIS_LOGGER,
    ERROR_LOGGER,
    PERFORMANCE_LOGGER,
    get_logger,
    setup_logging,
)

# Get logger for this module
logger = logging.getLogger(__name__)

# Directory for log files
LOG_DIR = Path("output_dev/analysis_logs")

# Command line overrides mapped onto FunnelConfig fields
OVERRIDES = {
    "registration_rate": "registration_rate",
    "join_rate": "join_rate",
    "rebill_rate": "rebill_rate",
    "price": "monthly_price",
    "acquisition_cost": "acquisition_cost",
    "visitors": "visitors",
    "periods": "periods",
    "cohort_size": "cohort_size",
}


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Analyse a subscription funnel as an absorbing Markov chain."
    )

    parser.add_argument("--config", type=str, default=None, help="Path to a YAML configuration file.")
    parser.add_argument(
        "--chain",
        type=str,
        default=None,
        help="Path to a YAML chain definition; replaces the chain section and the subscription funnel."
    )
    parser.add_argument("--registration-rate", type=float, default=None, help="Visitor to registered (%%).")
    parser.add_argument("--join-rate", type=float, default=None, help="Registered to subscriber (%%).")
    parser.add_argument("--rebill-rate", type=float, default=None, help="Monthly rebill rate (%%).")
    parser.add_argument("--price", type=float, default=None, help="Monthly subscription price.")
    parser.add_argument("--acquisition-cost", type=float, default=None, help="Customer acquisition cost.")
    parser.add_argument("--visitors", type=float, default=None, help="Monthly visitors.")
    parser.add_argument("--periods", type=int, default=None, help="Months to project.")
    parser.add_argument("--cohort-size", type=float, default=None, help="Cohort size for retention curves.")

    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory to write analysis_summary.csv and cohort_table.csv."
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-dir",
        type=str,
        default=str(LOG_DIR),
        help=f"Directory to store log files (default: {LOG_DIR})"
    )

    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> ModelConfig:
    """Load the YAML config if given and apply command line overrides."""
    config = load_funnel_config(Path(args.config)) if args.config else ModelConfig()

    updates = {
        field: getattr(args, arg)
        for arg, field in OVERRIDES.items()
        if getattr(args, arg) is not None
    }
    if updates:
        funnel = FunnelConfig.model_validate({**config.funnel.model_dump(), **updates})
        config = config.model_copy(update={"funnel": funnel})
    return config


def build_calculator(config: ModelConfig, chain_path: Optional[Path] = None) -> MarkovChainCalculator:
    if chain_path is not None:
        states, transitions = load_chain_definition(str(chain_path))
    elif config.chain is not None:
        states, transitions = chain_from_definition(config.chain)
        logger.info(f"Using custom chain with {len(states)} states")
    else:
        funnel = config.funnel
        states, transitions = create_subscription_markov_chain(
            funnel.registration_rate, funnel.join_rate, funnel.rebill_rate
        )
    return MarkovChainCalculator(states, transitions)


def run_analysis(
    config: ModelConfig,
    output_path: Optional[Path] = None,
    chain_path: Optional[Path] = None,
) -> None:
    """Run the chain analysis, print it and optionally save CSV outputs.

    Raises:
        MarkovChainError: If the chain is numerically degenerate
    """
    analysis_logger = get_logger(ANALYSIS_LOGGER)
    perf_logger = get_logger(PERFORMANCE_LOGGER)
    funnel = config.funnel

    start = time.perf_counter()
    calculator = build_calculator(config, chain_path)
    result = calculator.get_comprehensive_analysis(funnel.monthly_price, funnel.acquisition_cost)
    cohort_table = build_cohort_table(calculator, funnel.cohort_size, funnel.monthly_price, funnel.periods)
    perf_logger.info(f"Chain analysis completed in {time.perf_counter() - start:.4f}s")

    summary = summarize_analysis(result)
    analysis_logger.info(f"Analysis summary:\n{summary.to_string(index=False)}")

    print(summary[["metric", "display"]].to_string(index=False))
    print()
    print(cohort_table.to_string(index=False, float_format=lambda v: f"{v:.4f}"))

    if chain_path is None and config.chain is None:
        new_subscribers = estimate_cohort_size(funnel.visitors, funnel.registration_rate, funnel.join_rate)
        print()
        print(f"New subscribers per month: {new_subscribers:,}")
        for size, revenue in revenue_at_scale(result.customer_lifetime_value).items():
            print(f"{size:,} customers: {format_currency(revenue)}")

    if output_path is not None:
        output_path.mkdir(parents=True, exist_ok=True)
        summary.to_csv(output_path / "analysis_summary.csv", index=False)
        cohort_table.to_csv(output_path / "cohort_table.csv", index=False)
        states = pd.DataFrame({
            "state": result.state_ids,
            "steady_state": result.steady_state,
            "expected_steps": result.expected_steps,
        })
        states.to_csv(output_path / "state_metrics.csv", index=False)
        logger.info(f"All outputs saved in: {output_path}")


def initialize_logging(debug: bool = False, log_dir: Path = LOG_DIR) -> None:
    setup_logging(log_dir=log_dir, debug=debug)

    logger.info("Starting funnel model analysis")
    logger.info(f"Command line arguments: {sys.argv}")
    logger.info(f"Pandas version: {pd.__version__}")
    logger.info(f"NumPy version: {np.__version__}")
    if debug:
        logger.debug("Debug logging enabled")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the funnel model CLI."""
    err_logger = logging.getLogger(ERROR_LOGGER)

    args = parse_arguments(argv)
    initialize_logging(debug=args.debug, log_dir=Path(args.log_dir))

    try:
        config = resolve_config(args)
        output_path = Path(args.output_dir) if args.output_dir else None
        chain_path = Path(args.chain) if args.chain else None
        run_analysis(config, output_path, chain_path)
        return 0
    except (ConfigLoadError, FileNotFoundError) as e:
        err_logger.error(f"Invalid configuration: {e}")
    except ValueError as e:
        err_logger.error(f"Invalid parameters: {e}")
    except MarkovChainError as e:
        err_logger.error(f"Chain analysis failed: {e}")

    return 1


if __name__ == "__main__":
    sys.exit(main())
