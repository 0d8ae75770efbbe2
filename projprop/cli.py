"""Command-line interface for projection propagation.

Usage:
    projprop run --config detector.yaml --deposits deposits.csv --output propagated.h5
    projprop run --deposits deposits.csv --csv propagated.csv --seed 42 --workers 4 --plots plots/
    projprop defaults
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from projprop.config import (
    ConfigurationError,
    SimulationConfig,
    get_defaults,
    load_config_file,
)
from projprop.transport.api import run_events
from projprop.transport.runners import (
    export_conservation_csv,
    export_propagated_csv,
    export_propagated_hdf5,
    load_deposits_csv,
    save_propagation_figures,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def cmd_run(args: argparse.Namespace) -> int:
    """Propagate the deposits of a CSV file."""
    if args.config:
        config = SimulationConfig.from_dict(load_config_file(args.config))
        logger.info(f"Loaded configuration from {args.config}")
    else:
        config = SimulationConfig()
        logger.info("Using default configuration")

    if args.plots:
        config.propagation.output_plots = True

    events = load_deposits_csv(args.deposits)
    n_deposits = sum(len(deposits) for deposits in events.values())
    logger.info(f"Read {n_deposits} deposits in {len(events)} events from {args.deposits}")

    summary = run_events(events, config, seed=args.seed, n_workers=args.workers)

    if args.output:
        export_propagated_hdf5(summary.results, args.output, config=config)
        logger.info(f"Propagated charges saved to: {args.output}")
    if args.csv:
        export_propagated_csv(summary.results, args.csv)
        logger.info(f"Propagated charges saved to: {args.csv}")
    if args.balance:
        export_conservation_csv(summary.results, args.balance)
        logger.info(f"Charge balance saved to: {args.balance}")

    if args.plots and summary.tracker is not None:
        save_propagation_figures(
            summary.tracker,
            Path(args.plots),
            bins=config.propagation.output_plots_bins,
            integration_time=config.propagation.integration_time,
        )

    print(summary.report)
    print(f"Survival fraction: {summary.report.survival_fraction:.4f}")
    print(f"Runtime: {summary.runtime_seconds:.3f} s")

    return 0 if summary.conservation_valid else 1


def cmd_defaults(args: argparse.Namespace) -> int:
    """Print the default configuration as YAML."""
    print(yaml.safe_dump(get_defaults(), sort_keys=False), end="")
    return 0


def create_cli_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="projprop",
        description="Projection of deposited charge carriers onto the sensor readout surface",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Propagate with the default detector and save HDF5 output
  projprop run --deposits deposits.csv --output propagated.h5

  # Custom detector, fixed seed, four worker processes and diagnostic plots
  projprop run --config detector.yaml --deposits deposits.csv \\
      --csv propagated.csv --seed 42 --workers 4 --plots plots/

  # Show the default configuration
  projprop defaults
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Run command
    run_parser = subparsers.add_parser("run", help="Propagate charge deposits")
    run_parser.add_argument("--config", type=str, help="Path to YAML configuration file")
    run_parser.add_argument("--deposits", type=str, required=True, help="Input deposits CSV file")
    run_parser.add_argument("--output", type=str, help="Output HDF5 file for propagated charges")
    run_parser.add_argument("--csv", type=str, help="Output CSV file for propagated charges")
    run_parser.add_argument("--balance", type=str, help="Output CSV file for the per-event charge balance")
    run_parser.add_argument("--seed", type=int, default=0, help="Run seed (default: 0)")
    run_parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes, -1 for all CPUs (default: 1)",
    )
    run_parser.add_argument("--plots", type=str, metavar="DIR", help="Save diagnostic figures to DIR")

    # Defaults command
    subparsers.add_parser("defaults", help="Print the default configuration")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = create_cli_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        if args.command == "run":
            return cmd_run(args)
        if args.command == "defaults":
            return cmd_defaults(args)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except (OSError, ValueError) as e:
        logger.error(f"Error: {e}")
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
