"""
Command Line Interface for the connectedness engine.

Provides the main entry point for running analysis.
"""

import argparse
import signal
import sys
from pathlib import Path

EXIT_STOPPED = 130


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog='connectedness',
        description='Causal Connectedness - Rolling-Window Granger Causality Networks',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Basic run
    python -m connectedness run -d returns.csv

    # With custom config and output directory
    python -m connectedness run -d returns.xlsx -c config.yaml -o ./reports

    # Robust p-values, shorter windows, analysis plots
    python -m connectedness run -d returns.csv --bw 126 --rp --analyze

    # Verbose mode
    python -m connectedness run -d returns.csv -v
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Run command
    run_parser = subparsers.add_parser('run', help='Run analysis')
    run_parser.add_argument('-d', '--data', required=True, type=Path,
                            help='Path to the returns (or prices) CSV/Excel file')
    run_parser.add_argument('-o', '--output', default='./output', type=Path,
                            help='Output directory (default: ./output)')
    run_parser.add_argument('-c', '--config', type=Path,
                            help='Path to config.yaml')
    run_parser.add_argument('--bw', type=int, help='Rolling window length [21, 252]')
    run_parser.add_argument('--sst', type=float, help='Significance threshold (0, 0.1]')
    run_parser.add_argument('--rp', action='store_true', default=None,
                            help='Use robust (HAC) p-values')
    run_parser.add_argument('--k', type=float, help='Causality strength threshold (0, 0.2]')
    run_parser.add_argument('--lags', type=int, help='Regression lag order')
    run_parser.add_argument('--analyze', action='store_true', default=None,
                            help='Create analysis plots')
    run_parser.add_argument('--workers', type=int, help='Worker pool size')
    run_parser.add_argument('--processes', action='store_true', default=None,
                            help='Use a process pool instead of threads')
    run_parser.add_argument('-v', '--verbose', action='store_true',
                            help='Verbose output')
    run_parser.add_argument('-q', '--quiet', action='store_true',
                            help='Quiet mode (warnings only)')
    run_parser.add_argument('--log-file', type=Path, help='Also write a debug log to this file')

    # Validate config command
    validate_parser = subparsers.add_parser('validate-config', help='Validate config file')
    validate_parser.add_argument('config', type=Path, help='Config file path')

    # Version command
    parser.add_argument('--version', action='store_true', help='Show version')

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from . import __version__
        from .core.constants import VERSION_NAME
        print(f"{VERSION_NAME} v{__version__}")
        return 0

    if args.command == 'run':
        return run_analysis(args)
    elif args.command == 'validate-config':
        return validate_config(args)
    else:
        parser.print_help()
        return 0


def apply_overrides(config, args) -> None:
    """Apply command line overrides to the loaded configuration."""
    overrides = {
        'bw': args.bw,
        'sst': args.sst,
        'rp': args.rp,
        'k': args.k,
        'lags': args.lags,
        'analyze': args.analyze,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config.analysis, name, value)

    if args.workers is not None:
        config.execution.max_workers = args.workers
    if args.processes is not None:
        config.execution.use_processes = args.processes


def run_analysis(args) -> int:
    """Run the main analysis pipeline."""
    import logging
    from .utils.logging import setup_logging, log_exception, ProgressLogger
    from .core.config import ConfigLoader
    from .core.exceptions import ConnectednessError, format_exception_chain
    from .data.loader import PanelLoader
    from .analysis.engine import ConnectednessEngine
    from .analysis.scheduler import CancellationToken
    from .report.writer import ResultWriter
    from .report.generator import ReportGenerator
    from .report.visualizer import Visualizer

    # Setup logging
    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logging(level=log_level, log_file=args.log_file, detailed=args.verbose, quiet=args.quiet)
    logger = logging.getLogger(__name__)

    print("=" * 70)
    print("  CAUSAL CONNECTEDNESS")
    print("=" * 70)

    token = CancellationToken()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: token.cancel())

    try:
        # Load config
        print("\n[1/4] Loading configuration...")
        config = ConfigLoader.load_or_default(args.config)
        apply_overrides(config, args)
        a = config.analysis
        print(f"  BW={a.bw}  SST={a.sst:g}  K={a.k:g}  Robust={'Yes' if a.rp else 'No'}")

        output_dir = Path(args.output)
        output_dir.mkdir(parents=True, exist_ok=True)

        # Load data
        print("\n[2/4] Loading returns...")
        panel = PanelLoader(args.data, config).load()
        print(f"  {panel.n} firms, {panel.t} observations, {panel.groups} groups")

        # Compute
        print("\n[3/4] Computing connectedness measures...")
        engine = ConnectednessEngine(config)
        progress = ProgressLogger(logger, description="Calculating connectedness measures")
        dataset, stopped = engine.compute(panel, progress=progress, should_stop=token)
        progress.finish()

        if stopped:
            print("\n  Stopped before completion. No results were written.", file=sys.stderr)
            return EXIT_STOPPED

        # Generate outputs
        print("\n[4/4] Generating outputs...")

        if config.output.save_results:
            results_path = ResultWriter().write(
                dataset, output_dir / config.output.results_prefix
            )
            print(f"  Results: {results_path}")

        if config.output.save_report:
            report = ReportGenerator(config).generate(dataset)
            report_path = output_dir / f"{config.output.report_prefix}.txt"
            with open(report_path, 'w', encoding='utf-8') as f:
                f.write(report)
            print(f"  Report: {report_path}")

            if not args.quiet:
                print("\n" + "=" * 70)
                print(report)

        if a.analyze:
            for plot_path in Visualizer(config).create_all(dataset, output_dir):
                print(f"  Plot: {plot_path}")

        print("\n" + "=" * 70)
        print("  Done!")
        print("=" * 70)

        return 0

    except ConnectednessError as e:
        logger.error(format_exception_chain(e))
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        log_exception(logger, e, "Unexpected error")
        print(f"\nUnexpected error: {e}", file=sys.stderr)
        return 1
    finally:
        signal.signal(signal.SIGINT, previous_handler)


def validate_config(args) -> int:
    """Validate a config file."""
    from .core.config import ConfigLoader
    from .core.exceptions import ConfigError

    print(f"Validating: {args.config}")

    try:
        config = ConfigLoader.load(args.config)
        a = config.analysis
        print("✓ Config is valid")
        print(f"  Groups: {len(config.groups)}")
        print(f"  Firms in groups: {sum(len(f) for f in config.groups.values())}")
        print(f"  Parameters: bw={a.bw}, sst={a.sst:g}, k={a.k:g}, rp={a.rp}, lags={a.lags}")
        return 0
    except ConfigError as e:
        print(f"✗ Config validation failed: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
