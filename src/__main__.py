"""Entry point of the src module. Allows python -m src."""

import argparse
import sys

from src.movielens.exceptions import RankingInvariantError
from src.movielens.loaders import VARIANTS


def run_report(args: argparse.Namespace) -> None:
    """Generate every report for a dataset folder."""
    from pathlib import Path

    from src.movielens.pipeline import ReportPipeline
    from src.movielens.utils import get_logger

    # Handlers for the module-level loggers under src.*
    get_logger("src")

    pipeline = ReportPipeline(
        output_root=Path(args.output) if args.output else None,
        top_n=args.top_n,
        genres=args.genres,
        chunk_size=args.chunk_size,
        max_workers=args.max_workers,
        executor=args.executor,
    )
    result = pipeline.run(args.dataset_dir, variant=args.variant, parallel=args.parallel)

    print(f"\nReport generation time: {result.report_seconds:.3f} s")
    print(f"Total execution time  : {result.total_seconds:.3f} s")
    print(f"Reports are available in: {result.output_dir}")


def run_detect(args: argparse.Namespace) -> None:
    """Print the variant detected in a dataset folder."""
    from src.movielens.loaders import detect_variant

    print(detect_variant(args.dataset_dir))


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="MovieLens top-N report generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src report data/ml-100k                 # Single-threaded reports
  python -m src report data/ml-25m --parallel       # Partitioned aggregation
  python -m src detect data/ml-10M100K              # Show detected variant
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command")

    report_parser = subparsers.add_parser("report", help="Generate top-N reports")
    report_parser.add_argument("dataset_dir", help="MovieLens dataset folder")
    report_parser.add_argument("--variant", choices=VARIANTS, default=None)
    report_parser.add_argument(
        "--parallel",
        action="store_true",
        help="Aggregate fixed-size chunks concurrently",
    )
    report_parser.add_argument("--chunk-size", type=int, default=None)
    report_parser.add_argument("--max-workers", type=int, default=None)
    report_parser.add_argument("--executor", choices=["thread", "process"], default=None)
    report_parser.add_argument("--top-n", type=int, default=None)
    report_parser.add_argument("--output", default=None, help="Output root folder")
    report_parser.add_argument("--genres", nargs="+", default=None, help="Target genres")

    detect_parser = subparsers.add_parser("detect", help="Detect dataset variant")
    detect_parser.add_argument("dataset_dir", help="MovieLens dataset folder")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "report":
            run_report(args)
        elif args.command == "detect":
            run_detect(args)

    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)
    except RankingInvariantError:
        raise
    except Exception as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
