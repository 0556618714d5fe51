"""
Command-line entry point for the rules-data preprocessor.

Usage:
    charforge-preprocess
    charforge-preprocess --raw-dir data/_raw --out-dir data
    charforge-preprocess --fetch

Exit status is 0 when every category was written, 1 when the raw directory
is missing or any category failed.
"""

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .config import LOG_LEVELS, Settings, load_settings
from .preprocess import Pipeline, RawDataMissingError, fetch_raw_data


logger = logging.getLogger("charforge-data")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="charforge-preprocess",
        description="Normalize raw 5etools JSON into flat lookup documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process data/_raw into data/
  charforge-preprocess

  # Download the raw files first, then process
  charforge-preprocess --fetch

  # Custom directories
  charforge-preprocess --raw-dir /path/to/raw --out-dir /path/to/out
        """,
    )
    parser.add_argument(
        "--raw-dir",
        type=Path,
        help="Raw 5etools JSON directory (default: $CHARFORGE_RAW_DIR or data/_raw)",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        help="Output directory (default: $CHARFORGE_OUT_DIR or data)",
    )
    parser.add_argument(
        "--fetch",
        action="store_true",
        help="Download the raw files from the 5etools mirror before processing",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="With --fetch, re-download files that already exist",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Logging level (default: $CHARFORGE_LOG_LEVEL or INFO)",
    )
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> Settings:
    """Environment settings with command-line overrides applied."""
    settings = load_settings()
    overrides = {
        "raw_dir": args.raw_dir,
        "out_dir": args.out_dir,
        "log_level": args.log_level,
    }
    return settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})


def main(argv: list[str] | None = None) -> int:
    """Run the pipeline; returns the process exit status."""
    args = parse_args(argv)
    try:
        settings = resolve_settings(args)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format="%(message)s",
    )

    if args.fetch:
        outcome = fetch_raw_data(settings.raw_dir, force=args.force)
        missing = [path for path, ok in outcome.items() if not ok]
        if missing:
            logger.warning(f"Could not fetch {len(missing)} raw files: {', '.join(missing)}")

    pipeline = Pipeline(settings.raw_dir, settings.out_dir, edition=settings.edition)
    try:
        report = pipeline.run()
    except RawDataMissingError as e:
        logger.error(str(e))
        logger.error(
            f"Place 5etools JSON files in {settings.raw_dir}/ before running this "
            "script, or rerun with --fetch."
        )
        return 1

    return 0 if report.ok else 1


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
