import sys
import argparse
from pathlib import Path
from typing import List, Optional, Tuple

# --- Settings/Logging ---
from winrates.logging.setup import setup_logging
from winrates.config.settings import settings

from loguru import logger

from winrates.models.enums import ErrorPolicy
from winrates.extraction.extractor import StatsError
from winrates.corpus.loader import iter_battle_logs
from winrates.aggregation.pool import aggregate
from winrates.normalization.species import (
    NormalizationError,
    SpeciesNormalizer,
    load_species_rules,
)
from winrates.ranking.ranker import rank
from winrates.reporting.renderer import render_ranking


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="winrates",
        description="Generate Pokemon winrates from Showdown battle logs.",
    )
    parser.add_argument(
        "--minimum-elo",
        type=float,
        default=settings.minimum_elo,
        help="Only count battles where both players are rated at least this high.",
    )
    parser.add_argument(
        "-i",
        "--input",
        dest="format_dir",
        type=Path,
        required=True,
        help="Format directory containing one subdirectory of battle logs per day.",
    )
    parser.add_argument(
        "-o", "--csv-output", dest="csv_output_path", type=Path, help="CSV output path."
    )
    parser.add_argument(
        "-H",
        "--human-output",
        dest="human_readable_output_path",
        type=Path,
        help="Human-readable table output path.",
    )
    parser.add_argument(
        "--exclude",
        dest="exclusion",
        default=settings.exclusion,
        help="Skip day directories whose name contains this string.",
    )
    parser.add_argument(
        "--workers",
        type=positive_int,
        default=settings.worker_count,
        help="Number of concurrent workers (at least 1).",
    )
    parser.add_argument(
        "--skip-malformed",
        action="store_true",
        help="Log and skip malformed battle logs instead of aborting the run.",
    )
    return parser


def write_outputs(outputs: List[Tuple[Path, str]]) -> None:
    """Writes every (path, text) pair, or none of them.

    A failed write removes the files this call already wrote and re-raises.
    """
    written: List[Path] = []
    try:
        for path, text in outputs:
            path.write_text(text, encoding="utf-8")
            written.append(path)
            logger.success(f"Wrote {path}")
    except OSError:
        for path in written:
            path.unlink(missing_ok=True)
            logger.warning(f"Removed partial output {path}")
        raise


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parser = build_parser()
    options = parser.parse_args(argv)

    if options.csv_output_path is None and options.human_readable_output_path is None:
        parser.print_usage(sys.stderr)
        print(
            "Error: You must specify at least one of --csv-output or --human-output",
            file=sys.stderr,
        )
        return 2

    setup_logging()
    logger.info(f"Starting winrate analysis of {options.format_dir}")

    error_policy = ErrorPolicy.SKIP if options.skip_malformed else settings.error_policy

    try:
        extra_rules = (
            load_species_rules(settings.species_rules_file)
            if settings.species_rules_file
            else None
        )
        normalizer = SpeciesNormalizer(extra_rules)

        stats = aggregate(
            options.minimum_elo,
            iter_battle_logs(options.format_dir, options.exclusion),
            workers=options.workers,
            error_policy=error_policy,
            normalizer=normalizer,
        )
    except (StatsError, NormalizationError) as e:
        logger.critical(f"Run failed, no output written: {e}")
        return 1

    ranked = rank(stats)
    if ranked:
        top = ranked[0]
        logger.info(
            f"Top Pokemon: {top.species} ({top.deviations:.2f} deviations, "
            f"{top.winrate:.2f}% over {top.games} games)"
        )
    else:
        logger.warning("No battles passed the rating filter.")

    report = render_ranking(ranked)
    outputs: List[Tuple[Path, str]] = []
    if options.csv_output_path:
        outputs.append((options.csv_output_path, report.serialized))
    if options.human_readable_output_path:
        outputs.append((options.human_readable_output_path, report.human_readable))

    try:
        write_outputs(outputs)
    except OSError as e:
        logger.error(f"Failed to write output, no output written: {e}")
        return 1

    return 0


def run() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(130)
