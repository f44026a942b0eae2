from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from salus.app import build_reconciler, run_enrichment, seed_remote_database, watch_dashboard
from salus.config import configure_logging
from salus.domain.projections import project_constituencies, search_projections

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from salus.domain.aggregates import DashboardStats
    from salus.domain.model import CollectionKind
    from salus.domain.projections import ConstituencyProjection

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Salus election monitoring dashboard")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("stats", help="Print dashboard statistics for the seed collections")

    projections = subparsers.add_parser(
        "projections", help="Print parliamentary constituency projections"
    )
    projections.add_argument(
        "--search",
        type=str,
        default="",
        help="Only show constituencies or leaders matching this term",
    )

    watch = subparsers.add_parser("watch", help="Follow the live incident stream")
    watch.add_argument(
        "--duration",
        type=float,
        help="Stop after this many seconds (runs until interrupted otherwise)",
    )
    watch.add_argument(
        "--offline",
        action="store_true",
        help="Ignore the remote store even if one is configured",
    )

    subparsers.add_parser("enrich", help="Fetch one enrichment batch and merge it")

    seed = subparsers.add_parser("seed-remote", help="Upload seed collections to the remote store")
    seed.add_argument(
        "--parliamentary-limit",
        type=int,
        default=50,
        help="Number of parliamentary candidates to upload",
    )

    args = parser.parse_args(list(argv))
    if args.command == "watch" and args.duration is not None and args.duration <= 0:
        raise ValueError("Duration must be positive")
    if args.command == "seed-remote" and args.parliamentary_limit < 0:
        raise ValueError("Parliamentary limit must be non-negative")
    return args


def _format_stats(stats: DashboardStats) -> str:
    flags = []
    if stats.is_high_alert:
        flags.append("HIGH ALERT")
    if stats.is_surge:
        flags.append("SURGE")
    lines = [
        f"Violence index:     {stats.violence_index:.1f}/10",
        f"Active incidents:   {stats.active_incidents}",
        f"Sentiment:          {stats.sentiment} ({stats.weighted_sentiment:.1f})",
        f"Days to election:   {stats.days_to_election}",
    ]
    if flags:
        lines.append(f"Flags:              {', '.join(flags)}")
    return "\n".join(lines)


def _format_projection(projection: ConstituencyProjection) -> str:
    runner_up = projection.runner_up.name if projection.runner_up else "-"
    return (
        f"{projection.constituency}: {projection.leader.name} ({projection.leader.party}) "
        f"leads {runner_up} by {projection.margin:.1f} pts"
    )


def _print_change(kind: CollectionKind, stats: DashboardStats) -> None:
    log.info(
        "%s updated: violence_index=%.1f, active_incidents=%s, sentiment=%s",
        kind,
        stats.violence_index,
        stats.active_incidents,
        stats.sentiment,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    signal(SIGINT, sigint_handler)
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "stats":
            print(_format_stats(build_reconciler().stats))
        elif parsed_args.command == "projections":
            reconciler = build_reconciler()
            projections = search_projections(
                project_constituencies(reconciler.parliamentary_candidates),
                parsed_args.search,
            )
            for projection in projections:
                print(_format_projection(projection))
            log.info("Listed %s constituencies", len(projections))
        elif parsed_args.command == "watch":
            watched = asyncio.run(
                watch_dashboard(
                    duration=parsed_args.duration,
                    offline=parsed_args.offline,
                    on_change=_print_change,
                )
            )
            if watched.last_error is not None:
                log.warning("Remote store reported: %s", watched.last_error)
        elif parsed_args.command == "enrich":
            reconciler = build_reconciler()
            enriched = asyncio.run(run_enrichment(reconciler))
            log.info(
                "Enrichment finished: incidents=%s, candidates_patched=%s",
                enriched.incidents,
                enriched.candidates_patched,
            )
            print(_format_stats(reconciler.stats))
        elif parsed_args.command == "seed-remote":
            seed_remote_database(parliamentary_limit=parsed_args.parliamentary_limit)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error while running %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    main()
