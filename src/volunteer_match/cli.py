from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone

from volunteer_match.config import AppConfig, ConfigError, load_config
from volunteer_match.errors import InvalidArgument
from volunteer_match.filters import CandidateFilter
from volunteer_match.formatting import (
    render_explanation_text,
    render_match_text,
    render_stats_text,
    render_volunteer_match_text,
)
from volunteer_match.loaders import load_volunteer, load_volunteers
from volunteer_match.logging_config import setup_logging
from volunteer_match.matching.ranking import MatchRanker
from volunteer_match.matching.scoring import ScoreCalculator
from volunteer_match.service import MatchingService, RecommendationRun
from volunteer_match.sources import OpportunitySource, SourceRegistrationError, create_source
from volunteer_match.store import SQLiteMatchStore
from volunteer_match.utils.datetime_utils import format_datetime, parse_datetime_utc

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="volunteer-match",
        description="Rank volunteer opportunities with an explainable weighted score.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to config YAML file (default: config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        help="Override config log level (e.g. INFO, DEBUG)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("init-db", help="Initialize SQLite schema")

    rank = subparsers.add_parser("rank", help="Recommend opportunities for a volunteer")
    rank.add_argument("--volunteer", required=True, help="Volunteer profile YAML/JSON file")
    rank.add_argument("--limit", type=int, help="Maximum number of results")
    rank.add_argument("--min-score", type=float, help="Drop results scoring below this value")
    _add_common_run_arguments(rank)
    rank.add_argument(
        "--dry-run",
        action="store_true",
        help="Do not record results in the match store",
    )

    candidates = subparsers.add_parser(
        "candidates",
        help="Rank volunteers for one opportunity",
    )
    candidates.add_argument("--opportunity-id", required=True)
    candidates.add_argument("--volunteers", required=True, help="Volunteers YAML/JSON file")
    candidates.add_argument("--limit", type=int, help="Maximum number of results")
    _add_common_run_arguments(candidates)

    explain = subparsers.add_parser(
        "explain",
        help="Explain why a volunteer is or is not matched to one opportunity",
    )
    explain.add_argument("--volunteer", required=True, help="Volunteer profile YAML/JSON file")
    explain.add_argument("--opportunity-id", required=True)
    _add_common_run_arguments(explain)

    history = subparsers.add_parser("history", help="Show recorded matches for a volunteer")
    history.add_argument("--volunteer-id", required=True)
    history.add_argument("--limit", type=int, default=20)

    stats = subparsers.add_parser("stats", help="Summarize the opportunity inventory")
    stats.add_argument("--volunteers", required=True, help="Volunteers YAML/JSON file")
    stats.add_argument("--now", help="Reference time (ISO 8601, default: current UTC time)")

    return parser


def _add_common_run_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--now", help="Reference time (ISO 8601, default: current UTC time)")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = load_config(args.config)
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2

    log_level = args.log_level or app_config.log_level
    setup_logging(log_level)

    try:
        store = _build_store(app_config)
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2

    if args.command == "init-db":
        store.init_db()
        logger.info("Initialized SQLite database at %s", app_config.storage.path)
        return 0

    store.init_db()

    if args.command == "history":
        return _run_history(store, args.volunteer_id, args.limit)

    try:
        now = _parse_now(getattr(args, "now", None))
        service = _build_service(
            app_config,
            store=store,
            min_score=getattr(args, "min_score", None),
            dry_run=getattr(args, "dry_run", False),
        )
        if args.command == "rank":
            return _run_rank(service, app_config, args, now)
        if args.command == "candidates":
            return _run_candidates(service, args, now)
        if args.command == "explain":
            return _run_explain(service, app_config, args, now)
        if args.command == "stats":
            scale = app_config.scoring.scale()
            print(render_stats_text(service.stats(load_volunteers(args.volunteers, scale), now=now)))
            return 0
    except InvalidArgument as exc:
        print(f"Invalid argument: {exc}", file=sys.stderr)
        return 2
    except SourceRegistrationError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2

    parser.error(f"unknown command {args.command}")
    return 2


def _build_store(app_config: AppConfig) -> SQLiteMatchStore:
    if app_config.storage.type != "sqlite":
        raise ConfigError(f"Unsupported storage type: {app_config.storage.type}")
    return SQLiteMatchStore(app_config.storage.path)


def _build_sources(app_config: AppConfig) -> list[OpportunitySource]:
    scale = app_config.scoring.scale()
    sources: list[OpportunitySource] = []
    for source_config in app_config.sources:
        source = create_source(source_config, scale)
        sources.append(source)
    return sources


def _build_service(
    app_config: AppConfig,
    *,
    store: SQLiteMatchStore,
    min_score: float | None,
    dry_run: bool,
) -> MatchingService:
    scale = app_config.scoring.scale()
    ranker = MatchRanker(
        calculator=ScoreCalculator(app_config.scoring.weights, scale),
        candidate_filter=CandidateFilter(scale, app_config.filters.include_categories),
        min_score=min_score if min_score is not None else app_config.filters.min_score,
        parallel_threshold=app_config.ranking.parallel_threshold,
        max_workers=app_config.ranking.max_workers,
    )
    return MatchingService(
        sources=_build_sources(app_config),
        ranker=ranker,
        store=store,
        default_limit=app_config.ranking.default_limit,
        dry_run=dry_run or not app_config.storage.record_matches,
    )


def _run_rank(
    service: MatchingService,
    app_config: AppConfig,
    args: argparse.Namespace,
    now: datetime,
) -> int:
    volunteer = load_volunteer(args.volunteer, app_config.scoring.scale())
    run = service.recommend(volunteer, now=now, limit=args.limit)

    if args.json:
        _print_json(run)
    elif not run.results:
        print(f"No matches for volunteer {volunteer.id}")
    else:
        for position, result in enumerate(run.results, start=1):
            print(render_match_text(position, result, run.opportunities.get(result.opportunity_id)))

    _log_run_summary(run)
    return 0 if run.ok else 1


def _run_candidates(service: MatchingService, args: argparse.Namespace, now: datetime) -> int:
    opportunity = service.find_opportunity(args.opportunity_id)
    if opportunity is None:
        print(f"Opportunity not found: {args.opportunity_id}", file=sys.stderr)
        return 2

    volunteers = load_volunteers(args.volunteers, service.ranker.calculator.scale)
    run = service.candidates_for(opportunity, volunteers, now=now, limit=args.limit)

    if args.json:
        _print_json(run)
    elif not run.results:
        print(f"No eligible volunteers for opportunity {opportunity.id}")
    else:
        for position, result in enumerate(run.results, start=1):
            print(render_volunteer_match_text(position, result))

    _log_run_summary(run)
    return 0 if run.ok else 1


def _run_explain(
    service: MatchingService,
    app_config: AppConfig,
    args: argparse.Namespace,
    now: datetime,
) -> int:
    opportunity = service.find_opportunity(args.opportunity_id)
    if opportunity is None:
        print(f"Opportunity not found: {args.opportunity_id}", file=sys.stderr)
        return 2

    volunteer = load_volunteer(args.volunteer, app_config.scoring.scale())
    explanation = service.explain(volunteer, opportunity, now=now)

    if args.json:
        print(json.dumps(explanation.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(render_explanation_text(volunteer.id, opportunity, explanation))
    return 0


def _run_history(store: SQLiteMatchStore, volunteer_id: str, limit: int) -> int:
    records = store.history(volunteer_id, limit=limit)
    if not records:
        print(f"No recorded matches for volunteer {volunteer_id}")
        return 0
    for record in records:
        print(
            f"{format_datetime(record.saved_at)} | {record.opportunity_id} | "
            f"score {record.score:.1f}"
        )
    return 0


def _parse_now(raw: str | None) -> datetime:
    if raw is None:
        return datetime.now(timezone.utc)
    parsed = parse_datetime_utc(raw)
    if parsed is None:
        raise InvalidArgument(f"--now is not a valid timestamp: {raw!r}")
    return parsed


def _print_json(run: RecommendationRun) -> None:
    payload = {
        "results": [result.to_dict() for result in run.results],
        "warnings": run.warnings,
        "errors": run.errors,
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _log_run_summary(run: RecommendationRun) -> None:
    logger.info(
        "Run complete | fetched=%d considered=%d eligible=%d returned=%d saved=%d warnings=%d errors=%d",
        run.fetched,
        run.considered,
        run.eligible,
        len(run.results),
        run.saved,
        len(run.warnings),
        len(run.errors),
    )


if __name__ == "__main__":
    raise SystemExit(main())
