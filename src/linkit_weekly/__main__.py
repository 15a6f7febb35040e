# ABOUTME: CLI entry point for the LinkIt Weekly newsletter system.
# ABOUTME: Provides subcommands: collect, current, generate, stale, sources.

import argparse
import logging
import sys
from datetime import UTC, datetime

import structlog

from linkit_weekly.config import get_settings


def configure_logging() -> None:
    """Configure structlog for console or JSON output."""
    settings = get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
        )
    else:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
                structlog.processors.add_log_level,
                structlog.dev.ConsoleRenderer(colors=True),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
        )


def _reference_instant(value: str | None) -> datetime:
    """Parse --now, defaulting to the current time in UTC."""
    if not value:
        return datetime.now(UTC)
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def cmd_collect(args: argparse.Namespace) -> int:
    """Fetch enabled RSS sources and merge the articles into the stored digests."""
    from linkit_weekly.collector import ArticleCollector

    log = structlog.get_logger()
    log.info("cmd_collect_start")

    try:
        now = _reference_instant(args.now)
        with ArticleCollector() as collector:
            result = collector.collect(now)

        print(f"\nFetched {result.fetched} articles, {result.stored} new.")
        print(f"Rejected: {result.tally.total_rejected}, duplicates: {result.tally.duplicates}")
        for url in result.failed_sources:
            print(f"  ⚠️  Unavailable: {url}")
        print()

        log.info("cmd_collect_complete", digests=len(result.digests))
        return 0

    except Exception:
        log.exception("cmd_collect_failed")
        return 1


def cmd_current(args: argparse.Namespace) -> int:
    """Show the current-week digest and the most recent stored digest."""
    from linkit_weekly.digest import filter_current_week, select_current_digest, week_date_range
    from linkit_weekly.digest.calendar import iso_week
    from linkit_weekly.storage import DigestStorage

    log = structlog.get_logger()

    try:
        storage = DigestStorage()
        now = _reference_instant(args.now)
        year, week = iso_week(now)

        articles = filter_current_week(storage.load_raw_articles(), now)
        print(f"\n=== KW {week}/{year} ({week_date_range(week, year)}) ===\n")
        print(f"Articles this week: {len(articles)}")
        for article in articles[:10]:
            print(f"  - {article.title} ({article.source_name or 'Unbekannte Quelle'})")

        digest = select_current_digest(storage.load_digests())
        if digest is None:
            print("\nNo digests stored yet.\n")
            return 0

        print(f"\nLatest digest: {digest.title}")
        print(f"  {digest.summary}")
        print(f"  Newsletter generated: {'yes' if digest.generated_content else 'no'}")
        print()
        return 0

    except Exception:
        log.exception("cmd_current_failed")
        return 1


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate and archive the newsletter for a stored week digest."""
    from linkit_weekly.newsletter.weekly import run_newsletter_pipeline

    log = structlog.get_logger()
    log.info("cmd_generate_start", week=args.week)

    try:
        result = run_newsletter_pipeline(week=args.week, force=args.force)

        if result.skipped:
            print(f"\nNewsletter for {result.digest.id} already archived (use --force).\n")
        else:
            print(f"\nGenerated: {result.archive_entry.title}\n")

        log.info("cmd_generate_complete", week=result.digest.id, skipped=result.skipped)
        return 0

    except ValueError as e:
        log.error("generate_failed", error=str(e))
        return 1
    except Exception:
        log.exception("cmd_generate_failed")
        return 1


def cmd_stale(args: argparse.Namespace) -> int:
    """List archived raw articles older than the retention horizon."""
    from linkit_weekly.digest import find_stale
    from linkit_weekly.storage import DigestStorage

    log = structlog.get_logger()

    try:
        settings = get_settings()
        storage = DigestStorage(settings)
        retention_days = args.retention_days or settings.retention_days
        now = _reference_instant(args.now)

        stale = find_stale(storage.load_raw_articles(), now, retention_days)

        print(f"\nArticles older than {retention_days} days: {len(stale)}")
        for article in stale:
            print(f"  - {article.published_at}  {article.title}")
        print()
        return 0

    except Exception:
        log.exception("cmd_stale_failed")
        return 1


def cmd_sources(args: argparse.Namespace) -> int:
    """List or edit the configured RSS sources."""
    from linkit_weekly.exceptions import SourceError
    from linkit_weekly.feeds.sources import SourceRegistry
    from linkit_weekly.storage import DigestStorage

    log = structlog.get_logger()

    try:
        storage = DigestStorage()
        registry = SourceRegistry(storage.load_sources())

        action = args.action
        if action == "add":
            try:
                registry.add(args.url, args.name or "")
            except SourceError as e:
                log.error("source_add_failed", error=str(e))
                return 1
        elif action == "remove":
            if not registry.remove(args.url):
                log.error("source_not_found", url=args.url)
                return 1
        elif action in ("enable", "disable"):
            if not registry.toggle(args.url, action == "enable"):
                log.error("source_not_found", url=args.url)
                return 1

        if action != "list":
            storage.save_sources(registry.sources)

        print("\n=== RSS Sources ===\n")
        for source in registry.sources:
            state = "on " if source.enabled else "off"
            fetched = source.last_fetched.isoformat() if source.last_fetched else "never"
            print(f"  [{state}] {source.name}: {source.url} (last fetched: {fetched})")
        print()
        return 0

    except Exception:
        log.exception("cmd_sources_failed")
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="linkit_weekly",
        description="LinkIt Weekly - AI news weekly digest and newsletter generator",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # collect command
    collect_parser = subparsers.add_parser(
        "collect",
        help="Fetch RSS sources and merge articles into weekly digests",
    )
    collect_parser.add_argument(
        "--now",
        type=str,
        help="Reference instant (ISO 8601). Defaults to the current time.",
    )

    # current command
    current_parser = subparsers.add_parser(
        "current",
        help="Show articles of the current week and the latest digest",
    )
    current_parser.add_argument(
        "--now",
        type=str,
        help="Reference instant (ISO 8601). Defaults to the current time.",
    )

    # generate command
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate and archive the newsletter for a week",
    )
    generate_parser.add_argument(
        "--week",
        type=str,
        help="Week key, e.g. 2026-W04. Defaults to the most recent digest.",
    )
    generate_parser.add_argument(
        "--force",
        action="store_true",
        help="Regenerate even if the week is already archived",
    )

    # stale command
    stale_parser = subparsers.add_parser(
        "stale",
        help="List raw articles past the retention horizon",
    )
    stale_parser.add_argument(
        "--now",
        type=str,
        help="Reference instant (ISO 8601). Defaults to the current time.",
    )
    stale_parser.add_argument(
        "--retention-days",
        type=int,
        help="Retention horizon in days (default: from settings, 28)",
    )

    # sources command
    sources_parser = subparsers.add_parser(
        "sources",
        help="List or edit RSS sources",
    )
    sources_parser.add_argument(
        "action",
        nargs="?",
        default="list",
        choices=["list", "add", "remove", "enable", "disable"],
    )
    sources_parser.add_argument("url", nargs="?", help="Feed URL")
    sources_parser.add_argument("--name", type=str, help="Display name for 'add'")

    return parser


def main() -> int:
    """Main entry point."""
    configure_logging()

    parser = create_parser()
    args = parser.parse_args()

    commands = {
        "collect": cmd_collect,
        "current": cmd_current,
        "generate": cmd_generate,
        "stale": cmd_stale,
        "sources": cmd_sources,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    if args.command == "sources" and args.action != "list" and not args.url:
        parser.error(f"sources {args.action} requires a URL")

    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
