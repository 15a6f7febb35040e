# ABOUTME: Strict week filters over an explicit reference instant.
# ABOUTME: Articles with unparsable timestamps are rejected, never defaulted to now.

from collections.abc import Iterable
from datetime import datetime, timedelta

import structlog

from linkit_weekly.digest.calendar import in_week, iso_week, parse_published_at
from linkit_weekly.digest.validation import ensure_article, ensure_articles, ensure_instant
from linkit_weekly.models import ArticleStats, RawArticle, RejectionTally

log = structlog.get_logger()

DEFAULT_RETENTION_DAYS = 28

INVALID_DATE = "invalid_date"


def is_current_week(article: RawArticle, now: datetime) -> bool:
    """True if the article was published in the ISO week containing ``now``.

    Requires a valid timestamp, the same ISO (year, week) as ``now`` and
    membership in the inclusive range [week_start(now), week_end(now)].
    """
    article = ensure_article(article)
    now = ensure_instant(now)
    published = parse_published_at(article.published_at)
    if published is None:
        return False
    return iso_week(published) == iso_week(now) and in_week(published, now)


def _sorted_newest_first(pairs: list[tuple[datetime, RawArticle]]) -> list[RawArticle]:
    return [article for _, article in sorted(pairs, key=lambda p: p[0], reverse=True)]


def _dated(
    articles: list[RawArticle],
    tally: RejectionTally | None,
) -> list[tuple[datetime, RawArticle]]:
    """Pair each article with its parsed timestamp, dropping unparsable ones."""
    dated = []
    for article in articles:
        published = parse_published_at(article.published_at)
        if published is None:
            log.debug(
                "article_rejected",
                reason=INVALID_DATE,
                title=article.title,
                published_at=str(article.published_at),
            )
            if tally is not None:
                tally.reject(INVALID_DATE)
            continue
        dated.append((published, article))
    return dated


def filter_current_week(
    articles: Iterable[RawArticle],
    now: datetime,
    tally: RejectionTally | None = None,
) -> list[RawArticle]:
    """Articles of the current ISO week, newest first."""
    items = ensure_articles(articles, tally)
    now = ensure_instant(now)
    current = iso_week(now)

    kept = [
        (published, article)
        for published, article in _dated(items, tally)
        if iso_week(published) == current and in_week(published, now)
    ]

    log.info(
        "filtered_current_week",
        week=current[1],
        year=current[0],
        before=len(items),
        after=len(kept),
    )
    return _sorted_newest_first(kept)


def filter_specific_week(
    articles: Iterable[RawArticle],
    week_number: int,
    year: int,
    tally: RejectionTally | None = None,
) -> list[RawArticle]:
    """Articles of ISO week ``week_number`` of ISO year ``year``, newest first."""
    items = ensure_articles(articles, tally)
    target = (year, week_number)

    kept = [
        (published, article)
        for published, article in _dated(items, tally)
        if iso_week(published) == target
    ]

    log.info(
        "filtered_specific_week",
        week=week_number,
        year=year,
        before=len(items),
        after=len(kept),
    )
    return _sorted_newest_first(kept)


def is_stale(
    article: RawArticle,
    now: datetime,
    retention_days: int = DEFAULT_RETENTION_DAYS,
) -> bool:
    """True if the article is valid and older than the retention horizon.

    Only identifies archival candidates; nothing is deleted here.
    """
    article = ensure_article(article)
    now = ensure_instant(now)
    published = parse_published_at(article.published_at)
    if published is None:
        return False
    return published < now - timedelta(days=retention_days)


def find_stale(
    articles: Iterable[RawArticle],
    now: datetime,
    retention_days: int = DEFAULT_RETENTION_DAYS,
) -> list[RawArticle]:
    """Articles past the retention horizon, in input order."""
    items = ensure_articles(articles)
    stale = [article for article in items if is_stale(article, now, retention_days)]
    log.info("stale_articles_found", count=len(stale), retention_days=retention_days)
    return stale


def article_stats(
    articles: Iterable[RawArticle],
    now: datetime,
    retention_days: int = DEFAULT_RETENTION_DAYS,
) -> ArticleStats:
    """Count articles by their position relative to ``now``."""
    items = ensure_articles(articles)
    now = ensure_instant(now)

    invalid = sum(1 for a in items if parse_published_at(a.published_at) is None)
    return ArticleStats(
        total=len(items),
        this_week=sum(1 for a in items if is_current_week(a, now)),
        stale=sum(1 for a in items if is_stale(a, now, retention_days)),
        invalid_date=invalid,
    )
