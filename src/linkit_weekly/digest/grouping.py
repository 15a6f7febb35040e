# ABOUTME: Partitions articles into per-week digests.
# ABOUTME: Each bucket is deduplicated, sorted newest first and given title and summary text.

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime

import structlog

from linkit_weekly.digest.calendar import iso_week, parse_published_at, week_date_range, week_key
from linkit_weekly.digest.filters import INVALID_DATE
from linkit_weekly.digest.identity import MISSING_IDENTITY, deduplicate_digest_items, identity_of
from linkit_weekly.digest.validation import ensure_articles, ensure_instant
from linkit_weekly.models import RawArticle, RejectionTally, WeeklyDigest

log = structlog.get_logger()

MISSING_TITLE = "missing_title"

_OLDEST = datetime.min.replace(tzinfo=UTC)


def digest_title(week: int, date_range: str) -> str:
    return f"KI-Update KW {week} · {date_range}"


def digest_summary(week: int, count: int) -> str:
    """Count-bearing summary line, recomputed whenever the items change."""
    noun = "KI-Nachricht" if count == 1 else "KI-Nachrichten"
    return f"{count} {noun} aus Kalenderwoche {week}"


def new_digest(year: int, week: int, now: datetime) -> WeeklyDigest:
    """Empty bucket for ISO week ``week`` of ``year`` created at ``now``."""
    date_range = week_date_range(week, year)
    return WeeklyDigest(
        id=week_key(year, week),
        week_number=week,
        year=year,
        date_range=date_range,
        title=digest_title(week, date_range),
        summary=f"Die wichtigsten KI-Nachrichten der Woche {week}",
        items=[],
        created_at=now,
    )


def _published_key(article: RawArticle) -> datetime:
    return parse_published_at(article.published_at) or _OLDEST


def refresh_digest(digest: WeeklyDigest, tally: RejectionTally | None = None) -> WeeklyDigest:
    """Deduplicate, sort and re-summarize a single bucket in place.

    Dedup keeps the first occurrence by insertion order, then a stable sort
    orders the survivors newest first.
    """
    unique = deduplicate_digest_items(digest.items, tally)
    digest.items = sorted(unique, key=_published_key, reverse=True)
    digest.summary = digest_summary(digest.week_number, len(digest.items))
    return digest


def rejection_reason(article: RawArticle) -> str | None:
    """Why an article cannot be placed in any week bucket, or None if it can."""
    if parse_published_at(article.published_at) is None:
        return INVALID_DATE
    if not identity_of(article):
        return MISSING_IDENTITY
    if not (article.title or "").strip():
        return MISSING_TITLE
    return None


def place_article(
    digests: dict[str, WeeklyDigest],
    article: RawArticle,
    now: datetime,
    tally: RejectionTally | None = None,
) -> str | None:
    """Append ``article`` to its week bucket, creating the bucket if needed.

    Returns:
        The week key the article went to, or None if it was rejected.
    """
    reason = rejection_reason(article)
    if reason is not None:
        log.debug(
            "article_rejected",
            reason=reason,
            title=article.title,
            published_at=str(article.published_at),
        )
        if tally is not None:
            tally.reject(reason)
        return None

    published = parse_published_at(article.published_at)
    year, week = iso_week(published)
    key = week_key(year, week)

    if key not in digests:
        digests[key] = new_digest(year, week, now)
    digests[key].items.append(article)
    return key


def group_by_week(
    articles: Iterable[RawArticle],
    now: datetime,
    tally: RejectionTally | None = None,
) -> dict[str, WeeklyDigest]:
    """Group articles into week-keyed digests.

    Args:
        articles: Raw articles in any order.
        now: Creation time stamped on every new bucket.
        tally: Optional counter for rejected and duplicate articles.

    Returns:
        Mapping of week key ('2026-W04') to WeeklyDigest. Key order is not
        meaningful; sort the keys to get chronological order.
    """
    tally = tally if tally is not None else RejectionTally()
    items = ensure_articles(articles, tally)
    now = ensure_instant(now)

    digests: dict[str, WeeklyDigest] = {}
    for article in items:
        place_article(digests, article, now, tally)

    for digest in digests.values():
        refresh_digest(digest, tally)

    log.info(
        "grouped_by_week",
        articles=len(items),
        digests=len(digests),
        rejected=tally.total_rejected,
        duplicates=tally.duplicates,
    )
    for key in sorted(digests):
        log.debug("week_digest", week=key, articles=digests[key].item_count)

    return digests


def flatten_items(digests: Mapping[str, WeeklyDigest]) -> list[RawArticle]:
    """All items of all digests, oldest week first."""
    return [item for key in sorted(digests) for item in digests[key].items]
