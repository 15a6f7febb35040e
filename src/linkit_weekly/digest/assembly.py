# ABOUTME: Merges newly fetched articles into a persisted map of week digests.
# ABOUTME: Returns a new mapping; the caller's digests are never modified.

from collections.abc import Iterable, Mapping
from datetime import datetime

import structlog

from linkit_weekly.digest.grouping import place_article, refresh_digest
from linkit_weekly.digest.validation import ensure_articles, ensure_digests, ensure_instant
from linkit_weekly.models import RawArticle, RejectionTally, WeeklyDigest

log = structlog.get_logger()


def merge_articles(
    existing: Mapping[str, WeeklyDigest],
    new_articles: Iterable[RawArticle],
    now: datetime,
    tally: RejectionTally | None = None,
) -> dict[str, WeeklyDigest]:
    """Fold ``new_articles`` into copies of the ``existing`` digests.

    New articles are appended after the bucket's current items, so an
    article already in the digest wins over a later duplicate. Only touched
    buckets are re-deduplicated and re-sorted. ``created_at`` and
    ``generated_content`` of existing buckets are kept.
    """
    current = ensure_digests(existing)
    tally = tally if tally is not None else RejectionTally()
    items = ensure_articles(new_articles, tally)
    now = ensure_instant(now)

    merged = {key: digest.model_copy(deep=True) for key, digest in current.items()}
    created = set()
    touched = set()

    for article in items:
        key = place_article(merged, article, now, tally)
        if key is None:
            continue
        if key not in current:
            created.add(key)
        touched.add(key)

    for key in touched:
        refresh_digest(merged[key], tally)

    log.info(
        "articles_merged",
        articles=len(items),
        created=len(created),
        updated=len(touched - created),
        rejected=tally.total_rejected,
        duplicates=tally.duplicates,
    )
    return merged


def select_current_digest(digests: Mapping[str, WeeklyDigest]) -> WeeklyDigest | None:
    """Digest of the most recent week with any data, or None if there is none."""
    current = ensure_digests(digests)
    if not current:
        return None
    return current[max(current)]
