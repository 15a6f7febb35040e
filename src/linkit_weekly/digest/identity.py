# ABOUTME: Article identity and the two deduplication policies.
# ABOUTME: Identity dedup (guid or link) for raw collections, link-or-title dedup inside digests.

import re
from collections.abc import Iterable

import structlog

from linkit_weekly.digest.validation import ensure_articles
from linkit_weekly.models import RawArticle, RejectionTally

log = structlog.get_logger()

IMAGE_URL_PATTERN = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg)(\?|$)", re.IGNORECASE)

MISSING_IDENTITY = "missing_identity"


def identity_of(article: RawArticle) -> str:
    """Stable identity: the feed GUID when present, else the link.

    Returns:
        The identity, or an empty string when the article has neither.
    """
    guid = (article.guid or "").strip()
    if guid:
        return guid
    return (article.link or "").strip()


def deduplicate(
    articles: Iterable[RawArticle],
    tally: RejectionTally | None = None,
) -> list[RawArticle]:
    """Keep the first article per identity, in original order.

    Articles without an identity are dropped; later duplicates are dropped
    silently. Both are counted in ``tally`` when given.
    """
    items = ensure_articles(articles, tally)
    seen: set[str] = set()
    unique: list[RawArticle] = []

    for article in items:
        identity = identity_of(article)
        if not identity:
            log.debug("article_rejected", reason=MISSING_IDENTITY, title=article.title)
            if tally is not None:
                tally.reject(MISSING_IDENTITY)
            continue
        if identity in seen:
            if tally is not None:
                tally.duplicates += 1
            continue
        seen.add(identity)
        unique.append(article)

    return unique


def deduplicate_digest_items(
    items: Iterable[RawArticle],
    tally: RejectionTally | None = None,
) -> list[RawArticle]:
    """Drop entries whose link OR title repeats an earlier entry.

    Both comparisons ignore case. Empty links and titles never collide.
    Catches re-published stories that moved to a different URL.
    """
    seen_links: set[str] = set()
    seen_titles: set[str] = set()
    unique: list[RawArticle] = []

    for article in items:
        link = (article.link or "").strip().lower()
        title = (article.title or "").strip().lower()

        if (link and link in seen_links) or (title and title in seen_titles):
            log.debug("duplicate_digest_item", link=article.link, title=article.title)
            if tally is not None:
                tally.duplicates += 1
            continue

        if link:
            seen_links.add(link)
        if title:
            seen_titles.add(title)
        unique.append(article)

    return unique


def is_valid_image_url(url: str | None) -> bool:
    """Check that a URL points at a common image file by its extension."""
    if not url:
        return False
    return IMAGE_URL_PATTERN.search(url) is not None
