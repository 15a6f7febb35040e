# ABOUTME: Up-front precondition checks for digest pipeline entry points.
# ABOUTME: Coerces caller input into models; malformed collection elements are tallied, not raised.

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime

import structlog
from pydantic import ValidationError

from linkit_weekly.exceptions import InvalidInputError
from linkit_weekly.models import RawArticle, RejectionTally, WeeklyDigest

log = structlog.get_logger()

MALFORMED_ARTICLE = "malformed_article"


def ensure_article(article: object) -> RawArticle:
    """Coerce a single article argument, validating mappings into RawArticle.

    Raises:
        InvalidInputError: If the argument is not an article record.
    """
    if isinstance(article, RawArticle):
        return article
    if isinstance(article, Mapping):
        try:
            return RawArticle.model_validate(dict(article))
        except ValidationError as e:
            raise InvalidInputError(f"Article is malformed: {e}") from e
    raise InvalidInputError(f"Expected a RawArticle or mapping, got {type(article).__name__}")


def ensure_articles(
    articles: object,
    tally: RejectionTally | None = None,
) -> list[RawArticle]:
    """Materialize ``articles`` as a list of RawArticle.

    Mappings inside the collection are validated into RawArticle. Elements
    that are not article records are dropped and counted as malformed.
    Strings, bytes and mappings are rejected as the top-level argument
    because they iterate as something other than a sequence of records.

    Raises:
        InvalidInputError: If the argument is not a collection of records.
    """
    if isinstance(articles, str | bytes | Mapping) or not isinstance(articles, Iterable):
        raise InvalidInputError(
            f"Expected a collection of articles, got {type(articles).__name__}"
        )

    result: list[RawArticle] = []
    for index, item in enumerate(articles):
        try:
            result.append(ensure_article(item))
        except InvalidInputError as e:
            log.debug("article_rejected", reason=MALFORMED_ARTICLE, index=index, error=str(e))
            if tally is not None:
                tally.reject(MALFORMED_ARTICLE)
    return result


def ensure_digests(digests: object) -> dict[str, WeeklyDigest]:
    """Validate a week-key -> WeeklyDigest mapping, coercing plain dicts."""
    if not isinstance(digests, Mapping):
        raise InvalidInputError(
            f"Expected a mapping of week keys to digests, got {type(digests).__name__}"
        )

    result: dict[str, WeeklyDigest] = {}
    for key, digest in digests.items():
        if isinstance(digest, WeeklyDigest):
            result[key] = digest
        elif isinstance(digest, Mapping):
            try:
                result[key] = WeeklyDigest.model_validate(dict(digest))
            except ValidationError as e:
                raise InvalidInputError(f"Digest {key!r} is malformed: {e}") from e
        else:
            raise InvalidInputError(
                f"Digest {key!r} must be a WeeklyDigest or mapping, got {type(digest).__name__}"
            )
    return result


def ensure_instant(now: object) -> datetime:
    """Require an explicit reference instant; naive values are taken as UTC."""
    if not isinstance(now, datetime):
        raise InvalidInputError(f"Reference instant must be a datetime, got {type(now).__name__}")
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now.astimezone(UTC)
