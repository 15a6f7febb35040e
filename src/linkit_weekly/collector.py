# ABOUTME: Article collector feeding the weekly digest pipeline.
# ABOUTME: Fetches enabled sources, archives raw articles and merges them into stored digests.

from dataclasses import dataclass
from datetime import datetime

import structlog

from linkit_weekly.config import Settings, get_settings
from linkit_weekly.digest.assembly import merge_articles
from linkit_weekly.feeds.fetcher import FeedFetcher
from linkit_weekly.feeds.sources import SourceRegistry
from linkit_weekly.models import RawArticle, RejectionTally, WeeklyDigest
from linkit_weekly.storage import DigestStorage

log = structlog.get_logger()


@dataclass
class CollectionResult:
    """Outcome of one collection run."""

    digests: dict[str, WeeklyDigest]
    fetched: int
    stored: int
    tally: RejectionTally
    failed_sources: list[str]


class ArticleCollector:
    """Collects articles from RSS sources into the persisted digest map."""

    def __init__(
        self,
        settings: Settings | None = None,
        registry: SourceRegistry | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.storage = DigestStorage(self.settings)
        self.registry = registry or SourceRegistry(self.storage.load_sources())
        self.fetcher = FeedFetcher(self.settings)

    def __enter__(self) -> "ArticleCollector":
        return self

    def __exit__(self, *args: object) -> None:
        self.fetcher.close()

    def collect(self, now: datetime) -> CollectionResult:
        """Fetch all enabled sources and merge the articles into the stored digests."""
        log.info("collection_start", sources=len(self.registry.enabled()))

        result = self.fetcher.fetch_all(self.registry.enabled())
        for url in result.fetched:
            self.registry.mark_fetched(url, now)
        self.storage.save_sources(self.registry.sources)

        return self.ingest(result.articles, now, failed_sources=result.failed)

    def ingest(
        self,
        articles: list[RawArticle],
        now: datetime,
        failed_sources: list[str] | None = None,
    ) -> CollectionResult:
        """Archive raw articles and merge them into the stored digests."""
        stored = self.storage.save_raw_articles(articles)

        tally = RejectionTally()
        digests = merge_articles(self.storage.load_digests(), articles, now, tally)
        self.storage.save_digests(digests)

        log.info(
            "collection_complete",
            fetched=len(articles),
            stored=stored,
            digests=len(digests),
            **tally.as_dict(),
        )
        return CollectionResult(
            digests=digests,
            fetched=len(articles),
            stored=stored,
            tally=tally,
            failed_sources=failed_sources or [],
        )
