# ABOUTME: RSS feed fetcher turning feed entries into RawArticle records.
# ABOUTME: Uses httpx for download (direct, then each proxy) and feedparser + BeautifulSoup to parse.

from collections.abc import Iterable
from dataclasses import dataclass, field
from urllib.parse import quote

import feedparser
import httpx
import structlog
from bs4 import BeautifulSoup

from linkit_weekly.config import Settings, get_settings
from linkit_weekly.models import RawArticle, RssSource

log = structlog.get_logger()

HTML_MARKERS = ("<!doctype html", "<html")


@dataclass
class FeedFetchResult:
    """Articles gathered from a batch of sources."""

    articles: list[RawArticle] = field(default_factory=list)
    fetched: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class FeedFetcher:
    """Fetches RSS feeds and converts their entries to RawArticle."""

    def __init__(
        self,
        settings: Settings | None = None,
        proxies: Iterable[str] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.proxies = list(self.settings.cors_proxies if proxies is None else proxies)
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialized HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.settings.feed_timeout,
                headers={
                    "User-Agent": self.settings.feed_user_agent,
                    "Accept": "application/rss+xml, application/xml, text/xml, */*",
                },
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "FeedFetcher":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def candidate_urls(self, feed_url: str) -> list[str]:
        """The feed URL itself, then the feed URL behind each proxy in order."""
        encoded = quote(feed_url, safe="")
        return [feed_url, *(f"{proxy}{encoded}" for proxy in self.proxies)]

    def fetch_all(self, sources: Iterable[RssSource]) -> FeedFetchResult:
        """Fetch every enabled source; failing sources contribute nothing."""
        result = FeedFetchResult()

        for source in sources:
            if not source.enabled:
                continue
            articles = self.fetch_source(source)
            if articles is None:
                result.failed.append(source.url)
                continue
            result.fetched.append(source.url)
            result.articles.extend(articles)

        log.info(
            "feeds_fetched",
            articles=len(result.articles),
            fetched=len(result.fetched),
            failed=len(result.failed),
        )
        return result

    def fetch_source(self, source: RssSource) -> list[RawArticle] | None:
        """Fetch one source, trying each candidate URL until one yields a feed.

        Returns:
            Articles of the feed (possibly empty), or None if every attempt failed.
        """
        for url in self.candidate_urls(source.url):
            text = self._download(url)
            if text is None:
                continue

            feed = feedparser.parse(text)
            if feed.bozo and not feed.entries:
                log.warning("feed_parse_error", url=url, error=str(feed.bozo_exception))
                continue

            entries = feed.entries[: self.settings.max_articles_per_feed]
            log.info("feed_parsed", source=source.name, via=url, entries=len(entries))
            return [self._entry_to_article(entry, source) for entry in entries]

        log.error("feed_unavailable", source=source.name, url=source.url)
        return None

    def _download(self, url: str) -> str | None:
        """Download a feed document, rejecting empty bodies and HTML pages."""
        try:
            response = self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            log.warning("feed_fetch_error", url=url, error=str(e))
            return None

        text = response.text
        if not text.strip():
            log.warning("feed_empty", url=url)
            return None

        head = text[:512].lower()
        if any(marker in head for marker in HTML_MARKERS):
            log.warning("feed_is_html", url=url)
            return None

        return text

    def _entry_to_article(self, entry: feedparser.FeedParserDict, source: RssSource) -> RawArticle:
        content = ""
        if entry.get("content"):
            content = entry.content[0].get("value", "")

        return RawArticle(
            title=entry.get("title", ""),
            link=entry.get("link", ""),
            guid=entry.get("id") or None,
            published_at=entry.get("published") or entry.get("updated"),
            description=entry.get("summary"),
            content=content or None,
            categories=[tag.get("term", "") for tag in entry.get("tags", []) if tag.get("term")],
            creator=entry.get("author"),
            source_name=source.name,
            source_url=source.url,
            image_url=self._extract_image_url(entry, content),
        )

    def _extract_image_url(self, entry: feedparser.FeedParserDict, content: str) -> str | None:
        """Image from media:content, then an enclosure, then the first <img> in the body."""
        for media in entry.get("media_content", []):
            if media.get("url"):
                return media["url"]

        for enclosure in entry.get("enclosures", []):
            if enclosure.get("href"):
                return enclosure["href"]

        if content:
            img = BeautifulSoup(content, "html.parser").find("img", src=True)
            if img is not None:
                return img["src"]

        return None
