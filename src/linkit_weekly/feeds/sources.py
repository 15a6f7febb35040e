# ABOUTME: Caller-owned registry of RSS sources.
# ABOUTME: Validates, adds, removes and toggles feeds; persistence is left to DigestStorage.

from collections.abc import Iterable
from datetime import datetime

import httpx
import structlog

from linkit_weekly.exceptions import SourceError
from linkit_weekly.models import RssSource

log = structlog.get_logger()

DEFAULT_SOURCES = [
    RssSource(url="https://the-decoder.de/feed/", name="The Decoder"),
]


class SourceRegistry:
    """Set of RSS sources owned by whoever constructs it."""

    def __init__(self, sources: Iterable[RssSource] | None = None) -> None:
        if sources is None:
            sources = DEFAULT_SOURCES
        self._sources = [source.model_copy() for source in sources]

    @property
    def sources(self) -> list[RssSource]:
        """Copy of all sources, enabled or not."""
        return [source.model_copy() for source in self._sources]

    def enabled(self) -> list[RssSource]:
        return [source.model_copy() for source in self._sources if source.enabled]

    def get(self, url: str) -> RssSource | None:
        return next((s for s in self._sources if s.url == url), None)

    def add(self, url: str, name: str = "") -> RssSource:
        """Register a new source.

        Args:
            url: Absolute http(s) feed URL.
            name: Display name. Defaults to the URL's host.

        Raises:
            SourceError: If the URL is invalid or already registered.
        """
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            raise SourceError(f"Invalid feed URL: {url!r}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise SourceError(f"Invalid feed URL: {url!r}")

        if self.get(url) is not None:
            raise SourceError(f"Feed already registered: {url}")

        source = RssSource(url=url, name=name.strip() or parsed.host)
        self._sources.append(source)
        log.info("source_added", url=url, name=source.name)
        return source.model_copy()

    def remove(self, url: str) -> bool:
        """Remove a source. Returns False if it was not registered."""
        before = len(self._sources)
        self._sources = [s for s in self._sources if s.url != url]
        removed = len(self._sources) < before
        if removed:
            log.info("source_removed", url=url)
        return removed

    def toggle(self, url: str, enabled: bool) -> bool:
        """Enable or disable a source. Returns False if it was not registered."""
        source = self.get(url)
        if source is None:
            return False
        source.enabled = enabled
        log.info("source_toggled", url=url, enabled=enabled)
        return True

    def mark_fetched(self, url: str, when: datetime) -> None:
        source = self.get(url)
        if source is not None:
            source.last_fetched = when

    def search(self, name: str) -> list[RssSource]:
        """Sources whose name contains ``name``, ignoring case."""
        needle = name.lower()
        return [s.model_copy() for s in self._sources if needle in s.name.lower()]
