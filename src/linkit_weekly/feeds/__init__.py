# ABOUTME: Feed processing module for RSS sources and fetching.
# ABOUTME: Handles source registration, downloading and parsing into raw articles.

from linkit_weekly.feeds.fetcher import FeedFetcher, FeedFetchResult
from linkit_weekly.feeds.sources import DEFAULT_SOURCES, SourceRegistry

__all__ = ["DEFAULT_SOURCES", "FeedFetchResult", "FeedFetcher", "SourceRegistry"]
