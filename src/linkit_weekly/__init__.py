# ABOUTME: Main package for the LinkIt Weekly AI-news newsletter system.
# ABOUTME: Exports the weekly digest pipeline, models and settings.

from linkit_weekly.config import get_settings
from linkit_weekly.digest import (
    deduplicate,
    filter_current_week,
    filter_specific_week,
    group_by_week,
    merge_articles,
    select_current_digest,
)
from linkit_weekly.exceptions import InvalidInputError
from linkit_weekly.models import ArchiveEntry, RawArticle, RssSource, WeeklyDigest

__all__ = [
    "get_settings",
    "ArchiveEntry",
    "InvalidInputError",
    "RawArticle",
    "RssSource",
    "WeeklyDigest",
    "deduplicate",
    "filter_current_week",
    "filter_specific_week",
    "group_by_week",
    "merge_articles",
    "select_current_digest",
]
