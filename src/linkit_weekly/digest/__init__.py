# ABOUTME: Weekly digest pipeline: week calculus, dedup, strict filters, grouping, assembly.
# ABOUTME: Pure functions over in-memory articles with an explicit reference instant.

from linkit_weekly.digest.assembly import merge_articles, select_current_digest
from linkit_weekly.digest.calendar import (
    iso_week,
    parse_published_at,
    week_date_range,
    week_end,
    week_key,
    week_number,
    week_start,
)
from linkit_weekly.digest.filters import (
    article_stats,
    filter_current_week,
    filter_specific_week,
    find_stale,
    is_current_week,
    is_stale,
)
from linkit_weekly.digest.grouping import flatten_items, group_by_week, new_digest, refresh_digest
from linkit_weekly.digest.identity import (
    deduplicate,
    deduplicate_digest_items,
    identity_of,
    is_valid_image_url,
)

__all__ = [
    "article_stats",
    "deduplicate",
    "deduplicate_digest_items",
    "filter_current_week",
    "filter_specific_week",
    "find_stale",
    "flatten_items",
    "group_by_week",
    "identity_of",
    "is_current_week",
    "is_stale",
    "is_valid_image_url",
    "iso_week",
    "merge_articles",
    "new_digest",
    "parse_published_at",
    "refresh_digest",
    "select_current_digest",
    "week_date_range",
    "week_end",
    "week_key",
    "week_number",
    "week_start",
]
