# ABOUTME: Pydantic models for newsletter data structures.
# ABOUTME: Defines RawArticle, WeeklyDigest, ArchiveEntry, RssSource and rejection counters.

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class RawArticle(BaseModel):
    """Article record as delivered by a feed, the raw archive, or manual entry."""

    title: str = ""
    link: str = ""
    guid: str | None = None
    published_at: str | datetime | None = None
    description: str | None = None
    content: str | None = None
    categories: list[str] = Field(default_factory=list)
    creator: str | None = None
    source_name: str | None = None
    source_url: str | None = None
    image_url: str | None = None

    @field_validator("title", "link", mode="before")
    @classmethod
    def _none_as_empty_text(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("categories", mode="before")
    @classmethod
    def _none_as_no_categories(cls, value: object) -> object:
        return [] if value is None else value

    @property
    def display_image_url(self) -> str | None:
        """Image URL if it looks like an image file, otherwise None."""
        from linkit_weekly.digest.identity import is_valid_image_url

        return self.image_url if is_valid_image_url(self.image_url) else None


class WeeklyDigest(BaseModel):
    """Deduplicated, sorted articles of one ISO calendar week."""

    id: str = Field(description="Week key, e.g. '2026-W04'")
    week_number: int = Field(ge=1, le=53)
    year: int
    date_range: str = Field(description="'DD.MM.YYYY–DD.MM.YYYY' for Monday-Sunday")
    title: str
    summary: str
    items: list[RawArticle] = Field(default_factory=list)
    generated_content: str | None = None
    created_at: datetime

    @property
    def item_count(self) -> int:
        return len(self.items)


class ArchiveEntry(BaseModel):
    """Newsletter archive row, unique per (week_number, year)."""

    week_number: int = Field(ge=1, le=53)
    year: int
    date_range: str
    title: str
    content: str
    html_content: str | None = None
    item_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def key(self) -> tuple[int, int]:
        return (self.week_number, self.year)


class RssSource(BaseModel):
    """Configured RSS feed."""

    url: str
    name: str
    enabled: bool = True
    last_fetched: datetime | None = None


@dataclass
class RejectionTally:
    """Counts of articles dropped for data-quality reasons.

    Passed optionally into core operations so callers can report how many
    records were skipped without the operation ever raising.
    """

    rejected: Counter[str] = field(default_factory=Counter)
    duplicates: int = 0

    def reject(self, reason: str) -> None:
        self.rejected[reason] += 1

    @property
    def total_rejected(self) -> int:
        return sum(self.rejected.values())

    def as_dict(self) -> dict[str, int]:
        return {**self.rejected, "duplicates": self.duplicates}


@dataclass
class ArticleStats:
    """Article counts relative to a reference instant."""

    total: int
    this_week: int
    stale: int
    invalid_date: int
