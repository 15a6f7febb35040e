# ABOUTME: JSON-based persistence for digests, raw articles, archive entries and sources.
# ABOUTME: Everything round-trips through plain JSON so state can be diffed and inspected.

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog

from linkit_weekly.config import Settings, get_settings
from linkit_weekly.digest.identity import deduplicate
from linkit_weekly.digest.validation import ensure_articles
from linkit_weekly.models import ArchiveEntry, RawArticle, RssSource, WeeklyDigest

log = structlog.get_logger()


class DigestStorage:
    """Handles persistence of pipeline state to JSON files."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._ensure_data_dir()

    def _ensure_data_dir(self) -> None:
        """Create data directory if it doesn't exist."""
        self.settings.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def digests_path(self) -> Path:
        return self.settings.data_dir / self.settings.digest_state_file

    @property
    def raw_articles_path(self) -> Path:
        return self.settings.data_dir / self.settings.raw_articles_file

    @property
    def archive_path(self) -> Path:
        return self.settings.data_dir / self.settings.archive_file

    @property
    def sources_path(self) -> Path:
        return self.settings.data_dir / self.settings.sources_file

    def _read_json(self, path: Path, default: Any) -> Any:
        if not path.exists():
            log.info("state_file_not_found", path=str(path))
            return default
        return json.loads(path.read_text(encoding="utf-8"))

    def _write_json(self, path: Path, data: Any) -> None:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    def load_digests(self) -> dict[str, WeeklyDigest]:
        """Load the week-key -> WeeklyDigest map, or an empty map if none is stored."""
        content = self._read_json(self.digests_path, {})
        digests = {key: WeeklyDigest.model_validate(data) for key, data in content.items()}
        log.info("digests_loaded", count=len(digests))
        return digests

    def save_digests(self, digests: dict[str, WeeklyDigest]) -> Path:
        """Save the digest map, keys in chronological order."""
        data = {key: digests[key].model_dump(mode="json") for key in sorted(digests)}
        self._write_json(self.digests_path, data)
        log.info("digests_saved", path=str(self.digests_path), count=len(digests))
        return self.digests_path

    def load_raw_articles(self) -> list[RawArticle]:
        """Load the raw article archive."""
        content = self._read_json(self.raw_articles_path, [])
        articles = ensure_articles(content)
        log.info("raw_articles_loaded", count=len(articles))
        return articles

    def save_raw_articles(self, articles: list[RawArticle]) -> int:
        """Add articles to the raw archive, ignoring ones whose identity is already stored.

        Returns:
            Number of articles newly stored.
        """
        stored = self.load_raw_articles()
        combined = deduplicate([*stored, *articles])
        added = len(combined) - len(stored)

        self._write_json(
            self.raw_articles_path,
            [article.model_dump(mode="json") for article in combined],
        )
        log.info("raw_articles_saved", added=added, total=len(combined))
        return added

    def load_archive(self) -> list[ArchiveEntry]:
        """Load newsletter archive entries, newest week first."""
        content = self._read_json(self.archive_path, [])
        entries = [ArchiveEntry.model_validate(data) for data in content]
        return sorted(entries, key=lambda e: (e.year, e.week_number), reverse=True)

    def upsert_archive_entry(self, entry: ArchiveEntry) -> ArchiveEntry:
        """Insert an archive entry or replace the one for the same (week, year).

        The original ``created_at`` survives an update.
        """
        entries = {e.key: e for e in self.load_archive()}
        now = datetime.now().astimezone()

        previous = entries.get(entry.key)
        stored = entry.model_copy(
            update={
                "created_at": previous.created_at if previous else (entry.created_at or now),
                "updated_at": now,
            }
        )
        entries[entry.key] = stored

        self._write_json(
            self.archive_path,
            [e.model_dump(mode="json") for e in entries.values()],
        )
        log.info(
            "archive_entry_saved",
            week=entry.week_number,
            year=entry.year,
            updated=previous is not None,
        )
        return stored

    def load_sources(self) -> list[RssSource] | None:
        """Load configured RSS sources, or None if none were ever saved."""
        if not self.sources_path.exists():
            return None
        content = self._read_json(self.sources_path, [])
        return [RssSource.model_validate(data) for data in content]

    def save_sources(self, sources: list[RssSource]) -> None:
        self._write_json(self.sources_path, [s.model_dump(mode="json") for s in sources])
        log.info("sources_saved", count=len(sources))
