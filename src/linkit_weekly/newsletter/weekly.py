# ABOUTME: Weekly newsletter generator and pipeline for LinkIt Weekly.
# ABOUTME: Shapes a digest into an AI prompt, stores the generated text and its archive entry.

from __future__ import annotations

from dataclasses import dataclass

import structlog

from linkit_weekly.ai.prompts import (
    ARTICLE_DETAIL,
    NEWSLETTER_REQUEST,
    NEWSLETTER_SYSTEM_PROMPT,
    REFERENCE_FOOTER,
)
from linkit_weekly.ai.service import AIService
from linkit_weekly.config import Settings, get_settings
from linkit_weekly.digest.assembly import select_current_digest
from linkit_weekly.digest.validation import ensure_articles
from linkit_weekly.exceptions import GenerationError
from linkit_weekly.models import ArchiveEntry, RawArticle, WeeklyDigest
from linkit_weekly.storage import DigestStorage

log = structlog.get_logger()


def archive_title(digest: WeeklyDigest) -> str:
    return f"LINKIT WEEKLY - KW {digest.week_number}/{digest.year}"


def build_archive_entry(
    digest: WeeklyDigest,
    content: str,
    html_content: str | None = None,
) -> ArchiveEntry:
    """Archive row for a digest whose newsletter text has been generated."""
    if not content:
        raise ValueError("Newsletter content is required")

    return ArchiveEntry(
        week_number=digest.week_number,
        year=digest.year,
        date_range=digest.date_range,
        title=archive_title(digest),
        content=content,
        html_content=html_content,
        item_count=digest.item_count,
    )


class NewsletterGenerator:
    """Generates the newsletter body for a weekly digest."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.ai_service = AIService(self.settings)

    def build_prompt(self, digest: WeeklyDigest, articles: list[RawArticle]) -> str:
        """Build the user prompt listing every selected article."""
        details = "\n".join(
            ARTICLE_DETAIL.format(
                index=index,
                title=article.title,
                description=article.description or "Keine Beschreibung verfügbar",
                source=article.source_name or "Unbekannte Quelle",
                published_at=article.published_at,
                link=article.link,
            )
            for index, article in enumerate(articles, start=1)
        )
        return NEWSLETTER_REQUEST.format(
            week_number=digest.week_number,
            year=digest.year,
            date_range=digest.date_range,
            article_details=details,
        )

    def generate(
        self,
        digest: WeeklyDigest,
        selected: list[RawArticle] | None = None,
        reference_link: str | None = None,
    ) -> WeeklyDigest:
        """Generate newsletter text for a digest.

        Args:
            digest: Week to write about.
            selected: Subset of the digest's items to cover. Defaults to all items.
            reference_link: Link appended as a footer unless the text already has it.

        Returns:
            Copy of the digest with ``generated_content`` set.

        Raises:
            ValueError: If there are no articles to write about.
            GenerationError: If the model returned empty text.
        """
        articles = digest.items if selected is None else ensure_articles(selected)
        if not articles:
            raise ValueError("No articles available for newsletter generation")

        reference_link = reference_link or self.settings.reference_link

        log.info(
            "generating_newsletter",
            week=digest.id,
            articles=len(articles),
            selected=selected is not None,
        )

        content = self.ai_service.generate_text(
            prompt=self.build_prompt(digest, articles),
            system_prompt=NEWSLETTER_SYSTEM_PROMPT,
        ).strip()

        if not content:
            raise GenerationError(f"Empty newsletter text for {digest.id}")

        if reference_link and reference_link not in content:
            content += REFERENCE_FOOTER.format(link=reference_link)

        log.info("newsletter_generated", week=digest.id, length=len(content))
        return digest.model_copy(update={"generated_content": content})


@dataclass
class NewsletterPipelineResult:
    """Result of the newsletter pipeline."""

    digest: WeeklyDigest
    archive_entry: ArchiveEntry | None
    skipped: bool = False


def run_newsletter_pipeline(
    week: str | None = None,
    force: bool = False,
    settings: Settings | None = None,
) -> NewsletterPipelineResult:
    """Generate the newsletter for a stored digest and archive it.

    Picks the digest for ``week`` (a key like '2026-W04') or the most recent
    one, skips generation when the week is already archived unless ``force``,
    then saves the updated digest map and the archive entry.

    Raises:
        ValueError: If no matching digest is stored.
    """
    settings = settings or get_settings()
    storage = DigestStorage(settings)
    digests = storage.load_digests()

    digest = digests.get(week) if week else select_current_digest(digests)
    if digest is None:
        raise ValueError(f"No digest found for {week or 'any week'}")

    archived = {entry.key: entry for entry in storage.load_archive()}
    existing = archived.get((digest.week_number, digest.year))
    if existing is not None and not force:
        log.info("newsletter_already_archived", week=digest.id)
        return NewsletterPipelineResult(digest=digest, archive_entry=existing, skipped=True)

    generator = NewsletterGenerator(settings)
    updated = generator.generate(digest)

    storage.save_digests({**digests, updated.id: updated})
    entry = storage.upsert_archive_entry(build_archive_entry(updated, updated.generated_content))

    log.info("newsletter_pipeline_complete", week=updated.id)
    return NewsletterPipelineResult(digest=updated, archive_entry=entry)
