# ABOUTME: Pytest fixtures and configuration for LinkIt Weekly tests.
# ABOUTME: Provides test settings, a fixed reference instant, and article factories.

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from pydantic import SecretStr

from linkit_weekly.config import Settings
from linkit_weekly.models import RawArticle

# Wednesday of ISO week 42/2026 (Monday 12.10. - Sunday 18.10.)
REFERENCE_NOW = datetime(2026, 10, 14, 12, 0, tzinfo=UTC)


@pytest.fixture
def mock_settings(tmp_path: Path) -> Settings:
    """Create mock settings for testing."""
    return Settings(
        gemini_api_key=SecretStr("test-api-key"),
        gemini_model="gemini-test",
        ai_sleep_between_calls=0,
        feed_timeout=5,
        max_articles_per_feed=10,
        cors_proxies=["https://proxy.example/?url="],
        reference_link=None,
        data_dir=tmp_path / "data",
        log_level="DEBUG",
    )


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant: Wednesday, 14.10.2026 12:00 UTC."""
    return REFERENCE_NOW


@pytest.fixture
def make_article() -> Callable[..., RawArticle]:
    """Factory for RawArticle with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides: Any) -> RawArticle:
        counter["n"] += 1
        n = counter["n"]
        data: dict[str, Any] = {
            "title": f"Article {n}",
            "link": f"https://example.com/article-{n}",
            "published_at": "2026-10-13T09:00:00Z",
            "description": f"Description {n}",
            "source_name": "Test Source",
        }
        data.update(overrides)
        return RawArticle(**data)

    return _make


@pytest.fixture
def sample_articles(make_article: Callable[..., RawArticle]) -> list[RawArticle]:
    """Articles spread over three ISO weeks of 2026."""
    return [
        make_article(title="GPT News", published_at="2026-10-13T09:00:00Z"),
        make_article(title="Gemini Update", published_at="2026-10-15T18:30:00+02:00"),
        make_article(title="Claude Release", published_at="Fri, 09 Oct 2026 08:00:00 +0000"),
        make_article(title="Llama Paper", published_at="2026-10-05T00:00:00Z"),
        make_article(title="Mistral Funding", published_at="2026-10-20T10:00:00Z"),
    ]


@pytest.fixture
def mock_genai_client() -> MagicMock:
    """Create a mock Google GenAI client."""
    mock_client = MagicMock()
    mock_response = MagicMock()
    mock_response.text = "## KI-Update\n\nNewsletter body."
    mock_client.models.generate_content_stream.return_value = [mock_response]
    return mock_client
