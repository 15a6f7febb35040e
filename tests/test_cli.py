# ABOUTME: Tests for CLI argument parsing and command dispatch.
# ABOUTME: Validates argparse configuration, subcommand routing, and command output.

import argparse
from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import pytest

from linkit_weekly.__main__ import (
    _reference_instant,
    cmd_current,
    cmd_generate,
    cmd_sources,
    cmd_stale,
    create_parser,
    main,
)
from linkit_weekly.config import Settings
from linkit_weekly.digest.grouping import group_by_week, new_digest
from linkit_weekly.models import RawArticle
from linkit_weekly.newsletter.weekly import NewsletterPipelineResult
from linkit_weekly.storage import DigestStorage


@pytest.fixture
def cli_settings(mock_settings: Settings) -> Iterator[Settings]:
    """Route every get_settings() call of the CLI to temporary settings."""
    with (
        patch("linkit_weekly.__main__.get_settings", return_value=mock_settings),
        patch("linkit_weekly.storage.get_settings", return_value=mock_settings),
    ):
        yield mock_settings


class TestCreateParser:
    """Tests for argument parser creation."""

    def test_parser_creation(self) -> None:
        """Parser is created successfully."""
        assert isinstance(create_parser(), argparse.ArgumentParser)

    def test_collect_command(self) -> None:
        parser = create_parser()
        args = parser.parse_args(["collect", "--now", "2026-10-14T12:00:00Z"])
        assert args.command == "collect"
        assert args.now == "2026-10-14T12:00:00Z"

    def test_generate_command(self) -> None:
        """Generate defaults to the latest week without force."""
        args = create_parser().parse_args(["generate"])
        assert args.command == "generate"
        assert args.week is None
        assert args.force is False

    def test_generate_with_week_and_force(self) -> None:
        args = create_parser().parse_args(["generate", "--week", "2026-W04", "--force"])
        assert args.week == "2026-W04"
        assert args.force is True

    def test_stale_command(self) -> None:
        args = create_parser().parse_args(["stale", "--retention-days", "7"])
        assert args.retention_days == 7

    def test_sources_defaults_to_list(self) -> None:
        args = create_parser().parse_args(["sources"])
        assert args.action == "list"
        assert args.url is None

    def test_sources_add(self) -> None:
        args = create_parser().parse_args(
            ["sources", "add", "https://x.example/feed", "--name", "X"]
        )
        assert (args.action, args.url, args.name) == ("add", "https://x.example/feed", "X")

    def test_sources_rejects_unknown_action(self) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["sources", "purge"])

    def test_no_command(self) -> None:
        """No command results in None."""
        assert create_parser().parse_args([]).command is None


class TestReferenceInstant:
    """Tests for --now parsing."""

    def test_naive_value_is_utc(self) -> None:
        assert _reference_instant("2026-10-14T12:00:00") == datetime(2026, 10, 14, 12, tzinfo=UTC)

    def test_missing_value_is_now(self) -> None:
        assert _reference_instant(None).tzinfo is not None


class TestMain:
    """Tests for main entry point."""

    @patch("linkit_weekly.__main__.configure_logging")
    def test_main_without_command_prints_help(
        self, _mock_logging: MagicMock, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("sys.argv", ["linkit_weekly"]):
            assert main() == 1
        assert "usage:" in capsys.readouterr().out

    @patch("linkit_weekly.__main__.cmd_collect")
    @patch("linkit_weekly.__main__.configure_logging")
    def test_main_collect_command(self, _mock_logging: MagicMock, mock_collect: MagicMock) -> None:
        """Main routes collect command correctly."""
        mock_collect.return_value = 0

        with patch("sys.argv", ["linkit_weekly", "collect"]):
            result = main()

        mock_collect.assert_called_once()
        assert result == 0

    @patch("linkit_weekly.__main__.configure_logging")
    def test_sources_edit_requires_url(self, _mock_logging: MagicMock) -> None:
        with patch("sys.argv", ["linkit_weekly", "sources", "remove"]):
            with pytest.raises(SystemExit):
                main()


class TestCommands:
    """Tests for individual commands against temporary storage."""

    def test_cmd_current(
        self,
        cli_settings: Settings,
        sample_articles: list[RawArticle],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """current shows this week's articles and the latest digest."""
        now = datetime(2026, 10, 14, 12, tzinfo=UTC)
        storage = DigestStorage(cli_settings)
        storage.save_raw_articles(sample_articles)
        storage.save_digests(group_by_week(sample_articles, now))

        assert cmd_current(argparse.Namespace(now="2026-10-14T12:00:00+00:00")) == 0

        out = capsys.readouterr().out
        assert "KW 42/2026 (12.10.2026–18.10.2026)" in out
        assert "Articles this week: 2" in out
        assert "Latest digest: KI-Update KW 43" in out

    def test_cmd_current_without_digests(
        self, cli_settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert cmd_current(argparse.Namespace(now=None)) == 0
        assert "No digests stored yet." in capsys.readouterr().out

    def test_cmd_stale(
        self,
        cli_settings: Settings,
        make_article: Callable[..., RawArticle],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        DigestStorage(cli_settings).save_raw_articles(
            [
                make_article(title="Alt", published_at="2026-08-01T00:00:00Z"),
                make_article(title="Neu", published_at="2026-10-13T00:00:00Z"),
            ]
        )

        args = argparse.Namespace(now="2026-10-14T12:00:00+00:00", retention_days=None)
        assert cmd_stale(args) == 0

        out = capsys.readouterr().out
        assert "older than 28 days: 1" in out
        assert "Alt" in out
        assert "Neu" not in out

    def test_cmd_sources_add_and_list(
        self, cli_settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Added sources are persisted and listed."""
        add = argparse.Namespace(action="add", url="https://x.example/feed", name="X News")
        assert cmd_sources(add) == 0

        stored = DigestStorage(cli_settings).load_sources()
        assert "https://x.example/feed" in [s.url for s in stored]
        assert "X News: https://x.example/feed" in capsys.readouterr().out

    def test_cmd_sources_invalid_url(self, cli_settings: Settings) -> None:
        args = argparse.Namespace(action="add", url="ftp://x.example/feed", name=None)
        assert cmd_sources(args) == 1
        assert DigestStorage(cli_settings).load_sources() is None

    def test_cmd_sources_disable_unknown(self, cli_settings: Settings) -> None:
        args = argparse.Namespace(action="disable", url="https://missing.example/feed", name=None)
        assert cmd_sources(args) == 1

    def test_cmd_current_bad_now_returns_1(self, cli_settings: Settings) -> None:
        """An unparsable --now is logged and reported as failure."""
        assert cmd_current(argparse.Namespace(now="not-a-date")) == 1

    def test_cmd_stale_bad_now_returns_1(self, cli_settings: Settings) -> None:
        args = argparse.Namespace(now="not-a-date", retention_days=None)
        assert cmd_stale(args) == 1

    def test_cmd_sources_corrupt_file_returns_1(self, cli_settings: Settings) -> None:
        """A sources file that is not JSON fails the command instead of raising."""
        DigestStorage(cli_settings).sources_path.write_text("{not json", encoding="utf-8")
        assert cmd_sources(argparse.Namespace(action="list", url=None, name=None)) == 1

    @patch("linkit_weekly.newsletter.weekly.run_newsletter_pipeline")
    def test_cmd_generate_reports_skip(
        self, mock_pipeline: MagicMock, capsys: pytest.CaptureFixture[str]
    ) -> None:
        digest = new_digest(2026, 42, datetime(2026, 10, 14, tzinfo=UTC))
        mock_pipeline.return_value = NewsletterPipelineResult(
            digest=digest, archive_entry=None, skipped=True
        )

        assert cmd_generate(argparse.Namespace(week=None, force=False)) == 0
        assert "already archived" in capsys.readouterr().out

    @patch("linkit_weekly.newsletter.weekly.run_newsletter_pipeline")
    def test_cmd_generate_missing_digest_returns_1(self, mock_pipeline: MagicMock) -> None:
        """cmd_generate returns 1 when the pipeline raises ValueError."""
        mock_pipeline.side_effect = ValueError("No digest found for any week")
        assert cmd_generate(argparse.Namespace(week=None, force=False)) == 1
