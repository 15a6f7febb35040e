# ABOUTME: Tests for merging new articles into existing digests.
# ABOUTME: Verifies copy-on-write, re-deduplication, associativity and current-digest selection.

from collections.abc import Callable
from datetime import datetime, timedelta

import pytest

from linkit_weekly.digest.assembly import merge_articles, select_current_digest
from linkit_weekly.digest.grouping import group_by_week, new_digest
from linkit_weekly.exceptions import InvalidInputError
from linkit_weekly.models import RawArticle, RejectionTally


class TestMergeArticles:
    """Tests for merge_articles."""

    def test_merge_into_empty(
        self, sample_articles: list[RawArticle], now: datetime
    ) -> None:
        """Merging into an empty map equals grouping."""
        merged = merge_articles({}, sample_articles, now)
        grouped = group_by_week(sample_articles, now)

        assert sorted(merged) == sorted(grouped)
        for key in grouped:
            assert merged[key].items == grouped[key].items

    def test_duplicate_link_in_second_merge(
        self, make_article: Callable[..., RawArticle], now: datetime
    ) -> None:
        """Re-merging an article with the same link keeps exactly one item."""
        article = make_article(link="https://x/a", title="Original")
        duplicate = make_article(link="https://x/a", title="Updated headline")

        first = merge_articles({}, [article], now)
        second = merge_articles(first, [duplicate], now)

        assert second["2026-W42"].items == [article]
        assert second["2026-W42"].summary == "1 KI-Nachricht aus Kalenderwoche 42"

    def test_does_not_mutate_existing(
        self, make_article: Callable[..., RawArticle], now: datetime
    ) -> None:
        """The caller's map and digests are left untouched."""
        existing = merge_articles({}, [make_article(title="A")], now)
        snapshot = {k: d.model_dump() for k, d in existing.items()}

        merged = merge_articles(existing, [make_article(title="B")], now)

        assert {k: d.model_dump() for k, d in existing.items()} == snapshot
        assert merged is not existing
        assert merged["2026-W42"] is not existing["2026-W42"]
        assert merged["2026-W42"].item_count == 2

    def test_preserves_created_at_and_generated_content(
        self, make_article: Callable[..., RawArticle], now: datetime
    ) -> None:
        """Existing bucket metadata survives a merge."""
        existing = merge_articles({}, [make_article(title="A")], now)
        existing["2026-W42"].generated_content = "Newsletter text"
        later = now + timedelta(days=1)

        merged = merge_articles(existing, [make_article(title="B")], later)

        assert merged["2026-W42"].created_at == now
        assert merged["2026-W42"].generated_content == "Newsletter text"

    def test_new_bucket_created_with_now(
        self, make_article: Callable[..., RawArticle], now: datetime
    ) -> None:
        """A new week gets a fresh bucket stamped with the merge time."""
        existing = merge_articles({}, [make_article()], now)
        later = now + timedelta(days=7)
        next_week = make_article(published_at="2026-10-20T09:00:00Z")

        merged = merge_articles(existing, [next_week], later)

        assert sorted(merged) == ["2026-W42", "2026-W43"]
        assert merged["2026-W43"].created_at == later

    def test_existing_item_wins_over_new_duplicate(
        self, make_article: Callable[..., RawArticle], now: datetime
    ) -> None:
        """New articles are appended, so stored items take precedence."""
        stored = make_article(title="KI-Gesetz beschlossen", link="https://x/old")
        incoming = make_article(title="KI-GESETZ BESCHLOSSEN", link="https://y/new")

        merged = merge_articles(merge_articles({}, [stored], now), [incoming], now)

        assert merged["2026-W42"].items == [stored]

    def test_merge_is_associative(
        self, make_article: Callable[..., RawArticle], now: datetime
    ) -> None:
        """Merging A then B equals merging A+B at once."""
        batch_a = [
            make_article(link="https://x/1", title="One", published_at="2026-10-12T08:00:00Z"),
            make_article(link="https://x/2", title="Two", published_at="2026-10-05T08:00:00Z"),
            make_article(link="https://x/3", title="One", published_at="2026-10-13T08:00:00Z"),
        ]
        batch_b = [
            make_article(link="https://x/2", title="Two again", published_at="2026-10-06T08:00:00Z"),
            make_article(link="https://x/4", title="Four", published_at="2026-10-14T08:00:00Z"),
            make_article(link="https://x/5", title="five", published_at="2026-10-20T08:00:00Z"),
        ]

        stepwise = merge_articles(merge_articles({}, batch_a, now), batch_b, now)
        at_once = merge_articles({}, batch_a + batch_b, now)

        assert sorted(stepwise) == sorted(at_once)
        for key in at_once:
            assert {i.link for i in stepwise[key].items} == {i.link for i in at_once[key].items}

    def test_tallies_rejections(
        self, make_article: Callable[..., RawArticle], now: datetime
    ) -> None:
        """Rejected and duplicate articles are counted."""
        tally = RejectionTally()
        articles = [
            make_article(link="https://x/a"),
            make_article(link="https://x/a"),
            make_article(published_at="not-a-date"),
        ]

        merge_articles({}, articles, now, tally)

        assert tally.duplicates == 1
        assert tally.rejected["invalid_date"] == 1

    def test_accepts_plain_dict_digests(
        self, make_article: Callable[..., RawArticle], now: datetime
    ) -> None:
        """Digests loaded from JSON as dicts are accepted."""
        existing = {
            k: d.model_dump(mode="json")
            for k, d in merge_articles({}, [make_article(title="A")], now).items()
        }
        merged = merge_articles(existing, [make_article(title="B")], now)
        assert merged["2026-W42"].item_count == 2

    @pytest.mark.parametrize("existing", [None, [], "2026-W42", {"2026-W42": 5}])
    def test_invalid_existing_raises(self, existing: object, now: datetime) -> None:
        """Malformed existing digests fail fast."""
        with pytest.raises(InvalidInputError):
            merge_articles(existing, [], now)  # type: ignore[arg-type]

    def test_invalid_articles_raise(self, now: datetime) -> None:
        """Non-collection articles fail fast."""
        with pytest.raises(InvalidInputError):
            merge_articles({}, 17, now)  # type: ignore[arg-type]

    def test_null_fields_filtered_not_raised(
        self, make_article: Callable[..., RawArticle], now: datetime
    ) -> None:
        """Records with null link or title are dropped while the rest merge."""
        tally = RejectionTally()
        existing = merge_articles({}, [make_article(title="A")], now)
        records = [
            {"title": "B", "link": "https://x/b", "published_at": "2026-10-13T09:00:00Z"},
            {"title": "C", "link": None, "published_at": "2026-10-13T09:00:00Z"},
            {"title": None, "link": "https://x/d", "published_at": "2026-10-13T09:00:00Z"},
        ]

        merged = merge_articles(existing, records, now, tally)

        assert sorted(i.title for i in merged["2026-W42"].items) == ["A", "B"]
        assert tally.rejected["missing_identity"] == 1
        assert tally.rejected["missing_title"] == 1


class TestSelectCurrentDigest:
    """Tests for select_current_digest."""

    def test_empty_map(self) -> None:
        """No digests means no current digest."""
        assert select_current_digest({}) is None

    def test_picks_latest_week(self, now: datetime) -> None:
        """Week 10 is newer than week 9 thanks to zero padding."""
        digests = {
            d.id: d for d in (new_digest(2026, 9, now), new_digest(2026, 10, now), new_digest(2025, 52, now))
        }
        assert select_current_digest(digests).id == "2026-W10"

    def test_picks_latest_year(self, now: datetime) -> None:
        """A new year's week 1 beats the previous year's week 52."""
        digests = {d.id: d for d in (new_digest(2025, 52, now), new_digest(2026, 1, now))}
        assert select_current_digest(digests).id == "2026-W01"
