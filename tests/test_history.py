"""Tests for the SQLite scan history."""
import pytest

from privacy_advisor.persistence import HISTORY_LIMIT, ScanHistory


@pytest.fixture
def history(tmp_path):
    return ScanHistory(str(tmp_path / "data" / "history.db"))


def entry(slug, domain="a.example", **extra):
    return {"slug": slug, "domain": domain, **extra}


class TestScanHistory:
    def test_newest_first(self, history):
        history.add(entry("one"))
        history.add(entry("two"))
        assert [e.slug for e in history.read()] == ["two", "one"]

    def test_re_adding_moves_to_front_without_duplicates(self, history):
        history.add(entry("one"))
        history.add(entry("two"))
        items = history.add(entry("one", score=91, label="Safe"))
        assert [e.slug for e in items] == ["one", "two"]
        assert items[0].score == 91
        assert items[0].label == "Safe"

    def test_trimmed_to_limit(self, history):
        for i in range(HISTORY_LIMIT + 3):
            history.add(entry(f"slug-{i}"))
        items = history.read()
        assert len(items) == HISTORY_LIMIT
        assert items[0].slug == f"slug-{HISTORY_LIMIT + 2}"
        assert items[-1].slug == "slug-3"

    def test_invalid_entries_ignored(self, history):
        history.add({"slug": "", "domain": "a.example"})
        history.add({"slug": "x"})
        history.add(entry("ok", score="high"))
        items = history.read()
        assert [e.slug for e in items] == ["ok"]
        assert items[0].score is None

    def test_persists_across_instances(self, history):
        history.add(entry("kept"))
        again = ScanHistory(str(history.db_path))
        assert [e.slug for e in again.read()] == ["kept"]

    def test_clear(self, history):
        history.add(entry("one"))
        history.clear()
        assert history.read() == []
