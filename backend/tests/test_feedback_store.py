"""Tests for the versioned feedback stores."""

import threading
import time
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from models.schemas import ExtractedResumeData, FeedbackRecord, SectionType
from services import feedback_store
from services.feedback_store import (
    InMemoryFeedbackStore,
    SqliteFeedbackStore,
    VersionConflictError,
    get_store,
)
from services.pipeline.extraction import extract_entities

RESUME = """Jane Doe
jane@x.com | (415) 555-0100

Experience
Senior Software Engineer at Acme Corp
Jan 2020 - Present

Education
BS CS, State U, 2019
"""


@pytest.fixture
def extracted():
    return extract_entities(RESUME)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryFeedbackStore()
    else:
        sqlite_store = SqliteFeedbackStore(str(tmp_path / "feedback.db"), max_retries=50)
        yield sqlite_store
        sqlite_store.close()


class TestVersioning:
    def test_first_append_is_version_one(self, store, extracted):
        record = store.append("doc-1", extracted)
        assert isinstance(record, FeedbackRecord)
        assert record.document_id == "doc-1"
        assert record.version == 1
        assert record.created_at.tzinfo is not None

    def test_versions_increase(self, store, extracted):
        versions = [store.append("doc-1", extracted).version for _ in range(3)]
        assert versions == [1, 2, 3]

    def test_documents_are_independent(self, store, extracted):
        store.append("doc-1", extracted)
        store.append("doc-1", extracted)
        assert store.append("doc-2", extracted).version == 1

    def test_concurrent_appends_get_unique_versions(self, store, extracted):
        results = []

        def worker():
            results.append(store.append("doc-1", extracted).version)

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(results) == list(range(1, 11))


class TestReads:
    def test_latest_get_history(self, store, extracted):
        store.append("doc-1", extracted)
        store.append("doc-1", ExtractedResumeData(raw_text="rewritten"))

        latest = store.latest("doc-1")
        assert latest.version == 2
        assert latest.extracted.raw_text == "rewritten"

        first = store.get("doc-1", 1)
        assert first.extracted == extracted
        assert [s.type for s in first.extracted_sections] == [
            SectionType.HEADER, SectionType.EXPERIENCE, SectionType.EDUCATION,
        ]

        assert [r.version for r in store.history("doc-1")] == [2, 1]

    def test_unknown_document(self, store):
        assert store.latest("missing") is None
        assert store.get("missing", 1) is None
        assert store.history("missing") == []

    def test_unknown_version(self, store, extracted):
        store.append("doc-1", extracted)
        assert store.get("doc-1", 7) is None

    def test_record_is_immutable(self, store, extracted):
        record = store.append("doc-1", extracted)
        with pytest.raises(ValidationError):
            record.version = 5


class TestSqliteConflicts:
    def test_retries_after_conflict(self, tmp_path, extracted):
        store = SqliteFeedbackStore(str(tmp_path / "feedback.db"))
        store.append("doc-1", extracted)

        # Simulate a writer that read MAX(version) before the first insert landed
        with patch.object(store, "_next_version", side_effect=[1, 2]):
            record = store.append("doc-1", extracted)

        assert record.version == 2
        assert [r.version for r in store.history("doc-1")] == [2, 1]
        store.close()

    def test_gives_up_after_max_retries(self, tmp_path, extracted):
        store = SqliteFeedbackStore(str(tmp_path / "feedback.db"), max_retries=3)
        store.append("doc-1", extracted)

        with patch.object(store, "_next_version", return_value=1) as next_version:
            with pytest.raises(VersionConflictError):
                store.append("doc-1", extracted)

        assert next_version.call_count == 3
        assert len(store.history("doc-1")) == 1
        store.close()

    def test_persists_across_connections(self, tmp_path, extracted):
        path = str(tmp_path / "nested" / "feedback.db")
        store = SqliteFeedbackStore(path)
        store.append("doc-1", extracted)
        store.close()

        reopened = SqliteFeedbackStore(path)
        assert reopened.latest("doc-1").extracted == extracted
        assert reopened.append("doc-1", extracted).version == 2
        reopened.close()


class TestConfiguredStore:
    def test_default_is_in_memory(self):
        assert isinstance(get_store(), InMemoryFeedbackStore)
        assert get_store() is get_store()

    def test_sqlite_backend(self, tmp_path):
        with patch.object(feedback_store.settings, "feedback_store_backend", "sqlite"), \
                patch.object(feedback_store.settings, "feedback_db_path", str(tmp_path / "f.db")):
            store = get_store()
        assert isinstance(store, SqliteFeedbackStore)
        store.close()

    def test_clear_drops_store(self):
        first = get_store()
        feedback_store.clear()
        assert get_store() is not first

    def test_concurrent_first_calls_share_one_store(self):
        def slow_store():
            time.sleep(0.05)
            return InMemoryFeedbackStore()

        stores = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            stores.append(get_store())

        with patch.object(feedback_store, "InMemoryFeedbackStore", side_effect=slow_store) as factory:
            threads = [threading.Thread(target=worker) for _ in range(8)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        assert factory.call_count == 1
        assert len({id(s) for s in stores}) == 1
