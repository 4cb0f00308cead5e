import pytest

from models.responses import FactualAccuracyReport
from services.feedback_service import (
    EntityDataNotFoundError,
    analyze_and_store,
    get_feedback_history,
    verify_optimized_content,
)
from services.feedback_store import InMemoryFeedbackStore

RESUME = """Jane Doe
jane@x.com | (415) 555-0100

Experience
Senior Software Engineer at Acme Corp
Jan 2020 - Present
• Increased revenue by 30%

Education
BS CS, State U, 2019
"""

REWRITE_OK = """Jane Doe | jane@x.com

Experience
Senior Engineer (Software) at Acme Corp, Jan 2020 - Present.
• Increased revenue by 30% for the core product.

Education
BS CS, State U, 2019
"""

REWRITE_LOSSY = """Jane Doe

Experience
Senior Software Engineer, Jan 2020 - Present.

Education
BS CS, State U, 2019
"""


@pytest.fixture
def store():
    return InMemoryFeedbackStore()


def test_analyze_and_store_versions(store):
    first = analyze_and_store(store, "doc-1", RESUME)
    second = analyze_and_store(store, "doc-1", RESUME)
    assert (first.version, second.version) == (1, 2)
    assert first.extracted.raw_text == RESUME
    assert first.extracted.entities
    assert [s.id for s in first.extracted_sections] == [s.id for s in first.extracted.sections]


def test_verify_accurate_rewrite(store):
    analyze_and_store(store, "doc-1", RESUME)
    report = verify_optimized_content(store, "doc-1", REWRITE_OK)

    assert isinstance(report, FactualAccuracyReport)
    assert report.document_id == "doc-1"
    assert report.version == 1
    assert report.is_factually_accurate is True
    assert report.missing_entities == []
    assert [m.original.value for m in report.modified_entities] == ["Senior Software Engineer"]


def test_verify_lossy_rewrite(store):
    analyze_and_store(store, "doc-1", RESUME)
    report = verify_optimized_content(store, "doc-1", REWRITE_LOSSY)

    assert report.is_factually_accurate is False
    missing = {e.value for e in report.missing_entities}
    assert missing == {"Acme Corp", "Increased revenue by 30%"}
    assert "critical details may have been lost" in report.summary


def test_verify_against_specific_version(store):
    analyze_and_store(store, "doc-1", RESUME)
    analyze_and_store(store, "doc-1", "Jane Doe")

    assert verify_optimized_content(store, "doc-1", "Jane Doe").is_factually_accurate
    report = verify_optimized_content(store, "doc-1", "Jane Doe", version=1)
    assert report.version == 1
    assert report.is_factually_accurate is False


def test_verify_without_baseline_raises(store):
    with pytest.raises(EntityDataNotFoundError):
        verify_optimized_content(store, "never-seen", "anything")


def test_verify_unknown_version_raises(store):
    analyze_and_store(store, "doc-1", RESUME)
    with pytest.raises(EntityDataNotFoundError, match="version 9"):
        verify_optimized_content(store, "doc-1", "anything", version=9)


def test_history_newest_first(store):
    analyze_and_store(store, "doc-1", RESUME)
    analyze_and_store(store, "doc-1", RESUME)
    assert [r.version for r in get_feedback_history(store, "doc-1")] == [2, 1]
    assert get_feedback_history(store, "doc-2") == []
