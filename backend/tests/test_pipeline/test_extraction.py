"""Tests for the document-level extraction pipeline."""

import time
from collections import Counter
from unittest.mock import patch

import pytest

from models.schemas import EntityType, ExtractedResumeData, SectionType
from services.entity_extractor import extract_section_entities as real_extract
from services.pipeline.extraction import extract_entities
from services.pipeline.verifier import verify_entity_preservation

SAMPLE_RESUME = """John Doe
john.doe@email.com | (555) 123-4567
linkedin.com/in/johndoe | github.com/johndoe

Summary
Experienced software engineer with 5+ years building web applications.

Experience
Senior Software Engineer | TechCorp | Jan 2021 - Present
• Increased API throughput by 40% through caching
• Led team of 5 engineers

Software Engineer at Acme Corp
Jun 2019 - Dec 2020
• Developed React frontend components

Education
B.S. Computer Science | State University | 2019

Skills
Python, JavaScript, React, Docker, AWS, PostgreSQL, Git
"""

CORPUS = [
    SAMPLE_RESUME,
    "EXPERIENCE\nSenior Dev | Acme\n• Built X\nEDUCATION\nBS CS, State U, 2019",
    "Jane Doe, jane@x.com, (415) 555-0100",
    "Jane Doe\r\nExperience\r\nData Analyst at Globex\r\n2018 - 2020\r\n",
    "\n\n  Skills\n  • Terraform\n  • Kubernetes\n\nCertifications\n• Certified Scrum Master\n",
    "",
]


def _values(entities, entity_type):
    return [e.value for e in entities if e.type == entity_type]


def test_extract_sample_resume():
    result = extract_entities(SAMPLE_RESUME)

    assert isinstance(result, ExtractedResumeData)
    assert result.raw_text == SAMPLE_RESUME
    assert [s.type for s in result.sections] == [
        SectionType.HEADER, SectionType.SUMMARY, SectionType.EXPERIENCE,
        SectionType.EDUCATION, SectionType.SKILLS,
    ]
    assert _values(result.entities, EntityType.PERSON_NAME) == ["John Doe"]
    assert _values(result.entities, EntityType.EMAIL) == ["john.doe@email.com"]
    assert _values(result.entities, EntityType.JOB_TITLE) == [
        "Senior Software Engineer", "Software Engineer",
    ]
    assert _values(result.entities, EntityType.COMPANY_NAME) == ["Acme Corp"]
    assert _values(result.entities, EntityType.DEGREE) == ["B.S. Computer Science"]
    assert "PostgreSQL" in _values(result.entities, EntityType.SKILL)


def test_entities_carry_section_metadata():
    result = extract_entities(SAMPLE_RESUME)
    sections = {s.id: s for s in result.sections}
    for entity in result.entities:
        section = sections[entity.metadata["sectionId"]]
        assert entity.metadata["sectionType"] == section.type.value


def test_short_resume_positions():
    text = "EXPERIENCE\nSenior Dev | Acme\n• Built X\nEDUCATION\nBS CS, State U, 2019"
    result = extract_entities(text)
    degree = next(e for e in result.entities if e.type == EntityType.DEGREE)
    assert degree.value == "BS CS"
    assert (degree.position.start, degree.position.end) == (49, 54)


def test_empty_document():
    result = extract_entities("")
    assert result.entities == []
    assert len(result.sections) == 1
    assert result.sections[0].type == SectionType.HEADER


def test_failing_section_does_not_abort_document():
    def flaky(text, section_type):
        if section_type == SectionType.EXPERIENCE:
            raise RuntimeError("rule blew up")
        return real_extract(text, section_type)

    with patch("services.pipeline.extraction.extract_section_entities", side_effect=flaky):
        result = extract_entities(SAMPLE_RESUME)

    experience = next(s for s in result.sections if s.type == SectionType.EXPERIENCE)
    assert experience.entities == []
    assert _values(result.entities, EntityType.JOB_TITLE) == []
    assert _values(result.entities, EntityType.EMAIL) == ["john.doe@email.com"]
    assert _values(result.entities, EntityType.DEGREE) == ["B.S. Computer Science"]


def test_segmentation_failure_returns_empty_result():
    with patch("services.pipeline.extraction.segment", side_effect=RuntimeError("boom")):
        result = extract_entities(SAMPLE_RESUME)
    assert result.entities == []
    assert result.sections == []
    assert result.raw_text == SAMPLE_RESUME


@pytest.mark.property
@pytest.mark.parametrize("text", CORPUS)
def test_positions_are_exact_slices(text):
    result = extract_entities(text)
    for entity in result.entities:
        assert 0 <= entity.position.start < entity.position.end <= len(text)
        assert text[entity.position.start:entity.position.end] == entity.value


@pytest.mark.property
@pytest.mark.parametrize("text", CORPUS)
def test_entities_match_their_sections(text):
    result = extract_entities(text)

    section_keys = Counter(
        (e.type, e.position.start, e.position.end)
        for s in result.sections for e in s.entities
    )
    document_keys = Counter((e.type, e.position.start, e.position.end) for e in result.entities)
    assert section_keys == document_keys
    assert all(count == 1 for count in document_keys.values())

    for section in result.sections:
        for entity in section.entities:
            assert section.contains(entity)


@pytest.mark.property
@pytest.mark.parametrize("text", CORPUS)
def test_entities_in_document_order(text):
    starts = [e.position.start for e in extract_entities(text).entities]
    assert starts == sorted(starts)


@pytest.mark.property
@pytest.mark.parametrize("text", CORPUS)
def test_unchanged_text_is_preserved(text):
    result = extract_entities(text)
    verification = verify_entity_preservation(result.entities, text)
    assert verification.preserved
    assert verification.missing_entities == []
    assert verification.modified_entities == []


@pytest.mark.parametrize("header", ["Education", "Experience", "Volunteer", "Contact"])
def test_long_capitalised_section_extracts_quickly(header):
    # ~50k chars of capitalised words with no keyword, suffix or comma
    text = f"{header}\n" + "Alpha Beta " * 4500
    assert len(text) <= 50000

    started = time.perf_counter()
    result = extract_entities(text)
    elapsed = time.perf_counter() - started

    assert elapsed < 2.0
    assert result.sections[0].type.value == header.upper()
