"""Resume section segmentation.

Splits raw resume text into ordered, non-overlapping sections using
line-level header recognition. Section spans are inclusive document
offsets and together cover the whole text; each section's ``content`` is
the exact body slice (header line excluded), trimmed at both ends, so
entity positions found in it map back to the document by adding
``content_offset``.
"""

import logging
import re
from collections.abc import Iterator

from config import settings
from models.schemas.extracted_resume import Section, SectionType

logger = logging.getLogger(__name__)

# Ordered: the first matching category wins.
SECTION_PATTERNS: list[tuple[SectionType, list[str]]] = [
    (SectionType.SUMMARY, [r"summary", r"profile", r"objective", r"about"]),
    (SectionType.EXPERIENCE, [
        r"professional\s+experience", r"experience", r"work", r"employment", r"history",
    ]),
    (SectionType.EDUCATION, [r"education", r"academic", r"qualifications", r"degrees"]),
    (SectionType.SKILLS, [r"skills", r"expertise", r"competencies", r"proficiencies"]),
    (SectionType.CERTIFICATIONS, [r"certifications", r"certificates", r"licenses"]),
    (SectionType.PROJECTS, [r"projects", r"portfolio"]),
    (SectionType.LANGUAGES, [r"languages"]),
    (SectionType.ACHIEVEMENTS, [r"achievements", r"accomplishments", r"awards"]),
    (SectionType.VOLUNTEER, [r"volunteer", r"community"]),
    (SectionType.PUBLICATIONS, [r"publications", r"papers", r"research"]),
    (SectionType.REFERENCES, [r"references"]),
    (SectionType.CONTACT, [r"contact", r"personal\s+information"]),
]

_COMPILED: list[tuple[SectionType, re.Pattern]] = [
    (section_type, re.compile(rf"\b(?:{'|'.join(patterns)})\b", re.IGNORECASE))
    for section_type, patterns in SECTION_PATTERNS
]

HEADER_TITLE = "Header"


def classify_header(line: str, max_length: int | None = None) -> SectionType | None:
    """Return the section type if ``line`` is a header candidate, else None.

    Long lines are never headers, even when they contain a keyword.
    """
    stripped = line.strip()
    if not stripped:
        return None
    limit = settings.header_max_length if max_length is None else max_length
    if len(stripped) >= limit:
        return None
    for section_type, pattern in _COMPILED:
        if pattern.search(stripped):
            return section_type
    return None


def _iter_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield (offset, line) pairs; lines exclude the trailing newline."""
    offset = 0
    for line in text.split("\n"):
        yield offset, line
        offset += len(line) + 1


def _build_section(
    index: int,
    section_type: SectionType,
    title: str,
    text: str,
    start: int,
    end: int,
    body_start: int,
) -> Section:
    body = text[body_start:end + 1]
    content = body.strip()
    if content:
        content_offset = body_start + len(body) - len(body.lstrip())
    else:
        content_offset = min(body_start, len(text))
    return Section(
        id=f"section-{index}",
        type=section_type,
        title=title,
        content=content,
        content_offset=content_offset,
        start_position=start,
        end_position=end,
    )


def segment(text: str, max_header_length: int | None = None) -> list[Section]:
    """Split resume text into ordered sections.

    Content before the first recognised header goes into a synthetic
    HEADER section starting at offset 0. Input without any header (or
    empty input) yields a single HEADER section.
    """
    # (type, title, start offset, body start offset)
    opened: list[tuple[SectionType, str, int, int]] = []

    for offset, line in _iter_lines(text):
        section_type = classify_header(line, max_header_length)
        if section_type is not None:
            # The first section absorbs any leading blank lines
            start = offset if opened else 0
            opened.append((section_type, line.strip(), start, offset + len(line) + 1))
        elif line.strip() and not opened:
            opened.append((SectionType.HEADER, HEADER_TITLE, 0, 0))

    if not opened:
        opened.append((SectionType.HEADER, HEADER_TITLE, 0, 0))

    sections: list[Section] = []
    for i, (section_type, title, start, body_start) in enumerate(opened):
        if i + 1 < len(opened):
            end = opened[i + 1][2] - 1
        else:
            end = max(len(text) - 1, 0)
        sections.append(
            _build_section(i + 1, section_type, title, text, start, end, body_start)
        )

    logger.debug(
        "Segmented %d chars into %d sections: %s",
        len(text), len(sections), [s.type.value for s in sections],
    )
    return sections


def section_types(sections: list[Section]) -> list[str]:
    """Distinct section type names in document order."""
    seen: list[str] = []
    for section in sections:
        if section.type.value not in seen:
            seen.append(section.type.value)
    return seen
