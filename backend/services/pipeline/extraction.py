"""Extraction pipeline: segment a resume, then extract entities per section.

Flow:
    raw text
      ├─ segment(text)                                  → [Section]
      └─ for each section:
           extract_section_entities(content, type)      → [Entity] (section-local)
           shift by content_offset, tag sectionId/Type  → [Entity] (document-global)
                       ↓
         ExtractedResumeData(entities, sections, raw_text)

A rule family failing on one section is logged and leaves that section
without entities; the rest of the document is still extracted.
"""

import logging

from models.schemas.extracted_resume import Entity, EntityType, ExtractedResumeData, Section
from services.entity_extractor import extract_section_entities
from services.section_parser import section_types, segment

logger = logging.getLogger(__name__)


def _place_entities(
    section: Section,
    local_entities: list[Entity],
    seen: set[tuple[EntityType, int, int]],
) -> list[Entity]:
    """Move section-local entities into document coordinates."""
    placed: list[Entity] = []
    for entity in local_entities:
        global_entity = entity.shifted(
            section.content_offset,
            sectionId=section.id,
            sectionType=section.type.value,
        )
        if not section.contains(global_entity):
            logger.warning(
                "Dropping %s %r: position %d-%d outside %s",
                entity.type.value, entity.value,
                global_entity.position.start, global_entity.position.end, section.id,
            )
            continue
        key = (global_entity.type, global_entity.position.start, global_entity.position.end)
        if key in seen:
            continue
        seen.add(key)
        placed.append(global_entity)
    return placed


def extract_entities(document_text: str) -> ExtractedResumeData:
    """Run segmentation and section-aware extraction over a whole document."""
    try:
        sections = segment(document_text)
    except Exception:
        logger.exception("Section segmentation failed")
        return ExtractedResumeData(raw_text=document_text)

    entities: list[Entity] = []
    result_sections: list[Section] = []
    seen: set[tuple[EntityType, int, int]] = set()

    for section in sections:
        try:
            local_entities = extract_section_entities(section.content, section.type)
        except Exception:
            logger.exception(
                "Entity extraction failed for %s (%s)", section.id, section.type.value
            )
            local_entities = []

        placed = _place_entities(section, local_entities, seen)
        entities.extend(placed)
        result_sections.append(section.model_copy(update={"entities": placed}))

    logger.info(
        "Extracted %d entities from %d sections (%s)",
        len(entities), len(result_sections), ", ".join(section_types(result_sections)),
    )
    return ExtractedResumeData(
        entities=entities,
        sections=result_sections,
        raw_text=document_text,
    )
