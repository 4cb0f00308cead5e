"""Section-aware entity extraction.

Maps each section type to a family of rules from ``entity_rules`` and runs
them over a section's text. Types without a dedicated family (including
unknown type names) get the generic rules.
"""

import logging
from collections.abc import Callable

from models.schemas.extracted_resume import Entity, EntityType, SectionType
from services import entity_rules as rules

logger = logging.getLogger(__name__)

Rule = Callable[[str], list[Entity]]

CONTACT_RULES: tuple[Rule, ...] = (
    rules.extract_person_name,
    rules.extract_emails,
    rules.extract_phones,
    rules.extract_websites,
)
EXPERIENCE_RULES: tuple[Rule, ...] = (
    rules.extract_job_titles,
    rules.extract_companies,
    rules.extract_date_ranges,
    rules.extract_metrics,
)
EDUCATION_RULES: tuple[Rule, ...] = (
    rules.extract_degrees,
    rules.extract_institutions,
    rules.extract_graduation_dates,
)
# Vocabulary first so its higher-confidence hit wins a shared span
SKILL_RULES: tuple[Rule, ...] = (
    rules.extract_known_skills,
    rules.extract_listed_skills,
    rules.extract_inline_skills,
)
GENERIC_RULES: tuple[Rule, ...] = (
    rules.extract_dates,
    rules.extract_locations,
    rules.extract_certifications,
)

RULE_REGISTRY: dict[SectionType, tuple[Rule, ...]] = {
    SectionType.HEADER: CONTACT_RULES,
    SectionType.CONTACT: CONTACT_RULES + GENERIC_RULES,
    SectionType.EXPERIENCE: EXPERIENCE_RULES,
    SectionType.PROJECTS: EXPERIENCE_RULES,
    SectionType.EDUCATION: EDUCATION_RULES,
    SectionType.SKILLS: SKILL_RULES,
    SectionType.ACHIEVEMENTS: GENERIC_RULES + (rules.extract_metrics, rules.extract_achievements),
    SectionType.CERTIFICATIONS: GENERIC_RULES + (rules.extract_certification_lines,),
}

_TYPE_ORDER = {entity_type: i for i, entity_type in enumerate(EntityType)}


def resolve_rules(section_type: SectionType | str) -> tuple[Rule, ...]:
    """Return the rule family for a section type, falling back to generic rules."""
    if isinstance(section_type, SectionType):
        key = section_type
    else:
        try:
            key = SectionType(str(section_type).strip().upper())
        except ValueError:
            logger.debug("Unknown section type %r, using generic rules", section_type)
            return GENERIC_RULES
    return RULE_REGISTRY.get(key, GENERIC_RULES)


def _dedupe_sorted(entities: list[Entity]) -> list[Entity]:
    """Drop repeated (type, span) hits keeping the first, then sort by position."""
    seen: set[tuple[EntityType, int, int]] = set()
    unique: list[Entity] = []
    for entity in entities:
        key = (entity.type, entity.position.start, entity.position.end)
        if key not in seen:
            seen.add(key)
            unique.append(entity)
    return sorted(
        unique,
        key=lambda e: (e.position.start, e.position.end, _TYPE_ORDER[e.type]),
    )


def extract_section_entities(text: str, section_type: SectionType | str) -> list[Entity]:
    """Extract entities from one section's text.

    Positions are relative to ``text``; the caller shifts them into
    document coordinates.
    """
    if not text:
        return []
    entities: list[Entity] = []
    for rule in resolve_rules(section_type):
        entities.extend(rule(text))
    return _dedupe_sorted(entities)
