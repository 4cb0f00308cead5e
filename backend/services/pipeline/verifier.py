"""Factual-preservation check for rewritten resume text.

Each critical entity of the original extraction must still appear in the
candidate text. An exact substring hit means preserved. Otherwise a
sliding window looks for a stretch of text that still carries most of the
entity's tokens; a hit there is reported as a modification, anything else
as missing. Single-token entities are exact-match only, since the token
ratio degenerates to all-or-nothing for them.
"""

import logging
from collections.abc import Iterable
from typing import Any

from config import settings
from models.schemas.extracted_resume import Entity, EntityType
from models.schemas.verification_result import ModifiedEntity, VerificationResult

logger = logging.getLogger(__name__)

# Entity types whose loss changes the facts of a resume. Skills, links and
# contact details may be legitimately reorganised by a rewrite.
CRITICAL_ENTITY_TYPES: frozenset[EntityType] = frozenset({
    EntityType.PERSON_NAME,
    EntityType.COMPANY_NAME,
    EntityType.JOB_TITLE,
    EntityType.DATE,
    EntityType.DATE_RANGE,
    EntityType.EDUCATION,
    EntityType.DEGREE,
    EntityType.CERTIFICATION,
    EntityType.METRIC,
})


def critical_entities(entities: Iterable[Entity]) -> list[Entity]:
    return [e for e in entities if e.type in CRITICAL_ENTITY_TYPES]


def _window_starts(length: int, size: int, step: int) -> list[int]:
    """Window offsets covering the whole text, the last one aligned to its end."""
    if length <= size:
        return [0]
    starts = list(range(0, length - size, step))
    if starts[-1] + size < length:
        starts.append(length - size)
    return starts


def find_similar_text(
    original: str,
    text: str,
    *,
    window_size: int | None = None,
    step: int | None = None,
    ratio: float | None = None,
) -> str | None:
    """Find a rewritten occurrence of a multi-token value inside ``text``.

    Returns the window slice spanning the matched tokens of the first window
    containing at least ``ratio`` of them, or None.
    """
    window_size = window_size or settings.fuzzy_window_size
    step = step or settings.fuzzy_window_step
    ratio = settings.fuzzy_match_ratio if ratio is None else ratio

    tokens = original.split()
    if len(tokens) < 2:
        return None

    for start in _window_starts(len(text), window_size, step):
        window = text[start:start + window_size]
        matched = [token for token in tokens if token in window]
        # Compared as a fraction: 7 of 10 tokens meets a 0.7 ratio exactly
        if not matched or len(matched) / len(tokens) < ratio:
            continue
        begin = min(window.find(token) for token in matched)
        end = max(window.rfind(token) + len(token) for token in matched)
        if end > begin:
            return window[begin:end]
    return None


def verify_entity_preservation(
    original_entities: Iterable[Entity | dict[str, Any]],
    candidate_text: str,
    *,
    window_size: int | None = None,
    step: int | None = None,
    ratio: float | None = None,
) -> VerificationResult:
    """Check that every critical entity survives in ``candidate_text``."""
    entities = [
        e if isinstance(e, Entity) else Entity.model_validate(e)
        for e in original_entities
    ]
    missing: list[Entity] = []
    modified: list[ModifiedEntity] = []

    for entity in critical_entities(entities):
        if entity.value in candidate_text:
            continue
        similar = find_similar_text(
            entity.value, candidate_text,
            window_size=window_size, step=step, ratio=ratio,
        )
        if similar is not None:
            modified.append(ModifiedEntity(original=entity, modified=similar))
        else:
            missing.append(entity)

    if missing:
        logger.info(
            "%d critical entities missing from candidate text: %s",
            len(missing), [e.value for e in missing],
        )
    return VerificationResult(
        preserved=not missing,
        missing_entities=missing,
        modified_entities=modified,
    )
