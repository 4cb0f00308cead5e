"""Use cases around stored extractions: ingest, verify a rewrite, list versions."""

import logging

from models.responses import FactualAccuracyReport
from models.schemas.feedback_record import FeedbackRecord
from services.feedback_store import FeedbackStore
from services.pipeline.extraction import extract_entities
from services.pipeline.verifier import verify_entity_preservation

logger = logging.getLogger(__name__)


class EntityDataNotFoundError(LookupError):
    """No stored extraction to verify against."""


def analyze_and_store(store: FeedbackStore, document_id: str, resume_text: str) -> FeedbackRecord:
    """Extract entities from ``resume_text`` and persist them as a new version."""
    extracted = extract_entities(resume_text)
    record = store.append(document_id, extracted)
    logger.info(
        "Stored extraction v%d for %s (%d entities, %d sections)",
        record.version, document_id, len(extracted.entities), len(extracted.sections),
    )
    return record


def verify_optimized_content(
    store: FeedbackStore,
    document_id: str,
    optimized_text: str,
    version: int | None = None,
) -> FactualAccuracyReport:
    """Verify a rewritten document against the latest (or a given) stored version.

    Raises EntityDataNotFoundError when there is no baseline: accuracy is
    then unknown, never assumed.
    """
    if version is None:
        record = store.latest(document_id)
    else:
        record = store.get(document_id, version)

    if record is None:
        logger.warning("No entity data for %s (version=%s)", document_id, version)
        target = f"version {version} of " if version is not None else ""
        raise EntityDataNotFoundError(f"No entity data found for {target}document {document_id!r}")

    result = verify_entity_preservation(record.extracted.entities, optimized_text)
    return FactualAccuracyReport(
        document_id=document_id,
        version=record.version,
        is_factually_accurate=result.preserved,
        missing_entities=result.missing_entities,
        modified_entities=result.modified_entities,
        summary=result.summary,
    )


def get_feedback_history(store: FeedbackStore, document_id: str) -> list[FeedbackRecord]:
    return store.history(document_id)
