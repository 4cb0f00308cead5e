"""Pydantic contracts shared by the extraction engine, the store and the API."""

from models.schemas.extracted_resume import (
    Entity,
    EntityType,
    ExtractedResumeData,
    Position,
    Section,
    SectionType,
)
from models.schemas.feedback_record import FeedbackRecord, SectionSummary
from models.schemas.verification_result import ModifiedEntity, VerificationResult

__all__ = [
    "Entity",
    "EntityType",
    "ExtractedResumeData",
    "Position",
    "Section",
    "SectionType",
    "FeedbackRecord",
    "SectionSummary",
    "ModifiedEntity",
    "VerificationResult",
]
