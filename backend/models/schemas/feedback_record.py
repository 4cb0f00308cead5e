"""Versioned feedback record embedding one extraction result."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from models.schemas.extracted_resume import ExtractedResumeData, SectionType


class SectionSummary(BaseModel):
    id: str
    type: SectionType
    title: str


class FeedbackRecord(BaseModel):
    """Immutable record keyed by (document_id, version)."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    document_id: str = Field(alias="documentId")
    version: int = Field(ge=1)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="createdAt"
    )
    extracted: ExtractedResumeData
    extracted_sections: list[SectionSummary] = Field(default=[], alias="extractedSections")
