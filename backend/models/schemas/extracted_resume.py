"""Extraction output: typed entities and the sections they were found in."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EntityType(str, Enum):
    PERSON_NAME = "PERSON_NAME"
    COMPANY_NAME = "COMPANY_NAME"
    JOB_TITLE = "JOB_TITLE"
    DATE = "DATE"
    DATE_RANGE = "DATE_RANGE"
    LOCATION = "LOCATION"
    EDUCATION = "EDUCATION"
    DEGREE = "DEGREE"
    SKILL = "SKILL"
    CERTIFICATION = "CERTIFICATION"
    PHONE = "PHONE"
    EMAIL = "EMAIL"
    WEBSITE = "WEBSITE"
    ACHIEVEMENT = "ACHIEVEMENT"
    METRIC = "METRIC"


class SectionType(str, Enum):
    HEADER = "HEADER"
    SUMMARY = "SUMMARY"
    EXPERIENCE = "EXPERIENCE"
    EDUCATION = "EDUCATION"
    SKILLS = "SKILLS"
    CERTIFICATIONS = "CERTIFICATIONS"
    PROJECTS = "PROJECTS"
    LANGUAGES = "LANGUAGES"
    ACHIEVEMENTS = "ACHIEVEMENTS"
    VOLUNTEER = "VOLUNTEER"
    PUBLICATIONS = "PUBLICATIONS"
    REFERENCES = "REFERENCES"
    CONTACT = "CONTACT"


class Position(BaseModel):
    """Half-open character span [start, end)."""
    start: int = Field(ge=0)
    end: int

    @model_validator(mode="after")
    def _check_span(self) -> "Position":
        if self.end <= self.start:
            raise ValueError(f"empty or inverted span: [{self.start}, {self.end})")
        return self


class Entity(BaseModel):
    """A single extracted fact."""
    type: EntityType
    value: str
    confidence: float = Field(ge=0.0, le=1.0)
    position: Position
    metadata: dict[str, Any] = {}

    def shifted(self, offset: int, **metadata: Any) -> "Entity":
        """Return a copy moved by ``offset`` characters with extra metadata merged in."""
        return self.model_copy(
            update={
                "position": Position(
                    start=self.position.start + offset,
                    end=self.position.end + offset,
                ),
                "metadata": {**self.metadata, **metadata},
            }
        )


class Section(BaseModel):
    """A contiguous, typed span of the document.

    ``start_position``/``end_position`` are inclusive document offsets of the
    whole section (header line included). ``content_offset`` is the document
    offset of the first character of ``content``; section-local entity
    positions are relative to it.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: SectionType
    title: str
    content: str = ""
    content_offset: int = Field(default=0, alias="contentOffset")
    entities: list[Entity] = []
    start_position: int = Field(alias="startPosition")
    end_position: int = Field(alias="endPosition")

    def contains(self, entity: Entity) -> bool:
        return (
            self.start_position <= entity.position.start
            and entity.position.end - 1 <= self.end_position
        )


class ExtractedResumeData(BaseModel):
    """Unit of record produced once per document ingestion."""
    model_config = ConfigDict(populate_by_name=True)

    entities: list[Entity] = []
    sections: list[Section] = []
    raw_text: str = Field(default="", alias="rawText")
