from pydantic import BaseModel, Field

from config import settings
from models.schemas.extracted_resume import Entity


class ExtractRequest(BaseModel):
    text: str = Field(..., max_length=settings.max_document_chars, description="Plain text resume content")


class VerifyRequest(BaseModel):
    entities: list[Entity] = Field(..., description="Entities of the original extraction")
    text: str = Field(..., max_length=settings.max_document_chars, description="Rewritten resume text")


class DocumentVerifyRequest(BaseModel):
    text: str = Field(..., max_length=settings.max_document_chars, description="Rewritten resume text")
    version: int | None = Field(default=None, ge=1, description="Stored version to verify against (latest if omitted)")
