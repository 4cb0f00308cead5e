from pydantic import BaseModel, ConfigDict, Field

from models.schemas.extracted_resume import Entity
from models.schemas.verification_result import ModifiedEntity


class FactualAccuracyReport(BaseModel):
    """Verification of a rewritten resume against a stored extraction."""
    model_config = ConfigDict(populate_by_name=True)

    document_id: str = Field(alias="documentId")
    version: int
    is_factually_accurate: bool = Field(alias="isFactuallyAccurate")
    missing_entities: list[Entity] = Field(default=[], alias="missingEntities")
    modified_entities: list[ModifiedEntity] = Field(default=[], alias="modifiedEntities")
    summary: str = ""
