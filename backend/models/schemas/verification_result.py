"""Preservation verification output."""

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from models.schemas.extracted_resume import Entity


class ModifiedEntity(BaseModel):
    original: Entity
    modified: str


class VerificationResult(BaseModel):
    """Outcome of checking critical entities against a rewritten document.

    ``modified_entities`` is advisory; only ``missing_entities`` makes
    ``preserved`` false.
    """
    model_config = ConfigDict(populate_by_name=True)

    preserved: bool
    missing_entities: list[Entity] = Field(default=[], alias="missingEntities")
    modified_entities: list[ModifiedEntity] = Field(default=[], alias="modifiedEntities")

    @model_validator(mode="after")
    def _check_consistency(self) -> "VerificationResult":
        if self.preserved != (len(self.missing_entities) == 0):
            raise ValueError("preserved must be true exactly when no entity is missing")
        for item in self.modified_entities:
            if item.original in self.missing_entities:
                raise ValueError(f"entity {item.original.value!r} is both missing and modified")
        return self

    @computed_field
    @property
    def summary(self) -> str:
        parts = []
        if self.modified_entities:
            parts.append(f"{len(self.modified_entities)} details may have been modified")
        if self.missing_entities:
            parts.append(f"{len(self.missing_entities)} critical details may have been lost")
        if not parts:
            return "All critical details were preserved."
        return "; ".join(parts)
