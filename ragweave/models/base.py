"""Base model classes for RAGWeave."""

from pydantic import BaseModel, ConfigDict


class RagWeaveBaseModel(BaseModel):
    """Base model with common configuration for all RAGWeave models."""

    model_config = ConfigDict(
        # Allow population by field name or by camelCase wire alias
        populate_by_name=True,
        validate_assignment=True,
        extra='forbid',
    )

    def to_wire(self) -> dict:
        """Serialize using wire (camelCase) aliases."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FrozenModel(RagWeaveBaseModel):
    """Base model for values that must not change after creation."""

    model_config = ConfigDict(frozen=True)
