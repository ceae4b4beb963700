"""
Base models and mixins for Bot Gateway.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field


class BaseModel(PydanticBaseModel):
    """
    Base model for all Bot Gateway data structures.

    Provides common configuration and utilities.
    """

    model_config = ConfigDict(
        # Allow field population by name or alias
        populate_by_name=True,
        # Validate assignments after object creation
        validate_assignment=True,
        # Use enum values instead of enum names
        use_enum_values=True,
        extra="forbid",
    )


class TimestampMixin(PydanticBaseModel):
    """
    Mixin to add a creation timestamp to models.
    """
    created_at: datetime = Field(default_factory=datetime.utcnow, description="Creation timestamp")


class MetadataMixin(PydanticBaseModel):
    """
    Mixin to add metadata field to models.
    """
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional metadata")

    def get_metadata(self, key: str, default: Any = None) -> Any:
        """Get a metadata value."""
        return self.metadata.get(key, default)
