"""
Bot configuration and model catalog records.

Both are written by the administration side of the platform and are
read-only to the chat gateway.
"""

from enum import Enum
from typing import Any, Dict, Optional
from pydantic import ConfigDict, Field, field_validator

from .base import BaseModel


class ModelType(str, Enum):
    """Kinds of catalog entries."""
    EMBEDDING = "embedding"
    CHAT = "chat"


class Bot(BaseModel):
    """A configured chat agent."""

    id: str = Field(..., description="Internal bot identifier")
    public_id: str = Field(..., description="Identifier exposed to API callers")
    name: Optional[str] = Field(default=None, description="Display name")

    # Model choice
    provider: str = Field(..., description="Chat model vendor")
    model: str = Field(..., description="Chat model catalog name")
    embedding: str = Field(..., description="Embedding model catalog name")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)

    # Retrieval
    use_hybrid_search: bool = Field(default=False, description="Combine lexical and vector ranking")

    # Prompts
    question_generator_prompt: Optional[str] = Field(default=None, description="Template condensing a follow-up into a standalone question")
    qa_prompt: Optional[str] = Field(default=None, description="Template answering from retrieved context")

    # Credentials
    bot_api_key: Optional[str] = Field(default=None, description="Secret callers must present")
    bot_model_api_key: Optional[str] = Field(default=None, description="Per-bot provider credential override")

    @property
    def model_credential(self) -> Optional[str]:
        """The per-bot provider credential, or None when unset or blank."""
        if self.bot_model_api_key and self.bot_model_api_key.strip():
            return self.bot_model_api_key
        return None


class ModelInfo(BaseModel):
    """A resolved catalog entry for a named embedding or chat model."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str = Field(..., description="Catalog name of the model")
    model_type: ModelType = Field(..., description="embedding or chat")
    model_provider: str = Field(..., description="Provider serving the model")
    config: Dict[str, Any] = Field(default_factory=dict, description="Provider-specific configuration")

    @field_validator('config', mode='before')
    @classmethod
    def default_config(cls, v):
        return v or {}
