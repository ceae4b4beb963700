"""
Conversation turns and retrieved documents.
"""

from enum import Enum
from typing import Any, Dict
from pydantic import AliasChoices, ConfigDict, Field, field_validator

from .base import BaseModel, MetadataMixin


class TurnRole(str, Enum):
    """Speaker of a chat turn."""
    HUMAN = "human"
    AI = "ai"


class ChatTurn(BaseModel):
    """
    One caller-supplied turn of prior conversation.

    Accepts `type` in place of `role` so a returned history can be sent back as is.
    """

    model_config = ConfigDict(extra="ignore")

    role: TurnRole = Field(..., validation_alias=AliasChoices("role", "type"), description="human or ai")
    text: str = Field(default="", description="Turn content")

    def to_chain_message(self) -> Dict[str, str]:
        """Shape consumed by conversation grouping."""
        return {"type": self.role, "content": self.text}


class RetrievedDocument(BaseModel, MetadataMixin):
    """A ranked supporting document produced by a retriever."""

    page_content: str = Field(..., alias="pageContent", description="Document text")

    @field_validator('page_content', mode='before')
    @classmethod
    def coerce_content(cls, v):
        return "" if v is None else str(v)

    def to_payload(self) -> Dict[str, Any]:
        """Wire shape used in `sourceDocuments`."""
        return self.model_dump(by_alias=True)
