"""
Request and response models for bot chat.
"""

from typing import Any, Dict, List

from pydantic import ConfigDict, Field

from ...shared.models import BaseModel, ChatTurn, RetrievedDocument


class ChatRequest(BaseModel):
    """Body of a bot chat API call."""

    model_config = ConfigDict(extra="ignore")

    message: str = Field(..., description="User message")
    history: List[ChatTurn] = Field(default_factory=list, description="Prior turns, oldest first")
    stream: bool = Field(default=False, description="Deliver as server-sent events")

    @property
    def question(self) -> str:
        """Message as sent to the chain: trimmed, on one line."""
        return self.message.strip().replace("\n", " ")

    def chain_history(self) -> List[Dict[str, str]]:
        return [turn.to_chain_message() for turn in self.history]


class BotReply(BaseModel):
    """Generated answer and its supporting documents."""

    text: str
    source_documents: List[RetrievedDocument] = Field(default_factory=list, alias="sourceDocuments")


class ChatResult(BaseModel):
    """Terminal payload of a chat request."""

    bot: BotReply
    history: List[Dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def build(cls,
              request: ChatRequest,
              text: str,
              documents: List[RetrievedDocument] = None) -> "ChatResult":
        """Echo the caller's history followed by the new human and ai turns."""
        history = [turn.model_dump() for turn in request.history]
        history.append({"type": "human", "text": request.message})
        history.append({"type": "ai", "text": text})
        return cls(
            bot=BotReply(text=text, source_documents=list(documents or [])),
            history=history,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "bot": {
                "text": self.bot.text,
                "sourceDocuments": [document.to_payload() for document in self.bot.source_documents],
            },
            "history": self.history,
        }
