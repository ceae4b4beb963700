"""
Shared data models for Bot Gateway.
"""

from .base import BaseModel, TimestampMixin, MetadataMixin
from .bot import Bot, ModelInfo, ModelType
from .conversation import ChatTurn, TurnRole, RetrievedDocument

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "MetadataMixin",
    "Bot",
    "ModelInfo",
    "ModelType",
    "ChatTurn",
    "TurnRole",
    "RetrievedDocument",
]
