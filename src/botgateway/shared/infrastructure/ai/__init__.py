"""
AI infrastructure for Bot Gateway.
"""

from .model_client import (
    ChatModel, ProviderSpec, TokenCallback,
    chat_model_provider, get_provider_spec, supports_credential_override,
)
from .embedding_client import Embeddings, get_embeddings

__all__ = [
    "ChatModel",
    "ProviderSpec",
    "TokenCallback",
    "chat_model_provider",
    "get_provider_spec",
    "supports_credential_override",
    "Embeddings",
    "get_embeddings",
]
