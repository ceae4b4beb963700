"""
Shared components for Bot Gateway.

Contains common models, utilities, and infrastructure used across all services:

- Common data models and validation
- Centralized configuration management
- Shared exception hierarchy
- Infrastructure services (database, AI providers, monitoring)
"""

from .models import *
from .config import *
from .exceptions import *
from .infrastructure import *

__all__ = [
    # From models
    "BaseModel", "TimestampMixin", "MetadataMixin",
    "Bot", "ModelInfo", "ModelType", "ChatTurn", "TurnRole", "RetrievedDocument",

    # From config
    "Settings", "get_settings",

    # From exceptions
    "BotGatewayError", "ConfigurationError", "DatabaseError", "StorageError",
    "AIError", "RetrievalError", "UpstreamError",
    "DocumentCaptureError", "AuthorizationError", "BotNotFoundError",
    "ForbiddenError", "ResolutionMissingError",

    # From infrastructure
    "DatabaseManager", "get_database",
    "ChatModel", "chat_model_provider", "supports_credential_override",
    "Embeddings", "get_embeddings",
    "get_logger", "setup_logging", "MetricsCollector", "get_metrics",
]
