"""
Shared infrastructure components for Bot Gateway.

Provides centralized infrastructure services including:
- PostgreSQL connection pooling
- Embedding and chat model provider clients
- Logging and metrics collection
"""

from .database.connection_manager import DatabaseManager, get_database
from .ai.model_client import ChatModel, chat_model_provider, supports_credential_override
from .ai.embedding_client import Embeddings, get_embeddings
from .monitoring.logger import get_logger, setup_logging
from .monitoring.metrics import MetricsCollector, get_metrics

__all__ = [
    # Database
    "DatabaseManager",
    "get_database",

    # AI Services
    "ChatModel",
    "chat_model_provider",
    "supports_credential_override",
    "Embeddings",
    "get_embeddings",

    # Monitoring
    "get_logger",
    "setup_logging",
    "MetricsCollector",
    "get_metrics",
]
