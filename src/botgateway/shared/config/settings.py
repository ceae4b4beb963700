"""
Centralized configuration management for Bot Gateway.

All environment variables and settings are managed here so the API layer,
the orchestrator and the storage/provider clients read one consistent view.
"""

from functools import lru_cache
from typing import Optional, Dict, Any
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Centralized settings for Bot Gateway.

    All configuration is loaded from environment variables with sensible defaults.
    Uses Pydantic for validation and type safety.
    """

    # === Application Settings ===
    app_name: str = Field(default="Bot Gateway", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    # === API Settings ===
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    api_key_header: str = Field(default="x-api-key", description="Header carrying the caller's bot API key")

    # === Storage Settings ===
    storage_backend: str = Field(default="memory", description="Registry/history backend: memory or postgres")
    database_url: Optional[str] = Field(default=None, description="PostgreSQL DSN", validation_alias="DATABASE_URL")
    database_min_connections: int = Field(default=1, description="Min pooled connections")
    database_max_connections: int = Field(default=10, description="Max pooled connections")

    # === Vector Index Settings ===
    chroma_persist_directory: Optional[str] = Field(default=None, description="ChromaDB directory (ephemeral if unset)", validation_alias="CHROMA_PERSIST_DIRECTORY")
    chroma_collection: str = Field(default="bot_documents", description="ChromaDB collection holding bot documents")
    retriever_top_k: int = Field(default=4, description="Documents returned per retrieval")
    hybrid_vector_weight: float = Field(default=0.7, description="Vector score weight in hybrid fusion")
    hybrid_lexical_weight: float = Field(default=0.3, description="Lexical score weight in hybrid fusion")

    # === AI Provider Settings ===
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key", validation_alias="OPENAI_API_KEY")
    gemini_api_key: Optional[str] = Field(default=None, description="Google Gemini API key", validation_alias="GEMINI_API_KEY")
    default_embedding_model: str = Field(default="all-MiniLM-L6-v2", description="Sentence transformer model")

    # === Monitoring Settings ===
    enable_metrics: bool = Field(default=True, description="Enable metrics collection")
    metrics_max_history: int = Field(default=1000, description="Samples kept per metric")

    # === Logging Configuration ===
    @property
    def logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return {
            'level': self.log_level,
            'file': self.log_file,
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }

    # === Monitoring Configuration ===
    @property
    def monitoring_config(self) -> Dict[str, Any]:
        """Get monitoring configuration."""
        return {
            'enabled': self.enable_metrics,
            'max_history': self.metrics_max_history,
            'retention_seconds': 3600
        }

    @property
    def database_config(self) -> Dict[str, Any]:
        """Get database configuration as dictionary."""
        return {
            'dsn': self.database_url,
            'min_connections': self.database_min_connections,
            'max_connections': self.database_max_connections,
        }

    @property
    def retrieval_config(self) -> Dict[str, Any]:
        """Get vector index and retriever configuration."""
        return {
            'persist_directory': self.chroma_persist_directory,
            'collection': self.chroma_collection,
            'top_k': self.retriever_top_k,
            'vector_weight': self.hybrid_vector_weight,
            'lexical_weight': self.hybrid_lexical_weight,
        }

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator('storage_backend')
    @classmethod
    def validate_storage_backend(cls, v):
        valid_backends = {'memory', 'postgres'}
        if v.lower() not in valid_backends:
            raise ValueError(f"Storage backend must be one of {valid_backends}")
        return v.lower()

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once per application lifecycle.
    """
    return Settings()
