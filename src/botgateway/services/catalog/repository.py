"""
Storage backends for the Bot Registry and Model Catalog.

Provides an in-memory backend for development and tests and a PostgreSQL
backend for deployments sharing the administration database.
"""

import json
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from ...shared import get_logger, get_database
from ...shared.exceptions import StorageError
from ...shared.models import Bot, ModelInfo, ModelType


class CatalogRepository(ABC):
    """Abstract read access to bots and catalog models."""

    @abstractmethod
    def get_bot_by_public_id(self, public_id: str) -> Optional[Bot]:
        """Retrieve a bot by its public identifier."""
        pass

    @abstractmethod
    def get_model_info(self, model_id: str, model_type: ModelType) -> Optional[ModelInfo]:
        """Retrieve a non-deleted catalog model by name and type."""
        pass


class InMemoryCatalogRepository(CatalogRepository):
    """
    In-memory catalog for development and testing.

    Doesn't persist between restarts.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self._lock = threading.RLock()
        self._bots: Dict[str, Bot] = {}
        self._models: Dict[Tuple[str, str], ModelInfo] = {}

    def add_bot(self, bot: Bot) -> None:
        with self._lock:
            self._bots[bot.public_id] = bot
            self.logger.debug(f"Stored bot: {bot.public_id}")

    def add_model(self, model_info: ModelInfo) -> None:
        with self._lock:
            self._models[(model_info.model_id, model_info.model_type)] = model_info
            self.logger.debug(f"Stored {model_info.model_type} model: {model_info.model_id}")

    def remove_model(self, model_id: str, model_type: ModelType) -> None:
        with self._lock:
            self._models.pop((model_id, ModelType(model_type).value), None)

    def get_bot_by_public_id(self, public_id: str) -> Optional[Bot]:
        with self._lock:
            return self._bots.get(public_id)

    def get_model_info(self, model_id: str, model_type: ModelType) -> Optional[ModelInfo]:
        with self._lock:
            return self._models.get((model_id, ModelType(model_type).value))


class PostgresCatalogRepository(CatalogRepository):
    """Catalog backed by the `bots` and `models` tables."""

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS bots (
            id TEXT PRIMARY KEY,
            public_id TEXT UNIQUE NOT NULL,
            name TEXT,
            provider TEXT NOT NULL,
            model TEXT NOT NULL,
            embedding TEXT NOT NULL,
            temperature DOUBLE PRECISION NOT NULL DEFAULT 0.7,
            use_hybrid_search BOOLEAN NOT NULL DEFAULT FALSE,
            question_generator_prompt TEXT,
            qa_prompt TEXT,
            bot_api_key TEXT,
            bot_model_api_key TEXT
        );
        CREATE TABLE IF NOT EXISTS models (
            id SERIAL PRIMARY KEY,
            model_id TEXT NOT NULL,
            model_type TEXT NOT NULL,
            model_provider TEXT NOT NULL,
            config JSONB,
            deleted BOOLEAN NOT NULL DEFAULT FALSE
        );
    """

    def __init__(self, database=None):
        self.logger = get_logger(__name__)
        self.db = database or get_database()

    def ensure_schema(self) -> None:
        self.db.execute(self.SCHEMA)

    def get_bot_by_public_id(self, public_id: str) -> Optional[Bot]:
        row = self.db.fetch_one(
            "SELECT id, public_id, name, provider, model, embedding, temperature, "
            "use_hybrid_search, question_generator_prompt, qa_prompt, bot_api_key, "
            "bot_model_api_key FROM bots WHERE public_id = %s LIMIT 1",
            (public_id,),
        )
        if row is None:
            return None
        try:
            return Bot(**row)
        except ValueError as e:
            raise StorageError(f"Malformed bot record {public_id}: {e}") from e

    def get_model_info(self, model_id: str, model_type: ModelType) -> Optional[ModelInfo]:
        row = self.db.fetch_one(
            "SELECT model_id, model_type, model_provider, config FROM models "
            "WHERE model_id = %s AND model_type = %s AND deleted = FALSE LIMIT 1",
            (model_id, ModelType(model_type).value),
        )
        if row is None:
            return None

        config = row.get("config")
        try:
            if isinstance(config, str):
                config = json.loads(config)
            row["config"] = config or {}
            return ModelInfo(**row)
        except ValueError as e:
            raise StorageError(f"Malformed model record {model_id}: {e}") from e
