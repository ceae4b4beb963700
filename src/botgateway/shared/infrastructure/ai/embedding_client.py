"""
Embedding providers for query and document vectors.

Resolves a catalog entry (provider, model id, config) to an embeddings client
with a common async interface.
"""

import asyncio
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import google.generativeai as genai
from openai import AsyncOpenAI
from sentence_transformers import SentenceTransformer

from ...config.settings import get_settings
from ...exceptions import AIError, ConfigurationError
from ..monitoring.logger import get_logger

OPENAI_COMPATIBLE_PROVIDERS = {"openai", "fireworks", "openrouter", "together", "groq", "local", "ollama"}


class Embeddings(ABC):
    """Common interface for embedding clients."""

    model_name: str

    @abstractmethod
    async def embed_query(self, text: str) -> List[float]:
        """Embed a single search query."""
        pass

    @abstractmethod
    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """Embed a batch of document texts."""
        pass


class SentenceTransformerEmbeddings(Embeddings):
    """
    Local embeddings backed by sentence-transformers.

    Loaded models are shared across instances; loading is guarded per model
    name so concurrent requests do not load the same weights twice.
    """

    _model_cache: Dict[str, SentenceTransformer] = {}
    _model_loading_locks: Dict[str, threading.Lock] = {}
    _lock = threading.Lock()

    def __init__(self, model_name: str, normalize_embeddings: bool = True, batch_size: int = 32):
        self.logger = get_logger(__name__)
        self.model_name = model_name
        self.normalize_embeddings = normalize_embeddings
        self.batch_size = batch_size

    def _get_model_lock(self) -> threading.Lock:
        with self._lock:
            if self.model_name not in self._model_loading_locks:
                self._model_loading_locks[self.model_name] = threading.Lock()
            return self._model_loading_locks[self.model_name]

    def get_model(self) -> SentenceTransformer:
        """Get or load the embedding model."""
        cached_model = self._model_cache.get(self.model_name)
        if cached_model is not None:
            return cached_model

        with self._get_model_lock():
            cached_model = self._model_cache.get(self.model_name)
            if cached_model is not None:
                return cached_model

            try:
                start_time = time.time()
                model = SentenceTransformer(self.model_name)
                self.logger.info(f"Loaded embedding model in {time.time() - start_time:.2f}s: {self.model_name}")
            except Exception as e:
                raise AIError(f"Failed to load embedding model {self.model_name}: {e}") from e

            self._model_cache[self.model_name] = model
            return model

    def _encode(self, texts: List[str]) -> List[List[float]]:
        model = self.get_model()
        try:
            embeddings = model.encode(
                texts,
                normalize_embeddings=self.normalize_embeddings,
                batch_size=self.batch_size,
                show_progress_bar=False,
                convert_to_numpy=True
            )
        except Exception as e:
            raise AIError(f"Failed to encode texts: {e}") from e
        return embeddings.tolist()

    async def embed_query(self, text: str) -> List[float]:
        vectors = await asyncio.to_thread(self._encode, [text])
        return vectors[0]

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        return await asyncio.to_thread(self._encode, texts)


class OpenAIEmbeddings(Embeddings):
    """Embeddings from the OpenAI API or any OpenAI-compatible endpoint."""

    def __init__(self, model_name: str, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.model_name = model_name
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        try:
            response = await self.client.embeddings.create(model=self.model_name, input=texts)
        except Exception as e:
            raise AIError(f"Embedding request failed: {e}") from e
        return [item.embedding for item in response.data]

    async def embed_query(self, text: str) -> List[float]:
        vectors = await self.embed_documents([text])
        return vectors[0]


class GoogleEmbeddings(Embeddings):
    """Embeddings from the Gemini embedding models."""

    def __init__(self, model_name: str, api_key: Optional[str] = None):
        self.model_name = model_name if model_name.startswith("models/") else f"models/{model_name}"
        if api_key:
            genai.configure(api_key=api_key)

    def _embed(self, texts: List[str], task_type: str) -> List[List[float]]:
        try:
            result = genai.embed_content(model=self.model_name, content=texts, task_type=task_type)
        except Exception as e:
            raise AIError(f"Embedding request failed: {e}") from e
        return result["embedding"]

    async def embed_query(self, text: str) -> List[float]:
        vectors = await asyncio.to_thread(self._embed, [text], "retrieval_query")
        return vectors[0]

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        return await asyncio.to_thread(self._embed, texts, "retrieval_document")


def get_embeddings(provider: str, model_id: str, config: Optional[Dict[str, Any]] = None) -> Embeddings:
    """
    Build an embeddings client for a catalog entry.

    Args:
        provider: Provider name (case-insensitive)
        model_id: Provider's model identifier
        config: Catalog configuration (api_key, base_url, ...)

    Returns:
        Embeddings client

    Raises:
        ConfigurationError: If the provider is unknown
    """
    settings = get_settings()
    config = config or {}
    provider = (provider or "").lower()

    if provider in {"transformer", "local-transformer", "sentence-transformers"}:
        return SentenceTransformerEmbeddings(model_id or settings.default_embedding_model)

    if provider in OPENAI_COMPATIBLE_PROVIDERS:
        return OpenAIEmbeddings(
            model_id,
            api_key=config.get("api_key") or settings.openai_api_key,
            base_url=config.get("base_url"),
        )

    if provider in {"google", "gemini"}:
        return GoogleEmbeddings(model_id, api_key=config.get("api_key") or settings.gemini_api_key)

    raise ConfigurationError(f"Unsupported embedding provider: {provider}")
