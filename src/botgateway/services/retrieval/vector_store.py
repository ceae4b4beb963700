"""
ChromaDB vector index scoped to one bot.

All bots share one collection; every stored document carries `bot_id` (and
optionally `source_id`) metadata, and a store instance only ever sees the
documents of the scope it was opened with.
"""

import asyncio
import threading
from typing import Any, Dict, Iterable, List, Optional, Tuple

import chromadb

from ...shared import get_logger, get_settings
from ...shared.exceptions import RetrievalError
from ...shared.infrastructure.ai import Embeddings
from ...shared.models import RetrievedDocument
from .base import BaseRetriever, RetrieverCallback

_client = None
_client_lock = threading.Lock()


def get_chroma_client():
    """Process-wide ChromaDB client (persistent when a directory is configured)."""
    global _client

    if _client is None:
        with _client_lock:
            if _client is None:
                persist_directory = get_settings().retrieval_config['persist_directory']
                if persist_directory:
                    _client = chromadb.PersistentClient(path=persist_directory)
                else:
                    _client = chromadb.EphemeralClient()
    return _client


class ChromaVectorStore:
    """Similarity search over one bot's documents."""

    def __init__(self, embeddings: Embeddings, bot_id: str, source_id: Optional[str] = None, collection=None):
        self.logger = get_logger(__name__)
        self.embeddings = embeddings
        self.bot_id = bot_id
        self.source_id = source_id
        self.collection = collection

    @classmethod
    async def from_existing_index(cls,
                                  embeddings: Embeddings,
                                  bot_id: str,
                                  source_id: Optional[str] = None) -> "ChromaVectorStore":
        """
        Open the shared collection scoped to a bot.

        Args:
            embeddings: Client used to embed queries
            bot_id: Internal bot identifier
            source_id: Restrict to one source document (None for the whole bot)
        """
        collection_name = get_settings().retrieval_config['collection']

        def _open():
            return get_chroma_client().get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"}
            )

        try:
            collection = await asyncio.to_thread(_open)
        except Exception as e:
            raise RetrievalError(f"Failed to open vector index {collection_name}: {e}") from e

        return cls(embeddings, bot_id, source_id=source_id, collection=collection)

    def _where(self) -> Dict[str, Any]:
        if self.source_id is None:
            return {"bot_id": self.bot_id}
        return {"$and": [{"bot_id": self.bot_id}, {"source_id": self.source_id}]}

    @staticmethod
    def _to_document(chroma_id: str, content: Optional[str], metadata: Optional[Dict[str, Any]]) -> RetrievedDocument:
        metadata = dict(metadata or {})
        metadata.setdefault("id", chroma_id)
        return RetrievedDocument(page_content=content, metadata=metadata)

    async def similarity_search_with_score(self, query: str, k: int = 4) -> List[Tuple[RetrievedDocument, float]]:
        """
        Nearest documents to a query with cosine similarity scores.

        Returns:
            List of (document, similarity) tuples, best first
        """
        query_embedding = await self.embeddings.embed_query(query)

        try:
            result = await asyncio.to_thread(
                self.collection.query,
                query_embeddings=[query_embedding],
                n_results=k,
                where=self._where(),
                include=["documents", "metadatas", "distances"],
            )
        except Exception as e:
            raise RetrievalError(f"Vector search failed for bot {self.bot_id}: {e}") from e

        ids = (result.get("ids") or [[]])[0]
        documents = (result.get("documents") or [[]])[0]
        metadatas = (result.get("metadatas") or [[]])[0]
        distances = (result.get("distances") or [[]])[0]

        # Cosine distance -> similarity
        return [
            (self._to_document(chroma_id, content, metadata), 1.0 - float(distance))
            for chroma_id, content, metadata, distance in zip(ids, documents, metadatas, distances)
        ]

    async def similarity_search(self, query: str, k: int = 4) -> List[RetrievedDocument]:
        results = await self.similarity_search_with_score(query, k)
        return [document for document, _ in results]

    async def get_scope_documents(self) -> List[RetrievedDocument]:
        """Every document in this store's scope (lexical candidates)."""
        try:
            result = await asyncio.to_thread(
                self.collection.get,
                where=self._where(),
                include=["documents", "metadatas"],
            )
        except Exception as e:
            raise RetrievalError(f"Failed to read documents for bot {self.bot_id}: {e}") from e

        return [
            self._to_document(chroma_id, content, metadata)
            for chroma_id, content, metadata in zip(
                result.get("ids") or [],
                result.get("documents") or [],
                result.get("metadatas") or [],
            )
        ]

    def as_retriever(self,
                     k: Optional[int] = None,
                     callbacks: Optional[Iterable[RetrieverCallback]] = None) -> "VectorStoreRetriever":
        return VectorStoreRetriever(self, k=k, callbacks=callbacks)


class VectorStoreRetriever(BaseRetriever):
    """Plain top-k retriever over a vector store."""

    def __init__(self,
                 vector_store: ChromaVectorStore,
                 k: Optional[int] = None,
                 callbacks: Optional[Iterable[RetrieverCallback]] = None):
        super().__init__(callbacks)
        self.vector_store = vector_store
        self.k = k or get_settings().retrieval_config['top_k']

    async def _get_relevant_documents(self, query: str) -> List[RetrievedDocument]:
        return await self.vector_store.similarity_search(query, self.k)
