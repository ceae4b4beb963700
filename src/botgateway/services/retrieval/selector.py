"""
Retrieval strategy selection.
"""

from typing import Iterable, Optional

from ...shared import get_logger
from ...shared.infrastructure.ai import Embeddings
from .base import BaseRetriever, RetrieverCallback
from .hybrid import HybridRetriever
from .vector_store import ChromaVectorStore

logger = get_logger(__name__)


async def build_retriever(use_hybrid_search: bool,
                          embeddings: Embeddings,
                          bot_id: str,
                          callbacks: Optional[Iterable[RetrieverCallback]] = None) -> BaseRetriever:
    """
    Build the retriever for a bot.

    Hybrid search when the bot enables it, otherwise a top-k retriever over
    the bot's existing vector index. Both are scoped to the whole bot.

    Args:
        use_hybrid_search: Bot search mode
        embeddings: Embedding client for the bot's embedding model
        bot_id: Internal bot identifier
        callbacks: Completion callbacks (e.g. a DocumentCapture)
    """
    callbacks = list(callbacks or [])

    if use_hybrid_search:
        logger.debug(f"Using hybrid retriever for bot {bot_id}")
        return HybridRetriever(embeddings, bot_id, source_id=None, callbacks=callbacks)

    logger.debug(f"Using vector retriever for bot {bot_id}")
    vector_store = await ChromaVectorStore.from_existing_index(embeddings, bot_id, source_id=None)
    return vector_store.as_retriever(callbacks=callbacks)
