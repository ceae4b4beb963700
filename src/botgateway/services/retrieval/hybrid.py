"""
Hybrid retrieval combining lexical and vector ranking.
"""

import re
from typing import Dict, Iterable, List, Optional, Tuple

from ...shared import get_settings
from ...shared.infrastructure.ai import Embeddings
from ...shared.models import RetrievedDocument
from .base import BaseRetriever, RetrieverCallback
from .vector_store import ChromaVectorStore

_TERM_PATTERN = re.compile(r"\w+")


def lexical_search(query_text: str,
                   documents: List[RetrievedDocument],
                   top_k: int = 5) -> List[Tuple[RetrievedDocument, float]]:
    """
    Simple lexical search using term frequency.

    Args:
        query_text: Query text
        documents: Candidate documents
        top_k: Number of results to return

    Returns:
        List of (document, score) tuples with scores in [0, 1]
    """
    query_terms = set(_TERM_PATTERN.findall(query_text.lower()))
    if not query_terms:
        return []

    scored = []
    for document in documents:
        terms = _TERM_PATTERN.findall(document.page_content.lower())
        if not terms:
            continue

        term_set = set(terms)
        coverage = len(query_terms & term_set) / len(query_terms)
        if coverage == 0:
            continue

        density = sum(terms.count(term) for term in query_terms) / len(terms)
        scored.append((document, min(1.0, 0.8 * coverage + 0.2 * min(1.0, density * 10))))

    scored.sort(key=lambda x: x[1], reverse=True)
    return scored[:top_k]


def _document_key(document: RetrievedDocument) -> str:
    return str(document.get_metadata("id") or document.page_content)


class HybridRetriever(BaseRetriever):
    """
    Retriever fusing vector similarity and lexical scores over one bot's index.

    The fused score is `vector_weight * vector + lexical_weight * lexical`;
    documents found by only one ranking get 0 for the other.
    """

    def __init__(self,
                 embeddings: Embeddings,
                 bot_id: str,
                 source_id: Optional[str] = None,
                 callbacks: Optional[Iterable[RetrieverCallback]] = None,
                 vector_store: Optional[ChromaVectorStore] = None,
                 k: Optional[int] = None,
                 vector_weight: Optional[float] = None,
                 lexical_weight: Optional[float] = None):
        super().__init__(callbacks)
        config = get_settings().retrieval_config

        self.embeddings = embeddings
        self.bot_id = bot_id
        self.source_id = source_id
        self.vector_store = vector_store
        self.k = k or config['top_k']
        self.vector_weight = config['vector_weight'] if vector_weight is None else vector_weight
        self.lexical_weight = config['lexical_weight'] if lexical_weight is None else lexical_weight

    async def _get_store(self) -> ChromaVectorStore:
        if self.vector_store is None:
            self.vector_store = await ChromaVectorStore.from_existing_index(
                self.embeddings, self.bot_id, source_id=self.source_id
            )
        return self.vector_store

    async def _get_relevant_documents(self, query: str) -> List[RetrievedDocument]:
        store = await self._get_store()

        # Over-fetch both rankings before fusing
        vector_results = await store.similarity_search_with_score(query, self.k * 2)
        candidates = await store.get_scope_documents()
        lexical_results = lexical_search(query, candidates, top_k=self.k * 2)

        combined: Dict[str, Dict] = {}
        for document, score in vector_results:
            combined[_document_key(document)] = {'document': document, 'vector': score, 'lexical': 0.0}

        for document, score in lexical_results:
            key = _document_key(document)
            if key in combined:
                combined[key]['lexical'] = score
            else:
                combined[key] = {'document': document, 'vector': 0.0, 'lexical': score}

        ranked = sorted(
            combined.values(),
            key=lambda entry: self.vector_weight * entry['vector'] + self.lexical_weight * entry['lexical'],
            reverse=True,
        )
        return [entry['document'] for entry in ranked[:self.k]]
