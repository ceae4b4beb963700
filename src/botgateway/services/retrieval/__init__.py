"""
Retrieval services: retrievers, strategy selection and document capture.
"""

from .base import BaseRetriever, RetrieverCallback
from .capture import DocumentCapture
from .hybrid import HybridRetriever, lexical_search
from .selector import build_retriever
from .vector_store import ChromaVectorStore, VectorStoreRetriever, get_chroma_client

__all__ = [
    'BaseRetriever',
    'RetrieverCallback',
    'DocumentCapture',
    'HybridRetriever',
    'lexical_search',
    'build_retriever',
    'ChromaVectorStore',
    'VectorStoreRetriever',
    'get_chroma_client',
]
