"""
Retriever interface shared by every retrieval strategy.

A retriever returns ranked documents for a query and reports the final list
to its registered callbacks exactly once per invocation.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ...shared import get_logger
from ...shared.exceptions import BotGatewayError, RetrievalError
from ...shared.models import RetrievedDocument


class RetrieverCallback:
    """Receives retrieval outcomes. Override the hooks you need."""

    def handle_retriever_end(self, documents: List[RetrievedDocument]) -> None:
        pass

    def handle_retriever_error(self, error: BaseException) -> None:
        pass


class BaseRetriever(ABC):
    """
    Base class for retrievers.

    Subclasses implement `_get_relevant_documents`; `invoke` handles
    callback notification and error wrapping.
    """

    def __init__(self, callbacks: Optional[Iterable[RetrieverCallback]] = None):
        self.logger = get_logger(__name__)
        self.callbacks: List[RetrieverCallback] = list(callbacks or [])

    def add_callback(self, callback: RetrieverCallback) -> None:
        self.callbacks.append(callback)

    async def invoke(self, query: str) -> List[RetrievedDocument]:
        """
        Retrieve ranked documents for a query.

        Args:
            query: Search text

        Returns:
            Ranked documents, best first
        """
        try:
            documents = await self._get_relevant_documents(query)
        except Exception as e:
            for callback in self.callbacks:
                callback.handle_retriever_error(e)
            if isinstance(e, BotGatewayError):
                raise
            raise RetrievalError(f"Retrieval failed: {e}") from e

        self.logger.debug(f"{type(self).__name__} returned {len(documents)} documents")
        for callback in self.callbacks:
            callback.handle_retriever_end(documents)
        return documents

    @abstractmethod
    async def _get_relevant_documents(self, query: str) -> List[RetrievedDocument]:
        pass
