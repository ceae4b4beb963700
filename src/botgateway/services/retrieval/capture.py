"""
Document Capture: observe the documents a retriever produced inside a chain.
"""

import asyncio
from typing import List, Optional

from ...shared.exceptions import DocumentCaptureError
from ...shared.models import RetrievedDocument
from .base import RetrieverCallback


class DocumentCapture(RetrieverCallback):
    """
    Single-assignment cell resolved by a retriever's completion hook.

    Create it before invoking the chain, register it as a retriever callback,
    and call `wait()` once the chain has returned. Resolving it twice is a
    programming error and raises instead of overwriting.
    """

    def __init__(self):
        self._future: Optional[asyncio.Future] = None

    def _get_future(self) -> asyncio.Future:
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
        return self._future

    @property
    def resolved(self) -> bool:
        return self._future is not None and self._future.done()

    def resolve(self, documents: List[RetrievedDocument]) -> None:
        future = self._get_future()
        if future.done():
            raise DocumentCaptureError("Retrieved documents were already captured for this request")
        future.set_result(list(documents))

    def handle_retriever_end(self, documents: List[RetrievedDocument]) -> None:
        self.resolve(documents)

    async def wait(self) -> List[RetrievedDocument]:
        """
        Documents captured during the chain call.

        Raises:
            DocumentCaptureError: If the retriever never reported documents
        """
        if not self.resolved:
            raise DocumentCaptureError("Retriever finished without reporting its documents")
        return await self._get_future()
