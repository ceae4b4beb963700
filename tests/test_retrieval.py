"""
Tests for retrievers, strategy selection and document capture.
"""

import pytest

from botgateway.services.retrieval import (
    DocumentCapture, HybridRetriever, RetrieverCallback, VectorStoreRetriever,
    build_retriever, lexical_search,
)
from botgateway.services.retrieval import selector
from botgateway.shared.exceptions import DocumentCaptureError, RetrievalError
from botgateway.shared.models import RetrievedDocument

from conftest import FakeEmbeddings, FakeRetriever


def doc(doc_id: str, content: str) -> RetrievedDocument:
    return RetrievedDocument(page_content=content, metadata={"id": doc_id})


class RecordingCallback(RetrieverCallback):
    def __init__(self):
        self.ends = []
        self.errors = []

    def handle_retriever_end(self, documents):
        self.ends.append(documents)

    def handle_retriever_error(self, error):
        self.errors.append(error)


class StaticVectorStore:
    """Vector store double with fixed similarity results."""

    def __init__(self, scored, scope):
        self.scored = scored
        self.scope = scope
        self.requested_k = None

    async def similarity_search_with_score(self, query, k=4):
        self.requested_k = k
        return list(self.scored)

    async def get_scope_documents(self):
        return list(self.scope)


class TestDocumentCapture:

    @pytest.mark.asyncio
    async def test_wait_returns_resolved_documents(self):
        capture = DocumentCapture()
        documents = [doc("a", "alpha")]

        capture.handle_retriever_end(documents)

        assert capture.resolved is True
        assert await capture.wait() == documents

    @pytest.mark.asyncio
    async def test_second_resolution_raises(self):
        capture = DocumentCapture()
        capture.resolve([doc("a", "alpha")])

        with pytest.raises(DocumentCaptureError):
            capture.resolve([doc("b", "beta")])

        assert [d.metadata["id"] for d in await capture.wait()] == ["a"]

    @pytest.mark.asyncio
    async def test_wait_without_resolution_raises(self):
        capture = DocumentCapture()

        with pytest.raises(DocumentCaptureError):
            await capture.wait()

    @pytest.mark.asyncio
    async def test_empty_result_is_a_valid_capture(self):
        capture = DocumentCapture()
        capture.resolve([])

        assert await capture.wait() == []


class TestBaseRetriever:

    @pytest.mark.asyncio
    async def test_callbacks_notified_once_with_final_list(self):
        callback = RecordingCallback()
        documents = [doc("a", "alpha"), doc("b", "beta")]
        retriever = FakeRetriever(documents, callbacks=[callback])

        result = await retriever.invoke("alpha")

        assert result == documents
        assert callback.ends == [documents]
        assert callback.errors == []

    @pytest.mark.asyncio
    async def test_add_callback(self):
        callback = RecordingCallback()
        retriever = FakeRetriever([doc("a", "alpha")])
        retriever.add_callback(callback)

        await retriever.invoke("alpha")

        assert len(callback.ends) == 1

    @pytest.mark.asyncio
    async def test_errors_reported_and_wrapped(self):
        callback = RecordingCallback()
        retriever = FakeRetriever(callbacks=[callback], error=ValueError("bad index"))

        with pytest.raises(RetrievalError):
            await retriever.invoke("alpha")

        assert callback.ends == []
        assert len(callback.errors) == 1
        assert isinstance(callback.errors[0], ValueError)

    @pytest.mark.asyncio
    async def test_capture_as_callback(self):
        capture = DocumentCapture()
        documents = [doc("a", "alpha")]
        retriever = FakeRetriever(documents, callbacks=[capture])

        await retriever.invoke("alpha")

        assert await capture.wait() == documents


class TestLexicalSearch:

    def test_ranks_by_term_coverage(self):
        documents = [
            doc("a", "Shipping takes five days."),
            doc("b", "Refund policy: refunds within 30 days."),
            doc("c", "The refund desk is closed."),
        ]

        results = lexical_search("refund policy", documents, top_k=5)

        assert [d.metadata["id"] for d, _ in results] == ["b", "c"]
        assert all(0 < score <= 1 for _, score in results)

    def test_no_query_terms(self):
        assert lexical_search("   ", [doc("a", "alpha")]) == []

    def test_respects_top_k(self):
        documents = [doc(str(i), "refund") for i in range(5)]

        assert len(lexical_search("refund", documents, top_k=2)) == 2


class TestHybridRetriever:

    @pytest.mark.asyncio
    async def test_fuses_vector_and_lexical_scores(self):
        a = doc("a", "Contact support by email.")
        b = doc("b", "Refund policy allows refunds within 30 days.")
        c = doc("c", "Unrelated shipping notes.")
        store = StaticVectorStore(scored=[(a, 0.9), (c, 0.5)], scope=[a, b, c])

        retriever = HybridRetriever(
            FakeEmbeddings(), "bot_1", vector_store=store, k=3, vector_weight=0.7, lexical_weight=0.3
        )
        results = await retriever.invoke("refund policy")

        assert [d.metadata["id"] for d in results] == ["a", "c", "b"]
        assert store.requested_k == 6

    @pytest.mark.asyncio
    async def test_document_found_by_both_rankings_wins(self):
        a = doc("a", "Contact support by email.")
        b = doc("b", "Refund policy allows refunds within 30 days.")
        store = StaticVectorStore(scored=[(a, 0.6), (b, 0.55)], scope=[a, b])

        retriever = HybridRetriever(FakeEmbeddings(), "bot_1", vector_store=store, k=1)
        results = await retriever.invoke("refund policy")

        assert [d.metadata["id"] for d in results] == ["b"]

    @pytest.mark.asyncio
    async def test_notifies_callbacks_with_truncated_list(self):
        callback = RecordingCallback()
        docs = [doc(str(i), f"refund {i}") for i in range(6)]
        store = StaticVectorStore(scored=[(d, 0.5) for d in docs], scope=docs)

        retriever = HybridRetriever(FakeEmbeddings(), "bot_1", callbacks=[callback], vector_store=store, k=2)
        results = await retriever.invoke("refund")

        assert len(results) == 2
        assert callback.ends == [results]


class TestBuildRetriever:

    @pytest.mark.asyncio
    async def test_hybrid_when_enabled(self, mocker):
        open_index = mocker.patch.object(selector.ChromaVectorStore, "from_existing_index")
        capture = DocumentCapture()

        retriever = await build_retriever(True, FakeEmbeddings(), "bot_1", [capture])

        assert isinstance(retriever, HybridRetriever)
        assert retriever.bot_id == "bot_1"
        assert retriever.source_id is None
        assert retriever.callbacks == [capture]
        open_index.assert_not_called()

    @pytest.mark.asyncio
    async def test_vector_store_retriever_otherwise(self, mocker):
        store = mocker.Mock()
        store.as_retriever.side_effect = lambda callbacks: VectorStoreRetriever(store, k=4, callbacks=callbacks)
        open_index = mocker.patch.object(
            selector.ChromaVectorStore, "from_existing_index", new=mocker.AsyncMock(return_value=store)
        )
        embeddings = FakeEmbeddings()
        capture = DocumentCapture()

        retriever = await build_retriever(False, embeddings, "bot_1", [capture])

        assert isinstance(retriever, VectorStoreRetriever)
        assert retriever.callbacks == [capture]
        open_index.assert_awaited_once_with(embeddings, "bot_1", source_id=None)
