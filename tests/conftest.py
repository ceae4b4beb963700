"""
Shared pytest fixtures: in-memory storage and fake model / retriever collaborators.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import List

import pytest

# Add the src directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from botgateway.services.catalog import CatalogService, InMemoryCatalogRepository
from botgateway.services.chat_orchestrator import ChatOrchestrator
from botgateway.services.history import InMemoryHistoryRepository
from botgateway.services.retrieval import BaseRetriever
from botgateway.shared.infrastructure.ai import ChatModel, Embeddings
from botgateway.shared.infrastructure.monitoring import get_metrics
from botgateway.shared.models import Bot, ModelInfo, ModelType, RetrievedDocument

PUBLIC_ID = "support-bot"
API_KEY = "bot-secret-key"
ANSWER_TOKENS = ["Refunds ", "are ", "accepted ", "within ", "30 days."]
ANSWER = "".join(ANSWER_TOKENS)


class FakeEmbeddings(Embeddings):
    def __init__(self, model_name: str = "fake-embedding"):
        self.model_name = model_name

    async def embed_query(self, text: str) -> List[float]:
        return [0.1, 0.2, 0.3]

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        return [[0.1, 0.2, 0.3] for _ in texts]


class FakeChatModel(ChatModel):
    """Chat model replaying canned tokens."""

    def __init__(self, *args, tokens=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.tokens = list(tokens if tokens is not None else ANSWER_TOKENS)
        self.prompts = []

    async def _generate(self, messages):
        self.prompts.append(messages[-1]["content"])
        return "".join(self.tokens)

    async def _stream(self, messages):
        self.prompts.append(messages[-1]["content"])
        for token in self.tokens:
            await asyncio.sleep(0)
            yield token


class BlockingChatModel(ChatModel):
    """Streams one token, then waits until cancelled."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cancelled = False

    async def _generate(self, messages):
        return ""

    async def _stream(self, messages):
        yield "partial"
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


class FakeRetriever(BaseRetriever):
    def __init__(self, documents=None, callbacks=None, error=None):
        super().__init__(callbacks)
        self.documents = list(documents or [])
        self.error = error
        self.queries = []

    async def _get_relevant_documents(self, query: str) -> List[RetrievedDocument]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.documents)


class FakeModelFactory:
    """Records every chat model built by the orchestrator."""

    def __init__(self, model_class=FakeChatModel, **model_kwargs):
        self.model_class = model_class
        self.model_kwargs = model_kwargs
        self.calls = []
        self.models = []

    def __call__(self, provider, model, temperature, config=None, streaming=False, on_token=None):
        self.calls.append({
            "provider": provider,
            "model": model,
            "temperature": temperature,
            "config": config,
            "streaming": streaming,
            "on_token": on_token,
        })
        chat_model = self.model_class(
            model, temperature=temperature, config=config, streaming=streaming, on_token=on_token,
            **self.model_kwargs
        )
        self.models.append(chat_model)
        return chat_model


class FakeRetrieverFactory:
    def __init__(self, documents=None, error=None):
        self.documents = documents
        self.error = error
        self.calls = []
        self.retrievers = []

    async def __call__(self, use_hybrid_search, embeddings, bot_id, callbacks=None):
        self.calls.append({"use_hybrid_search": use_hybrid_search, "bot_id": bot_id})
        retriever = FakeRetriever(self.documents, callbacks=callbacks, error=self.error)
        self.retrievers.append(retriever)
        return retriever


def make_bot(**overrides) -> Bot:
    values = {
        "id": "bot_internal_1",
        "public_id": PUBLIC_ID,
        "name": "Support",
        "provider": "openai",
        "model": "gpt-4o-mini",
        "embedding": "text-embedding-3-small",
        "temperature": 0.2,
        "use_hybrid_search": False,
        "bot_api_key": API_KEY,
    }
    values.update(overrides)
    return Bot(**values)


@pytest.fixture(autouse=True)
def reset_metrics():
    get_metrics().reset()
    yield


@pytest.fixture
def documents():
    return [
        RetrievedDocument(page_content="Refunds are accepted within 30 days.", metadata={"id": "doc-1", "source": "policy.md"}),
        RetrievedDocument(page_content="Contact support for returns.", metadata={"id": "doc-2", "source": "faq.md"}),
    ]


@pytest.fixture
def catalog_repository():
    repository = InMemoryCatalogRepository()
    repository.add_bot(make_bot())
    repository.add_model(ModelInfo(
        model_id="text-embedding-3-small", model_type=ModelType.EMBEDDING, model_provider="openai", config={}
    ))
    repository.add_model(ModelInfo(
        model_id="gpt-4o-mini", model_type=ModelType.CHAT, model_provider="openai", config={"base_url": "https://api.example.com/v1"}
    ))
    return repository


@pytest.fixture
def history_repository():
    return InMemoryHistoryRepository()


@pytest.fixture
def model_factory():
    return FakeModelFactory()


@pytest.fixture
def retriever_factory(documents):
    return FakeRetrieverFactory(documents)


@pytest.fixture
def orchestrator(catalog_repository, history_repository, model_factory, retriever_factory):
    return ChatOrchestrator(
        catalog=CatalogService(catalog_repository),
        history=history_repository,
        embeddings_factory=lambda provider, model_id, config: FakeEmbeddings(model_id),
        retriever_factory=retriever_factory,
        model_factory=model_factory,
    )


def parse_events(body: str):
    """Split a server-sent event body into (event, data) pairs."""
    events = []
    for block in body.strip().split("\n\n"):
        if not block:
            continue
        name, data = None, None
        for line in block.split("\n"):
            if line.startswith("event: "):
                name = line[len("event: "):]
            elif line.startswith("data: "):
                data = json.loads(line[len("data: "):])
        events.append((name, data))
    return events
