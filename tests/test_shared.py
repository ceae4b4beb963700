"""
Tests for shared configuration, models, providers and metrics.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from botgateway.shared.config import Settings
from botgateway.shared.exceptions import AIError, ConfigurationError
from botgateway.shared.infrastructure.ai import (
    chat_model_provider, get_embeddings, get_provider_spec, supports_credential_override,
)
from botgateway.shared.infrastructure.ai.embedding_client import (
    GoogleEmbeddings, OpenAIEmbeddings, SentenceTransformerEmbeddings,
)
from botgateway.shared.infrastructure.ai.model_client import GeminiChatModel, OpenAIChatModel
from botgateway.shared.infrastructure.monitoring import get_metrics, timed_operation
from botgateway.shared.models import ChatTurn, ModelInfo, ModelType, RetrievedDocument

from conftest import ANSWER, ANSWER_TOKENS, FakeChatModel, make_bot


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.storage_backend == "memory"
        assert settings.api_key_header == "x-api-key"
        assert settings.retrieval_config["vector_weight"] == 0.7
        assert settings.retrieval_config["lexical_weight"] == 0.3

    def test_log_level_is_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, log_level="chatty")

    def test_invalid_storage_backend(self):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, storage_backend="sqlite")

    def test_database_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/bots")

        settings = Settings(_env_file=None, storage_backend="postgres")

        assert settings.database_config["dsn"] == "postgresql://localhost/bots"


class TestModels:

    def test_model_credential(self):
        assert make_bot(bot_model_api_key="sk-1").model_credential == "sk-1"
        assert make_bot(bot_model_api_key="  ").model_credential is None
        assert make_bot().model_credential is None

    def test_temperature_bounds(self):
        with pytest.raises(PydanticValidationError):
            make_bot(temperature=3.5)

    def test_model_info_config_defaults_to_empty(self):
        info = ModelInfo(model_id="m", model_type=ModelType.CHAT, model_provider="openai", config=None)

        assert info.config == {}
        assert info.model_type == "chat"

    def test_chat_turn_to_chain_message(self):
        assert ChatTurn(role="ai", text="Hello").to_chain_message() == {"type": "ai", "content": "Hello"}

    def test_chat_turn_accepts_type_and_ignores_extra_keys(self):
        turn = ChatTurn.model_validate({"type": "human", "text": "Hi", "id": "turn-1"})

        assert turn.role == "human"
        assert turn.to_chain_message() == {"type": "human", "content": "Hi"}

    def test_retrieved_document_payload(self):
        document = RetrievedDocument(pageContent="text", metadata={"source": "a.md"})

        assert document.to_payload() == {"pageContent": "text", "metadata": {"source": "a.md"}}


class TestProviders:

    @pytest.mark.parametrize("provider", ["openai", "OpenAI", "fireworks", "groq", "ollama"])
    def test_openai_compatible_supports_override(self, provider):
        assert supports_credential_override(provider) is True

    def test_google_does_not_support_override(self):
        assert supports_credential_override("google") is False

    def test_unknown_provider_has_no_override(self):
        assert supports_credential_override("mystery") is False

    def test_unknown_chat_provider(self):
        with pytest.raises(ConfigurationError):
            get_provider_spec("mystery")
        with pytest.raises(ConfigurationError):
            chat_model_provider("mystery", "m", 0.5)

    def test_chat_model_provider_builds_registered_class(self):
        spec = get_provider_spec("GROQ")

        assert spec.model_class is OpenAIChatModel
        assert get_provider_spec("google").model_class is GeminiChatModel
        assert get_provider_spec("Gemini").model_class is GeminiChatModel
        assert supports_credential_override("gemini") is False

    def test_embedding_factory(self):
        assert isinstance(get_embeddings("transformer", "all-MiniLM-L6-v2", {}), SentenceTransformerEmbeddings)
        assert isinstance(get_embeddings("OpenAI", "text-embedding-3-small", {"api_key": "sk"}), OpenAIEmbeddings)
        assert isinstance(get_embeddings("google", "models/text-embedding-004", {}), GoogleEmbeddings)

        with pytest.raises(ConfigurationError):
            get_embeddings("mystery", "m", {})


class TestChatModel:

    @pytest.mark.asyncio
    async def test_streaming_awaits_tokens_in_order(self):
        received = []

        async def on_token(token):
            received.append(token)

        model = FakeChatModel("fake", streaming=True, on_token=on_token)
        text = await model.invoke([{"role": "user", "content": "hi"}])

        assert text == ANSWER
        assert received == ANSWER_TOKENS

    @pytest.mark.asyncio
    async def test_non_streaming_does_not_emit_tokens(self):
        received = []

        async def on_token(token):
            received.append(token)

        model = FakeChatModel("fake", streaming=False, on_token=on_token)

        assert await model.invoke([{"role": "user", "content": "hi"}]) == ANSWER
        assert received == []

    @pytest.mark.asyncio
    async def test_provider_errors_become_ai_errors(self, mocker):
        model = FakeChatModel("fake")
        mocker.patch.object(model, "_generate", side_effect=TimeoutError("slow"))

        with pytest.raises(AIError):
            await model.invoke([{"role": "user", "content": "hi"}])


class TestMetrics:

    def test_chat_request_counters(self):
        metrics = get_metrics()

        metrics.record_chat_request("stream", "success")
        metrics.record_chat_request("oneshot", "success")
        metrics.record_chat_request("oneshot", "fallback")

        assert metrics.get_counter("chat_requests_total") == 3
        assert metrics.get_counter("chat_requests_success") == 2
        assert metrics.get_counter("chat_requests_fallback") == 1

    @pytest.mark.asyncio
    async def test_timed_operation_on_coroutines(self):
        @timed_operation("unit_operation")
        async def operation():
            return 42

        assert await operation() == 42
        assert get_metrics().get_timer_stats("unit_operation")["count"] == 1
