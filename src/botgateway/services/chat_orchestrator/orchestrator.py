"""
Request orchestrator for bot chat.

Authorizes a request against the bot registry, resolves the bot's embedding
and chat models, runs the retrieval-augmented chain while capturing the
retrieved documents, persists the exchange and delivers the result through a
response sink (single JSON payload or server-sent events).
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional

from ...shared import get_logger
from ...shared.exceptions import (
    AuthorizationError, BotNotFoundError, ForbiddenError, ResolutionMissingError, UpstreamError,
)
from ...shared.infrastructure.ai import (
    chat_model_provider, get_embeddings, supports_credential_override,
)
from ...shared.infrastructure.monitoring import get_metrics
from ...shared.models import Bot, ModelInfo, ModelType
from ..catalog import CatalogService
from ..chain import create_chain, group_messages_by_conversation
from ..history import HistoryRepository
from ..retrieval import DocumentCapture, build_retriever
from .models import ChatRequest, ChatResult
from .sinks import BufferedSink, EventStreamSink, ResponseSink

FALLBACK_TEXT = "There was an error processing your request."


@dataclass
class PreparedRequest:
    """An authorized request with its models resolved."""

    bot: Bot
    api_key: str
    embedding_info: ModelInfo
    model_info: ModelInfo


class ChatOrchestrator:
    """
    Runs bot chat requests.

    Collaborator factories are injectable so the pipeline can be exercised
    without model providers or a vector index.
    """

    def __init__(self,
                 catalog: CatalogService,
                 history: HistoryRepository,
                 embeddings_factory=get_embeddings,
                 retriever_factory=build_retriever,
                 model_factory=chat_model_provider,
                 chain_factory=create_chain):
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()
        self.catalog = catalog
        self.history = history
        self.embeddings_factory = embeddings_factory
        self.retriever_factory = retriever_factory
        self.model_factory = model_factory
        self.chain_factory = chain_factory
        self._active_streams = 0

    async def authorize(self, public_id: str, api_key: Optional[str]) -> Bot:
        """
        Look up a bot and check the caller's key.

        Raises:
            BotNotFoundError: No bot with this public id
            ForbiddenError: Key missing or not an exact match
        """
        bot = await self.catalog.resolve_bot(public_id)
        if bot is None:
            raise BotNotFoundError()
        if not api_key or bot.bot_api_key != api_key:
            raise ForbiddenError()
        return bot

    async def resolve(self, bot: Bot):
        """
        Resolve the bot's embedding and chat model catalog entries.

        Raises:
            ResolutionMissingError: Either entry is absent
        """
        embedding_info = await self.catalog.resolve_model_info(bot.embedding, ModelType.EMBEDDING)
        if embedding_info is None:
            raise ResolutionMissingError("embedding")

        model_info = await self.catalog.resolve_model_info(bot.model, ModelType.CHAT)
        if model_info is None:
            raise ResolutionMissingError("model")

        return embedding_info, model_info

    async def prepare(self, public_id: str, api_key: Optional[str]) -> PreparedRequest:
        bot = await self.authorize(public_id, api_key)
        self.logger.debug(f"Authorized request for bot {bot.id}")
        embedding_info, model_info = await self.resolve(bot)
        self.logger.debug(
            f"Resolved embedding {embedding_info.model_id} and model {model_info.model_id} for bot {bot.id}"
        )
        return PreparedRequest(bot=bot, api_key=api_key, embedding_info=embedding_info, model_info=model_info)

    def _model_config(self, bot: Bot, model_info: ModelInfo) -> Dict[str, Any]:
        config = dict(model_info.config)
        if bot.model_credential and supports_credential_override(bot.provider):
            config["api_key"] = bot.model_credential
        return config

    async def run(self, prepared: PreparedRequest, request: ChatRequest, sink: ResponseSink) -> ChatResult:
        """
        Retrieve, generate, persist, then deliver the result to the sink.

        The history record is written before the sink receives the result.
        """
        bot = prepared.bot
        embedding_info = prepared.embedding_info

        embeddings = self.embeddings_factory(
            embedding_info.model_provider, embedding_info.model_id, embedding_info.config
        )

        capture = DocumentCapture()
        retriever = await self.retriever_factory(bot.use_hybrid_search, embeddings, bot.id, [capture])

        config = self._model_config(bot, prepared.model_info)
        if sink.streaming:
            llm = self.model_factory(
                bot.provider, bot.model, bot.temperature, dict(config),
                streaming=True, on_token=sink.send_token,
            )
            question_llm = self.model_factory(
                bot.provider, bot.model, bot.temperature, dict(config), streaming=False,
            )
        else:
            llm = self.model_factory(bot.provider, bot.model, bot.temperature, dict(config), streaming=False)
            question_llm = llm

        chain = self.chain_factory(
            llm=llm,
            question_llm=question_llm,
            question_template=bot.question_generator_prompt,
            response_template=bot.qa_prompt,
            retriever=retriever,
        )

        self.logger.debug(f"Invoking chain for bot {bot.id}")
        answer = await chain.invoke({
            "question": request.question,
            "chat_history": group_messages_by_conversation(request.chain_history()),
        })
        documents = await capture.wait()

        start_time = time.time()
        await self.history.append_history(
            api_key=prepared.api_key,
            bot_id=bot.id,
            human=request.message,
            bot=answer,
        )
        self.metrics.record_history_write(bot.id, time.time() - start_time)

        result = ChatResult.build(request, answer, documents)
        await sink.send_result(result)
        return result

    async def chat(self, public_id: str, api_key: Optional[str], request: ChatRequest) -> ChatResult:
        """
        Handle a one-shot request.

        Missing embedding or chat model entries produce a normal result whose
        answer is a fallback message; nothing is persisted in that case.

        Raises:
            AuthorizationError: Bot missing or key rejected
        """
        try:
            bot = await self.authorize(public_id, api_key)
        except AuthorizationError as e:
            self.logger.warning(f"Rejected chat request for bot {public_id}: {e.message}")
            self.metrics.record_chat_request("oneshot", "unauthorized")
            raise

        try:
            embedding_info, model_info = await self.resolve(bot)
        except ResolutionMissingError as e:
            self.logger.warning(f"{e.message} for bot {bot.id}, returning fallback answer")
            self.metrics.record_chat_request("oneshot", "fallback")
            return ChatResult.build(request, FALLBACK_TEXT)

        prepared = PreparedRequest(bot=bot, api_key=api_key, embedding_info=embedding_info, model_info=model_info)
        sink = BufferedSink()
        try:
            await self.run(prepared, request, sink)
        except UpstreamError as e:
            self.logger.error(f"Upstream failure for bot {bot.id}: {e}")
            self.metrics.record_chat_request("oneshot", "error")
            raise
        except Exception:
            self.metrics.record_chat_request("oneshot", "error")
            raise

        self.metrics.record_chat_request("oneshot", "success")
        return sink.result

    async def open_stream(self, public_id: str, api_key: Optional[str]) -> PreparedRequest:
        """
        Authorize and resolve before a stream is opened.

        Raises:
            AuthorizationError: Bot missing or key rejected
            ResolutionMissingError: Embedding or chat model missing
        """
        try:
            return await self.prepare(public_id, api_key)
        except (AuthorizationError, ResolutionMissingError) as e:
            self.logger.warning(f"Rejected streaming request for bot {public_id}: {e.message}")
            self.metrics.record_chat_request("stream", "rejected")
            raise

    async def stream(self, prepared: PreparedRequest, request: ChatRequest) -> AsyncIterator[str]:
        """
        Run the pipeline and yield server-sent events as they are produced.

        Closing the generator before the pipeline finishes (client
        disconnect) cancels the pipeline; a cancelled request is not persisted.
        """
        sink = EventStreamSink()
        task = asyncio.create_task(self.run(prepared, request, sink))
        task.add_done_callback(lambda _: sink.close())

        self._active_streams += 1
        self.metrics.gauge("active_streams", self._active_streams)
        try:
            async for event in sink.events():
                yield event

            error = task.exception()
            if error is not None:
                self.logger.error(
                    f"Streaming chat failed for bot {prepared.bot.id}",
                    exc_info=(type(error), error, error.__traceback__),
                )
                self.metrics.record_chat_request("stream", "error")
                yield sink.error_event()
            else:
                self.metrics.record_chat_request("stream", "success")
        finally:
            if not task.done():
                task.cancel()
                self.logger.info(f"Client disconnected from stream for bot {prepared.bot.id}, cancelled generation")
                self.metrics.record_chat_request("stream", "cancelled")
            self._active_streams -= 1
            self.metrics.gauge("active_streams", self._active_streams)
