"""
Chat model providers.

Builds callable chat model clients for a provider/model/temperature/config
combination, with optional token-level streaming notification.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Type

import google.generativeai as genai
from openai import AsyncOpenAI

from ...config.settings import get_settings
from ...exceptions import AIError, ConfigurationError
from ..monitoring.logger import get_logger
from ..monitoring.metrics import get_metrics
from .embedding_client import OPENAI_COMPATIBLE_PROVIDERS

TokenCallback = Callable[[str], Awaitable[None]]


class ChatModel(ABC):
    """
    Base class for chat model clients.

    `invoke` takes OpenAI-style messages (`role`, `content`) and returns the
    full completion text. When `streaming` is set, every token is awaited
    through `on_token` in generation order before `invoke` returns.
    """

    def __init__(self,
                 model_name: str,
                 temperature: float = 0.7,
                 config: Optional[Dict[str, Any]] = None,
                 streaming: bool = False,
                 on_token: Optional[TokenCallback] = None):
        self.logger = get_logger(__name__)
        self.settings = get_settings()
        self.model_name = model_name
        self.temperature = temperature
        self.config = dict(config or {})
        self.streaming = streaming
        self.on_token = on_token

    async def invoke(self, messages: List[Dict[str, str]]) -> str:
        start_time = time.time()
        tokens_streamed = 0

        try:
            if self.streaming:
                parts = []
                async for token in self._stream(messages):
                    if not token:
                        continue
                    parts.append(token)
                    tokens_streamed += 1
                    if self.on_token is not None:
                        await self.on_token(token)
                text = "".join(parts)
            else:
                text = await self._generate(messages)
        except AIError:
            raise
        except Exception as e:
            raise AIError(f"Chat completion failed for {self.model_name}: {e}") from e

        get_metrics().record_model_inference(self.model_name, time.time() - start_time, tokens_streamed)
        return text

    @abstractmethod
    async def _generate(self, messages: List[Dict[str, str]]) -> str:
        pass

    @abstractmethod
    def _stream(self, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        pass


class OpenAIChatModel(ChatModel):
    """Chat completions from OpenAI or any OpenAI-compatible endpoint."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.client = AsyncOpenAI(
            api_key=self.config.get("api_key") or self.settings.openai_api_key,
            base_url=self.config.get("base_url"),
        )

    def _request_kwargs(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        kwargs = {
            "model": self.model_name,
            "messages": messages,
            "temperature": self.temperature,
        }
        if self.config.get("max_tokens"):
            kwargs["max_tokens"] = self.config["max_tokens"]
        return kwargs

    async def _generate(self, messages: List[Dict[str, str]]) -> str:
        response = await self.client.chat.completions.create(stream=False, **self._request_kwargs(messages))
        return response.choices[0].message.content or ""

    async def _stream(self, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        stream = await self.client.chat.completions.create(stream=True, **self._request_kwargs(messages))
        async for chunk in stream:
            if not chunk.choices:
                continue
            content = chunk.choices[0].delta.content
            if content:
                yield content


class GeminiChatModel(ChatModel):
    """Chat completions from Google Gemini."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        api_key = self.config.get("api_key") or self.settings.gemini_api_key
        if api_key:
            genai.configure(api_key=api_key)

    def _build(self, messages: List[Dict[str, str]]):
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        contents = [
            {"role": "model" if m["role"] == "assistant" else "user", "parts": [m["content"]]}
            for m in messages if m["role"] != "system"
        ]
        model = genai.GenerativeModel(model_name=self.model_name, system_instruction=system or None)
        generation_config = genai.types.GenerationConfig(
            temperature=self.temperature,
            max_output_tokens=self.config.get("max_tokens"),
        )
        return model, contents, generation_config

    async def _generate(self, messages: List[Dict[str, str]]) -> str:
        model, contents, generation_config = self._build(messages)
        response = await model.generate_content_async(contents, generation_config=generation_config)
        return _chunk_text(response)

    async def _stream(self, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        model, contents, generation_config = self._build(messages)
        response = await model.generate_content_async(contents, generation_config=generation_config, stream=True)
        async for chunk in response:
            yield _chunk_text(chunk)


def _chunk_text(response) -> str:
    # `.text` raises when a candidate carries no parts (e.g. safety stop)
    try:
        return response.text or ""
    except ValueError:
        return ""


@dataclass(frozen=True)
class ProviderSpec:
    """How a chat provider is instantiated and what it supports."""

    name: str
    model_class: Type[ChatModel]
    supports_credential_override: bool


PROVIDERS: Dict[str, ProviderSpec] = {
    name: ProviderSpec(name, OpenAIChatModel, supports_credential_override=True)
    for name in OPENAI_COMPATIBLE_PROVIDERS
}
# Gemini credentials are process-wide in google-generativeai
for name in ("google", "gemini"):
    PROVIDERS[name] = ProviderSpec(name, GeminiChatModel, supports_credential_override=False)


def get_provider_spec(provider: str) -> ProviderSpec:
    """
    Look up a chat provider registration.

    Raises:
        ConfigurationError: If the provider is unknown
    """
    spec = PROVIDERS.get((provider or "").lower())
    if spec is None:
        raise ConfigurationError(f"Unsupported chat provider: {provider}")
    return spec


def supports_credential_override(provider: str) -> bool:
    """Whether a per-bot credential may replace the provider's default one."""
    spec = PROVIDERS.get((provider or "").lower())
    return bool(spec and spec.supports_credential_override)


def chat_model_provider(provider: str,
                        model: str,
                        temperature: float,
                        config: Optional[Dict[str, Any]] = None,
                        streaming: bool = False,
                        on_token: Optional[TokenCallback] = None) -> ChatModel:
    """
    Build a chat model client.

    Args:
        provider: Provider name (case-insensitive)
        model: Model name passed to the provider
        temperature: Sampling temperature
        config: Provider configuration (api_key, base_url, max_tokens)
        streaming: Whether to stream tokens through `on_token`
        on_token: Awaited once per generated token when streaming

    Returns:
        ChatModel client
    """
    spec = get_provider_spec(provider)
    return spec.model_class(
        model,
        temperature=temperature,
        config=config,
        streaming=streaming,
        on_token=on_token,
    )
