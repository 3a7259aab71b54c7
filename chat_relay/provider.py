"""
Hugging Face inference router client.

Uses the OpenAI SDK against the router's OpenAI-compatible endpoint and maps each
streamed chunk to a DeltaEvent. The inference provider is picked with the router's
"<model>:<provider>" suffix.
"""

import json
import logging
from typing import AsyncIterator, List, Optional

import httpx
from openai import APIError, APIStatusError, AsyncOpenAI, DefaultAsyncHttpxClient

from chat_relay.config import Settings
from chat_relay.exceptions import UpstreamError
from chat_relay.models import ChatMessage, DeltaEvent

logger = logging.getLogger(__name__)


def to_delta_event(chunk) -> DeltaEvent:
    choices = getattr(chunk, "choices", None) or []
    if not choices:
        return DeltaEvent()
    choice = choices[0]
    delta = getattr(choice, "delta", None)
    return DeltaEvent(
        content=getattr(delta, "content", None),
        finish_reason=getattr(choice, "finish_reason", None),
    )


class HuggingFaceChatClient:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def _client(self) -> AsyncOpenAI:
        # One attempt per request; retries are the caller's business.
        return AsyncOpenAI(
            base_url=self.settings.base_url,
            api_key=self.settings.hf_token,
            timeout=self.settings.upstream_timeout,
            max_retries=0,
            http_client=DefaultAsyncHttpxClient(transport=self._transport),
        )

    def build_request(self, messages: List[ChatMessage]) -> dict:
        return {
            "model": f"{self.settings.model}:{self.settings.provider}",
            "messages": [m.model_dump() for m in messages],
            "temperature": self.settings.temperature,
            "max_tokens": self.settings.max_tokens,
            "top_p": self.settings.top_p,
            "stream": True,
        }

    async def open_chat_stream(self, messages: List[ChatMessage]) -> AsyncIterator[DeltaEvent]:
        """
        Lazy, single-use stream of DeltaEvents. Nothing is sent until the first pull;
        closing the generator releases the connection.
        """
        async with self._client() as client:
            try:
                stream = await client.chat.completions.create(**self.build_request(messages))
                try:
                    async for chunk in stream:
                        yield to_delta_event(chunk)
                finally:
                    await stream.close()
            except APIStatusError as e:
                raise UpstreamError(
                    f"Inference provider returned HTTP {e.status_code}: {e.message}",
                    status_code=e.status_code,
                    body=e.response.text,
                ) from e
            except APIError as e:
                body = json.dumps(e.body, default=str) if e.body is not None else None
                raise UpstreamError(f"Inference provider error: {e.message}", body=body) from e
