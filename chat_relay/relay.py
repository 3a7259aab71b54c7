"""
Chat relay handler — forwards one user message to the inference provider and streams
the generated text back as plain-text chunks.

The response moves through PENDING -> STREAMING -> CLOSED. A structured JSON error is
only legal while PENDING; once the first chunk is on its way the body can only be cut
short. start() therefore primes the upstream stream up to the first content fragment so
that early failures (auth, rate limits, network) can still become an HTTP 500.
"""

import logging
from enum import Enum
from typing import AsyncIterator, List, Optional, Protocol

from chat_relay.exceptions import ChatProcessingException, ResponseStateError, UpstreamError
from chat_relay.models import ChatMessage, ChatRequest, DeltaEvent

logger = logging.getLogger(__name__)


class ChatStreamProvider(Protocol):
    def open_chat_stream(self, messages: List[ChatMessage]) -> AsyncIterator[DeltaEvent]:
        ...


class ResponseState(str, Enum):
    PENDING = "pending"
    STREAMING = "streaming"
    CLOSED = "closed"


def log_failure(exc: BaseException) -> None:
    """Full failure detail for the operator. Never sent to the client."""
    logger.error("ERROR CAUGHT IN /api/chat: %s", exc, exc_info=(type(exc), exc, exc.__traceback__))
    if isinstance(exc, UpstreamError):
        if exc.status_code is not None:
            logger.error("Upstream response status: %s", exc.status_code)
        if exc.body is not None:
            logger.error("Upstream response body: %s", exc.body)


class ChatRelay:
    def __init__(self, provider: ChatStreamProvider):
        self.provider = provider
        self.state = ResponseState.PENDING
        self._events: Optional[AsyncIterator[DeltaEvent]] = None
        self._pending: Optional[str] = None
        self._finished = False

    def _accept(self, event: DeltaEvent) -> Optional[str]:
        # Content first, then the finish check.
        chunk = event.content or None
        if event.finish_reason:
            logger.info("Stream finished with reason: %s", event.finish_reason)
            self._finished = True
        return chunk

    async def start(self, chat_request: ChatRequest) -> None:
        """Open the upstream stream and pull until there is something to send."""
        conversation = [ChatMessage(role="user", content=chat_request.message)]
        logger.info("Attempting to call chat completion stream...")
        self._events = self.provider.open_chat_stream(conversation)
        try:
            while self._pending is None and not self._finished:
                event = await anext(self._events, None)
                if event is None:
                    self._finished = True
                    break
                self._pending = self._accept(event)
        except Exception:
            await self.aclose()
            raise

    async def stream(self) -> AsyncIterator[str]:
        """Response body. Pulled one chunk at a time, so a slow client pauses upstream reads."""
        self.state = ResponseState.STREAMING
        logger.info("Streaming response started...")
        try:
            if self._pending is not None:
                chunk, self._pending = self._pending, None
                yield chunk
            while not self._finished:
                event = await anext(self._events, None)
                if event is None:
                    break
                chunk = self._accept(event)
                if chunk is not None:
                    yield chunk
            logger.info("Finished sending streaming response.")
        except Exception as exc:
            log_failure(exc)
            logger.info("Headers already sent, ending response after error during stream.")
        finally:
            self.state = ResponseState.CLOSED
            await self.aclose()

    def fail(self, exc: Exception) -> ChatProcessingException:
        log_failure(exc)
        if self.state is not ResponseState.PENDING:
            raise ResponseStateError(f"Cannot send a JSON error once the response is {self.state.value}")
        logger.info("Sending 500 error response back to client.")
        self.state = ResponseState.CLOSED
        return ChatProcessingException()

    async def aclose(self) -> None:
        if self._events is not None:
            await self._events.aclose()
