"""
Chat Relay
Handles: POST /api/chat — relays one user message to the Hugging Face inference router
and streams the reply back as text/plain chunks.
Port: 3000 (PORT env var)

Settings are built once at startup and handed to the app; the process refuses to start
without HF_TOKEN.
"""

import logging
import os
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles

from chat_relay import __version__
from chat_relay.config import Settings, load_settings
from chat_relay.dependencies import get_provider, require_chat_request
from chat_relay.exceptions import ChatRelayException
from chat_relay.logging_config import init_logging
from chat_relay.models import ChatRequest, ErrorResponse, HealthResponse
from chat_relay.provider import HuggingFaceChatClient
from chat_relay.relay import ChatRelay, ChatStreamProvider

logger = logging.getLogger(__name__)


def create_app(settings: Settings, provider: Optional[ChatStreamProvider] = None) -> FastAPI:
    app = FastAPI(title="Chat Relay", version=__version__)
    app.state.settings = settings
    app.state.provider = provider or HuggingFaceChatClient(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ChatRelayException)
    async def chat_relay_error(request: Request, exc: ChatRelayException):
        return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=exc.detail).model_dump())

    # ── Endpoints ─────────────────────────────────────────────────────────────

    @app.post("/api/chat")
    async def chat(
        chat_request: ChatRequest = Depends(require_chat_request),
        provider: ChatStreamProvider = Depends(get_provider),
    ):
        relay = ChatRelay(provider)
        try:
            await relay.start(chat_request)
        except Exception as e:
            raise relay.fail(e) from e

        return StreamingResponse(
            relay.stream(),
            media_type="text/plain",
            headers={"Transfer-Encoding": "chunked"},
        )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return {"status": "ok", "service": "chat-relay"}

    # Companion frontend; mounted last so the API routes win.
    if os.path.isdir(settings.static_dir):
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    else:
        logger.warning("Static directory %s not found; frontend will not be served", settings.static_dir)

    return app


settings = load_settings()
init_logging(settings.log_level)
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn
    logger.info("Backend server starting on port %s", settings.port)
    uvicorn.run("chat_relay.main:app", host="0.0.0.0", port=settings.port)
