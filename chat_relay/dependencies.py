import json
import logging

from fastapi import Request
from pydantic import ValidationError

from chat_relay.exceptions import MissingMessageException
from chat_relay.models import ChatRequest
from chat_relay.relay import ChatStreamProvider

logger = logging.getLogger(__name__)


async def require_chat_request(request: Request) -> ChatRequest:
    """Parse the JSON body. Anything without a non-empty string `message` is a 400."""
    raw = await request.body()
    logger.info("Received request for /api/chat")
    logger.info("Request Body: %s", raw.decode("utf-8", errors="replace"))

    try:
        payload = json.loads(raw) if raw else {}
    except ValueError:
        payload = {}

    try:
        chat_request = ChatRequest.model_validate(payload if isinstance(payload, dict) else {})
    except ValidationError:
        logger.error("Validation Error: Request body missing 'message' field.")
        raise MissingMessageException()

    logger.info('User input: "%s"', chat_request.message)
    return chat_request


def get_provider(request: Request) -> ChatStreamProvider:
    return request.app.state.provider
