from typing import Optional

from fastapi import HTTPException


class ChatRelayException(HTTPException):
    """Client-facing errors. Rendered as {"error": detail} by the app."""


class MissingMessageException(ChatRelayException):
    def __init__(self, detail: str = 'Request body must contain a "message" field.'):
        super().__init__(status_code=400, detail=detail)


class ChatProcessingException(ChatRelayException):
    def __init__(self, detail: str = "Failed to process chat message due to an internal server error."):
        super().__init__(status_code=500, detail=detail)


class UpstreamError(Exception):
    """Failure reported by the inference provider."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class StartupConfigurationError(RuntimeError):
    pass


class ResponseStateError(RuntimeError):
    pass
