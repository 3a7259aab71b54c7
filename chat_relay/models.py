"""Chat Relay — request/response models."""

from typing import Optional

from pydantic import BaseModel, Field, StrictStr


class ChatRequest(BaseModel):
    message: StrictStr = Field(min_length=1)


class ChatMessage(BaseModel):
    role: str
    content: str


class DeltaEvent(BaseModel):
    content: Optional[str] = None
    finish_reason: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    service: str
