"""Chatbot Service — request/response models."""

from typing import List, Literal, Optional

from pydantic import BaseModel, field_validator


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str = ""

    @field_validator("content", mode="before")
    @classmethod
    def null_content_is_empty(cls, value: Optional[str]) -> str:
        return "" if value is None else value


class ChatbotRequest(BaseModel):
    messages: List[ChatMessage]
    sessionId: Optional[str] = None


class ChatbotResponse(BaseModel):
    content: str
    workflowId: str
    fallback: bool = False


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    service: str
