from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class ToolCallFunction(BaseModel):
    name: str
    arguments: str | dict[str, Any] = ""


class ToolCallEnvelope(BaseModel):
    id: str
    type: Literal["function"] = "function"
    function: ToolCallFunction


class MessageEnvelope(BaseModel):
    """Serializable message payload, as sent by the chat UI."""

    role: Literal["user", "assistant", "system", "tool"]
    content: str | list[Any] | None = None
    tool_calls: list[ToolCallEnvelope] | None = None
    tool_call_id: str | None = None
    name: str | None = None


class ChatRequest(BaseModel):
    messages: list[MessageEnvelope] = Field(..., description="Conversation so far, oldest first")


class HealthResponse(BaseModel):
    status: str = "ok"
