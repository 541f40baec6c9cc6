from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage, ToolMessage

from .agent import ChatOrchestrator, get_orchestrator
from .messages import assistant_message, content_text
from .rate_limit import enforce_rate_limit
from .schemas import ChatRequest, HealthResponse, MessageEnvelope
from .stream_adapter import chunk_text

router = APIRouter()

logger = logging.getLogger(__name__)

EVENT_STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


def _as_langchain_messages(raw: Iterable[MessageEnvelope]) -> list[BaseMessage]:
    messages: list[BaseMessage] = []
    for envelope in raw:
        content = content_text(envelope.content)
        if envelope.role == "user":
            messages.append(HumanMessage(content=content))
        elif envelope.role == "assistant":
            tool_calls = [call.model_dump() for call in envelope.tool_calls or []]
            messages.append(assistant_message(content, tool_calls))
        elif envelope.role == "tool":
            if not envelope.tool_call_id:
                raise HTTPException(
                    status_code=422,
                    detail="tool messages must include tool_call_id",
                )
            messages.append(ToolMessage(content=content, tool_call_id=envelope.tool_call_id, name=envelope.name))
        else:
            messages.append(SystemMessage(content=content))
    return messages


def _format_sse_event(data: Any, event_type: str | None = None) -> str:
    """Format data as Server-Sent Event."""
    payload = data if isinstance(data, str) else json.dumps(data, ensure_ascii=False)
    if event_type:
        return f"event: {event_type}\ndata: {payload}\n\n"
    return f"data: {payload}\n\n"


@router.get("/healthz", response_model=HealthResponse)
def healthcheck() -> HealthResponse:
    return HealthResponse()


@router.post("/api/chat", dependencies=[Depends(enforce_rate_limit)])
async def chat(
    payload: ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> StreamingResponse:
    """Stream the model's answer as plain text."""
    history = _as_langchain_messages(payload.messages)

    async def text_stream():
        try:
            async for chunk in orchestrator.astream(history):
                text = chunk_text(chunk)
                if text:
                    yield text
        except Exception as exc:
            logger.exception("Chat stream failed")
            yield f"\n\n[error] {exc}"

    return StreamingResponse(text_stream(), media_type="text/plain; charset=utf-8")


@router.post("/api/chat/stream", dependencies=[Depends(enforce_rate_limit)])
async def chat_chunks(
    payload: ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> StreamingResponse:
    """Stream every adapted model chunk as a Server-Sent Event."""
    history = _as_langchain_messages(payload.messages)

    async def event_stream():
        try:
            async for chunk in orchestrator.astream(history):
                yield _format_sse_event(chunk)
        except Exception as exc:
            logger.exception("Chat chunk stream failed")
            yield _format_sse_event({"error": str(exc)}, event_type="error")
        yield _format_sse_event("[DONE]")

    return StreamingResponse(event_stream(), media_type="text/event-stream", headers=EVENT_STREAM_HEADERS)
