"""Conversation messages and their chat-completions wire form.

The conversation is kept as langchain messages. An assistant turn keeps the
model's tool calls exactly as streamed (OpenAI shape, arguments still a JSON
string) under ``additional_kwargs["tool_calls"]`` so that argument parsing
happens per request when the tools run, and so the turn replays verbatim.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage


@dataclass(frozen=True)
class ToolRequest:
    id: str
    name: str
    arguments: Any


def content_text(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, Mapping) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return json.dumps(content, ensure_ascii=False)


def normalize_tool_calls(raw: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    """Coerce caller-supplied tool calls into the OpenAI wire shape."""

    normalized: list[dict[str, Any]] = []
    for call in raw or []:
        function = call.get("function") or {}
        arguments = function.get("arguments", "")
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments, ensure_ascii=False)
        normalized.append(
            {
                "id": call.get("id") or "",
                "type": call.get("type") or "function",
                "function": {"name": function.get("name") or "", "arguments": arguments},
            }
        )
    return normalized


def assistant_message(content: str, tool_calls: Sequence[Mapping[str, Any]] | None = None) -> AIMessage:
    additional_kwargs: dict[str, Any] = {}
    if tool_calls:
        additional_kwargs["tool_calls"] = normalize_tool_calls(tool_calls)
    return AIMessage(content=content, additional_kwargs=additional_kwargs)


def tool_requests(message: BaseMessage) -> list[ToolRequest]:
    """Tool requests carried by an assistant turn, in the order the model emitted them."""

    if not isinstance(message, AIMessage):
        return []

    raw = message.additional_kwargs.get("tool_calls")
    if raw:
        requests = []
        for call in raw:
            function = call.get("function") or {}
            requests.append(
                ToolRequest(id=call.get("id") or "", name=function.get("name") or "", arguments=function.get("arguments"))
            )
        return requests

    return [ToolRequest(id=call["id"] or "", name=call["name"], arguments=call["args"]) for call in message.tool_calls]


def _assistant_tool_calls(message: AIMessage) -> list[dict[str, Any]]:
    raw = message.additional_kwargs.get("tool_calls")
    if raw:
        return normalize_tool_calls(raw)
    return [
        {
            "id": call["id"] or "",
            "type": "function",
            "function": {"name": call["name"], "arguments": json.dumps(call["args"], ensure_ascii=False)},
        }
        for call in message.tool_calls
    ]


def to_provider_message(message: BaseMessage) -> dict[str, Any]:
    text = content_text(message.content)
    if isinstance(message, SystemMessage):
        return {"role": "system", "content": text}
    if isinstance(message, HumanMessage):
        return {"role": "user", "content": text}
    if isinstance(message, ToolMessage):
        payload = {"role": "tool", "tool_call_id": message.tool_call_id, "content": text}
        if message.name:
            payload["name"] = message.name
        return payload
    if isinstance(message, AIMessage):
        tool_calls = _assistant_tool_calls(message)
        if tool_calls:
            return {"role": "assistant", "content": text or None, "tool_calls": tool_calls}
        return {"role": "assistant", "content": text}
    raise TypeError(f"Unsupported message type: {type(message).__name__}")


def to_provider_messages(messages: Iterable[BaseMessage]) -> list[dict[str, Any]]:
    return [to_provider_message(message) for message in messages]


__all__ = [
    "ToolRequest",
    "assistant_message",
    "content_text",
    "normalize_tool_calls",
    "to_provider_message",
    "to_provider_messages",
    "tool_requests",
]
