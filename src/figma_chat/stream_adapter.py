"""Map provider stream chunks onto the chat-completions chunk shape.

Providers hand back either SDK objects (attribute access, snake_case) or plain
dicts (sometimes camelCase). ``adapt_chunk`` reads both and emits a plain dict
with snake_case keys. Fields missing on the source are left out rather than
filled with defaults, and nothing is buffered between chunks.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_MISSING = object()


def _field(source: Any, *names: str) -> Any:
    if source is None:
        return None
    for name in names:
        if isinstance(source, Mapping):
            value = source.get(name, _MISSING)
        else:
            value = getattr(source, name, _MISSING)
        if value is not _MISSING and value is not None:
            return value
    return None


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _adapt_function(function: Any) -> dict[str, Any] | None:
    if function is None:
        return None
    return _compact({"name": _field(function, "name"), "arguments": _field(function, "arguments")})


def _adapt_tool_call(tool_call: Any) -> dict[str, Any]:
    return _compact(
        {
            "index": _field(tool_call, "index"),
            "id": _field(tool_call, "id"),
            "type": _field(tool_call, "type"),
            "function": _adapt_function(_field(tool_call, "function")),
        }
    )


def _adapt_delta(delta: Any) -> dict[str, Any]:
    tool_calls = _field(delta, "tool_calls", "toolCalls")
    return _compact(
        {
            "content": _field(delta, "content"),
            "role": _field(delta, "role"),
            "tool_calls": [_adapt_tool_call(tc) for tc in tool_calls] if tool_calls is not None else None,
            "function_call": _adapt_function(_field(delta, "function_call", "functionCall")),
        }
    )


def _adapt_choice(choice: Any) -> dict[str, Any]:
    return _compact(
        {
            "index": _field(choice, "index"),
            "finish_reason": _field(choice, "finish_reason", "finishReason"),
            "delta": _adapt_delta(_field(choice, "delta")),
        }
    )


def adapt_chunk(chunk: Any) -> dict[str, Any]:
    """Adapt a single provider chunk."""

    choices = _field(chunk, "choices") or []
    return _compact(
        {
            "id": _field(chunk, "id"),
            "created": _field(chunk, "created"),
            "model": _field(chunk, "model"),
            "object": _field(chunk, "object"),
            "system_fingerprint": _field(chunk, "system_fingerprint", "systemFingerprint"),
            "choices": [_adapt_choice(choice) for choice in choices],
        }
    )


def chunk_text(chunk: Mapping[str, Any]) -> str:
    """Concatenated text deltas of an adapted chunk."""

    parts = []
    for choice in chunk.get("choices", []):
        content = choice.get("delta", {}).get("content")
        if isinstance(content, str):
            parts.append(content)
    return "".join(parts)


__all__ = ["adapt_chunk", "chunk_text"]
