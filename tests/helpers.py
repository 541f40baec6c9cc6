"""Shared test helpers (fake MCP server, scripted chat model)."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx

from figma_chat.mcp.client import FigmaMcpClient
from figma_chat.mcp.transport import McpConfig


def sse_body(document: dict[str, Any]) -> str:
    """Wrap a JSON-RPC document in a single event-stream frame."""
    return f"event: message\ndata: {json.dumps(document)}\n\n"


class McpServerStub:
    """Callable handler for ``httpx.MockTransport`` that answers like the Figma MCP server.

    Every request body and its headers are recorded. ``initialize`` succeeds
    unless ``initialize_status`` or ``initialize_error`` say otherwise; tool calls
    answer with ``tool_result`` (or whatever ``on_tool_call`` returns).
    """

    def __init__(
        self,
        *,
        initialize_status: int = 200,
        initialize_error: dict[str, Any] | None = None,
        tool_result: dict[str, Any] | None = None,
        session_id: str | None = None,
        event_stream: bool = True,
    ):
        self.initialize_status = initialize_status
        self.initialize_error = initialize_error
        self.tool_result = tool_result or {"content": [{"type": "text", "text": "ok"}]}
        self.session_id = session_id
        self.event_stream = event_stream
        self.on_tool_call: Callable[[httpx.Request, dict[str, Any]], httpx.Response] | None = None
        self.requests: list[dict[str, Any]] = []
        self.headers: list[httpx.Headers] = []

    def methods(self) -> list[str]:
        return [request["method"] for request in self.requests]

    def count(self, method: str) -> int:
        return self.methods().count(method)

    def _reply(self, document: dict[str, Any], status_code: int = 200) -> httpx.Response:
        headers = {}
        if self.session_id:
            headers["mcp-session-id"] = self.session_id
        if self.event_stream:
            headers["content-type"] = "text/event-stream"
            return httpx.Response(status_code, text=sse_body(document), headers=headers)
        return httpx.Response(status_code, json=document, headers=headers)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        self.headers.append(request.headers)
        method = body["method"]

        if method == "initialize":
            if self.initialize_status != 200:
                return httpx.Response(self.initialize_status)
            if self.initialize_error is not None:
                return self._reply({"jsonrpc": "2.0", "error": self.initialize_error})
            return self._reply(
                {
                    "jsonrpc": "2.0",
                    "result": {
                        "protocolVersion": "2025-06-18",
                        "serverInfo": {"name": "Figma Dev Mode MCP", "version": "1.0.0"},
                        "capabilities": {"tools": {}},
                    },
                }
            )
        if method.startswith("notifications/"):
            return httpx.Response(202)
        if method == "tools/call" and self.on_tool_call is not None:
            return self.on_tool_call(request, body)
        if method == "tools/call":
            return self._reply({"jsonrpc": "2.0", "id": body.get("id"), "result": self.tool_result})
        return self._reply({"jsonrpc": "2.0", "id": body.get("id"), "result": {"items": []}})

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    def figma_client(self, config: McpConfig) -> FigmaMcpClient:
        return FigmaMcpClient.from_config(config, http_client=self.http_client())


def text_chunk(text: str, *, finish_reason: str | None = None) -> dict[str, Any]:
    choice: dict[str, Any] = {"index": 0, "delta": {"content": text}}
    if finish_reason:
        choice["finish_reason"] = finish_reason
    return {"id": "gen-1", "object": "chat.completion.chunk", "model": "test-model", "choices": [choice]}


def tool_call_chunk(
    index: int,
    *,
    call_id: str | None = None,
    name: str | None = None,
    arguments: str = "",
) -> dict[str, Any]:
    call: dict[str, Any] = {"index": index, "function": {"arguments": arguments}}
    if call_id:
        call["id"] = call_id
        call["type"] = "function"
    if name:
        call["function"]["name"] = name
    return {
        "id": "gen-1",
        "object": "chat.completion.chunk",
        "model": "test-model",
        "choices": [{"index": 0, "delta": {"tool_calls": [call]}}],
    }


class FakeProvider:
    """Chat model that replays one scripted list of chunks per turn."""

    def __init__(self, turns: list[list[dict[str, Any]]], *, repeat_last: bool = False):
        self.turns = list(turns)
        self.repeat_last = repeat_last
        self.calls: list[dict[str, Any]] = []

    async def stream_chat(self, messages, tools):
        self.calls.append({"messages": list(messages), "tools": list(tools)})
        if len(self.turns) > 1 or not self.repeat_last:
            chunks = self.turns.pop(0)
        else:
            chunks = self.turns[0]
        for chunk in chunks:
            yield chunk
