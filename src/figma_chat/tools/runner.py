from __future__ import annotations

import json
import logging
import time
from collections.abc import Mapping
from typing import Any

from ..mcp.client import FigmaMcpClient
from ..mcp.errors import ToolNotFoundError
from ..mcp.results import RpcFailure, RpcResult
from .catalog import TOOLS_BY_NAME

logger = logging.getLogger(__name__)


def _result_info(result: RpcResult) -> dict[str, Any]:
    if isinstance(result, RpcFailure):
        return {"isError": True, "error": result.message}

    body = result.result
    info: dict[str, Any] = {"hasResult": body is not None, "resultType": type(body).__name__}
    if isinstance(body, Mapping):
        info["resultKeys"] = list(body.keys())
        content = body.get("content")
        if isinstance(content, list):
            info["contentItems"] = len(content)
    elif isinstance(body, list):
        info["resultArrayLength"] = len(body)
    elif isinstance(body, str):
        info["resultLength"] = len(body)
    return info


async def run_tool(client: FigmaMcpClient, name: str, arguments: Any) -> RpcResult:
    """Execute one catalog tool against the MCP server.

    Structured arguments are checked against the tool's required fields before
    anything is sent; unparsed (string) arguments are forwarded as-is.
    """

    descriptor = TOOLS_BY_NAME.get(name)
    if descriptor is None:
        raise ToolNotFoundError(name)

    if arguments is None:
        arguments = {}

    started = time.perf_counter()
    logger.info("[TOOL] Executing tool: %s arguments=%s", name, str(arguments)[:500])
    try:
        if isinstance(arguments, Mapping):
            descriptor.validate(arguments)
        result = await client.call_tool(name, arguments)
    except Exception as exc:
        logger.error(
            "[TOOL] Tool execution failed: %s duration=%.0fms error=%s",
            name,
            (time.perf_counter() - started) * 1000,
            exc,
        )
        raise

    logger.info(
        "[TOOL] Tool execution completed: %s duration=%.0fms %s",
        name,
        (time.perf_counter() - started) * 1000,
        _result_info(result),
    )
    return result


def render_tool_result(result: RpcResult) -> str:
    """Text handed back to the model as the tool message content."""

    if isinstance(result, RpcFailure):
        return json.dumps(result.to_envelope(), ensure_ascii=False)

    body: Any = result.result
    if isinstance(body, Mapping) and "content" in body:
        body = body["content"]
    elif body is None:
        body = result.payload
    if isinstance(body, str):
        return body
    return json.dumps(body, ensure_ascii=False)


__all__ = ["render_tool_result", "run_tool"]
