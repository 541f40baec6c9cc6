"""Tool registry for the Figma chat server."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .catalog import FIGMA_TOOLS, ToolDescriptor
from .runner import render_tool_result, run_tool


def get_registered_tools() -> Sequence[ToolDescriptor]:
    """Return all tools available to the agent."""

    return FIGMA_TOOLS


def get_openai_tools() -> list[dict[str, Any]]:
    """Catalog in the chat-completions ``tools`` format."""

    return [tool.as_openai_tool() for tool in get_registered_tools()]


__all__ = [
    "ToolDescriptor",
    "get_openai_tools",
    "get_registered_tools",
    "render_tool_result",
    "run_tool",
]
