"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest
from unittest.mock import AsyncMock, MagicMock

from figma_chat.mcp.results import RpcSuccess
from figma_chat.mcp.transport import McpConfig

from tests.helpers import McpServerStub


@pytest.fixture
def mcp_config():
    """MCP configuration pointing at a fake server."""
    return McpConfig(
        server_url="https://figma.test/mcp",
        token="figd_test_token",
        protocol_version="2025-06-18",
        user_agent="figma-chat-tests/1.0",
        timeout=5.0,
        retries=3,
    )


@pytest.fixture
def mcp_server():
    """In-process stand-in for the Figma MCP server."""
    return McpServerStub()


@pytest.fixture
def mock_figma_client():
    """Figma client whose tool calls succeed with a single text item."""
    client = MagicMock()
    client.call_tool = AsyncMock(
        return_value=RpcSuccess(
            {"jsonrpc": "2.0", "id": 1, "result": {"content": [{"type": "text", "text": "ok"}]}}
        )
    )
    return client


@pytest.fixture
def sample_metadata_xml():
    """Metadata outline as returned by get_metadata."""
    return (
        '<frame id="1:2" name="Checkout" x="0" y="0" width="375" height="812">'
        '<text id="1:3" name="Title" x="24" y="64" width="327" height="32" />'
        '<instance id="1:4" name="Button/Primary" x="24" y="720" width="327" height="48" />'
        "</frame>"
    )
