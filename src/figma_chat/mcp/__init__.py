"""JSON-RPC client for the Figma MCP server."""

from __future__ import annotations

from .client import FigmaMcpClient, get_figma_client, strip_local_files
from .errors import FigmaMcpError, ServerUnavailableError, ToolNotFoundError, ToolValidationError
from .guard import AvailabilityGuard
from .results import RpcFailure, RpcResult, RpcSuccess
from .session import McpSession
from .transport import McpConfig, McpTransport

__all__ = [
    "AvailabilityGuard",
    "FigmaMcpClient",
    "FigmaMcpError",
    "McpConfig",
    "McpSession",
    "McpTransport",
    "RpcFailure",
    "RpcResult",
    "RpcSuccess",
    "ServerUnavailableError",
    "ToolNotFoundError",
    "ToolValidationError",
    "get_figma_client",
    "strip_local_files",
]
