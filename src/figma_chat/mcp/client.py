"""Typed gateway over the Figma MCP server.

Every tool call goes through :meth:`FigmaMcpClient.call_tool`, which strips
content items that point at the server's local filesystem before handing the
result back. The per-tool wrappers validate their required parameters first and
never touch the network when one is missing.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

import httpx

from ..config import get_settings
from .errors import ToolValidationError
from .guard import ACKNOWLEDGE_METHOD, HANDSHAKE_METHOD, AvailabilityGuard
from .results import RpcResult, RpcSuccess
from .session import McpSession
from .transport import McpConfig, McpTransport

logger = logging.getLogger(__name__)

LOCAL_FILE_SCHEME = "file:"
NODE_AND_FILE = ("nodeId", "fileKey")


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def require_fields(tool_name: str, arguments: Mapping[str, Any], required: tuple[str, ...] | list[str]) -> None:
    """Raise :class:`ToolValidationError` if any required argument is absent or empty."""

    missing = [name for name in required if _is_missing(arguments.get(name))]
    if missing:
        raise ToolValidationError(tool_name, list(required), missing)


def _origin_uri(item: Any) -> Any:
    if not isinstance(item, Mapping):
        return None
    uri = item.get("uri")
    if uri is None and isinstance(item.get("resource"), Mapping):
        uri = item["resource"].get("uri")
    return uri


def is_local_file_item(item: Any) -> bool:
    uri = _origin_uri(item)
    return isinstance(uri, str) and uri.startswith(LOCAL_FILE_SCHEME)


def strip_local_files(result: RpcResult) -> RpcResult:
    """Drop ``file:`` content items from a successful tool result.

    Applied to every tool call. A result without content gets an empty content
    list; failures and JSON-RPC error replies pass through untouched.
    """

    if not isinstance(result, RpcSuccess):
        return result
    body = result.result
    if not isinstance(body, Mapping):
        return result

    content = body.get("content") or []
    kept = [item for item in content if not is_local_file_item(item)]
    if len(kept) != len(content):
        logger.info("[MCP] Removed %d local file item(s) from tool result", len(content) - len(kept))
    return RpcSuccess({**result.payload, "result": {**body, "content": kept}})


def _arguments(**values: Any) -> dict[str, Any]:
    """Build wire arguments, dropping empty strings and unset values."""

    arguments: dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, bool):
            arguments[key] = value
        elif not _is_missing(value):
            arguments[key] = value
    return arguments


class FigmaMcpClient:
    def __init__(self, guard: AvailabilityGuard):
        self.guard = guard

    @classmethod
    def from_config(cls, config: McpConfig, http_client: httpx.AsyncClient | None = None) -> "FigmaMcpClient":
        session = McpSession()
        transport = McpTransport(config, session, client=http_client)
        return cls(AvailabilityGuard(transport, session))

    @property
    def config(self) -> McpConfig:
        return self.guard.transport.config

    def get_config(self) -> dict[str, Any]:
        config = self.config
        return {"server_url": config.server_url, "timeout": config.timeout, "retries": config.retries}

    def is_server_available(self) -> bool:
        return self.guard.available

    async def check_availability(self) -> bool:
        """Run the handshake now instead of waiting for the first guarded call."""
        return await self.guard.handshake()

    async def initialize(self) -> RpcResult:
        return await self.guard.request(HANDSHAKE_METHOD)

    async def notify_initialized(self) -> RpcResult:
        return await self.guard.request(ACKNOWLEDGE_METHOD)

    async def call_tool(self, tool_name: str, arguments: Any) -> RpcResult:
        result = await self.guard.request("tools/call", {"name": tool_name, "arguments": arguments})
        return strip_local_files(result)

    async def list_tools(self) -> RpcResult:
        return await self.guard.request("tools/list", {})

    async def list_resources(self) -> RpcResult:
        return await self.guard.request("resources/list", {})

    async def list_prompts(self) -> RpcResult:
        return await self.guard.request("prompts/list", {})

    async def _call_validated(
        self, tool_name: str, arguments: dict[str, Any], required: tuple[str, ...] = NODE_AND_FILE
    ) -> RpcResult:
        require_fields(tool_name, arguments, required)
        return await self.call_tool(tool_name, arguments)

    async def get_screenshot(
        self,
        *,
        node_id: str | None = None,
        file_key: str | None = None,
        client_languages: str | None = None,
        client_frameworks: str | None = None,
    ) -> RpcResult:
        """Render a node to an image."""
        return await self._call_validated(
            "get_screenshot",
            _arguments(
                nodeId=node_id,
                fileKey=file_key,
                clientLanguages=client_languages,
                clientFrameworks=client_frameworks,
            ),
        )

    async def create_design_system_rules(
        self,
        *,
        node_id: str | None = None,
        client_languages: str | None = None,
        client_frameworks: str | None = None,
    ) -> RpcResult:
        return await self._call_validated(
            "create_design_system_rules",
            _arguments(nodeId=node_id, clientLanguages=client_languages, clientFrameworks=client_frameworks),
            required=(),
        )

    async def get_design_context(
        self,
        *,
        node_id: str | None = None,
        file_key: str | None = None,
        client_languages: str | None = None,
        client_frameworks: str | None = None,
        force_code: bool | None = None,
        disable_code_connect: bool | None = None,
    ) -> RpcResult:
        """Generate UI code for a node; the reply carries code plus asset download URLs."""
        return await self._call_validated(
            "get_design_context",
            _arguments(
                nodeId=node_id,
                fileKey=file_key,
                clientLanguages=client_languages,
                clientFrameworks=client_frameworks,
                forceCode=force_code,
                disableCodeConnect=disable_code_connect,
            ),
        )

    async def get_metadata(
        self,
        *,
        node_id: str | None = None,
        file_key: str | None = None,
        client_languages: str | None = None,
        client_frameworks: str | None = None,
    ) -> RpcResult:
        """XML outline of a node or page: ids, layer types, names, positions and sizes."""
        return await self._call_validated(
            "get_metadata",
            _arguments(
                nodeId=node_id,
                fileKey=file_key,
                clientLanguages=client_languages,
                clientFrameworks=client_frameworks,
            ),
        )

    async def get_variable_defs(
        self,
        *,
        node_id: str | None = None,
        file_key: str | None = None,
        client_languages: str | None = None,
        client_frameworks: str | None = None,
    ) -> RpcResult:
        return await self._call_validated(
            "get_variable_defs",
            _arguments(
                nodeId=node_id,
                fileKey=file_key,
                clientLanguages=client_languages,
                clientFrameworks=client_frameworks,
            ),
        )

    async def get_figjam(
        self,
        *,
        node_id: str | None = None,
        file_key: str | None = None,
        client_languages: str | None = None,
        client_frameworks: str | None = None,
        include_images_of_nodes: bool | None = None,
    ) -> RpcResult:
        return await self._call_validated(
            "get_figjam",
            _arguments(
                nodeId=node_id,
                fileKey=file_key,
                clientLanguages=client_languages,
                clientFrameworks=client_frameworks,
                includeImagesOfNodes=include_images_of_nodes,
            ),
        )

    async def get_code_connect_map(
        self,
        *,
        node_id: str | None = None,
        file_key: str | None = None,
        code_connect_label: str | None = None,
    ) -> RpcResult:
        """Map node ids to the codebase components registered through Code Connect."""
        return await self._call_validated(
            "get_code_connect_map",
            _arguments(nodeId=node_id, fileKey=file_key, codeConnectLabel=code_connect_label),
        )

    async def whoami(self) -> RpcResult:
        return await self.call_tool("whoami", {})


@lru_cache
def get_figma_client() -> FigmaMcpClient:
    """Process-wide client so the correlation counter and availability state are shared."""

    return FigmaMcpClient.from_config(McpConfig.from_settings(get_settings()))
