"""HTTP transport for JSON-RPC calls against the Figma MCP server."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from ..config import Settings
from .event_stream import extract_data_payload, is_event_stream
from .results import RpcFailure, RpcResult, RpcSuccess
from .session import McpSession

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
SUCCESS_STATUSES = frozenset({200, 202})
SESSION_HEADER = "mcp-session-id"

CONNECTION_REFUSED_MESSAGE = (
    "Cannot connect to Figma MCP server. Please ensure the server is reachable and MCP is enabled."
)
TIMEOUT_MESSAGE = "Request to Figma MCP server timed out. Please try again."
UNKNOWN_ERROR_MESSAGE = "Unknown error occurred while communicating with Figma MCP server"


@dataclass(frozen=True)
class McpConfig:
    server_url: str = "https://mcp.figma.com/mcp"
    token: str = ""
    protocol_version: str = "2025-06-18"
    user_agent: str = "figma-chat/0.1.0"
    timeout: float = 60.0
    retries: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> "McpConfig":
        return cls(
            server_url=settings.figma_mcp_url,
            token=settings.figma_mcp_token,
            protocol_version=settings.figma_mcp_protocol_version,
            user_agent=settings.figma_mcp_user_agent,
            timeout=settings.figma_mcp_timeout_seconds,
            retries=settings.figma_mcp_retries,
        )


class UnexpectedStatusError(Exception):
    def __init__(self, status_code: int, reason: str):
        super().__init__(f"Figma MCP server responded with error: {status_code} {reason}".rstrip())
        self.status_code = status_code
        self.reason = reason


def format_error(error: BaseException) -> str:
    """Turn any failure raised while sending or decoding into a user-facing message."""

    if isinstance(error, httpx.TimeoutException):
        return TIMEOUT_MESSAGE
    if isinstance(error, httpx.ConnectError):
        return CONNECTION_REFUSED_MESSAGE
    if isinstance(error, UnexpectedStatusError):
        return str(error)
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        return str(UnexpectedStatusError(response.status_code, response.reason_phrase))
    return str(error) or UNKNOWN_ERROR_MESSAGE


def decode_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a plain JSON or event-stream body into the response document."""

    text = response.text
    if not text.strip():
        return {}

    if is_event_stream(text, response.headers.get("content-type")):
        data = extract_data_payload(text)
        if data is None:
            raise ValueError("Event stream response did not contain a data frame")
        document = json.loads(data)
    else:
        document = json.loads(text)

    if not isinstance(document, dict):
        raise ValueError(f"Unexpected response document of type {type(document).__name__}")
    return document


class McpTransport:
    """Issue one JSON-RPC request and classify the reply.

    ``send`` never raises for transport or decoding problems; those come back as
    :class:`RpcFailure`. There are no retries at this layer.
    """

    def __init__(
        self,
        config: McpConfig,
        session: McpSession,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config
        self.session = session
        self._client = client

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
            "Authorization": f"Bearer {self.config.token}",
            "mcp-protocol-version": self.config.protocol_version,
            "User-Agent": self.config.user_agent,
        }
        if self.session.session_id:
            headers[SESSION_HEADER] = self.session.session_id
        return headers

    def build_envelope(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Frame a request; only parameter-bearing calls consume a correlation id."""

        if not method:
            raise ValueError("method must be a non-empty string")

        envelope: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
        if params is not None:
            request_id = self.session.next_request_id()
            envelope["params"] = {**params, "_meta": {"progressToken": request_id}}
            envelope["id"] = request_id
        return envelope

    async def _post(self, envelope: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(
                self.config.server_url,
                json=envelope,
                headers=self._headers(),
                timeout=self.config.timeout,
            )
        async with httpx.AsyncClient() as client:
            return await client.post(
                self.config.server_url,
                json=envelope,
                headers=self._headers(),
                timeout=self.config.timeout,
            )

    async def send(self, method: str, params: dict[str, Any] | None = None) -> RpcResult:
        envelope = self.build_envelope(method, params)
        started = time.perf_counter()
        logger.info("[MCP] Calling %s (id=%s)", method, envelope.get("id"))

        try:
            response = await self._post(envelope)
            if response.status_code not in SUCCESS_STATUSES:
                raise UnexpectedStatusError(response.status_code, response.reason_phrase)
            session_id = response.headers.get(SESSION_HEADER)
            if session_id:
                self.session.session_id = session_id
            document = decode_body(response)
        except Exception as exc:
            message = format_error(exc)
            logger.error(
                "[MCP] %s failed after %.0fms: %s",
                method,
                (time.perf_counter() - started) * 1000,
                message,
            )
            return RpcFailure(message)

        logger.info("[MCP] %s completed in %.0fms", method, (time.perf_counter() - started) * 1000)
        return RpcSuccess(document)
