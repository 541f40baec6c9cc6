from __future__ import annotations

import logging
from typing import Any

from .errors import ServerUnavailableError
from .results import RpcFailure, RpcResult, RpcSuccess
from .session import McpSession
from .transport import McpTransport

logger = logging.getLogger(__name__)

HANDSHAKE_METHOD = "initialize"
ACKNOWLEDGE_METHOD = "notifications/initialized"
UNGUARDED_METHODS = frozenset({HANDSHAKE_METHOD, ACKNOWLEDGE_METHOD})


def _handshake_error(result: RpcResult) -> str | None:
    if isinstance(result, RpcFailure):
        return result.message
    if isinstance(result, RpcSuccess) and result.rpc_error is not None:
        error = result.rpc_error
        if isinstance(error, dict):
            return str(error.get("message") or error)
        return str(error)
    return None


class AvailabilityGuard:
    """Gate every RPC method behind a successful initialization handshake.

    While the session is unavailable each guarded call makes exactly one
    handshake attempt. Concurrent first calls share the attempt in flight; a
    failed attempt leaves the session unavailable so the next call tries again.
    """

    def __init__(self, transport: McpTransport, session: McpSession | None = None):
        self.transport = transport
        self.session = session or transport.session

    @property
    def available(self) -> bool:
        return self.session.available

    async def handshake(self) -> bool:
        result = await self.transport.send(HANDSHAKE_METHOD)
        reason = _handshake_error(result)
        if reason is not None:
            self.session.mark_unavailable()
            logger.warning("[MCP] Figma MCP server not available: %s", reason)
            return False

        self.session.mark_available()
        ack = await self.transport.send(ACKNOWLEDGE_METHOD)
        if isinstance(ack, RpcFailure):
            logger.warning("[MCP] Initialized notification failed: %s", ack.message)
        return True

    async def ensure_available(self) -> None:
        if self.session.available:
            return

        async with self.session.handshake_lock:
            # Another caller's handshake may have succeeded while we waited.
            if self.session.available:
                return
            if not await self.handshake():
                raise ServerUnavailableError()

    async def request(self, method: str, params: dict[str, Any] | None = None) -> RpcResult:
        if method not in UNGUARDED_METHODS:
            await self.ensure_available()
        return await self.transport.send(method, params)
