"""Result types returned at every RPC boundary.

A call either succeeds with the server's decoded JSON payload or fails with a
human-readable message. Callers branch with ``isinstance`` instead of probing an
``isError`` key on a loose dict.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


ERROR_TEXT_PREFIX = "Figma MCP server error: "


@dataclass(frozen=True)
class RpcSuccess:
    """Decoded response document, exactly as the server sent it."""

    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def result(self) -> Any:
        return self.payload.get("result")

    @property
    def rpc_error(self) -> Any:
        """JSON-RPC level ``error`` member, if the server replied with one."""
        return self.payload.get("error")


@dataclass(frozen=True)
class RpcFailure:
    """Transport or protocol failure, already classified into a message."""

    message: str

    def to_envelope(self) -> dict[str, Any]:
        return {
            "content": [{"type": "text", "text": f"{ERROR_TEXT_PREFIX}{self.message}"}],
            "isError": True,
            "error": self.message,
        }


RpcResult = Union[RpcSuccess, RpcFailure]


__all__ = ["ERROR_TEXT_PREFIX", "RpcFailure", "RpcResult", "RpcSuccess"]
