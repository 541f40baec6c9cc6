from __future__ import annotations


class FigmaMcpError(Exception):
    """Base error for the Figma MCP client."""


class ToolValidationError(FigmaMcpError, ValueError):
    """A tool invocation is missing one of its required parameters."""

    def __init__(self, tool_name: str, required: list[str], missing: list[str]):
        if len(required) == 1:
            message = f"{required[0]} is a required parameter"
        else:
            message = f"{' and '.join(required)} are required parameters"
        super().__init__(message)
        self.tool_name = tool_name
        self.required = required
        self.missing = missing


class ServerUnavailableError(FigmaMcpError):
    """The initialization handshake did not succeed."""

    def __init__(self, reason: str | None = None):
        super().__init__("Figma MCP server is not available")
        self.reason = reason


class ToolNotFoundError(FigmaMcpError, LookupError):
    def __init__(self, tool_name: str):
        super().__init__(f"Requested tool '{tool_name}' is not available.")
        self.tool_name = tool_name
