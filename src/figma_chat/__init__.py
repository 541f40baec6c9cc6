"""Chat with a Figma file: a tool-calling agent over the Figma MCP server."""

__version__ = "0.1.0"
