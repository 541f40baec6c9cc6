from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the Figma chat server."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # OpenAI-compatible chat completion endpoint (OpenRouter by default)
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    llm_base_url: str = Field(default="https://openrouter.ai/api/v1", alias="LLM_BASE_URL")
    llm_model: str = Field(default="anthropic/claude-sonnet-4.5", alias="LLM_MODEL")
    llm_temperature: float = Field(default=0.0, alias="LLM_TEMPERATURE")
    llm_http_referer: str | None = Field(default=None, alias="LLM_HTTP_REFERER")
    llm_app_title: str = Field(default="Chat with Figma", alias="LLM_APP_TITLE")

    # Figma MCP server
    figma_mcp_url: str = Field(default="https://mcp.figma.com/mcp", alias="FIGMA_MCP_URL")
    figma_mcp_token: str = Field(default="", alias="FIGMA_MCP_TOKEN")
    figma_mcp_protocol_version: str = Field(default="2025-06-18", alias="FIGMA_MCP_PROTOCOL_VERSION")
    figma_mcp_user_agent: str = Field(default="figma-chat/0.1.0", alias="FIGMA_MCP_USER_AGENT")
    figma_mcp_timeout_seconds: float = Field(default=60.0, alias="FIGMA_MCP_TIMEOUT_SECONDS")
    # Reported by the client config but never used to retry; retry policy belongs above the transport.
    figma_mcp_retries: int = Field(default=3, alias="FIGMA_MCP_RETRIES")

    # Agent loop
    max_tool_rounds: int = Field(default=10, ge=1, alias="MAX_TOOL_ROUNDS")
    system_prompt: str | None = Field(default=None, alias="SYSTEM_PROMPT")
    system_prompt_path: str = Field(default="prompt-system.md", alias="SYSTEM_PROMPT_PATH")

    # Per-client request limit; disabled when unset
    rate_limit_requests: int | None = Field(default=None, alias="RATE_LIMIT_REQUESTS")
    rate_limit_window_seconds: int = Field(default=86400, alias="RATE_LIMIT_WINDOW_SECONDS")
    # Only enable behind a proxy that overwrites X-Forwarded-For
    trust_forwarded_for: bool = Field(default=False, alias="TRUST_FORWARDED_FOR")

    # FastAPI configuration
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8080, alias="APP_PORT")
    debug: bool = Field(default=False, alias="DEBUG")


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings so multiple imports share a single instance."""

    return Settings()  # type: ignore[arg-type]
