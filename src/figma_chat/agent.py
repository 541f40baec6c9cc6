from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from functools import lru_cache
from typing import Any, Literal

from langchain_core.messages import AIMessage, BaseMessage, SystemMessage, ToolMessage
from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, MessagesState, StateGraph
from langgraph.types import StreamWriter

from .config import Settings, get_settings
from .mcp.client import FigmaMcpClient, get_figma_client
from .messages import ToolRequest, assistant_message, to_provider_messages, tool_requests
from .prompts import get_system_prompt
from .provider import ChatModelProvider, OpenRouterProvider
from .stream_adapter import adapt_chunk
from .tools import get_openai_tools, render_tool_result, run_tool

logger = logging.getLogger(__name__)


class ToolRoundLimitError(RuntimeError):
    def __init__(self, max_tool_rounds: int):
        super().__init__(
            f"Model kept requesting tools after {max_tool_rounds} tool round(s); aborting the run."
        )
        self.max_tool_rounds = max_tool_rounds


class AgentState(MessagesState):
    tool_rounds: int


class TurnAccumulator:
    """Folds the adapted chunks of one model turn into a single assistant message."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._calls: dict[int, dict[str, Any]] = {}

    def add(self, chunk: Mapping[str, Any]) -> None:
        for choice in chunk.get("choices", []):
            if choice.get("index", 0) != 0:
                continue
            delta = choice.get("delta", {})
            content = delta.get("content")
            if content:
                self._parts.append(content)
            # Legacy function_call deltas are streamed to the caller but never executed;
            # tools are offered with tool_choice, so only tool_calls carry requests.
            for position, call in enumerate(delta.get("tool_calls", [])):
                index = call.get("index", position)
                slot = self._calls.setdefault(
                    index, {"id": "", "type": "function", "function": {"name": "", "arguments": ""}}
                )
                if call.get("id") and not slot["id"]:
                    slot["id"] = call["id"]
                function = call.get("function", {})
                if function.get("name") and not slot["function"]["name"]:
                    slot["function"]["name"] = function["name"]
                if function.get("arguments"):
                    slot["function"]["arguments"] += function["arguments"]

    def to_message(self) -> AIMessage:
        calls = [self._calls[index] for index in sorted(self._calls)]
        return assistant_message("".join(self._parts), calls)


def parse_arguments(request: ToolRequest) -> Any:
    """Decode a tool request's JSON arguments; on failure keep the raw text."""

    raw = request.arguments
    if not isinstance(raw, str):
        return raw
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.error("[AGENT] Error parsing arguments for tool call %s: %s", request.name, exc)
        return raw


def create_graph(
    provider: ChatModelProvider,
    client: FigmaMcpClient,
    *,
    max_tool_rounds: int,
    tools: Sequence[dict[str, Any]] | None = None,
):
    tool_catalog = list(tools) if tools is not None else get_openai_tools()

    async def call_model(state: AgentState, writer: StreamWriter):
        turn = TurnAccumulator()
        async for raw_chunk in provider.stream_chat(to_provider_messages(state["messages"]), tool_catalog):
            chunk = adapt_chunk(raw_chunk)
            writer(chunk)
            turn.add(chunk)
        return {"messages": [turn.to_message()]}

    async def execute(request: ToolRequest) -> ToolMessage:
        arguments = parse_arguments(request)
        try:
            result = await run_tool(client, request.name, arguments)
            observation = render_tool_result(result)
        except Exception as exc:
            logger.warning("[AGENT] Tool %s failed: %s", request.name, exc)
            observation = f"Error: {exc}"
        return ToolMessage(content=observation, tool_call_id=request.id, name=request.name)

    async def call_tools(state: AgentState):
        requests = tool_requests(state["messages"][-1])
        rounds = state.get("tool_rounds", 0) + 1
        logger.info(
            "[AGENT] Tool round %d: %s", rounds, ", ".join(request.name for request in requests)
        )
        # gather keeps request order; each execute() handles its own failure
        outputs = await asyncio.gather(*(execute(request) for request in requests))
        return {"messages": list(outputs), "tool_rounds": rounds}

    def should_continue(state: AgentState) -> Literal["tools", "__end__"]:
        if not tool_requests(state["messages"][-1]):
            return END
        if state.get("tool_rounds", 0) >= max_tool_rounds:
            logger.error("[AGENT] Tool round limit (%d) reached", max_tool_rounds)
            raise ToolRoundLimitError(max_tool_rounds)
        return "tools"

    workflow = StateGraph(AgentState)
    workflow.add_node("model", call_model)
    workflow.add_node("tools", call_tools)
    workflow.add_edge(START, "model")
    workflow.add_conditional_edges("model", should_continue, ["tools", END])
    workflow.add_edge("tools", "model")
    return workflow.compile()


class ChatOrchestrator:
    """Runs the model/tool loop for one caller conversation at a time."""

    def __init__(
        self,
        provider: ChatModelProvider,
        client: FigmaMcpClient,
        *,
        system_prompt: str,
        max_tool_rounds: int,
        tools: Sequence[dict[str, Any]] | None = None,
    ):
        if max_tool_rounds < 1:
            raise ValueError("max_tool_rounds must be at least 1")
        self.system_prompt = system_prompt
        self.max_tool_rounds = max_tool_rounds
        self.graph = create_graph(provider, client, max_tool_rounds=max_tool_rounds, tools=tools)

    def build_conversation(self, history: Sequence[BaseMessage]) -> list[BaseMessage]:
        return [SystemMessage(content=self.system_prompt), *history]

    def _config(self) -> RunnableConfig:
        # model and tools steps per round, plus the final model step and slack
        return {"recursion_limit": 2 * self.max_tool_rounds + 4}

    async def ainvoke(self, history: Sequence[BaseMessage]) -> list[BaseMessage]:
        """Run to completion and return the full conversation."""
        result = await self.graph.ainvoke(
            {"messages": self.build_conversation(history)}, config=self._config()
        )
        return list(result["messages"])

    async def astream(self, history: Sequence[BaseMessage]) -> AsyncIterator[dict[str, Any]]:
        """Yield adapted model chunks of every turn, in arrival order."""
        async for chunk in self.graph.astream(
            {"messages": self.build_conversation(history)},
            config=self._config(),
            stream_mode="custom",
        ):
            yield chunk


def build_orchestrator(settings: Settings, client: FigmaMcpClient | None = None) -> ChatOrchestrator:
    return ChatOrchestrator(
        OpenRouterProvider(settings),
        client or get_figma_client(),
        system_prompt=get_system_prompt(override=settings.system_prompt, path=settings.system_prompt_path),
        max_tool_rounds=settings.max_tool_rounds,
    )


@lru_cache
def get_orchestrator() -> ChatOrchestrator:
    return build_orchestrator(get_settings())
