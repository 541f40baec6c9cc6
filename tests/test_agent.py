"""Tests for the chat orchestration loop."""

from __future__ import annotations

import pytest
from unittest.mock import MagicMock

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from figma_chat.agent import ChatOrchestrator, ToolRoundLimitError, TurnAccumulator, parse_arguments
from figma_chat.messages import ToolRequest, tool_requests
from figma_chat.mcp.errors import ServerUnavailableError
from figma_chat.mcp.results import RpcSuccess
from figma_chat.stream_adapter import chunk_text

from tests.helpers import FakeProvider, text_chunk, tool_call_chunk


def _orchestrator(provider, client, max_tool_rounds=10):
    return ChatOrchestrator(provider, client, system_prompt="You review Figma files.", max_tool_rounds=max_tool_rounds)


def _two_tool_turn():
    return [
        text_chunk("Let me look."),
        tool_call_chunk(0, call_id="call_1", name="get_metadata", arguments='{"nodeId": "1:2",'),
        tool_call_chunk(0, arguments=' "fileKey": "abc"}'),
        tool_call_chunk(1, call_id="call_2", name="whoami", arguments=""),
    ]


class TestTurnAccumulator:
    """Tests for folding streamed chunks into one assistant turn."""

    def test_merges_fragments_by_index(self):
        turn = TurnAccumulator()
        for chunk in _two_tool_turn():
            turn.add(chunk)

        message = turn.to_message()

        assert message.content == "Let me look."
        assert [(r.id, r.name, r.arguments) for r in tool_requests(message)] == [
            ("call_1", "get_metadata", '{"nodeId": "1:2", "fileKey": "abc"}'),
            ("call_2", "whoami", ""),
        ]

    def test_legacy_function_call_not_executed(self):
        """function_call deltas never become tool requests."""
        turn = TurnAccumulator()
        turn.add({"choices": [{"index": 0, "delta": {"function_call": {"name": "whoami", "arguments": "{}"}}}]})
        turn.add(text_chunk("No tools needed."))

        message = turn.to_message()

        assert tool_requests(message) == []
        assert message.content == "No tools needed."

    def test_ignores_other_choices(self):
        turn = TurnAccumulator()
        turn.add({"choices": [{"index": 1, "delta": {"content": "alt"}}, {"index": 0, "delta": {"content": "main"}}]})
        assert turn.to_message().content == "main"


class TestParseArguments:
    def test_json(self):
        assert parse_arguments(ToolRequest("a", "whoami", '{"x": 1}')) == {"x": 1}

    def test_empty_string(self):
        assert parse_arguments(ToolRequest("a", "whoami", "  ")) == {}

    def test_invalid_json_kept_raw(self):
        assert parse_arguments(ToolRequest("a", "get_metadata", "{nodeId")) == "{nodeId"


class TestChatOrchestrator:
    """Tests for ChatOrchestrator."""

    @pytest.mark.asyncio
    async def test_plain_answer(self, mock_figma_client):
        """A turn without tool requests appends exactly one assistant message."""
        provider = FakeProvider([[text_chunk("Hello"), text_chunk(" there", finish_reason="stop")]])
        orchestrator = _orchestrator(provider, mock_figma_client)

        messages = await orchestrator.ainvoke([HumanMessage(content="hi")])

        assert [type(m) for m in messages] == [SystemMessage, HumanMessage, AIMessage]
        assert messages[-1].content == "Hello there"
        assert provider.calls[0]["messages"][0] == {"role": "system", "content": "You review Figma files."}
        assert len(provider.calls[0]["tools"]) == 8
        mock_figma_client.call_tool.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_tool_round(self, mock_figma_client):
        """Each tool request gets one tool message, in request order, then the model runs again."""
        provider = FakeProvider([_two_tool_turn(), [text_chunk("The frame is a checkout screen.")]])
        orchestrator = _orchestrator(provider, mock_figma_client)

        messages = await orchestrator.ainvoke([HumanMessage(content="What is node 1:2?")])

        tool_messages = [m for m in messages if isinstance(m, ToolMessage)]
        assert [m.tool_call_id for m in tool_messages] == ["call_1", "call_2"]
        assert [m.name for m in tool_messages] == ["get_metadata", "whoami"]
        assert tool_messages[0].content == '[{"type": "text", "text": "ok"}]'
        assert messages[-1].content == "The frame is a checkout screen."

        mock_figma_client.call_tool.assert_any_await("get_metadata", {"nodeId": "1:2", "fileKey": "abc"})
        mock_figma_client.call_tool.assert_any_await("whoami", {})

        second_request = provider.calls[1]["messages"]
        assert [m["role"] for m in second_request] == ["system", "user", "assistant", "tool", "tool"]
        assert second_request[2]["tool_calls"][0]["function"]["arguments"] == '{"nodeId": "1:2", "fileKey": "abc"}'

    @pytest.mark.asyncio
    async def test_invalid_arguments_forwarded_raw(self, mock_figma_client):
        provider = FakeProvider(
            [
                [tool_call_chunk(0, call_id="call_1", name="get_metadata", arguments="{nodeId: 1:2")],
                [text_chunk("done")],
            ]
        )
        orchestrator = _orchestrator(provider, mock_figma_client)

        await orchestrator.ainvoke([HumanMessage(content="hi")])

        mock_figma_client.call_tool.assert_awaited_once_with("get_metadata", "{nodeId: 1:2")

    @pytest.mark.asyncio
    async def test_tool_errors_are_isolated(self):
        """One failing tool does not stop its siblings; its message carries the error text."""
        client = MagicMock()

        async def call_tool(name, arguments):
            if name == "whoami":
                raise ServerUnavailableError()
            return RpcSuccess({"result": {"content": [{"type": "text", "text": "<frame />"}]}})

        client.call_tool = call_tool
        provider = FakeProvider([_two_tool_turn(), [text_chunk("Partial answer.")]])

        messages = await _orchestrator(provider, client).ainvoke([HumanMessage(content="hi")])

        tool_messages = [m for m in messages if isinstance(m, ToolMessage)]
        assert tool_messages[0].content == '[{"type": "text", "text": "<frame />"}]'
        assert tool_messages[1].content == "Error: Figma MCP server is not available"
        assert messages[-1].content == "Partial answer."

    @pytest.mark.asyncio
    async def test_validation_error_reported_to_model(self, mock_figma_client):
        provider = FakeProvider(
            [[tool_call_chunk(0, call_id="call_1", name="get_screenshot", arguments='{"nodeId": "1:2"}')], [text_chunk("ok")]]
        )

        messages = await _orchestrator(provider, mock_figma_client).ainvoke([HumanMessage(content="hi")])

        tool_message = next(m for m in messages if isinstance(m, ToolMessage))
        assert tool_message.content == "Error: nodeId and fileKey are required parameters"
        mock_figma_client.call_tool.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_tool_reported_to_model(self, mock_figma_client):
        provider = FakeProvider([[tool_call_chunk(0, call_id="call_1", name="delete_file", arguments="{}")], [text_chunk("ok")]])

        messages = await _orchestrator(provider, mock_figma_client).ainvoke([HumanMessage(content="hi")])

        tool_message = next(m for m in messages if isinstance(m, ToolMessage))
        assert tool_message.content == "Error: Requested tool 'delete_file' is not available."

    @pytest.mark.asyncio
    async def test_round_limit(self, mock_figma_client):
        """A model that never stops requesting tools is cut off."""
        provider = FakeProvider([[tool_call_chunk(0, call_id="call_1", name="whoami", arguments="{}")]], repeat_last=True)
        orchestrator = _orchestrator(provider, mock_figma_client, max_tool_rounds=2)

        with pytest.raises(ToolRoundLimitError):
            await orchestrator.ainvoke([HumanMessage(content="hi")])

        assert mock_figma_client.call_tool.await_count == 2
        assert len(provider.calls) == 3

    @pytest.mark.asyncio
    async def test_astream_yields_every_chunk(self, mock_figma_client):
        """Chunks of every model turn are streamed in arrival order."""
        provider = FakeProvider([_two_tool_turn(), [text_chunk("Done"), text_chunk(".")]])
        orchestrator = _orchestrator(provider, mock_figma_client)

        chunks = [chunk async for chunk in orchestrator.astream([HumanMessage(content="hi")])]

        assert len(chunks) == 6
        assert "".join(chunk_text(chunk) for chunk in chunks) == "Let me look.Done."
        assert chunks[1]["choices"][0]["delta"]["tool_calls"][0]["id"] == "call_1"

    def test_rejects_zero_rounds(self, mock_figma_client):
        with pytest.raises(ValueError):
            _orchestrator(FakeProvider([]), mock_figma_client, max_tool_rounds=0)
