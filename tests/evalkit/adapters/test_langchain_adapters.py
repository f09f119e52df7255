"""Tests for the LangChain adapters.

Tests cover:
- Message conversion in both directions
- LangChainAgent with a fake chat model and runnables
- LangChainJudge structured output handling
- LangChainSyntheticUser persona instructions
- Building adapters from EvalKitSettings
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from langchain_core.language_models.fake_chat_models import GenericFakeChatModel
from langchain_core.messages import AIMessage as LCAIMessage
from langchain_core.messages import FunctionMessage as LCFunctionMessage
from langchain_core.messages import HumanMessage as LCHumanMessage
from langchain_core.messages import SystemMessage as LCSystemMessage
from langchain_core.messages import ToolMessage as LCToolMessage
from langchain_core.runnables import RunnableLambda

from src.evalkit.adapters.langchain import (
    LangChainAgent,
    LangChainJudge,
    LangChainSyntheticUser,
    from_langchain_message,
    judge_from_settings,
    synthetic_user_from_settings,
    to_langchain_message,
)
from src.evalkit.core.config import EvalKitSettings
from src.evalkit.core.llm_config import ChatModelConfig
from src.evalkit.criteria.models import AssertionVerdict
from src.evalkit.exceptions import AdapterError
from src.evalkit.messages import (
    AIMessage,
    SystemMessage,
    ToolCall,
    ToolResultMessage,
    UserMessage,
)


# =============================================================================
# Message Conversion
# =============================================================================


class TestToLangChainMessage:
    """Tests for to_langchain_message()."""

    def test_text_messages(self) -> None:
        system = to_langchain_message(SystemMessage(content="Be brief."))
        user = to_langchain_message(UserMessage(content="Hi"))
        assistant = to_langchain_message(AIMessage(content="Hello"))

        assert isinstance(system, LCSystemMessage) and system.content == "Be brief."
        assert isinstance(user, LCHumanMessage) and user.content == "Hi"
        assert isinstance(assistant, LCAIMessage) and assistant.content == "Hello"

    def test_assistant_tool_calls(self) -> None:
        converted = to_langchain_message(
            AIMessage(
                content="",
                tool_calls=[ToolCall(id="c1", name="search", args={"q": "hotels"})],
            )
        )
        assert converted.tool_calls[0]["id"] == "c1"
        assert converted.tool_calls[0]["name"] == "search"
        assert converted.tool_calls[0]["args"] == {"q": "hotels"}

    def test_tool_result_is_json_encoded(self) -> None:
        converted = to_langchain_message(
            ToolResultMessage(tool_call_id="c1", name="search", content={"hits": 3})
        )
        assert isinstance(converted, LCToolMessage)
        assert converted.content == '{"hits": 3}'
        assert converted.tool_call_id == "c1"
        assert converted.name == "search"

    def test_tool_result_without_id_gets_one(self) -> None:
        converted = to_langchain_message(ToolResultMessage(name="search"))
        assert converted.tool_call_id


class TestFromLangChainMessage:
    """Tests for from_langchain_message()."""

    def test_text_messages(self) -> None:
        assert from_langchain_message(LCSystemMessage(content="s")) == SystemMessage(content="s")
        assert from_langchain_message(LCHumanMessage(content="u")) == UserMessage(content="u")
        assert from_langchain_message(LCAIMessage(content="a")) == AIMessage(content="a")

    def test_content_blocks_flattened(self) -> None:
        message = LCAIMessage(
            content=[{"type": "text", "text": "Hello "}, {"type": "text", "text": "there"}]
        )
        assert from_langchain_message(message).content == "Hello there"

    def test_ai_tool_calls(self) -> None:
        message = LCAIMessage(
            content="",
            tool_calls=[{"id": "c1", "name": "book", "args": {"city": "Rome"}}],
        )
        converted = from_langchain_message(message)

        assert converted.tool_calls == [ToolCall(id="c1", name="book", args={"city": "Rome"})]

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ('{"celsius": 4}', {"celsius": 4}),
            ("[1, 2]", {"content": [1, 2]}),
            ("not json", {"content": "not json"}),
        ],
    )
    def test_tool_message_content(self, raw: str, expected: dict) -> None:
        converted = from_langchain_message(
            LCToolMessage(content=raw, tool_call_id="c1", name="weather")
        )
        assert isinstance(converted, ToolResultMessage)
        assert converted.content == expected
        assert converted.tool_call_id == "c1"

    def test_unknown_type_returns_none(self) -> None:
        assert from_langchain_message(LCFunctionMessage(content="x", name="f")) is None


# =============================================================================
# LangChainAgent
# =============================================================================


class TestLangChainAgent:
    """Tests for LangChainAgent."""

    @pytest.mark.asyncio
    async def test_invoke_with_fake_chat_model(self) -> None:
        model = GenericFakeChatModel(messages=iter([LCAIMessage(content="Hello!")]))
        agent = LangChainAgent(model)

        result = await agent.invoke([UserMessage(content="Hi")])

        assert result.message == AIMessage(content="Hello!")

    @pytest.mark.asyncio
    async def test_runnable_receives_converted_messages(self) -> None:
        seen: list = []

        def respond(messages: list) -> LCAIMessage:
            seen.extend(messages)
            return LCAIMessage(content="ok")

        agent = LangChainAgent(RunnableLambda(respond))
        await agent.invoke([SystemMessage(content="Be brief."), UserMessage(content="Hi")])

        assert [type(m) for m in seen] == [LCSystemMessage, LCHumanMessage]

    @pytest.mark.asyncio
    async def test_non_ai_response_raises(self) -> None:
        agent = LangChainAgent(RunnableLambda(lambda messages: "plain string"))

        with pytest.raises(AdapterError, match="expected an AI message"):
            await agent.invoke([UserMessage(content="Hi")])


# =============================================================================
# LangChainJudge
# =============================================================================


def make_model(output: object) -> MagicMock:
    """Create a chat model mock whose structured runnable returns ``output``."""
    model = MagicMock()
    structured = MagicMock()
    structured.ainvoke = AsyncMock(return_value=output)
    model.with_structured_output.return_value = structured
    return model


class TestLangChainJudge:
    """Tests for LangChainJudge."""

    @pytest.mark.asyncio
    async def test_returns_structured_output(self) -> None:
        verdict = AssertionVerdict(verdict=True)
        model = make_model(verdict)

        result = await LangChainJudge(model).invoke(
            [SystemMessage(content="judge this")], AssertionVerdict
        )

        assert result.output is verdict
        model.with_structured_output.assert_called_once_with(AssertionVerdict)
        (prompt,), _ = model.with_structured_output.return_value.ainvoke.await_args
        assert isinstance(prompt[0], LCSystemMessage)

    @pytest.mark.asyncio
    async def test_dict_output_validated(self) -> None:
        model = make_model({"verdict": False, "reason": "no greeting"})

        result = await LangChainJudge(model).invoke([], AssertionVerdict)

        assert result.output == AssertionVerdict(verdict=False, reason="no greeting")

    @pytest.mark.asyncio
    async def test_missing_output_raises(self) -> None:
        with pytest.raises(AdapterError, match="no AssertionVerdict output"):
            await LangChainJudge(make_model(None)).invoke([], AssertionVerdict)

    @pytest.mark.asyncio
    async def test_structured_output_unsupported(self) -> None:
        model = MagicMock()
        model.with_structured_output.side_effect = NotImplementedError

        with pytest.raises(AdapterError, match="does not support structured output"):
            await LangChainJudge(model).invoke([], AssertionVerdict)


# =============================================================================
# LangChainSyntheticUser
# =============================================================================


class TestLangChainSyntheticUser:
    """Tests for LangChainSyntheticUser."""

    @pytest.mark.asyncio
    async def test_prepends_instructions(self) -> None:
        seen: list = []

        def respond(messages: list) -> LCAIMessage:
            seen.extend(messages)
            return LCAIMessage(content="I need a hotel in Rome.")

        user = LangChainSyntheticUser(
            RunnableLambda(respond), instructions="You are planning a trip."
        )
        reply = await user.respond([AIMessage(content="How can I help?")])

        assert reply == UserMessage(content="I need a hotel in Rome.")
        assert isinstance(seen[0], LCSystemMessage)
        assert seen[0].content == "You are planning a trip."
        assert isinstance(seen[1], LCAIMessage)

    @pytest.mark.asyncio
    async def test_without_instructions(self) -> None:
        model = GenericFakeChatModel(messages=iter([LCAIMessage(content="Hi")]))
        reply = await LangChainSyntheticUser(model).respond([])
        assert reply.content == "Hi"

    @pytest.mark.asyncio
    async def test_non_message_response_raises(self) -> None:
        user = LangChainSyntheticUser(RunnableLambda(lambda messages: 42))
        with pytest.raises(AdapterError, match="expected a message"):
            await user.respond([])


# =============================================================================
# Settings Helpers
# =============================================================================


class TestSettingsHelpers:
    """Tests for judge_from_settings() and synthetic_user_from_settings()."""

    @patch("src.evalkit.adapters.langchain.ChatModelFactory.create_from_config")
    def test_judge_from_settings(self, mock_create: MagicMock) -> None:
        settings = EvalKitSettings(judge_model="claude-3-5-haiku-latest")

        judge = judge_from_settings(settings)

        mock_create.assert_called_once_with(
            ChatModelConfig(model="claude-3-5-haiku-latest", temperature=0.0)
        )
        assert judge.model is mock_create.return_value

    @patch("src.evalkit.adapters.langchain.ChatModelFactory.create_from_config")
    def test_synthetic_user_from_settings(self, mock_create: MagicMock) -> None:
        settings = EvalKitSettings(user_model="gpt-4o", user_temperature=0.9)

        user = synthetic_user_from_settings(settings, instructions="Be curious.")

        mock_create.assert_called_once_with(ChatModelConfig(model="gpt-4o", temperature=0.9))
        assert user.runnable is mock_create.return_value
        assert user.instructions == "Be curious."
