"""LangChain implementations of Agent, Judge and SyntheticUser.

Any LangChain runnable that maps a list of messages to a message can be
evaluated as an agent or play the synthetic user. Any chat model that
supports ``with_structured_output`` can serve as a judge.

Classes:
    LangChainAgent: Agent backed by a runnable.
    LangChainJudge: Judge backed by a chat model.
    LangChainSyntheticUser: Synthetic user backed by a runnable.

Functions:
    to_langchain_message: Convert a transcript message to LangChain.
    from_langchain_message: Convert a LangChain message to a transcript message.
    judge_from_settings: Build a judge from EvalKitSettings.
    synthetic_user_from_settings: Build a synthetic user from EvalKitSettings.

Example:
    >>> from langchain_openai import ChatOpenAI
    >>> model = ChatOpenAI(model="gpt-4.1-mini", temperature=0)
    >>> agent = LangChainAgent(model)
    >>> judge = LangChainJudge(model)
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Sequence
from typing import Any

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage as LCAIMessage
from langchain_core.messages import BaseMessage as LCBaseMessage
from langchain_core.messages import HumanMessage as LCHumanMessage
from langchain_core.messages import SystemMessage as LCSystemMessage
from langchain_core.messages import ToolMessage as LCToolMessage
from langchain_core.runnables import Runnable
from pydantic import BaseModel

from src.evalkit.core.config import EvalKitSettings
from src.evalkit.core.llm_config import ChatModelFactory
from src.evalkit.exceptions import AdapterError
from src.evalkit.interfaces import AgentInvocationResult, JudgeResult, SchemaT
from src.evalkit.messages import (
    AIMessage,
    Message,
    SystemMessage,
    ToolCall,
    ToolResultMessage,
    UserMessage,
)


logger = logging.getLogger(__name__)

LangChainRunnable = Runnable[list[LCBaseMessage], LCBaseMessage]


# =============================================================================
# Message Conversion
# =============================================================================


def _content_text(message: LCBaseMessage) -> str:
    """Flatten LangChain content (string or content blocks) to text."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "".join(parts)


def _parse_tool_content(raw: str) -> dict[str, Any]:
    """Decode a tool message payload, wrapping non-object payloads."""
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        return {"content": raw}
    if isinstance(decoded, dict):
        return decoded
    return {"content": decoded}


def from_langchain_message(message: LCBaseMessage) -> Message | None:
    """Convert a LangChain message to a transcript message.

    Args:
        message: The LangChain message.

    Returns:
        The converted message, or None for message types with no
        transcript equivalent.
    """
    if isinstance(message, LCSystemMessage):
        return SystemMessage(content=_content_text(message))
    if isinstance(message, LCAIMessage):
        tool_calls = [
            ToolCall(id=tc.get("id"), name=tc["name"], args=tc.get("args", {}))
            for tc in message.tool_calls
        ]
        return AIMessage(content=_content_text(message), tool_calls=tool_calls or None)
    if isinstance(message, LCHumanMessage):
        return UserMessage(content=_content_text(message))
    if isinstance(message, LCToolMessage):
        return ToolResultMessage(
            tool_call_id=message.tool_call_id,
            name=message.name or "_unknown_",
            content=_parse_tool_content(_content_text(message)),
        )
    return None


def to_langchain_message(message: Message) -> LCBaseMessage:
    """Convert a transcript message to a LangChain message.

    Tool results are JSON encoded. A tool result without a call id gets a
    random one, since LangChain requires it.

    Args:
        message: The transcript message.

    Returns:
        The LangChain message.
    """
    if isinstance(message, SystemMessage):
        return LCSystemMessage(content=message.content)
    if isinstance(message, UserMessage):
        return LCHumanMessage(content=message.content)
    if isinstance(message, AIMessage):
        tool_calls = [
            {"id": tc.id, "name": tc.name, "args": tc.args}
            for tc in message.tool_calls or []
        ]
        return LCAIMessage(content=message.content, tool_calls=tool_calls)
    return LCToolMessage(
        content=json.dumps(message.content, default=str),
        tool_call_id=message.tool_call_id or str(uuid.uuid4()),
        name=message.name,
    )


def _to_langchain_messages(messages: Sequence[Message]) -> list[LCBaseMessage]:
    return [to_langchain_message(m) for m in messages]


# =============================================================================
# Adapters
# =============================================================================


class LangChainAgent:
    """Agent backed by a LangChain runnable (e.g. a chat model).

    Attributes:
        runnable: Runnable mapping a message list to a response message.
    """

    def __init__(self, runnable: LangChainRunnable) -> None:
        self.runnable = runnable

    async def invoke(self, messages: Sequence[Message]) -> AgentInvocationResult:
        """Generate the agent's response to ``messages``.

        Raises:
            AdapterError: If the runnable does not return an AI message.
        """
        response = await self.runnable.ainvoke(_to_langchain_messages(messages))
        converted = (
            from_langchain_message(response)
            if isinstance(response, LCBaseMessage)
            else None
        )
        if not isinstance(converted, AIMessage):
            raise AdapterError(
                f"Agent runnable returned {type(response).__name__}, "
                "expected an AI message"
            )
        return AgentInvocationResult(message=converted)


class LangChainJudge:
    """Judge backed by a chat model with structured output support.

    Attributes:
        model: The chat model.
    """

    def __init__(self, model: BaseChatModel) -> None:
        self.model = model

    async def invoke(
        self,
        messages: Sequence[Message],
        schema: type[SchemaT],
    ) -> JudgeResult[SchemaT]:
        """Extract an instance of ``schema`` from ``messages``.

        Raises:
            AdapterError: If the model cannot produce structured output, or
                produced none.
        """
        try:
            structured = self.model.with_structured_output(schema)
        except NotImplementedError as e:
            raise AdapterError(
                "Given model does not support structured output"
            ) from e

        output = await structured.ainvoke(_to_langchain_messages(messages))
        if output is None:
            raise AdapterError(f"Judge returned no {schema.__name__} output")
        if not isinstance(output, BaseModel):
            output = schema.model_validate(output)

        logger.debug("Judge produced %s", schema.__name__)
        return JudgeResult(output=output)


class LangChainSyntheticUser:
    """Synthetic user backed by a LangChain runnable.

    Attributes:
        runnable: Runnable producing the next user turn.
        instructions: Optional system prompt describing the user's persona
            and goals, prepended on every turn.
    """

    def __init__(
        self,
        runnable: LangChainRunnable,
        instructions: str | None = None,
    ) -> None:
        self.runnable = runnable
        self.instructions = instructions

    async def respond(self, messages: Sequence[UserMessage | AIMessage]) -> UserMessage:
        """Write the next user turn.

        Raises:
            AdapterError: If the runnable returns something other than a
                message.
        """
        prompt = _to_langchain_messages(messages)
        if self.instructions:
            prompt.insert(0, LCSystemMessage(content=self.instructions))

        response = await self.runnable.ainvoke(prompt)
        if not isinstance(response, LCBaseMessage):
            raise AdapterError(
                f"Synthetic user runnable returned {type(response).__name__}, "
                "expected a message"
            )
        return UserMessage(content=_content_text(response))


# =============================================================================
# Settings Helpers
# =============================================================================


def judge_from_settings(settings: EvalKitSettings) -> LangChainJudge:
    """Build a judge from the configured judge model."""
    return LangChainJudge(ChatModelFactory.create_from_config(settings.judge_model_config()))


def synthetic_user_from_settings(
    settings: EvalKitSettings,
    instructions: str | None = None,
) -> LangChainSyntheticUser:
    """Build a synthetic user from the configured user model.

    Args:
        settings: Harness settings.
        instructions: Persona and goals of the simulated user.

    Returns:
        The synthetic user.
    """
    model = ChatModelFactory.create_from_config(settings.user_model_config())
    return LangChainSyntheticUser(model, instructions=instructions)
