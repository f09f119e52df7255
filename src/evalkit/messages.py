"""Conversation message models for evaluation transcripts.

This module defines the Pydantic models that make up a transcript: the
messages exchanged between the user, the agent under test, the system
prompt, and tool executions. All models are frozen so a message can never
change once it has been appended to a transcript.

Models:
    - ToolCall: A single function invocation made by the agent
    - AgentResponseGenerationContext: What the agent used to produce a response
    - SystemMessage: System prompt message
    - UserMessage: Message authored by the (real or synthetic) user
    - AIMessage: Message produced by the agent under test
    - ToolResultMessage: Structured outcome of a tool execution

Design Note:
    Every message model carries a fixed ``role`` literal which acts as the
    discriminator of the ``Message`` union. Use ``parse_message`` to turn a
    plain dictionary into the right model.

Example:
    >>> from src.evalkit.messages import AIMessage, ToolCall, parse_message
    >>> msg = parse_message({"role": "user", "content": "Hi!"})
    >>> msg.role
    'user'
    >>> reply = AIMessage(
    ...     content="It's sunny.",
    ...     tool_calls=[ToolCall(name="get_weather", args={"city": "Paris"})],
    ... )
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Role Type
# =============================================================================

MessageRole = Literal["system", "user", "assistant", "tool"]


# =============================================================================
# Tool Calls
# =============================================================================


class ToolCall(BaseModel):
    """A single function invocation made by an agent.

    Attributes:
        id: Provider-assigned identifier of the call, if any.
        name: Name of the invoked tool.
        args: Arguments the tool was invoked with.
        result: Outcome of the execution, when known.

    Example:
        >>> call = ToolCall(name="get_current_date", args={})
        >>> call.result is None
        True
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str = Field(..., min_length=1, description="Name of the invoked tool")
    args: dict[str, Any] = Field(default_factory=dict)
    result: dict[str, Any] | None = None


class AgentResponseGenerationContext(BaseModel):
    """The context an agent used to generate a response.

    Attributes:
        prompt_used: Messages that were sent to the model to produce the
            response. When absent, the transcript prior to the response is
            taken as the prompt.
        tool_calls: The tool calls made while producing the response.
    """

    model_config = ConfigDict(frozen=True)

    prompt_used: list[Message] | None = None
    tool_calls: list[ToolCall] | None = None


# =============================================================================
# Message Models
# =============================================================================


class SystemMessage(BaseModel):
    """System prompt message."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system"] = "system"
    content: str


class UserMessage(BaseModel):
    """Message authored by the user, real or synthetic."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user"] = "user"
    content: str


class AIMessage(BaseModel):
    """Message produced by the agent under test.

    Attributes:
        role: Always ``"assistant"``.
        content: Text of the response returned to the user.
        tool_calls: Ordered tool calls the agent made, if any.
        context: Generation context (prompt and tool calls) when the agent
            reports it.
    """

    model_config = ConfigDict(frozen=True)

    role: Literal["assistant"] = "assistant"
    content: str
    tool_calls: list[ToolCall] | None = None
    context: AgentResponseGenerationContext | None = None


class ToolResultMessage(BaseModel):
    """Structured outcome of a tool execution.

    Attributes:
        role: Always ``"tool"``.
        tool_call_id: Identifier of the ToolCall this message answers.
        name: Name of the tool that produced the result.
        content: Structured result payload.
    """

    model_config = ConfigDict(frozen=True)

    role: Literal["tool"] = "tool"
    tool_call_id: str | None = None
    name: str
    content: dict[str, Any] = Field(default_factory=dict)


# Union type for all transcript messages, discriminated on ``role``
Message = Annotated[
    Union[SystemMessage, UserMessage, AIMessage, ToolResultMessage],
    Field(discriminator="role"),
]

AgentResponseGenerationContext.model_rebuild()
AIMessage.model_rebuild()


# =============================================================================
# Message Parsing
# =============================================================================

# Mapping from role string to model class
MESSAGE_ROLE_REGISTRY: dict[str, type[BaseModel]] = {
    "system": SystemMessage,
    "user": UserMessage,
    "assistant": AIMessage,
    "tool": ToolResultMessage,
}


def parse_message(data: dict[str, Any]) -> Message:
    """Parse a dictionary into the appropriate message model.

    Uses the ``role`` field to determine which model to instantiate.

    Args:
        data: Dictionary containing message data, must include ``role``.

    Returns:
        The appropriate message model instance.

    Raises:
        ValueError: If ``role`` is missing or unrecognized.

    Example:
        >>> msg = parse_message({"role": "assistant", "content": "Hello!"})
        >>> isinstance(msg, AIMessage)
        True
    """
    role = data.get("role")
    if role is None:
        raise ValueError("Message data must include 'role' field")

    model_class = MESSAGE_ROLE_REGISTRY.get(role)
    if model_class is None:
        valid_roles = ", ".join(sorted(MESSAGE_ROLE_REGISTRY.keys()))
        raise ValueError(f"Unknown role '{role}'. Valid roles: {valid_roles}")

    return model_class.model_validate(data)


def message_text(message: Message) -> str:
    """Render a message's content as plain text.

    Tool results carry structured content; it is rendered as its ``str``
    representation so prompts and logs can include it.
    """
    if isinstance(message.content, str):
        return message.content
    return str(message.content)
