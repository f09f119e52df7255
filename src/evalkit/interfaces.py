"""Contracts for the collaborators an evaluation run talks to.

The harness never depends on a concrete model runtime. Anything that
implements these protocols can be evaluated, judge a transcript, or stand
in for a user. See ``src.evalkit.adapters`` for LangChain implementations.

Classes:
    AgentInvocationResult: What an agent returns for one invocation.
    JudgeResult: Structured output extracted by a judge.
    Agent: The AI agent under test.
    Judge: LLM-backed structured extraction used by criteria.
    SyntheticUser: Automated stand-in that writes user turns.

Type Aliases:
    AgentFactory: Zero-argument callable producing an agent asynchronously.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ConfigDict

from src.evalkit.messages import AIMessage, Message, UserMessage


SchemaT = TypeVar("SchemaT", bound=BaseModel)


# =============================================================================
# Result Models
# =============================================================================


class AgentInvocationResult(BaseModel):
    """The result of invoking an agent.

    Attributes:
        message: The final response, i.e. the message returned to the user.
    """

    model_config = ConfigDict(frozen=True)

    message: AIMessage


class JudgeResult(BaseModel, Generic[SchemaT]):
    """Structured output produced by a judge.

    Attributes:
        output: An instance of the schema the judge was asked to fill in.
    """

    model_config = ConfigDict(frozen=True)

    output: SchemaT


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class Agent(Protocol):
    """An AI agent to evaluate.

    Implementations must resolve to exactly one assistant message and must
    not mutate ``messages``.
    """

    async def invoke(self, messages: Sequence[Message]) -> AgentInvocationResult: ...


@runtime_checkable
class Judge(Protocol):
    """An AI used for extracting structured output from a conversation."""

    async def invoke(
        self,
        messages: Sequence[Message],
        schema: type[SchemaT],
    ) -> JudgeResult[SchemaT]: ...


@runtime_checkable
class SyntheticUser(Protocol):
    """An AI that plays the role of a user.

    Only ever shown the user and assistant turns of a conversation.
    """

    async def respond(
        self,
        messages: Sequence[UserMessage | AIMessage],
    ) -> UserMessage: ...


# Type alias for lazily constructed agents
AgentFactory = Callable[[], Awaitable[Agent]]
