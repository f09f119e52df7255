"""Segments: the scripted steps of an evaluation scenario.

A segment receives the agent under test and the transcript accumulated so
far, and returns the events it contributes to the run. The segment kinds
are fixed:

- ``message``: inject a literal message.
- ``agent_response``: invoke the agent and record its reply.
- ``ai_eval``: run a criterion against the transcript so far.
- ``user_simulation``: alternate synthetic-user and agent turns until a
  criterion succeeds or the turn budget is exhausted.

Events:
    MessageEvent: A completed conversational message.
    PendingEvalEvent: A criterion evaluation that may still be running.
    EvalEvent: A criterion evaluation with its resolved result.

Design Notes:
    - ``ai_eval`` starts its criterion as an ``asyncio`` task and returns
      immediately, so slow criteria never hold up later segments. The
      engine joins every pending result once all segments have run.
    - Segments never mutate the transcript they are given.

Example:
    >>> segments = [
    ...     message(UserMessage(content="Hi")),
    ...     agent_response(),
    ...     ai_eval(greets_user),
    ... ]
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, Union

from src.evalkit.criteria.criterion import Criterion, CriterionResult
from src.evalkit.exceptions import ScriptingError
from src.evalkit.interfaces import Agent, SyntheticUser
from src.evalkit.messages import AIMessage, Message, UserMessage


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Turn budget of a user simulation when none is given
DEFAULT_MAX_TURNS = 10


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class MessageEvent:
    """A completed conversational message added to the run.

    Attributes:
        message: The message, exactly as produced.
    """

    message: Message
    type: Literal["message"] = field(default="message", init=False)


@dataclass(frozen=True)
class PendingEvalEvent:
    """A criterion evaluation whose result may not be available yet.

    Attributes:
        criterion: The criterion instance being evaluated.
        result: Future resolving to the criterion's result.
    """

    criterion: Criterion[Any]
    result: asyncio.Future[CriterionResult[Any]]
    type: Literal["eval"] = field(default="eval", init=False)


@dataclass(frozen=True)
class EvalEvent:
    """A criterion evaluation with its resolved result.

    Attributes:
        criterion: The criterion instance that was evaluated.
        result: The criterion's result.
    """

    criterion: Criterion[Any]
    result: CriterionResult[Any]
    type: Literal["eval"] = field(default="eval", init=False)


# Events a segment can emit
SegmentEvent = Union[MessageEvent, PendingEvalEvent]


def _resolved(result: CriterionResult[Any]) -> asyncio.Future[CriterionResult[Any]]:
    """Wrap an already-computed result in a completed future."""
    future: asyncio.Future[CriterionResult[Any]] = (
        asyncio.get_running_loop().create_future()
    )
    future.set_result(result)
    return future


# =============================================================================
# Segment Base Class
# =============================================================================


class Segment(ABC):
    """Part of a scenario to be evaluated.

    Attributes:
        kind: Name of the segment kind, used in logs and errors.
    """

    kind: str = "segment"

    @abstractmethod
    async def evaluate(
        self,
        agent: Agent,
        transcript: Sequence[Message],
    ) -> list[SegmentEvent]:
        """Produce this segment's events.

        Args:
            agent: The agent under test.
            transcript: Conversational messages accumulated before this
                segment. Read-only.

        Returns:
            The events to append to the run, in emission order.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# =============================================================================
# Segment Kinds
# =============================================================================


class MessageSegment(Segment):
    """Adds a literal message to the run."""

    kind = "message"

    def __init__(self, message: Message) -> None:
        self.message = message

    async def evaluate(
        self,
        agent: Agent,
        transcript: Sequence[Message],
    ) -> list[SegmentEvent]:
        return [MessageEvent(message=self.message)]

    def __repr__(self) -> str:
        return f"MessageSegment(role={self.message.role!r})"


class AgentResponseSegment(Segment):
    """Invokes the agent to generate a response to the transcript."""

    kind = "agent_response"

    async def evaluate(
        self,
        agent: Agent,
        transcript: Sequence[Message],
    ) -> list[SegmentEvent]:
        logger.debug("Invoking agent with %d messages", len(transcript))
        response = await agent.invoke(list(transcript))
        return [MessageEvent(message=response.message)]


class AIEvalSegment(Segment):
    """Evaluates the transcript so far against a criterion.

    The criterion is started as a task and its future returned at once; the
    segment does not wait for the verdict.
    """

    kind = "ai_eval"

    def __init__(self, criterion: Criterion[Any]) -> None:
        self.criterion = criterion

    async def evaluate(
        self,
        agent: Agent,
        transcript: Sequence[Message],
    ) -> list[SegmentEvent]:
        if not transcript:
            raise ScriptingError(
                self.kind,
                "criterion evaluation appears before any messages",
                criterion_name=self.criterion.name,
            )

        logger.debug(
            "Starting criterion '%s' over %d messages",
            self.criterion.name,
            len(transcript),
        )
        pending = asyncio.ensure_future(self.criterion.evaluate(list(transcript)))
        return [PendingEvalEvent(criterion=self.criterion, result=pending)]

    def __repr__(self) -> str:
        return f"AIEvalSegment(criterion={self.criterion.name!r})"


class UserSimulationSegment(Segment):
    """Alternates synthetic-user and agent turns until a criterion succeeds.

    Each turn asks the synthetic user for a message, asks the agent for a
    reply, then evaluates ``until`` against the updated transcript. The run
    stops on the first success or after ``max_turns`` turns. Exactly one
    eval event is emitted, at termination. With ``max_turns=0`` no turn runs
    and nothing is emitted.

    Attributes:
        user: The synthetic user.
        until: Break-condition criterion.
        max_turns: Maximum number of user/agent turns.
    """

    kind = "user_simulation"

    def __init__(
        self,
        user: SyntheticUser,
        until: Criterion[Any],
        max_turns: int = DEFAULT_MAX_TURNS,
    ) -> None:
        if max_turns < 0:
            raise ValueError(f"max_turns must be non-negative, got {max_turns}")
        self.user = user
        self.until = until
        self.max_turns = max_turns

    async def evaluate(
        self,
        agent: Agent,
        transcript: Sequence[Message],
    ) -> list[SegmentEvent]:
        events: list[SegmentEvent] = []
        working = list(transcript)

        for turn in range(1, self.max_turns + 1):
            visible = [m for m in working if isinstance(m, (UserMessage, AIMessage))]
            user_reply = await self.user.respond(visible)
            user_message = UserMessage(content=user_reply.content)
            events.append(MessageEvent(message=user_message))
            working.append(user_message)

            response = await agent.invoke(list(working))
            events.append(MessageEvent(message=response.message))
            working.append(response.message)

            result = await self.until.evaluate(list(working))

            if result.status == "success":
                logger.info(
                    "User simulation met '%s' after %d turn(s)",
                    self.until.name,
                    turn,
                )
                events.append(
                    PendingEvalEvent(criterion=self.until, result=_resolved(result))
                )
                break

            if turn == self.max_turns:
                logger.info(
                    "User simulation reached max of %d turn(s) without meeting '%s'",
                    self.max_turns,
                    self.until.name,
                )
                events.append(
                    PendingEvalEvent(criterion=self.until, result=_resolved(result))
                )

        return events

    def __repr__(self) -> str:
        return (
            f"UserSimulationSegment(until={self.until.name!r}, "
            f"max_turns={self.max_turns})"
        )


# =============================================================================
# Constructors
# =============================================================================


def message(msg: Message) -> Segment:
    """Create a segment that adds ``msg`` to the run unmodified."""
    return MessageSegment(msg)


def agent_response() -> Segment:
    """Create a segment that invokes the agent on the transcript so far."""
    return AgentResponseSegment()


def ai_eval(criterion: Criterion[Any]) -> Segment:
    """Create a segment that evaluates the transcript so far.

    Args:
        criterion: The criterion to evaluate. Keep a reference to it to look
            up its result after the run.

    Returns:
        The segment. Evaluating it with an empty transcript raises
        ScriptingError.
    """
    return AIEvalSegment(criterion)


def user_simulation(
    user: SyntheticUser,
    until: Criterion[Any],
    max_turns: int = DEFAULT_MAX_TURNS,
) -> Segment:
    """Create a bounded synthetic-user conversation segment.

    Args:
        user: Synthetic user producing the user turns.
        until: Criterion ending the simulation when it succeeds.
        max_turns: Maximum number of user/agent turns. Zero runs nothing.

    Returns:
        The segment.

    Raises:
        ValueError: If ``max_turns`` is negative.
    """
    return UserSimulationSegment(user=user, until=until, max_turns=max_turns)
