"""Evaluation engine: replays a scenario against an agent.

The engine walks the segments of a scenario strictly in order. Each segment
sees every conversational message produced before it, and its events are
appended to the run before the next segment starts. Criterion evaluations
started along the way are joined concurrently once the walk is complete,
and the resolved run is exposed through ``EvaluationRunResult``.

Classes:
    EvaluationRunResult: Resolved events of a run plus lookup helpers.

Functions:
    evaluate: Run a scenario against an agent.

Design Notes:
    - Criterion results are keyed by criterion *identity*. Two criteria
      with the same name stay distinguishable.
    - Any exception from a segment (agent failure, scripting error) aborts
      the run. Criterion tasks still in flight are cancelled first.
    - A criterion that raises instead of reporting ``error`` aborts the
      final join as well.

Example:
    >>> greets = ai_assertion(prompt="The assistant greeted the user", judge=judge)
    >>> run = await evaluate(
    ...     agent=my_agent,
    ...     segments=[
    ...         message(UserMessage(content="Hi")),
    ...         agent_response(),
    ...         ai_eval(greets),
    ...     ],
    ... )
    >>> run.get_result_or_raise(greets).status
    'success'
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Sequence
from typing import Any, Literal, TypeVar, Union

from src.evalkit.criteria.criterion import Criterion, CriterionResult
from src.evalkit.exceptions import CriterionResultNotFoundError
from src.evalkit.interfaces import Agent, AgentFactory
from src.evalkit.messages import Message
from src.evalkit.segments import (
    EvalEvent,
    MessageEvent,
    PendingEvalEvent,
    Segment,
    SegmentEvent,
)


logger = logging.getLogger(__name__)

OutputT = TypeVar("OutputT")


# =============================================================================
# Result Types
# =============================================================================

# A fully resolved entry of a run
EvaluatedSegment = Union[MessageEvent, EvalEvent]

# Keys of EvaluationRunResult.results_by_status
ResultStatusKey = Literal["success", "failure", "unknown"]

RESULT_STATUS_KEYS: tuple[ResultStatusKey, ...] = ("success", "failure", "unknown")


class EvaluationRunResult:
    """The resolved record of an evaluation run.

    Attributes:
        results: Every event of the run in emission order, with criterion
            results resolved.

    Example:
        >>> run.messages
        ['Hi', 'Hello!']
        >>> run.success
        True
    """

    def __init__(self, results: Sequence[EvaluatedSegment]) -> None:
        """Initialize the run result.

        Args:
            results: Resolved events in emission order.
        """
        self.results: list[EvaluatedSegment] = list(results)

    @property
    def transcript(self) -> list[Message]:
        """Return the conversational messages of the run, in order."""
        return [r.message for r in self.results if isinstance(r, MessageEvent)]

    @property
    def messages(self) -> list[Any]:
        """Return the content of each message of the run, in order."""
        return [m.content for m in self.transcript]

    @property
    def evaluations(self) -> list[EvalEvent]:
        """Return the criterion evaluations of the run, in order."""
        return [r for r in self.results if isinstance(r, EvalEvent)]

    @property
    def results_by_status(self) -> dict[ResultStatusKey, list[EvalEvent]]:
        """Group criterion evaluations by status.

        Results without a determined status are grouped under ``"unknown"``.
        Every key is always present.

        Returns:
            Mapping of status key to evaluations, each in emission order.
        """
        grouped: dict[ResultStatusKey, list[EvalEvent]] = {
            key: [] for key in RESULT_STATUS_KEYS
        }
        for evaluation in self.evaluations:
            grouped[evaluation.result.status or "unknown"].append(evaluation)
        return grouped

    @property
    def success(self) -> bool:
        """Return True if no criterion evaluation failed.

        A run without any criterion evaluation is successful.
        """
        return not self.results_by_status["failure"]

    def get_results(self, criterion: Criterion[OutputT]) -> list[CriterionResult[OutputT]]:
        """Get every result of this criterion instance, in emission order.

        Matching uses identity, never name or value equality.

        Args:
            criterion: The criterion instance passed to a segment.

        Returns:
            The matching results. Empty if the criterion never ran.
        """
        return [e.result for e in self.evaluations if e.criterion is criterion]

    def get_result(self, criterion: Criterion[OutputT]) -> CriterionResult[OutputT] | None:
        """Get the first result of this criterion instance.

        Args:
            criterion: The criterion instance passed to a segment.

        Returns:
            The first matching result, or None if the criterion never ran.
        """
        for evaluation in self.evaluations:
            if evaluation.criterion is criterion:
                return evaluation.result
        return None

    def get_result_or_raise(self, criterion: Criterion[OutputT]) -> CriterionResult[OutputT]:
        """Get the first result of this criterion instance.

        Note:
            ``get_results`` is the safer alternative.

        Args:
            criterion: The criterion instance passed to a segment.

        Returns:
            The first matching result.

        Raises:
            CriterionResultNotFoundError: If the criterion never ran.
        """
        result = self.get_result(criterion)
        if result is None:
            raise CriterionResultNotFoundError(criterion)
        return result

    def __repr__(self) -> str:
        grouped = self.results_by_status
        return (
            f"EvaluationRunResult(results={len(self.results)}, "
            f"success={len(grouped['success'])}, "
            f"failure={len(grouped['failure'])}, "
            f"unknown={len(grouped['unknown'])})"
        )


# =============================================================================
# Engine
# =============================================================================


async def _resolve_agent(agent: Agent | AgentFactory) -> Agent:
    """Return the agent itself, or build it with its factory.

    An agent class is a factory too: it is instantiated without arguments.
    """
    if isinstance(agent, Agent) and not isinstance(agent, type):
        return agent
    if callable(agent):
        built = agent()
        if inspect.isawaitable(built):
            built = await built
        return built
    raise TypeError(
        f"agent must implement invoke() or be a zero-argument factory, "
        f"got {type(agent).__name__}"
    )


async def _cancel_pending(events: Sequence[SegmentEvent]) -> None:
    """Cancel criterion evaluations that are still running and wait for them."""
    pending = [
        event.result
        for event in events
        if isinstance(event, PendingEvalEvent) and not event.result.done()
    ]
    for future in pending:
        future.cancel()
    if pending:
        logger.debug("Cancelling %d pending criterion evaluation(s)", len(pending))
        await asyncio.gather(*pending, return_exceptions=True)


async def _resolve_event(event: SegmentEvent) -> EvaluatedSegment:
    if isinstance(event, PendingEvalEvent):
        result = await event.result
        logger.debug(
            "Criterion '%s' resolved with status %s",
            event.criterion.name,
            result.status,
        )
        return EvalEvent(criterion=event.criterion, result=result)
    return event


async def evaluate(
    agent: Agent | AgentFactory,
    segments: Sequence[Segment],
) -> EvaluationRunResult:
    """Evaluate a scenario against an agent.

    Args:
        agent: The agent under test, or a zero-argument (async) factory
            producing it. A factory is called exactly once.
        segments: The scenario, as an ordered list of segments.

    Returns:
        The resolved run.

    Raises:
        ScriptingError: If a segment is scripted in an invalid position.
        Exception: Whatever the agent, synthetic user or a criterion
            raised, unchanged.
    """
    resolved_agent = await _resolve_agent(agent)
    logger.info("Starting evaluation run with %d segment(s)", len(segments))

    events: list[SegmentEvent] = []
    transcript: list[Message] = []

    try:
        for index, segment in enumerate(segments):
            logger.debug(
                "Evaluating segment %d/%d: %r",
                index + 1,
                len(segments),
                segment,
            )
            segment_events = await segment.evaluate(resolved_agent, list(transcript))
            events.extend(segment_events)
            transcript.extend(
                e.message for e in segment_events if isinstance(e, MessageEvent)
            )
    except BaseException:
        await _cancel_pending(events)
        raise

    try:
        results = await asyncio.gather(*(_resolve_event(e) for e in events))
    except BaseException:
        await _cancel_pending(events)
        raise

    run = EvaluationRunResult(results)
    logger.info("Completed evaluation run: %r", run)
    return run
