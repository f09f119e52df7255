"""Criteria over the tool calls an agent made.

Functions:
    extract_tool_calls: Collect tool calls (with results) from a transcript.
    ai_tool_calls: Run an arbitrary assertion over the collected tool calls.
    ai_tools_called: Require specific tools to have been called.

Design Notes:
    - A tool call's result is taken from the call itself, or from the
      ToolResultMessage answering it (matched on ``tool_call_id``).
    - When an assistant message reports its generation context, the
      context's tool calls are used instead of the message's own list.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import BaseModel, Field

from src.evalkit.criteria.criterion import Criterion, CriterionResult
from src.evalkit.messages import AIMessage, Message, ToolCall, ToolResultMessage


logger = logging.getLogger(__name__)

AssertionT = TypeVar("AssertionT")

# Signature of a per-call check: returning False (or raising) rejects the call
ToolCallAssertionFn = Callable[[ToolCall], Any]


# =============================================================================
# Extraction
# =============================================================================


def extract_tool_calls(messages: Sequence[Message]) -> list[ToolCall]:
    """Collect every tool call made by the assistant, in order.

    Args:
        messages: The transcript to scan.

    Returns:
        Tool calls, with ``result`` filled in from tool result messages
        where the call itself has none.
    """
    results_by_id: dict[str, dict[str, Any]] = {
        m.tool_call_id: m.content
        for m in messages
        if isinstance(m, ToolResultMessage) and m.tool_call_id is not None
    }

    calls: list[ToolCall] = []
    for m in messages:
        if not isinstance(m, AIMessage):
            continue
        if m.context is not None and m.context.tool_calls:
            message_calls = m.context.tool_calls
        else:
            message_calls = m.tool_calls or []

        for call in message_calls:
            if call.result is None and call.id in results_by_id:
                call = call.model_copy(update={"result": results_by_id[call.id]})
            calls.append(call)

    return calls


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


# =============================================================================
# Arbitrary Assertion
# =============================================================================


class ToolCallsCriterion(Criterion[Any]):
    """Runs an assertion function over the transcript's tool calls.

    The assertion passes unless it raises. Whatever it returns becomes the
    criterion's output; an exception is reported as a failure with
    ``error`` set, so assertion libraries (or plain ``assert``) can be used.
    """

    def __init__(
        self,
        assertion: Callable[[list[ToolCall]], AssertionT | Awaitable[AssertionT]],
        name: str = "tool calls",
    ) -> None:
        super().__init__(name)
        self.assertion = assertion

    async def evaluate(
        self, messages: Sequence[Message]
    ) -> CriterionResult[AssertionT | None]:
        tool_calls = extract_tool_calls(messages)
        try:
            output = await _maybe_await(self.assertion(tool_calls))
        except Exception as e:
            logger.debug("Tool call assertion '%s' failed: %s", self.name, e)
            return CriterionResult(
                output=None,
                reason=str(e) or type(e).__name__,
                error=e,
                status="failure",
            )
        return CriterionResult(output=output, status="success")


def ai_tool_calls(
    assertion: Callable[[list[ToolCall]], AssertionT | Awaitable[AssertionT]],
    name: str = "tool calls",
) -> Criterion[AssertionT | None]:
    """Create a criterion running ``assertion`` over the tool calls made.

    Args:
        assertion: Sync or async function receiving the extracted tool
            calls. Raising marks the criterion as failed.
        name: Name of the criterion.

    Returns:
        The criterion.
    """
    return ToolCallsCriterion(assertion, name=name)


# =============================================================================
# Required Tool Calls
# =============================================================================


@dataclass(frozen=True)
class ToolCallAssertion:
    """An expected tool call.

    Attributes:
        name: Assert that the tool with this name was called.
        assertion: Optional check of the call's arguments and result. The
            call is rejected if it returns False or raises.
    """

    name: str
    assertion: ToolCallAssertionFn | None = None


class ToolsCalledOutput(BaseModel):
    """Output of the required-tool-calls criterion.

    Attributes:
        tool_call_order_satisfied: True if every expected call was matched
            in the expected order.
        missing_tool_calls: Names of expected calls with no match.
    """

    tool_call_order_satisfied: bool
    missing_tool_calls: list[str] = Field(default_factory=list)


class ToolsCalledCriterion(Criterion[ToolsCalledOutput]):
    """Requires each expected tool call to match a distinct actual call.

    Attributes:
        expected: The expected tool calls.
        assert_order: Require matches to follow the order of ``expected``.
    """

    def __init__(
        self,
        expected: Sequence[ToolCallAssertion],
        assert_order: bool = False,
        name: str | None = None,
    ) -> None:
        names = ", ".join(e.name for e in expected)
        super().__init__(name or f"tools called: {names}")
        self.expected = list(expected)
        self.assert_order = assert_order

    async def _accepts(self, expected: ToolCallAssertion, call: ToolCall) -> bool:
        if call.name != expected.name:
            return False
        if expected.assertion is None:
            return True
        try:
            return await _maybe_await(expected.assertion(call)) is not False
        except Exception as e:
            logger.debug("Tool call '%s' rejected by assertion: %s", call.name, e)
            return False

    async def _acceptance(self, calls: list[ToolCall]) -> list[list[bool]]:
        """Return, per expected call, which actual calls it accepts."""
        return [
            [await self._accepts(expected, call) for call in calls]
            for expected in self.expected
        ]

    @staticmethod
    def _assign(accepted: list[list[bool]]) -> list[int | None]:
        """Match expected calls to distinct actual calls, maximizing matches.

        Uses augmenting paths, so an expectation that accepts any call never
        starves a more specific one of the only call it accepts.
        """
        owner: dict[int, int] = {}

        def augment(row: int, seen: set[int]) -> bool:
            for index, ok in enumerate(accepted[row]):
                if not ok or index in seen:
                    continue
                seen.add(index)
                if index not in owner or augment(owner[index], seen):
                    owner[index] = row
                    return True
            return False

        for row in range(len(accepted)):
            augment(row, set())

        matches: list[int | None] = [None] * len(accepted)
        for index, row in owner.items():
            matches[row] = index
        return matches

    @staticmethod
    def _in_order(accepted: list[list[bool]]) -> bool:
        """Return True if the expected calls match an increasing run of calls."""
        floor = -1
        for row in accepted:
            found = next(
                (i for i, ok in enumerate(row) if ok and i > floor),
                None,
            )
            if found is None:
                return False
            floor = found
        return True

    async def evaluate(self, messages: Sequence[Message]) -> CriterionResult[ToolsCalledOutput]:
        calls = extract_tool_calls(messages)
        accepted = await self._acceptance(calls)
        matches = self._assign(accepted)
        missing = [e.name for e, m in zip(self.expected, matches) if m is None]

        in_order = not missing and self._in_order(accepted)

        passed = not missing and (in_order or not self.assert_order)
        reason = None
        if missing:
            reason = f"Expected tool calls not found: {', '.join(missing)}"
        elif self.assert_order and not in_order:
            reason = "Tool calls were not made in the expected order"

        return CriterionResult(
            output=ToolsCalledOutput(
                tool_call_order_satisfied=in_order,
                missing_tool_calls=missing,
            ),
            reason=reason,
            status="success" if passed else "failure",
        )


def ai_tools_called(
    tool_calls: Sequence[ToolCallAssertion],
    assert_order: bool = False,
) -> Criterion[ToolsCalledOutput]:
    """Create a criterion requiring the given tools to have been called.

    Args:
        tool_calls: Tool calls that must be made for this criterion to pass.
        assert_order: Assert that the calls were made in the same order as
            in ``tool_calls``.

    Returns:
        The criterion.
    """
    return ToolsCalledCriterion(tool_calls, assert_order=assert_order)
