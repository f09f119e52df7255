"""Criterion contract and composition helpers.

A criterion decides whether a transcript satisfies some semantic property.
Criteria are constructed by the caller before a run and looked up by
*identity* afterwards, so two criteria with the same name remain distinct.

Classes:
    CriterionResult: Verdict and typed output of a criterion evaluation.
    Criterion: Abstract base class for all criteria.

Functions:
    negate: Flip a criterion's status, keeping its output.
    and_: Join two criteria, pairing their outputs.
    pipe: Transform a criterion's output without touching its status.

Design Notes:
    - Expected negative outcomes are reported as ``status="failure"``, never
      raised. Unexpected faults may be reported through ``error``.
    - ``status`` is ``None`` only when no determination was made. It must
      not be read as a failure.
    - Criterion deliberately keeps object identity equality and hashing;
      subclasses must not define value-based ``__eq__``.

Example:
    >>> class ContainsGreeting(Criterion[bool]):
    ...     def __init__(self) -> None:
    ...         super().__init__("greets the user")
    ...
    ...     async def evaluate(self, messages):
    ...         greeted = any("hello" in m.content.lower() for m in messages
    ...                       if m.role == "assistant")
    ...         return CriterionResult(
    ...             output=greeted,
    ...             status="success" if greeted else "failure",
    ...         )
    >>> polite = negate(ContainsGreeting())
    >>> polite.name
    'not(greets the user)'
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict

from src.evalkit.messages import Message


logger = logging.getLogger(__name__)

OutputT = TypeVar("OutputT")
OtherT = TypeVar("OtherT")
PipedT = TypeVar("PipedT")


# =============================================================================
# Result Model
# =============================================================================

# Closed vocabulary of determined statuses
CriterionStatus = Literal["success", "failure"]


class CriterionResult(BaseModel, Generic[OutputT]):
    """The result of a criterion evaluation.

    Attributes:
        output: Criterion-specific output (a verdict, a score object, ...).
        reason: Human-readable explanation of the outcome.
        error: Error raised during evaluation, when the criterion chose to
            report it instead of raising.
        status: Whether the check passed. ``None`` if it was not determined.

    Example:
        >>> result = CriterionResult(output=True, status="success")
        >>> result.passed
        True
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    output: OutputT
    reason: str | None = None
    error: Any = None
    status: CriterionStatus | None = None

    @property
    def passed(self) -> bool:
        """Return True only when the status was determined as success."""
        return self.status == "success"


# =============================================================================
# Criterion Base Class
# =============================================================================


class Criterion(ABC, Generic[OutputT]):
    """A named, reusable judgment over a transcript.

    Subclasses implement ``evaluate``. The transcript passed in is a
    read-only view; implementations must not mutate it.

    Attributes:
        name: Human-readable name, used in logs and error messages.
    """

    def __init__(self, name: str) -> None:
        """Initialize the criterion.

        Args:
            name: Human-readable name of the criterion.
        """
        self.name = name

    @abstractmethod
    async def evaluate(self, messages: Sequence[Message]) -> CriterionResult[OutputT]:
        """Evaluate the transcript.

        Args:
            messages: The conversational messages to judge.

        Returns:
            The criterion's result.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


# =============================================================================
# Combinators
# =============================================================================

_NEGATED_STATUS: dict[CriterionStatus | None, CriterionStatus | None] = {
    "success": "failure",
    "failure": "success",
    None: None,
}


class _NegatedCriterion(Criterion[OutputT]):
    def __init__(self, inner: Criterion[OutputT]) -> None:
        super().__init__(f"not({inner.name})")
        self.inner = inner

    async def evaluate(self, messages: Sequence[Message]) -> CriterionResult[OutputT]:
        result = await self.inner.evaluate(messages)
        return result.model_copy(update={"status": _NEGATED_STATUS[result.status]})


class _JoinedCriterion(Criterion[tuple[OutputT, OtherT]]):
    def __init__(self, first: Criterion[OutputT], second: Criterion[OtherT]) -> None:
        super().__init__(f"and({first.name}, {second.name})")
        self.first = first
        self.second = second

    async def evaluate(
        self, messages: Sequence[Message]
    ) -> CriterionResult[tuple[OutputT, OtherT]]:
        first, second = await asyncio.gather(
            self.first.evaluate(messages),
            self.second.evaluate(messages),
        )
        reasons = [r for r in (first.reason, second.reason) if r]
        both_passed = first.status == "success" and second.status == "success"
        return CriterionResult(
            output=(first.output, second.output),
            reason="; ".join(reasons) or None,
            error=first.error if first.error is not None else second.error,
            status="success" if both_passed else "failure",
        )


class _PipedCriterion(Criterion[PipedT]):
    def __init__(
        self,
        inner: Criterion[OutputT],
        fn: Callable[[OutputT], PipedT],
    ) -> None:
        super().__init__(inner.name)
        self.inner = inner
        self.fn = fn

    async def evaluate(self, messages: Sequence[Message]) -> CriterionResult[PipedT]:
        result = await self.inner.evaluate(messages)
        return CriterionResult(
            output=self.fn(result.output),
            reason=result.reason,
            error=result.error,
            status=result.status,
        )


def negate(criterion: Criterion[OutputT]) -> Criterion[OutputT]:
    """Return a criterion whose status is the opposite of ``criterion``'s.

    The output is kept as is. An undetermined status stays undetermined.

    Args:
        criterion: The criterion to negate.

    Returns:
        A new criterion named ``not(<name>)``.
    """
    return _NegatedCriterion(criterion)


def and_(
    first: Criterion[OutputT],
    second: Criterion[OtherT],
) -> Criterion[tuple[OutputT, OtherT]]:
    """Return a criterion that succeeds only if both criteria succeed.

    Both criteria are evaluated concurrently against the same transcript.
    Their outputs are paired in order.

    Args:
        first: The first criterion.
        second: The second criterion.

    Returns:
        A new criterion named ``and(<first>, <second>)``.
    """
    return _JoinedCriterion(first, second)


def pipe(
    criterion: Criterion[OutputT],
    fn: Callable[[OutputT], PipedT],
) -> Criterion[PipedT]:
    """Return a criterion whose output is ``fn`` applied to ``criterion``'s.

    Status, reason and error pass through untouched, and the name is kept.

    Args:
        criterion: The criterion to transform.
        fn: Function mapping the wrapped criterion's output to the new one.

    Returns:
        A new criterion with the same name.
    """
    return _PipedCriterion(criterion, fn)
