"""Criterion returning a fixed result, for tests and dry runs."""

from __future__ import annotations

from collections.abc import Sequence

from src.evalkit.criteria.criterion import Criterion, CriterionResult, OutputT
from src.evalkit.messages import Message


class MockCriterion(Criterion[OutputT]):
    """Criterion that always returns the same result.

    Example:
        >>> polite = MockCriterion(
        ...     CriterionResult(output=True, status="success"),
        ...     name="politeness",
        ... )
    """

    def __init__(self, result: CriterionResult[OutputT], name: str = "Mock") -> None:
        super().__init__(name)
        self.result = result
        self.calls: list[list[Message]] = []

    async def evaluate(self, messages: Sequence[Message]) -> CriterionResult[OutputT]:
        self.calls.append(list(messages))
        return self.result
