"""Criterion wrapping an external numeric scorer.

Scoring libraries typically return a score in [0, 1], or no score at all
when they could not decide. ScorerCriterion turns such a score into a
pass/fail status against a threshold.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.evalkit.criteria.criterion import Criterion, CriterionResult
from src.evalkit.messages import Message


logger = logging.getLogger(__name__)

# Threshold applied when none is given
DEFAULT_SUCCESS_THRESHOLD = 1.0


class Score(BaseModel):
    """A scorer's output.

    Attributes:
        name: Name of the scorer.
        score: Numeric score, or None if the scorer could not decide.
        metadata: Scorer-specific details (rationale, choices, ...).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    score: float | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


ScorerFunc = Callable[[Sequence[Message]], "Score | Awaitable[Score]"]


class ScorerCriterion(Criterion[Score]):
    """Criterion that delegates to a numeric scorer.

    Success means ``score >= success_threshold`` (default 1). A missing
    score is always a failure, whatever the threshold.

    Example:
        >>> def exact_paris(messages):
        ...     answer = messages[-1].content.strip()
        ...     return Score(name="exact", score=1.0 if answer == "Paris" else 0.0)
        >>> criterion = ScorerCriterion(name="exact", scorer=exact_paris)
    """

    def __init__(
        self,
        name: str,
        scorer: ScorerFunc,
        success_threshold: float | None = None,
    ) -> None:
        super().__init__(name)
        self.scorer = scorer
        self.success_threshold = success_threshold

    @property
    def effective_threshold(self) -> float:
        """Return the threshold in use."""
        if self.success_threshold is None:
            return DEFAULT_SUCCESS_THRESHOLD
        return self.success_threshold

    async def evaluate(self, messages: Sequence[Message]) -> CriterionResult[Score]:
        score = self.scorer(list(messages))
        if inspect.isawaitable(score):
            score = await score

        if score.score is None:
            logger.debug("Scorer '%s' returned no score", self.name)
            status = "failure"
        elif score.score >= self.effective_threshold:
            status = "success"
        else:
            status = "failure"

        return CriterionResult(output=score, status=status)
