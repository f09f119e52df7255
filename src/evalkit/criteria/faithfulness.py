"""Judge-backed faithfulness criterion.

Checks that the claims made in the latest assistant response are supported
by the context the agent had: the prompt it reported using (plus its tool
call results) or, failing that, the conversation before the response.

Classes:
    FaithfulnessCriterion: Scores the supported fraction of claims.

Functions:
    faithfulness_criterion: Convenience constructor.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from src.evalkit.criteria.criterion import Criterion, CriterionResult
from src.evalkit.criteria.models import FaithfulnessVerdict
from src.evalkit.criteria.prompts import (
    FAITHFULNESS_PROMPT_TEMPLATE,
    format_conversation,
    format_tool_calls,
)
from src.evalkit.criteria.tools_called import extract_tool_calls
from src.evalkit.interfaces import Judge
from src.evalkit.messages import AIMessage, Message, SystemMessage


logger = logging.getLogger(__name__)

# Reason reported when the transcript holds no assistant response
NO_RESPONSE_REASON = "No assistant response to check"


class FaithfulnessCriterion(Criterion[FaithfulnessVerdict]):
    """Scores how many claims of the last response the context supports.

    Attributes:
        judge: Judge used to extract and check claims.
        score_threshold: Minimum supported fraction for success, in [0, 1].
    """

    def __init__(
        self,
        judge: Judge,
        score_threshold: float = 1.0,
        name: str = "faithfulness",
    ) -> None:
        """Initialize the criterion.

        Args:
            judge: Judge used to extract and check claims.
            score_threshold: Minimum supported fraction for success.
            name: Name of the criterion.

        Raises:
            ValueError: If ``score_threshold`` is outside [0, 1].
        """
        if not 0.0 <= score_threshold <= 1.0:
            raise ValueError(
                f"score_threshold must be between 0 and 1, got {score_threshold}"
            )
        super().__init__(name)
        self.judge = judge
        self.score_threshold = score_threshold

    @staticmethod
    def _split_response(
        messages: Sequence[Message],
    ) -> tuple[list[Message], AIMessage | None]:
        """Return the messages preceding the last response, and the response."""
        for index in range(len(messages) - 1, -1, -1):
            candidate = messages[index]
            if isinstance(candidate, AIMessage):
                return list(messages[:index]), candidate
        return list(messages), None

    @staticmethod
    def _build_context(history: list[Message], response: AIMessage) -> str:
        context = response.context
        prompt = context.prompt_used if context and context.prompt_used else history
        sections = [format_conversation(prompt)]

        tool_calls = extract_tool_calls([*history, response])
        if tool_calls:
            sections.append(format_tool_calls(tool_calls))

        return "\n\n".join(s for s in sections if s)

    async def evaluate(
        self, messages: Sequence[Message]
    ) -> CriterionResult[FaithfulnessVerdict]:
        """Check the last assistant response in ``messages``.

        Args:
            messages: Transcript ending with (or containing) the response.

        Returns:
            CriterionResult with every judged claim as output. A response
            without claims scores 1.0. A transcript without any assistant
            response is a failure and the judge is not consulted.
        """
        history, response = self._split_response(messages)
        if response is None:
            logger.debug("Faithfulness: no assistant response to check")
            return CriterionResult(
                output=FaithfulnessVerdict(),
                reason=NO_RESPONSE_REASON,
                status="failure",
            )

        judge_prompt = FAITHFULNESS_PROMPT_TEMPLATE.format(
            context=self._build_context(history, response),
            response=response.content,
        )
        judged = await self.judge.invoke(
            [SystemMessage(content=judge_prompt)],
            FaithfulnessVerdict,
        )
        verdict: FaithfulnessVerdict = judged.output
        score = verdict.score

        logger.debug(
            "Faithfulness: %d claim(s), score %.2f (threshold %.2f)",
            len(verdict.results),
            score,
            self.score_threshold,
        )

        unsupported = [r.claim for r in verdict.results if not r.supported]
        reason = None
        if unsupported:
            reason = "Unsupported claims: " + "; ".join(unsupported)

        return CriterionResult(
            output=verdict,
            reason=reason,
            status="success" if score >= self.score_threshold else "failure",
        )


def faithfulness_criterion(
    judge: Judge,
    score_threshold: float = 1.0,
) -> Criterion[FaithfulnessVerdict]:
    """Create a faithfulness criterion.

    Args:
        judge: Judge used to extract and check claims.
        score_threshold: Minimum supported fraction of claims for the
            criterion to succeed, between 0 and 1. Defaults to 1.

    Returns:
        The criterion.
    """
    return FaithfulnessCriterion(judge=judge, score_threshold=score_threshold)
